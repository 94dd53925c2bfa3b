"""
CLI entry point for the arborlight scene.

Usage:
    arborlight [options]                      interactive preview window
    arborlight --snapshot tree.png [options]  headless PNG after N ticks
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from PIL import Image

from arborlight.config import PROFILES, SceneConfig
from arborlight.core.view_mode import ViewMode
from arborlight.logging_config import FORMATS, setup_logging
from arborlight.scene.app import TreeScene, run_preview

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arborlight",
        description="Gesture-driven particle tree that morphs between formations",
    )

    parser.add_argument(
        "-p", "--profile", type=str, default="medium",
        choices=sorted(PROFILES),
        help="Particle budget and window size (low: 1500, medium: 3000, high: 6000 particles)",
    )
    parser.add_argument("-n", "--particles", type=int, default=None, help="Total particles (overrides profile)")
    parser.add_argument("--seed", type=int, default=None, help="Layout random seed")
    parser.add_argument("--width", type=int, default=None, help="Window width (overrides profile)")
    parser.add_argument("--height", type=int, default=None, help="Window height (overrides profile)")
    parser.add_argument("-f", "--fps", type=int, default=None, help="Frames per second (overrides profile)")

    parser.add_argument(
        "--mode", type=str, default="TREE",
        choices=[m.value for m in ViewMode],
        help="Requested view mode at startup (default: TREE)",
    )

    # Gesture control
    parser.add_argument("--no-gesture", action="store_true", help="Start with camera hand tracking off (G turns it on)")
    parser.add_argument("--camera", type=int, default=0, help="Camera device index (default: 0)")
    parser.add_argument(
        "--cooldown", type=float, default=3.0,
        help="Seconds between accepted gesture mode changes (default: 3.0)",
    )

    # Headless export
    parser.add_argument("--snapshot", type=Path, default=None, help="Write a PNG instead of opening a window")
    parser.add_argument(
        "--ticks", type=int, default=120,
        help="Ticks to simulate before the snapshot (default: 120)",
    )

    parser.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument("--log-file", type=str, default=None, help="Also write logs to this file")
    parser.add_argument(
        "--log-format", type=str, default="short", choices=sorted(FORMATS),
        help="short: time and message; full: adds thread and module (default: short)",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> SceneConfig:
    p_cfg = PROFILES[args.profile]
    config = SceneConfig(seed=args.seed, gesture_enabled=not args.no_gesture)
    config.layout.total_particles = p_cfg["particles"] if args.particles is None else args.particles
    config.preview.width = args.width or p_cfg["width"]
    config.preview.height = args.height or p_cfg["height"]
    config.preview.fps = args.fps or p_cfg["fps"]
    config.gesture.camera_index = args.camera
    config.gesture.cooldown_s = args.cooldown
    return config


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file, args.log_format)

    if args.particles is not None and args.particles < 0:
        print(f"Error: particle count must be >= 0, got {args.particles}", file=sys.stderr)
        sys.exit(1)

    config = config_from_args(args)
    t0 = time.time()
    scene = TreeScene(config)
    logger.info("Layout took %.2fs", time.time() - t0)
    scene.request(args.mode)

    if args.snapshot is not None:
        dt = 1.0 / config.preview.fps
        for _ in range(args.ticks):
            scene.tick(dt)
        Image.fromarray(scene.snapshot()).save(args.snapshot)
        logger.info(
            "Snapshot written to %s (mode=%s, transitioning=%s)",
            args.snapshot, scene.engine.target_mode.value, scene.engine.is_transitioning,
        )
        return

    run_preview(scene)


if __name__ == "__main__":
    main()
