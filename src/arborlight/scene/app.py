"""
Scene wiring and the interactive preview window.

TreeScene connects the pieces: layout → morph engine, gesture classifier →
debouncer → view-mode controller, hand position → camera rig. The pygame
preview drives it from the display clock and keyboard, with the hand
tracker running on its own thread.
"""

import logging

import numpy as np

from arborlight.config import SceneConfig
from arborlight.core.layout import LayoutGenerator, ParticleCategory, ParticleLayout
from arborlight.core.morph import MorphEngine
from arborlight.core.view_mode import ViewMode, ViewModeController
from arborlight.gesture.classifier import GestureClassifier, HandPosition
from arborlight.gesture.debouncer import GestureDebouncer
from arborlight.gesture.tracker import HandTracker
from arborlight.scene.camera_rig import CameraRig
from arborlight.scene.projection import point_radii, project, render_snapshot

logger = logging.getLogger(__name__)


class TreeScene:
    """All per-session state. Rebuilding a scene resets it to the initial formation."""

    def __init__(self, config: SceneConfig | None = None, layout: ParticleLayout | None = None):
        self.cfg = config or SceneConfig()
        self.layout = layout or LayoutGenerator(self.cfg.layout, seed=self.cfg.seed).generate()
        logger.info(
            "Generated %d particles (%s)",
            self.layout.total,
            ", ".join(f"{c.name.lower()}={n}" for c, n in self.layout.counts.items()),
        )

        self.controller = ViewModeController(self.cfg.morph.initial_mode)
        self.engine = MorphEngine(self.layout.formations, self.controller, self.cfg.morph)

        self.hand_position = HandPosition()
        self.classifier = GestureClassifier(self.hand_position, self.cfg.gesture)
        self.debouncer = GestureDebouncer(self.controller, self.cfg.gesture)
        self.rig = CameraRig(self.hand_position, self.cfg.rig)
        self.gesture_enabled = self.cfg.gesture_enabled
        self.tracker: HandTracker | None = None

        self._foliage = self.layout.attributes.mask(ParticleCategory.FOLIAGE)
        self._all_visible = np.ones(self.layout.total, dtype=bool)

    def make_tracker(self, **factories) -> HandTracker:
        self.tracker = HandTracker(self.classifier, self.debouncer, self.cfg.gesture, **factories)
        return self.tracker

    def set_gesture_control(self, enabled: bool) -> bool:
        """
        Turn hand tracking on or off, creating the tracker on first use.

        Returns:
            Whether gesture control is now on. Stays off when the camera
            or hand model cannot be opened.
        """
        if enabled:
            if self.tracker is None:
                self.make_tracker()
            enabled = self.tracker.start()
        elif self.tracker is not None:
            self.tracker.stop()
        self.gesture_enabled = enabled
        logger.info("Gesture control %s", "on" if enabled else "off")
        return enabled

    def request(self, mode) -> ViewMode:
        """UI entry point; same contract as gesture-triggered requests."""
        return self.controller.request(mode)

    def visible_mask(self) -> np.ndarray:
        # Foliage steps aside while photos are in focus
        if self.controller.requested_mode is ViewMode.FOCUS:
            return ~self._foliage
        return self._all_visible

    def tick(self, dt: float) -> float:
        """One render tick: morph step plus camera rig."""
        max_diff = self.engine.tick(dt)
        self.rig.tick(dt, self.gesture_enabled)
        return max_diff

    def snapshot(self) -> np.ndarray:
        return render_snapshot(
            self.engine.positions,
            self.layout.attributes.sizes,
            yaw=self.rig.yaw,
            pitch=self.rig.pitch,
            visible=self.visible_mask(),
            config=self.cfg.preview,
        )


KEY_MODES = {
    "1": ViewMode.TREE,
    "t": ViewMode.TREE,
    "2": ViewMode.SCATTER,
    "s": ViewMode.SCATTER,
    "3": ViewMode.FOCUS,
    "f": ViewMode.FOCUS,
}


def run_preview(scene: TreeScene) -> None:
    """
    Open a pygame window and run the render loop until closed.

    Keys: 1/T tree, 2/S scatter, 3/F focus, G toggle gesture control, Esc quit.
    """
    import pygame

    cfg = scene.cfg.preview
    pygame.init()
    screen = pygame.display.set_mode((cfg.width, cfg.height))
    pygame.display.set_caption("arborlight")
    clock = pygame.time.Clock()
    sizes = scene.layout.attributes.sizes

    if scene.gesture_enabled:
        scene.set_gesture_control(True)

    running = True
    try:
        while running:
            dt = clock.tick(cfg.fps) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    key = pygame.key.name(event.key)
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif key in KEY_MODES:
                        scene.request(KEY_MODES[key])
                    elif key == "g":
                        scene.set_gesture_control(not scene.gesture_enabled)

            scene.tick(dt)

            screen.fill(cfg.background_color)
            x_px, y_px, depth = project(
                scene.engine.positions, scene.rig.yaw, scene.rig.pitch,
                cfg.width, cfg.height, cfg.camera_distance, cfg.focal_length,
            )
            radii = point_radii(sizes, depth, cfg)
            order = np.argsort(-depth)
            order = order[scene.visible_mask()[order]]
            for i in order:
                shade = int(np.clip(255 * cfg.camera_distance / depth[i], 60, 255))
                pygame.draw.circle(
                    screen, (shade, shade, shade), (int(x_px[i]), int(y_px[i])), max(1, int(radii[i]))
                )

            mode = scene.controller.requested_mode.value
            status = f"{mode}{' ...' if scene.engine.is_transitioning else ''}"
            pygame.display.set_caption(f"arborlight - {status}")
            pygame.display.flip()
    finally:
        if scene.tracker is not None:
            scene.tracker.stop()
        pygame.quit()
