"""
Configuration for the arborlight scene.

Each component reads its own dataclass; SceneConfig bundles them for the
CLI and the preview app.
"""

from dataclasses import dataclass, field


@dataclass
class LayoutConfig:
    """Particle budget and tree geometry."""
    total_particles: int = 3000

    # Fixed allocations; foliage absorbs whatever is left
    star_count: int = 1
    fairy_light_count: int = 1200
    sphere_ornament_count: int = 280
    heart_ornament_count: int = 100
    ribbon_bow_count: int = 25
    garland_bead_count: int = 900

    tree_height: float = 14.0
    base_radius: float = 5.0
    taper: float = 0.98  # radius shrinks to 2% of the base at the apex
    scatter_radius: float = 18.0
    garland_loops: int = 8


@dataclass
class MorphConfig:
    rate: float = 10.0  # 1/s
    epsilon: float = 0.5  # max per-particle L1 distance counted as arrived
    initial_mode: str = "TREE"


@dataclass
class GestureConfig:
    """Thresholds for hand-landmark classification and mode debouncing."""
    pinch_threshold: float = 0.08  # normalized image units
    min_fingers: int = 3  # of the four tracked fingertips
    cooldown_s: float = 3.0
    position_smoothing: float = 1.0  # 1.0 publishes the raw hand centre

    # Camera / model
    camera_index: int = 0
    max_num_hands: int = 1
    min_detection_confidence: float = 0.7
    min_tracking_confidence: float = 0.5
    idle_sleep_s: float = 0.005
    max_frame_errors: int = 30  # consecutive failed frames before the loop gives up


@dataclass
class RigConfig:
    yaw_range: float = 1.5  # multiples of pi across the full hand sweep
    pitch_range: float = 0.4
    follow_rate: float = 5.0
    reset_rate: float = 3.0


@dataclass
class PreviewConfig:
    width: int = 1280
    height: int = 720
    fps: int = 60
    camera_distance: float = 32.0
    focal_length: float = 900.0
    point_scale: float = 0.35
    background_color: tuple[int, int, int] = (4, 6, 12)


@dataclass
class SceneConfig:
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    morph: MorphConfig = field(default_factory=MorphConfig)
    gesture: GestureConfig = field(default_factory=GestureConfig)
    rig: RigConfig = field(default_factory=RigConfig)
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    gesture_enabled: bool = True
    seed: int | None = None


# Profile presets (particle budget + preview window)
PROFILES = {
    "low": {"particles": 1500, "width": 960, "height": 540, "fps": 30},
    "medium": {"particles": 3000, "width": 1280, "height": 720, "fps": 60},
    "high": {"particles": 6000, "width": 1920, "height": 1080, "fps": 60},
}
