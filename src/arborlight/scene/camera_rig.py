"""Hand-driven orientation for the whole tree group."""

import math

from arborlight.config import RigConfig
from arborlight.gesture.classifier import HandPosition


class CameraRig:
    """
    Turns the published hand position into a yaw/pitch for the scene.

    With gesture control on, the rig follows the hand; with it off, the rig
    eases back to the neutral orientation at the slower reset rate.
    """

    def __init__(self, hand_position: HandPosition, config: RigConfig | None = None):
        self.cfg = config or RigConfig()
        self.hand_position = hand_position
        self.yaw = 0.0
        self.pitch = 0.0

    def _lerp(self, current: float, target: float, factor: float) -> float:
        return current + (target - current) * factor

    def target(self) -> tuple[float, float]:
        """(yaw, pitch) the current hand position points at."""
        x, y = self.hand_position.value
        yaw = (x - 0.5) * math.pi * self.cfg.yaw_range
        pitch = (y - 0.5) * math.pi * self.cfg.pitch_range
        return yaw, -pitch

    def tick(self, dt: float, gesture_enabled: bool = True) -> tuple[float, float]:
        if gesture_enabled:
            yaw, pitch = self.target()
            rate = self.cfg.follow_rate
        else:
            yaw, pitch = 0.0, 0.0
            rate = self.cfg.reset_rate
        factor = min(1.0, max(0.0, rate * dt))
        self.yaw = self._lerp(self.yaw, yaw, factor)
        self.pitch = self._lerp(self.pitch, pitch, factor)
        return self.yaw, self.pitch
