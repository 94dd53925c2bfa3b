"""
Cooldown gate between per-frame gestures and view-mode changes.

Per-frame classification flickers; without a cooldown a brief
misclassification would flip the scene back and forth.
"""

import logging
from dataclasses import dataclass
from typing import Dict

from arborlight.config import GestureConfig
from arborlight.core.view_mode import ViewMode, ViewModeController
from arborlight.gesture.classifier import Gesture

logger = logging.getLogger(__name__)

GESTURE_MODES: Dict[Gesture, ViewMode] = {
    Gesture.OPEN: ViewMode.SCATTER,
    Gesture.FIST: ViewMode.TREE,
    Gesture.PINCH: ViewMode.FOCUS,
}


@dataclass
class GestureState:
    last_gesture: Gesture = Gesture.NONE
    last_accepted_time: float | None = None  # seconds, monotonic clock
    cooldown_s: float = 3.0


class GestureDebouncer:
    """Maps gestures to mode requests, at most one accepted change per cooldown."""

    def __init__(self, controller: ViewModeController, config: GestureConfig | None = None):
        self.cfg = config or GestureConfig()
        self.controller = controller
        self.state = GestureState(cooldown_s=self.cfg.cooldown_s)

    def in_cooldown(self, now: float) -> bool:
        last = self.state.last_accepted_time
        return last is not None and now - last < self.state.cooldown_s

    def submit(self, gesture: Gesture | None, now: float) -> bool:
        """
        Offer one classified gesture.

        Returns True when it caused a view-mode request. NONE (or None), a
        gesture mapping to the already-requested mode, and anything inside
        the cooldown window are ignored.
        """
        if gesture is None:
            return False
        self.state.last_gesture = gesture

        mode = GESTURE_MODES.get(gesture)
        if mode is None:
            return False
        current = self.controller.requested_mode
        if mode is current or self.in_cooldown(now):
            return False

        logger.info("Mode change: %s -> %s (gesture %s)", current.value, mode.value, gesture.value)
        self.controller.request(mode)
        self.state.last_accepted_time = now
        return True
