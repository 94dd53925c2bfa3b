"""
Requested view mode shared between the UI, the gesture layer and the
morph engine.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    TREE = "TREE"
    SCATTER = "SCATTER"
    FOCUS = "FOCUS"

    @classmethod
    def parse(cls, value: "ViewMode | str") -> "ViewMode":
        """Accepts a ViewMode or its name in any case."""
        if isinstance(value, ViewMode):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown view mode {value!r} (expected one of {choices})") from None


class ViewModeController:
    """
    Holds the latest requested view mode.

    Every mode is reachable from every other with one request() call. The
    controller never drives interpolation itself; the morph engine samples
    `requested_mode` when it is ready to take a new target. Writes are a
    single attribute assignment, so the gesture thread and the render loop
    can share one controller without a lock.
    """

    def __init__(self, initial: ViewMode | str = ViewMode.TREE):
        self._requested = ViewMode.parse(initial)

    @property
    def requested_mode(self) -> ViewMode:
        return self._requested

    def request(self, mode: ViewMode | str) -> ViewMode:
        """Record a new requested mode. Repeating the current mode is a no-op."""
        mode = ViewMode.parse(mode)
        if mode is not self._requested:
            logger.debug("View mode requested: %s -> %s", self._requested.value, mode.value)
            self._requested = mode
        return mode
