"""
Per-tick morph engine.

Moves every particle toward the active formation with per-axis exponential
smoothing, detects arrival, and refuses to switch targets while a
transition is still running.
"""

import logging
from enum import Enum
from typing import Dict, Mapping

import numpy as np

from arborlight.config import MorphConfig
from arborlight.core.layout import SCATTER, TREE, Formation
from arborlight.core.view_mode import ViewMode, ViewModeController
from arborlight.errors import MorphStateError

logger = logging.getLogger(__name__)


class MorphPhase(Enum):
    IDLE = "idle"
    TRANSITIONING = "transitioning"


class MorphEvent(Enum):
    RETARGET = "retarget"
    CONVERGED = "converged"


# (phase, event) -> next phase
TRANSITIONS: Dict[tuple, MorphPhase] = {
    (MorphPhase.IDLE, MorphEvent.RETARGET): MorphPhase.TRANSITIONING,
    (MorphPhase.TRANSITIONING, MorphEvent.CONVERGED): MorphPhase.IDLE,
}

# FOCUS keeps the particle cloud scattered; the photo layer supplies its own layout
MODE_FORMATIONS: Dict[ViewMode, str] = {
    ViewMode.TREE: TREE,
    ViewMode.SCATTER: SCATTER,
    ViewMode.FOCUS: SCATTER,
}


class MorphEngine:
    """
    Owns the current particle positions and advances them each render tick.

    The requested mode is sampled only while IDLE. Requests made during a
    transition are not queued: whichever mode is requested when the engine
    next becomes idle is the one it latches.
    """

    def __init__(
        self,
        formations: Mapping[str, Formation],
        controller: ViewModeController,
        config: MorphConfig | None = None,
    ):
        self.cfg = config or MorphConfig()
        self.controller = controller
        self.formations = dict(formations)

        sizes = {len(f) for f in self.formations.values()}
        if len(sizes) != 1:
            raise ValueError(f"Formations disagree on particle count: {sorted(sizes)}")
        missing = set(MODE_FORMATIONS.values()) - set(self.formations)
        if missing:
            raise ValueError(f"Missing formations: {sorted(missing)}")

        self._initial_mode = ViewMode.parse(self.cfg.initial_mode)
        self._target_mode = self._initial_mode
        self._phase = MorphPhase.IDLE

        n = sizes.pop()
        self._positions = np.empty((n, 3), dtype=np.float32)
        # Scratch buffers so tick() does not allocate
        self._delta = np.empty((n, 3), dtype=np.float32)
        self._abs = np.empty((n, 3), dtype=np.float32)
        self._l1 = np.empty(n, dtype=np.float32)
        self.reset()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def positions(self) -> np.ndarray:
        """Current (N, 3) positions. Callers must treat this as read-only."""
        return self._positions

    @property
    def phase(self) -> MorphPhase:
        return self._phase

    @property
    def target_mode(self) -> ViewMode:
        return self._target_mode

    @property
    def is_transitioning(self) -> bool:
        return self._phase is MorphPhase.TRANSITIONING

    def target_positions(self) -> np.ndarray:
        return self.formations[MODE_FORMATIONS[self._target_mode]].positions

    def _apply(self, event: MorphEvent) -> None:
        try:
            self._phase = TRANSITIONS[(self._phase, event)]
        except KeyError:
            raise MorphStateError(
                f"Event {event.value!r} is not valid in phase {self._phase.value!r}"
            ) from None

    def reset(self) -> None:
        """Snap every particle back onto the initial formation."""
        self._target_mode = self._initial_mode
        self._phase = MorphPhase.IDLE
        np.copyto(self._positions, self.formations[MODE_FORMATIONS[self._initial_mode]].positions)

    # ------------------------------------------------------------------
    # Per-frame update
    # ------------------------------------------------------------------

    def tick(self, dt: float) -> float:
        """
        Advance all particles by one frame.

        Args:
            dt: Seconds since the previous tick. The interpolation factor is
                clamped to [0, 1] so a long pause cannot overshoot.

        Returns:
            The largest per-particle L1 distance to the target, measured
            before this step.
        """
        requested = self.controller.requested_mode
        if self._phase is MorphPhase.IDLE and requested is not self._target_mode:
            logger.info("Morph %s -> %s", self._target_mode.value, requested.value)
            self._target_mode = requested
            self._apply(MorphEvent.RETARGET)

        if len(self._positions) == 0:
            if self.is_transitioning:
                self._apply(MorphEvent.CONVERGED)
            return 0.0

        factor = min(1.0, max(0.0, self.cfg.rate * dt))

        np.subtract(self.target_positions(), self._positions, out=self._delta)
        np.abs(self._delta, out=self._abs)
        self._abs.sum(axis=1, out=self._l1)
        max_diff = float(self._l1.max())

        self._delta *= factor
        self._positions += self._delta

        if self.is_transitioning and max_diff < self.cfg.epsilon:
            logger.debug("Morph settled on %s", self._target_mode.value)
            self._apply(MorphEvent.CONVERGED)
        return max_diff
