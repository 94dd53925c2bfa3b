"""
Hand-landmark gesture classification.

Turns one 21-point MediaPipe hand frame into a discrete gesture and
publishes a hand-centre position for the camera rig.

Landmark indices used:
    0       wrist
    4, 8    thumb tip, index tip
    5, 17   index and pinky base knuckles
    8/12/16/20 fingertips, each compared with the joint two below it
"""

import logging
from enum import Enum
from typing import Any, Sequence, Tuple

import numpy as np

from arborlight.config import GestureConfig

logger = logging.getLogger(__name__)

NUM_LANDMARKS = 21
WRIST = 0
THUMB_TIP = 4
INDEX_TIP = 8
FINGER_TIPS = (8, 12, 16, 20)
PALM_ANCHORS = (0, 5, 17)


class Gesture(str, Enum):
    PINCH = "PINCH"
    OPEN = "OPEN"
    FIST = "FIST"
    NONE = "NONE"


class HandPosition:
    """
    Hand centre in normalized screen units, shared by reference between the
    classifier (single writer) and the camera rig.

    The pair is stored as one tuple so a reader on another thread never sees
    a new x with an old y.
    """

    def __init__(self, x: float = 0.5, y: float = 0.5):
        self._xy: Tuple[float, float] = (float(x), float(y))

    @property
    def value(self) -> Tuple[float, float]:
        return self._xy

    @property
    def x(self) -> float:
        return self._xy[0]

    @property
    def y(self) -> float:
        return self._xy[1]

    def set(self, x: float, y: float) -> None:
        self._xy = (float(x), float(y))

    def __repr__(self) -> str:
        return f"HandPosition(x={self.x:.3f}, y={self.y:.3f})"


def landmarks_to_array(landmarks: Any) -> np.ndarray:
    """
    Normalize a landmark frame into an (n, 3) float array.

    Accepts MediaPipe landmark objects (with .x/.y/.z), sequences of
    (x, y, z) triples, or an array of shape (n, 3).
    """
    if isinstance(landmarks, np.ndarray):
        arr = np.asarray(landmarks, dtype=np.float64)
        if arr.size == 0:
            return arr.reshape(0, 3)
        return arr.reshape(-1, 3)

    points = list(landmarks)
    if not points:
        return np.zeros((0, 3))
    if hasattr(points[0], "x"):
        return np.array([(p.x, p.y, getattr(p, "z", 0.0)) for p in points], dtype=np.float64)
    return np.array([tuple(p)[:3] for p in points], dtype=np.float64)


class GestureClassifier:
    """
    Classifies hand frames as PINCH, OPEN, FIST or NONE.

    Rules are checked in priority order and the first match wins, so a pinch
    is reported even when the fingers also look extended or curled.
    """

    def __init__(self, hand_position: HandPosition, config: GestureConfig | None = None):
        self.cfg = config or GestureConfig()
        self.hand_position = hand_position
        self.last_gesture: Gesture = Gesture.NONE

    def _lerp(self, current: float, target: float, factor: float) -> float:
        return current + (target - current) * factor

    def _analyze(self, pts: np.ndarray) -> Gesture:
        if np.linalg.norm(pts[THUMB_TIP] - pts[INDEX_TIP]) < self.cfg.pinch_threshold:
            return Gesture.PINCH

        wrist = pts[WRIST]
        tips = np.array(FINGER_TIPS)
        tip_dist = np.linalg.norm(pts[tips] - wrist, axis=1)
        joint_dist = np.linalg.norm(pts[tips - 2] - wrist, axis=1)

        if int(np.count_nonzero(tip_dist > joint_dist)) >= self.cfg.min_fingers:
            return Gesture.OPEN
        if int(np.count_nonzero(tip_dist < joint_dist)) >= self.cfg.min_fingers:
            return Gesture.FIST
        return Gesture.NONE

    def _publish_position(self, pts: np.ndarray) -> None:
        cx, cy = pts[list(PALM_ANCHORS), :2].mean(axis=0)
        # Mirror x for a front-facing camera
        x, y = 1.0 - float(cx), float(cy)
        k = self.cfg.position_smoothing
        if k < 1.0:
            px, py = self.hand_position.value
            x, y = self._lerp(px, x, k), self._lerp(py, y, k)
        self.hand_position.set(x, y)

    def classify(self, landmarks: Sequence[Any]) -> Gesture | None:
        """
        Classify one hand frame.

        Args:
            landmarks: 21 hand landmarks, or an empty sequence when no hand
                was detected.

        Returns:
            The gesture, or None for an empty frame or one holding
            non-finite coordinates. Such frames also leave the published
            hand position and last_gesture unchanged.

        Raises:
            ValueError: If the frame holds neither 0 nor 21 landmarks.
        """
        pts = landmarks_to_array(landmarks)
        if len(pts) == 0:
            return None
        if len(pts) != NUM_LANDMARKS:
            raise ValueError(f"Expected {NUM_LANDMARKS} hand landmarks, got {len(pts)}")
        if not np.isfinite(pts).all():
            logger.debug("Dropping hand frame with non-finite landmarks")
            return None

        gesture = self._analyze(pts)
        self._publish_position(pts)
        self.last_gesture = gesture
        logger.debug("Hand at (%.2f, %.2f): %s", self.hand_position.x, self.hand_position.y, gesture.value)
        return gesture
