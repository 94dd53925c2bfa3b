"""
Background hand-tracking loop.

Reads camera frames with OpenCV, runs MediaPipe Hands on them and feeds
the classifier and debouncer. Runs on its own thread at whatever rate the
model manages; the render loop never waits on it.

A camera or model that fails to open is logged and leaves the tracker
inert. Everything else in the scene keeps working. Errors on a single
frame are logged and skipped; only a long run of them ends the loop.
"""

import logging
import threading
import time
from typing import Any, Callable, List

from arborlight.config import GestureConfig
from arborlight.gesture.classifier import Gesture, GestureClassifier
from arborlight.gesture.debouncer import GestureDebouncer

logger = logging.getLogger(__name__)


def open_camera(index: int = 0) -> Any:
    """Open a cv2.VideoCapture, raising if the device cannot be used."""
    import cv2

    capture = cv2.VideoCapture(index)
    if not capture.isOpened():
        capture.release()
        raise RuntimeError(f"Camera {index} could not be opened")
    return capture


class MediaPipeHandDetector:
    """Single-hand MediaPipe detector returning the landmarks of the first hand."""

    def __init__(self, config: GestureConfig | None = None):
        import cv2
        import mediapipe as mp

        cfg = config or GestureConfig()
        self._cv2 = cv2
        self._hands = mp.solutions.hands.Hands(
            max_num_hands=cfg.max_num_hands,
            min_detection_confidence=cfg.min_detection_confidence,
            min_tracking_confidence=cfg.min_tracking_confidence,
        )

    def detect(self, frame_bgr) -> List[Any]:
        rgb = self._cv2.cvtColor(frame_bgr, self._cv2.COLOR_BGR2RGB)
        result = self._hands.process(rgb)
        if not result.multi_hand_landmarks:
            return []
        return list(result.multi_hand_landmarks[0].landmark)

    def close(self) -> None:
        self._hands.close()


class HandTracker:
    """
    Owns the camera stream and hand model for the prediction loop.

    Args:
        classifier: Receives each detected landmark frame.
        debouncer: Receives each classified gesture with a monotonic timestamp.
        config: Camera index and model thresholds.
        camera_factory: Callable(index) -> object with read() and release().
        detector_factory: Callable(config) -> object with detect(frame) and close().
        clock: Time source in seconds for the debouncer.
    """

    def __init__(
        self,
        classifier: GestureClassifier,
        debouncer: GestureDebouncer,
        config: GestureConfig | None = None,
        camera_factory: Callable[[int], Any] = open_camera,
        detector_factory: Callable[[GestureConfig], Any] = MediaPipeHandDetector,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.cfg = config or GestureConfig()
        self.classifier = classifier
        self.debouncer = debouncer
        self._camera_factory = camera_factory
        self._detector_factory = detector_factory
        self._clock = clock

        self._camera = None
        self._detector = None
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._failed = False

    @property
    def available(self) -> bool:
        """True while camera and model are open and opening them has not failed."""
        return not self._failed and self._camera is not None and self._detector is not None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, background: bool = True) -> bool:
        """
        Open the camera and model, then optionally start the loop thread.

        Returns:
            True if tracking is live. If the camera or model cannot be opened
            the error is logged and the tracker stays inert for the rest of
            its lifetime.
        """
        if self._failed:
            return False
        if self.running:
            if self._stop_event.is_set():
                logger.warning("Previous hand tracking loop is still shutting down")
                return False
            return True
        if not self.available:
            try:
                logger.info("Opening camera %d", self.cfg.camera_index)
                self._camera = self._camera_factory(self.cfg.camera_index)
                logger.info("Loading hand landmark model")
                self._detector = self._detector_factory(self.cfg)
            except Exception:
                logger.exception("Hand tracking unavailable; gesture control disabled")
                self._release()
                self._failed = True
                return False

        if background:
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._run, name="hand-tracker", daemon=True)
            self._thread.start()
        logger.info("Hand tracking started")
        return True

    def step(self) -> Gesture | None:
        """
        Process one camera frame.

        Returns:
            The classified gesture, or None when there was no frame or no hand.
        """
        if not self.available:
            return None
        ok, frame = self._camera.read()
        if not ok or frame is None:
            return None

        landmarks = self._detector.detect(frame)
        gesture = self.classifier.classify(landmarks)
        if gesture is not None:
            self.debouncer.submit(gesture, self._clock())
        return gesture

    def _run(self) -> None:
        # The loop owns the camera and model once started and releases them on exit
        errors = 0
        try:
            while not self._stop_event.is_set():
                try:
                    self.step()
                    errors = 0
                except Exception:
                    errors += 1
                    if errors >= self.cfg.max_frame_errors:
                        logger.exception("Hand tracking stopped after %d failed frames in a row", errors)
                        break
                    logger.warning("Skipping hand frame after error", exc_info=True)
                # Yield so the loop does not spin when the camera returns instantly
                self._stop_event.wait(self.cfg.idle_sleep_s)
        finally:
            self._release()

    def _release(self) -> None:
        if self._camera is not None:
            self._camera.release()
            self._camera = None
        if self._detector is not None:
            self._detector.close()
            self._detector = None

    def stop(self, timeout: float = 2.0) -> None:
        """Stop the loop and release the camera stream and model. Safe to call twice."""
        active = self._thread is not None or self._camera is not None or self._detector is not None
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Hand tracking loop did not stop within %.1fs; it releases the camera on exit", timeout)
                return
            self._thread = None
        if self._camera is not None or self._detector is not None:
            self._release()
        if active:
            logger.info("Hand tracking stopped")
