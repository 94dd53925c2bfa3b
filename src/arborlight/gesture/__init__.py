"""Hand-landmark classification, debouncing and the camera loop."""

from arborlight.gesture.classifier import Gesture, GestureClassifier, HandPosition
from arborlight.gesture.debouncer import GestureDebouncer
