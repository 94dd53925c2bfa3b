"""
arborlight: a gesture-driven particle tree.

Procedural formations, a morph engine that moves thousands of particles
between them, and the hand-gesture state machine that picks the active one.
"""

__version__ = "0.1.0"

from arborlight.core.layout import (
    Formation,
    LayoutGenerator,
    ParticleCategory,
    ParticleLayout,
    partition_counts,
)
from arborlight.core.morph import MorphEngine, MorphPhase
from arborlight.core.view_mode import ViewMode, ViewModeController
from arborlight.gesture.classifier import Gesture, GestureClassifier, HandPosition
from arborlight.gesture.debouncer import GestureDebouncer

__all__ = [
    "Formation",
    "Gesture",
    "GestureClassifier",
    "GestureDebouncer",
    "HandPosition",
    "LayoutGenerator",
    "MorphEngine",
    "MorphPhase",
    "ParticleCategory",
    "ParticleLayout",
    "ViewMode",
    "ViewModeController",
    "partition_counts",
]
