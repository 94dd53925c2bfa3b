"""Formation layouts, the morph engine and the view-mode state."""

from arborlight.core.layout import LayoutGenerator, ParticleCategory
from arborlight.core.morph import MorphEngine, MorphPhase
from arborlight.core.view_mode import ViewMode, ViewModeController
