"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from arborlight.config import LayoutConfig, MorphConfig, SceneConfig
from arborlight.core.layout import LayoutGenerator
from arborlight.core.view_mode import ViewModeController

# Small budget keeps morph tests fast while still covering every category
SMALL_TOTAL = 400

WRIST = (0.5, 0.8, 0.0)

# (base knuckle index, x offset of the finger column)
FINGERS = {
    "index": (5, -0.05),
    "middle": (9, 0.0),
    "ring": (13, 0.05),
    "pinky": (17, 0.10),
}


@pytest.fixture
def small_layout_config() -> LayoutConfig:
    return LayoutConfig(
        total_particles=SMALL_TOTAL,
        fairy_light_count=120,
        sphere_ornament_count=30,
        heart_ornament_count=10,
        ribbon_bow_count=5,
        garland_bead_count=90,
    )


@pytest.fixture
def small_layout(small_layout_config):
    return LayoutGenerator(small_layout_config, seed=7).generate()


@pytest.fixture
def full_layout():
    """The default 3000-particle layout."""
    return LayoutGenerator(seed=42).generate()


@pytest.fixture
def controller() -> ViewModeController:
    return ViewModeController()


@pytest.fixture
def morph_config() -> MorphConfig:
    return MorphConfig(rate=10.0, epsilon=0.5)


@pytest.fixture
def scene_config(small_layout_config) -> SceneConfig:
    return SceneConfig(layout=small_layout_config, seed=3)


def _finger(base: int, x_offset: float, extended: bool) -> dict:
    """Four joints (base, pip, dip, tip) of one finger, pointing up the image."""
    wx, wy, wz = WRIST
    x = wx + x_offset
    if extended:
        # Each joint further from the wrist than the previous one
        reach = [0.10, 0.15, 0.20, 0.25]
    else:
        # Tip folds back below the middle joint
        reach = [0.10, 0.15, 0.12, 0.07]
    return {base + k: (x, wy - r, wz) for k, r in enumerate(reach)}


@pytest.fixture
def make_hand():
    """
    Build a 21-point hand frame.

    Args (of the returned factory):
        extended: dict finger-name -> bool, or a single bool for all four.
        pinch: put the thumb tip 0.05 away from the index tip.
    """

    def _make(extended=True, pinch: bool = False) -> np.ndarray:
        if isinstance(extended, bool):
            extended = {name: extended for name in FINGERS}
        pts = {0: WRIST}
        # Thumb sweeps out to the left
        for k in range(1, 5):
            pts[k] = (WRIST[0] - 0.05 * k, WRIST[1] - 0.03 * k, 0.0)
        for name, (base, x_offset) in FINGERS.items():
            pts.update(_finger(base, x_offset, extended[name]))
        if pinch:
            ix, iy, iz = pts[8]
            pts[4] = (ix + 0.05, iy, iz)
        return np.array([pts[i] for i in range(21)], dtype=np.float64)

    return _make
