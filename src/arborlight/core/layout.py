"""
Procedural particle layouts for the decorated tree.

Every particle gets a category, a size, an animation phase and a colour
variant once at startup, plus one target position per named formation:
- TREE: categories arranged on and inside a tapered cone, with a spiral
  garland wound around it and a single star at the apex.
- SCATTER: every particle sampled uniformly over a solid sphere.

Formations and attributes are read-only numpy arrays; nothing downstream
may change them after generation.
"""

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict

import numpy as np

from arborlight.config import LayoutConfig


class ParticleCategory(IntEnum):
    """Particle kinds. The integer value is the renderer's type attribute."""
    FOLIAGE = 0
    SPHERE_ORNAMENT = 1
    STAR = 2
    FAIRY_LIGHT = 3
    GARLAND_BEAD = 4
    HEART_ORNAMENT = 5
    RIBBON_BOW = 6


TREE = "TREE"
SCATTER = "SCATTER"

# Index order in the particle arrays
GENERATION_ORDER = (
    ParticleCategory.STAR,
    ParticleCategory.FAIRY_LIGHT,
    ParticleCategory.SPHERE_ORNAMENT,
    ParticleCategory.HEART_ORNAMENT,
    ParticleCategory.RIBBON_BOW,
    ParticleCategory.GARLAND_BEAD,
    ParticleCategory.FOLIAGE,
)


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class Formation:
    """A named, immutable (N, 3) arrangement of every particle."""
    name: str
    positions: np.ndarray

    def __len__(self) -> int:
        return len(self.positions)


@dataclass(frozen=True)
class ParticleAttributes:
    """Per-particle scalars, parallel arrays indexed by particle id."""
    categories: np.ndarray  # int8 ParticleCategory values
    sizes: np.ndarray
    phases: np.ndarray
    color_variants: np.ndarray

    def __len__(self) -> int:
        return len(self.categories)

    def mask(self, category: ParticleCategory) -> np.ndarray:
        return self.categories == int(category)


@dataclass(frozen=True)
class ParticleLayout:
    """Output of LayoutGenerator: attributes plus every formation."""
    attributes: ParticleAttributes
    formations: Dict[str, Formation]
    counts: Dict[ParticleCategory, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.attributes)

    def slice_for(self, category: ParticleCategory) -> slice:
        """Contiguous index range holding one category."""
        start = 0
        for cat in GENERATION_ORDER:
            if cat == category:
                return slice(start, start + self.counts[cat])
            start += self.counts[cat]
        raise KeyError(category)


def partition_counts(total: int, config: LayoutConfig | None = None) -> Dict[ParticleCategory, int]:
    """
    Split `total` particles into per-category counts.

    Fixed allocations are taken in generation order and clamped to what is
    left, so the partition never overflows; foliage absorbs the remainder.
    The counts always sum to `total`.
    """
    if total < 0:
        raise ValueError(f"total particle count must be >= 0, got {total}")
    cfg = config or LayoutConfig()
    fixed = {
        ParticleCategory.STAR: cfg.star_count,
        ParticleCategory.FAIRY_LIGHT: cfg.fairy_light_count,
        ParticleCategory.SPHERE_ORNAMENT: cfg.sphere_ornament_count,
        ParticleCategory.HEART_ORNAMENT: cfg.heart_ornament_count,
        ParticleCategory.RIBBON_BOW: cfg.ribbon_bow_count,
        ParticleCategory.GARLAND_BEAD: cfg.garland_bead_count,
    }
    counts: Dict[ParticleCategory, int] = {}
    remaining = total
    for category in GENERATION_ORDER:
        if category == ParticleCategory.FOLIAGE:
            counts[category] = remaining
            remaining = 0
        else:
            n = min(max(fixed[category], 0), remaining)
            counts[category] = n
            remaining -= n
    return counts


def scatter_positions(rng: np.random.Generator, n: int, radius: float) -> np.ndarray:
    """
    Sample `n` points uniformly over a solid sphere.

    phi = acos(2u - 1) keeps directions uniform over the sphere surface and
    the cube root on the radius compensates for volume growing with r^3.
    """
    theta = rng.uniform(0.0, 2.0 * math.pi, n)
    phi = np.arccos(2.0 * rng.random(n) - 1.0)
    r = np.cbrt(rng.random(n)) * radius
    sin_phi = np.sin(phi)
    return np.stack(
        [r * sin_phi * np.cos(theta), r * sin_phi * np.sin(theta), r * np.cos(phi)],
        axis=1,
    )


class LayoutGenerator:
    """
    Builds the TREE and SCATTER formations for a fixed particle budget.

    Generation is pure and total for a given seed: the same config and seed
    always yield the same layout.
    """

    def __init__(self, config: LayoutConfig | None = None, seed: int | None = None):
        self.cfg = config or LayoutConfig()
        self.rng = np.random.default_rng(seed)

    # ------------------------------------------------------------------
    # Cone helpers
    # ------------------------------------------------------------------

    def _cone_radius(self, h: np.ndarray) -> np.ndarray:
        return self.cfg.base_radius * (1.0 - h * self.cfg.taper)

    def _height_to_y(self, h: np.ndarray) -> np.ndarray:
        return -self.cfg.tree_height / 2.0 + h * self.cfg.tree_height

    def _ring(self, r: np.ndarray, y: np.ndarray, angle: np.ndarray) -> np.ndarray:
        return np.stack([r * np.cos(angle), y, r * np.sin(angle)], axis=1)

    def _azimuth(self, n: int) -> np.ndarray:
        return self.rng.uniform(0.0, 2.0 * math.pi, n)

    def _surface_decorations(
        self,
        n: int,
        h_range: tuple[float, float],
        r_range: tuple[float, float],
        droop_range: tuple[float, float] | None = None,
    ) -> np.ndarray:
        """Items sitting near the cone surface, optionally hanging lower."""
        h = self.rng.uniform(h_range[0], h_range[1], n)
        r = self._cone_radius(h) * self.rng.uniform(r_range[0], r_range[1], n)
        y = self._height_to_y(h)
        if droop_range is not None:
            y = y - self.rng.uniform(droop_range[0], droop_range[1], n)
        return self._ring(r, y, self._azimuth(n))

    # ------------------------------------------------------------------
    # Per-category tree placement
    # ------------------------------------------------------------------

    def _star(self, n: int) -> np.ndarray:
        pos = np.zeros((n, 3))
        pos[:, 1] = self.cfg.tree_height / 2.0 + 0.3
        return pos

    def _fairy_lights(self, n: int) -> np.ndarray:
        # Power-law bias packs more lights toward the top
        h = np.power(self.rng.random(n), 0.6)
        r = self._cone_radius(h) * (0.7 + self.rng.random(n) * 0.35)
        return self._ring(r, self._height_to_y(h), self._azimuth(n))

    def _sphere_ornaments(self, n: int) -> np.ndarray:
        return self._surface_decorations(n, (0.1, 0.9), (1.0, 1.1), (0.1, 0.35))

    def _heart_ornaments(self, n: int) -> np.ndarray:
        return self._surface_decorations(n, (0.15, 0.85), (1.0, 1.08), (0.15, 0.45))

    def _ribbon_bows(self, n: int) -> np.ndarray:
        return self._surface_decorations(n, (0.2, 0.85), (1.02, 1.07))

    def _garland(self, n: int) -> np.ndarray:
        """A bead string wound `garland_loops` times from base to near the top."""
        t = np.arange(n) / max(n, 1)
        angle = t * 2.0 * math.pi * self.cfg.garland_loops
        y = (
            -self.cfg.tree_height / 2.0
            + t * self.cfg.tree_height * 0.9
            + np.sin(angle * 2.0) * 0.15
        )
        r = self._cone_radius(t) * (1.02 + np.sin(angle * 3.0) * 0.05)
        return self._ring(r, y, angle)

    def _foliage(self, n: int) -> np.ndarray:
        h = np.sqrt(self.rng.random(n))
        # sqrt keeps areal density even across each height band
        r = self._cone_radius(h) * np.sqrt(self.rng.random(n)) * 1.05
        droop = (r / self.cfg.base_radius) * 0.2
        return self._ring(r, self._height_to_y(h) - droop, self._azimuth(n))

    def _attributes(self, category: ParticleCategory, n: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Returns (sizes, phases, color_variants) for one category."""
        rng = self.rng
        zeros = np.zeros(n)
        if category == ParticleCategory.STAR:
            return np.full(n, 30.0), zeros, zeros

        phases = rng.random(n) * 100.0
        if category == ParticleCategory.FAIRY_LIGHT:
            return rng.uniform(3.0, 5.0, n), phases, zeros
        if category == ParticleCategory.SPHERE_ORNAMENT:
            return rng.uniform(6.0, 11.0, n), phases, rng.random(n)
        if category == ParticleCategory.HEART_ORNAMENT:
            return rng.uniform(7.0, 11.0, n), phases, rng.random(n)
        if category == ParticleCategory.RIBBON_BOW:
            return rng.uniform(22.0, 28.0, n), phases, rng.random(n)
        if category == ParticleCategory.GARLAND_BEAD:
            return rng.uniform(1.5, 2.0, n), phases, zeros
        return rng.uniform(2.5, 5.0, n), phases, rng.random(n)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self) -> ParticleLayout:
        """Generate attributes and both formations for every particle."""
        cfg = self.cfg
        counts = partition_counts(cfg.total_particles, cfg)
        placers = {
            ParticleCategory.STAR: self._star,
            ParticleCategory.FAIRY_LIGHT: self._fairy_lights,
            ParticleCategory.SPHERE_ORNAMENT: self._sphere_ornaments,
            ParticleCategory.HEART_ORNAMENT: self._heart_ornaments,
            ParticleCategory.RIBBON_BOW: self._ribbon_bows,
            ParticleCategory.GARLAND_BEAD: self._garland,
            ParticleCategory.FOLIAGE: self._foliage,
        }

        tree_parts, scatter_parts = [], []
        categories, sizes, phases, variants = [], [], [], []
        for category in GENERATION_ORDER:
            n = counts[category]
            if n == 0:
                continue
            tree_parts.append(placers[category](n))
            if category == ParticleCategory.STAR:
                star = np.zeros((n, 3))
                star[:, 1] = cfg.scatter_radius * 0.8
                scatter_parts.append(star)
            else:
                scatter_parts.append(scatter_positions(self.rng, n, cfg.scatter_radius))

            sz, ph, cv = self._attributes(category, n)
            categories.append(np.full(n, int(category), dtype=np.int8))
            sizes.append(sz)
            phases.append(ph)
            variants.append(cv)

        def _join(parts, shape_tail=()):
            if parts:
                return np.concatenate(parts).astype(np.float32)
            return np.zeros((0,) + shape_tail, dtype=np.float32)

        attributes = ParticleAttributes(
            categories=_frozen(
                np.concatenate(categories) if categories else np.zeros(0, dtype=np.int8)
            ),
            sizes=_frozen(_join(sizes)),
            phases=_frozen(_join(phases)),
            color_variants=_frozen(_join(variants)),
        )
        formations = {
            TREE: Formation(TREE, _frozen(_join(tree_parts, (3,)))),
            SCATTER: Formation(SCATTER, _frozen(_join(scatter_parts, (3,)))),
        }
        return ParticleLayout(attributes=attributes, formations=formations, counts=counts)
