"""Tests for the procedural formation layouts."""

import numpy as np
import pytest

from arborlight.config import LayoutConfig
from arborlight.core.layout import (
    SCATTER,
    TREE,
    LayoutGenerator,
    ParticleCategory,
    partition_counts,
    scatter_positions,
)


class TestPartition:
    def test_default_partition(self):
        counts = partition_counts(3000)
        assert counts[ParticleCategory.STAR] == 1
        assert counts[ParticleCategory.FAIRY_LIGHT] == 1200
        assert counts[ParticleCategory.SPHERE_ORNAMENT] == 280
        assert counts[ParticleCategory.HEART_ORNAMENT] == 100
        assert counts[ParticleCategory.RIBBON_BOW] == 25
        assert counts[ParticleCategory.GARLAND_BEAD] == 900
        assert counts[ParticleCategory.FOLIAGE] == 3000 - 2506
        assert sum(counts.values()) == 3000

    @pytest.mark.parametrize("total", [0, 1, 500, 1201, 2506, 2507, 10000])
    def test_sums_exactly(self, total):
        counts = partition_counts(total)
        assert sum(counts.values()) == total
        assert all(n >= 0 for n in counts.values())

    def test_small_budget_clamps_in_order(self):
        counts = partition_counts(1000)
        assert counts[ParticleCategory.STAR] == 1
        assert counts[ParticleCategory.FAIRY_LIGHT] == 999
        assert counts[ParticleCategory.SPHERE_ORNAMENT] == 0
        assert counts[ParticleCategory.FOLIAGE] == 0

    def test_negative_total_rejected(self):
        with pytest.raises(ValueError):
            partition_counts(-1)


class TestScatterPositions:
    def test_inside_sphere(self):
        rng = np.random.default_rng(0)
        pts = scatter_positions(rng, 5000, 18.0)
        assert pts.shape == (5000, 3)
        assert np.linalg.norm(pts, axis=1).max() <= 18.0 + 1e-9

    @pytest.mark.parametrize("frac", [0.25, 0.5, 0.8])
    def test_volumetric_uniformity(self, frac):
        """Fraction inside r*R converges to r^3, not r (volume, not surface)."""
        rng = np.random.default_rng(1)
        radius = 10.0
        pts = scatter_positions(rng, 40000, radius)
        inside = np.mean(np.linalg.norm(pts, axis=1) < frac * radius)
        assert inside == pytest.approx(frac ** 3, abs=0.01)

    def test_directions_uniform(self):
        rng = np.random.default_rng(2)
        pts = scatter_positions(rng, 40000, 1.0)
        # Every octant-half gets roughly half the points
        for axis in range(3):
            assert np.mean(pts[:, axis] > 0) == pytest.approx(0.5, abs=0.01)


class TestLayoutGenerator:
    def test_end_to_end_counts(self, full_layout):
        assert full_layout.total == 3000
        attrs = full_layout.attributes
        expected = {
            ParticleCategory.STAR: 1,
            ParticleCategory.FAIRY_LIGHT: 1200,
            ParticleCategory.SPHERE_ORNAMENT: 280,
            ParticleCategory.HEART_ORNAMENT: 100,
            ParticleCategory.RIBBON_BOW: 25,
            ParticleCategory.GARLAND_BEAD: 900,
            ParticleCategory.FOLIAGE: 494,
        }
        for category, n in expected.items():
            assert int(attrs.mask(category).sum()) == n
            assert full_layout.counts[category] == n
        assert sum(full_layout.counts.values()) == 3000

    def test_formations_cover_every_particle(self, full_layout):
        for name in (TREE, SCATTER):
            formation = full_layout.formations[name]
            assert formation.positions.shape == (3000, 3)
            assert np.all(np.isfinite(formation.positions))
        attrs = full_layout.attributes
        for arr in (attrs.sizes, attrs.phases, attrs.color_variants):
            assert len(arr) == 3000

    def test_formations_are_read_only(self, full_layout):
        with pytest.raises(ValueError):
            full_layout.formations[TREE].positions[0, 0] = 1.0
        with pytest.raises(ValueError):
            full_layout.attributes.sizes[0] = 1.0

    def test_deterministic_with_seed(self, small_layout_config):
        a = LayoutGenerator(small_layout_config, seed=11).generate()
        b = LayoutGenerator(small_layout_config, seed=11).generate()
        np.testing.assert_array_equal(a.formations[TREE].positions, b.formations[TREE].positions)
        np.testing.assert_array_equal(a.formations[SCATTER].positions, b.formations[SCATTER].positions)

    def test_star_at_apex(self, full_layout):
        star = full_layout.slice_for(ParticleCategory.STAR)
        pos = full_layout.formations[TREE].positions[star]
        assert pos.shape == (1, 3)
        np.testing.assert_allclose(pos[0], [0.0, 14.0 / 2 + 0.3, 0.0], atol=1e-5)
        assert full_layout.attributes.sizes[star][0] == 30.0

    def test_tree_tapers_toward_apex(self, full_layout):
        """No decoration sticks out further than the cone allows at its height."""
        cfg = LayoutConfig()
        pos = full_layout.formations[TREE].positions
        radial = np.hypot(pos[:, 0], pos[:, 2])
        assert radial.max() <= cfg.base_radius * 1.11
        lights = pos[full_layout.slice_for(ParticleCategory.FAIRY_LIGHT)]
        h = (lights[:, 1] + cfg.tree_height / 2) / cfg.tree_height
        cone = cfg.base_radius * (1 - cfg.taper * h)
        assert np.all(np.hypot(lights[:, 0], lights[:, 2]) <= cone * 1.05 + 1e-4)

    def test_ornaments_hang_below_their_level(self, full_layout):
        """Ornaments sit on the surface with droop, so none reach above the cone top."""
        cfg = LayoutConfig()
        pos = full_layout.formations[TREE].positions
        ornaments = pos[full_layout.slice_for(ParticleCategory.SPHERE_ORNAMENT)]
        assert ornaments[:, 1].max() < -cfg.tree_height / 2 + 0.9 * cfg.tree_height - 0.1 + 1e-4
        radial = np.hypot(ornaments[:, 0], ornaments[:, 2])
        assert radial.min() > 0.0

    def test_garland_spirals_upward(self, full_layout):
        pos = full_layout.formations[TREE].positions
        garland = pos[full_layout.slice_for(ParticleCategory.GARLAND_BEAD)]
        angles = np.unwrap(np.arctan2(garland[:, 2], garland[:, 0]))
        loops = (angles[-1] - angles[0]) / (2 * np.pi)
        assert loops == pytest.approx(8.0, abs=0.05)
        # Trend is upward even with the vertical ripple
        assert garland[-1, 1] > garland[0, 1] + 10.0

    def test_scatter_inside_radius(self, full_layout):
        pos = full_layout.formations[SCATTER].positions
        assert np.linalg.norm(pos, axis=1).max() <= 18.0 + 1e-4

    def test_zero_count_categories(self):
        cfg = LayoutConfig(
            total_particles=50,
            star_count=0,
            fairy_light_count=0,
            sphere_ornament_count=0,
            heart_ornament_count=0,
            ribbon_bow_count=0,
            garland_bead_count=0,
        )
        layout = LayoutGenerator(cfg, seed=0).generate()
        assert layout.counts[ParticleCategory.FOLIAGE] == 50
        assert np.all(layout.attributes.categories == int(ParticleCategory.FOLIAGE))

    def test_empty_layout(self):
        layout = LayoutGenerator(LayoutConfig(total_particles=0), seed=0).generate()
        assert layout.total == 0
        assert layout.formations[TREE].positions.shape == (0, 3)
