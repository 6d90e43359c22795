"""
Tests for the procedural texture generator.

Verifies:
  - Same id gives byte-identical textures, different ids differ
  - Output shape, dtype and opaque alpha
  - Palette determinism and terrain band classification
  - Ice caps only on land at high latitude
  - TextureCache reuse, read-only arrays and clearing
"""

import numpy as np
import pytest

from orbit_viz.core.config import TextureCfg
from orbit_viz.core.textures import (
    TextureCache,
    generate_texture,
    ice_cap_threshold,
    terrain_color,
    terrain_palette,
)

SMALL = 32


# ─── Generation ──────────────────────────────────────────────

class TestGenerateTexture:
    def test_deterministic(self):
        a = generate_texture(101, SMALL)
        b = generate_texture(101, SMALL)
        assert np.array_equal(a, b)

    def test_different_ids_differ(self):
        assert not np.array_equal(generate_texture(101, SMALL), generate_texture(102, SMALL))

    def test_shape_and_alpha(self):
        image = generate_texture(5, SMALL)
        assert image.shape == (SMALL, SMALL, 4)
        assert image.dtype == np.uint8
        assert np.all(image[..., 3] == 255)

    def test_default_size_from_cfg(self):
        image = generate_texture(5, cfg=TextureCfg(size=16))
        assert image.shape == (16, 16, 4)

    @pytest.mark.parametrize("size", [0, -4])
    def test_non_positive_size_rejected(self, size):
        with pytest.raises(ValueError):
            generate_texture(1, size)


# ─── Palette & classification ────────────────────────────────

class TestTerrain:
    def test_palette_deterministic(self):
        assert terrain_palette(42) == terrain_palette(42)

    def test_palette_varies_by_seed(self):
        assert terrain_palette(42).deep_ocean != terrain_palette(43).deep_ocean

    def test_deep_water_at_equator(self):
        palette = terrain_palette(3)
        rgb = terrain_color(np.array([0.1]), np.array([0.0]), palette)
        np.testing.assert_array_equal(rgb[0], palette.deep_ocean)

    def test_peak_blends_to_snow(self):
        palette = terrain_palette(3)
        rgb = terrain_color(np.array([1.0]), np.array([0.0]), palette)
        np.testing.assert_array_equal(rgb[0], np.floor(np.asarray(palette.snow_cap, dtype=float)))

    def test_output_shape(self):
        palette = terrain_palette(3)
        heights = np.random.default_rng(0).random((6, 7))
        assert terrain_color(heights, np.zeros((6, 7)), palette).shape == (6, 7, 3)

    def test_polar_land_is_ice(self):
        palette = terrain_palette(8)
        rgb = terrain_color(np.array([0.65]), np.array([0.999]), palette, ice_cap_size=0.0)
        np.testing.assert_array_equal(rgb[0], palette.snow_cap)

    def test_polar_deep_ocean_stays_water(self):
        palette = terrain_palette(8)
        rgb = terrain_color(np.array([0.1]), np.array([0.999]), palette, ice_cap_size=0.0)
        np.testing.assert_array_equal(rgb[0], palette.deep_ocean)

    def test_ice_threshold_asymmetric(self):
        north = ice_cap_threshold(0.5, 0.0, 0.0, 0.0, 0.5, 1.0)
        south = ice_cap_threshold(-0.5, 0.0, 0.0, 0.0, 0.5, 1.0)
        assert float(north) > float(south)


# ─── Cache ───────────────────────────────────────────────────

class TestTextureCache:
    def test_reuses_generated_array(self):
        calls = []

        def generator(project_id, size, cfg):
            calls.append(project_id)
            return np.zeros((size, size, 4), dtype=np.uint8)

        cache = TextureCache(8, generator=generator)
        first = cache.get(1)
        second = cache.get(1)
        assert first is second
        assert calls == [1]
        assert 1 in cache and len(cache) == 1

    def test_cached_arrays_are_read_only(self):
        cache = TextureCache(8)
        texture = cache.get(4)
        with pytest.raises(ValueError):
            texture[0, 0, 0] = 1

    def test_clear(self):
        cache = TextureCache(8)
        cache.get(1)
        cache.get(2)
        cache.clear()
        assert len(cache) == 0
        assert 1 not in cache
