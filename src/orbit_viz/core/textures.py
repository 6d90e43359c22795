# src/orbit_viz/core/textures.py
"""Procedural planet surface textures derived from a project id."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from .config import TEXTURE_CFG, TextureCfg
from .noise import PerlinNoise, hash_random, octave_noise

logger = logging.getLogger(__name__)

RGB = tuple[float, float, float]


# =======================
#   TERRAIN PALETTES
# =======================
@dataclass(frozen=True)
class TerrainPalette:
    """Per-planet colors for each terrain band."""

    deep_ocean: RGB
    ocean: RGB
    shallow_ocean: RGB
    beach: RGB
    lowland: RGB
    highland: RGB
    mountain: RGB
    snow_cap: RGB


# (threshold, base rgb, rgb span, salt offsets) for each ice chemistry
_ICE_FAMILIES: tuple[tuple[float, RGB, RGB, tuple[float, float, float]], ...] = (
    (0.15, (250, 250, 250), (5, 5, 5), (3.71, 3.72, 3.73)),        # water ice
    (0.30, (150, 180, 240), (50, 40, 15), (3.74, 3.75, 3.76)),     # frozen nitrogen
    (0.45, (240, 180, 230), (15, 40, 25), (3.77, 3.78, 3.79)),     # frozen methane
    (0.60, (240, 200, 140), (15, 40, 50), (3.80, 3.81, 3.82)),     # sulfur deposits
    (0.75, (180, 240, 220), (40, 15, 35), (3.83, 3.84, 3.85)),     # frozen ammonia
    (0.90, (200, 170, 240), (40, 50, 15), (3.86, 3.87, 3.88)),     # exotic compounds
    (1.01, (190, 240, 190), (40, 15, 40), (3.89, 3.90, 3.91)),     # chlorine ice
)


def _ice_color(seed: float) -> RGB:
    family = hash_random(seed * 3.7)
    for threshold, base, span, salts in _ICE_FAMILIES:
        if family < threshold:
            return tuple(
                float(math.floor(b + hash_random(seed * salt) * s))
                for b, s, salt in zip(base, span, salts)
            )  # type: ignore[return-value]
    raise AssertionError("ice family table must cover [0, 1)")


def terrain_palette(seed: float) -> TerrainPalette:
    """Randomize ocean, land and ice hues for a planet seed."""

    ocean_hue = hash_random(seed * 1.1)
    ocean_r = math.floor(15 + ocean_hue * 40)
    ocean_g = math.floor(50 + ocean_hue * 80)
    ocean_b = math.floor(90 + hash_random(seed * 1.2) * 100)

    land_hue = hash_random(seed * 2.3)
    land_r = math.floor(60 + land_hue * 80)
    land_g = math.floor(100 + land_hue * 60)
    land_b = math.floor(30 + land_hue * 50)

    return TerrainPalette(
        deep_ocean=(ocean_r, ocean_g, ocean_b),
        ocean=(ocean_r + 15, ocean_g + 30, ocean_b + 60),
        shallow_ocean=(ocean_r + 35, ocean_g + 70, ocean_b + 90),
        beach=(
            194 + hash_random(seed * 4.1) * 40,
            178 + hash_random(seed * 4.2) * 40,
            128 + hash_random(seed * 4.3) * 40,
        ),
        lowland=(land_r, land_g, land_b),
        highland=(land_r + 20, land_g + 20, land_b + 10),
        mountain=(120, 110, 100),
        snow_cap=_ice_color(seed),
    )


# =======================
#   TERRAIN CLASSIFICATION
# =======================
# (upper height bound, from band, to band); the lower bound is the previous entry
_HEIGHT_BANDS: tuple[tuple[float, str, str], ...] = (
    (0.40, "deep_ocean", "ocean"),
    (0.45, "ocean", "shallow_ocean"),
    (0.48, "shallow_ocean", "beach"),
    (0.60, "beach", "lowland"),
    (0.75, "lowland", "highland"),
    (0.85, "highland", "mountain"),
    (1.00, "mountain", "snow_cap"),
)
_DEEP_OCEAN_LIMIT = 0.30


def _lerp_color(c1: np.ndarray, c2: np.ndarray, t: np.ndarray) -> np.ndarray:
    return np.floor(c1 + (c2 - c1) * t[..., None])


def ice_cap_threshold(
    latitude: np.ndarray | float,
    jagged: np.ndarray | float,
    spiral: np.ndarray | float,
    patch: np.ndarray | float,
    ice_cap_size: float,
    ice_cap_asymmetry: float,
) -> np.ndarray:
    """Latitude above which a pixel turns to ice; asymmetric between poles."""

    latitude = np.asarray(latitude, dtype=float)
    base = 0.75 + ice_cap_size * 0.2
    asymmetry = np.where(
        latitude > 0, 1 + ice_cap_asymmetry * 0.3, 1 - ice_cap_asymmetry * 0.3
    )
    patch_effect = np.where(np.asarray(patch) > 0.6, 0.05, 0.0)
    return (base + np.asarray(jagged) * 0.2 + np.asarray(spiral) * 0.1 + patch_effect) * asymmetry


def terrain_color(
    height: np.ndarray | float,
    latitude: np.ndarray | float,
    palette: TerrainPalette,
    jagged: np.ndarray | float = 0.0,
    ice_cap_size: float = 0.5,
    ice_cap_asymmetry: float = 0.0,
    spiral: np.ndarray | float = 0.0,
    patch: np.ndarray | float = 0.0,
) -> np.ndarray:
    """Classify height and latitude into RGB, shape ``height.shape + (3,)``."""

    height = np.asarray(height, dtype=float)
    latitude = np.asarray(latitude, dtype=float)
    colors = {name: np.asarray(getattr(palette, name), dtype=float) for name in palette.__dataclass_fields__}

    out = np.empty(height.shape + (3,), dtype=float)
    out[...] = colors["deep_ocean"]

    lower = _DEEP_OCEAN_LIMIT
    assigned = height < lower
    for upper, start, end in _HEIGHT_BANDS:
        in_band = ~assigned & ((height < upper) | (upper >= 1.0))
        if np.any(in_band):
            t = (height - lower) / (upper - lower)
            blended = _lerp_color(colors[start], colors[end], t)
            out[in_band] = blended[in_band]
        assigned |= in_band
        lower = upper

    threshold = ice_cap_threshold(latitude, jagged, spiral, patch, ice_cap_size, ice_cap_asymmetry)
    icy = (np.abs(latitude) > threshold) & (height > _DEEP_OCEAN_LIMIT)
    out[icy] = colors["snow_cap"]
    return out


# =======================
#   TEXTURE GENERATION
# =======================
def _rotate(
    sx: np.ndarray, sy: np.ndarray, sz: np.ndarray, rx: float, ry: float, rz: float
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    sy, sz = sy * math.cos(rx) - sz * math.sin(rx), sy * math.sin(rx) + sz * math.cos(rx)
    sx, sz = sx * math.cos(ry) + sz * math.sin(ry), -sx * math.sin(ry) + sz * math.cos(ry)
    sx, sy = sx * math.cos(rz) - sy * math.sin(rz), sx * math.sin(rz) + sy * math.cos(rz)
    return sx, sy, sz


def generate_texture(
    project_id: int,
    size: Optional[int] = None,
    cfg: TextureCfg = TEXTURE_CFG,
) -> np.ndarray:
    """
    Generate an equirectangular RGBA surface texture for a project.

    Args:
        project_id: Stable numeric id used as the noise seed
        size: Edge length in pixels (defaults to ``cfg.size``)
        cfg: Texture tuning constants

    Returns:
        A ``(size, size, 4)`` uint8 array; identical ids give identical bytes

    Raises:
        ValueError: If size is not positive
    """
    size = cfg.size if size is None else size
    if size <= 0:
        raise ValueError("Texture size must be positive")

    seed = float(project_id)
    perlin = PerlinNoise(seed)
    palette = terrain_palette(seed)

    ice_cap_size = hash_random(seed * 5.1)
    ice_cap_asymmetry = hash_random(seed * 5.2)
    rot_x = hash_random(seed * 5.3) * math.pi * 2
    rot_y = hash_random(seed * 5.4) * math.pi * 2
    rot_z = hash_random(seed * 5.5) * math.pi * 2

    steps = np.arange(size, dtype=float) / size
    lon, lat = np.meshgrid(steps * math.pi * 2, (steps - 0.5) * math.pi)

    sx = np.cos(lat) * np.cos(lon)
    sy = np.cos(lat) * np.sin(lon)
    sz = np.sin(lat)
    sx, sy, sz = _rotate(sx, sy, sz, rot_x, rot_y, rot_z)

    scale = cfg.noise_scale
    height = octave_noise(perlin, sx * scale, sy * scale, cfg.height_octaves, cfg.height_persistence)
    normalized = (height + 1.0) / 2.0

    jagged = octave_noise(perlin, lon * 8, lat * 8, 3, 0.5)
    spiral = octave_noise(perlin, lon * 12 + lat * 6, lat * 12, 4, 0.6)
    patch = octave_noise(perlin, lon * 16, lat * 16, 2, 0.4)

    rgb = terrain_color(
        normalized,
        np.sin(lat),
        palette,
        jagged,
        ice_cap_size,
        ice_cap_asymmetry,
        spiral,
        patch,
    )

    variation = octave_noise(
        perlin, sx * cfg.variation_scale, sy * cfg.variation_scale, 2, 0.3
    ) * cfg.variation_amplitude
    rgb = np.clip(np.rint(rgb + variation[..., None]), 0, 255)

    image = np.empty((size, size, 4), dtype=np.uint8)
    image[..., :3] = rgb.astype(np.uint8)
    image[..., 3] = 255
    return image


class TextureCache:
    """Scene-owned cache of generated textures keyed by project id."""

    def __init__(
        self,
        size: Optional[int] = None,
        *,
        cfg: TextureCfg = TEXTURE_CFG,
        generator: Callable[..., np.ndarray] = generate_texture,
    ) -> None:
        self._size = cfg.size if size is None else size
        self._cfg = cfg
        self._generator = generator
        self._textures: dict[int, np.ndarray] = {}

    @property
    def size(self) -> int:
        return self._size

    def get(self, project_id: int) -> np.ndarray:
        cached = self._textures.get(project_id)
        if cached is not None:
            return cached
        texture = self._generator(project_id, self._size, cfg=self._cfg)
        texture.flags.writeable = False
        self._textures[project_id] = texture
        logger.debug("Generated %dpx texture for project %s", self._size, project_id)
        return texture

    def clear(self) -> None:
        self._textures.clear()

    def __len__(self) -> int:
        return len(self._textures)

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._textures


__all__ = [
    "TerrainPalette",
    "TextureCache",
    "generate_texture",
    "ice_cap_threshold",
    "terrain_color",
    "terrain_palette",
]
