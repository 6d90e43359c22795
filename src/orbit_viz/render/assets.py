from __future__ import annotations

import math
from collections import OrderedDict
from typing import Iterable, Optional

import numpy as np
import pygame

from ..core.config import RENDER_CFG, RenderCfg
from ..core.textures import TextureCache
from ..scene.resources import TEXTURE, ResourceHandle, ResourceRegistry

Color = tuple[int, int, int] | tuple[int, int, int, int]

SPIN_STEPS = 64


def hex_to_rgb(value: Optional[str], default: tuple[int, int, int] = (255, 255, 255)) -> tuple[int, int, int]:
    if not value:
        return default
    try:
        color = pygame.Color(value)
    except ValueError:
        return default
    return color.r, color.g, color.b


def _sphere_shading(diameter: int) -> tuple[np.ndarray, np.ndarray]:
    """Per-pixel alpha mask and limb-darkening factor for a disc."""

    coords = (np.arange(diameter, dtype=float) + 0.5) / diameter * 2.0 - 1.0
    xx, yy = np.meshgrid(coords, coords, indexing="ij")
    dist2 = xx * xx + yy * yy
    inside = dist2 <= 1.0
    light = np.sqrt(np.clip(1.0 - dist2, 0.0, 1.0))
    shade = 0.35 + 0.65 * light
    alpha = np.where(inside, 255, 0).astype(np.uint8)
    return alpha, shade


class AssetLibrary:
    """Cache of pygame surfaces built from procedural textures and gradients."""

    def __init__(
        self,
        textures: TextureCache,
        *,
        cfg: RenderCfg = RENDER_CFG,
        max_sprites: int = 512,
    ) -> None:
        self._textures = textures
        self._cfg = cfg
        self._max_sprites = max(1, max_sprites)
        self._texture_surfaces: dict[int, pygame.Surface] = {}
        self._sprites: OrderedDict[tuple[int, int, int], pygame.Surface] = OrderedDict()
        self._glows: dict[tuple[int, Color], pygame.Surface] = {}
        self._discs: dict[tuple[int, Color], pygame.Surface] = {}

    @property
    def textures(self) -> TextureCache:
        return self._textures

    def attach(self, registry: ResourceRegistry) -> None:
        """Drop cached surfaces when the owning body's texture is released."""

        registry.add_release_listener(self._on_release)

    def _on_release(self, handle: ResourceHandle) -> None:
        if handle.kind != TEXTURE or not handle.owner.startswith("body:"):
            return
        project_id = int(handle.owner.split(":", 1)[1])
        self.evict_project(project_id)

    def evict_project(self, project_id: int) -> None:
        self._texture_surfaces.pop(project_id, None)
        for key in [k for k in self._sprites if k[0] == project_id]:
            del self._sprites[key]

    def clear(self) -> None:
        self._texture_surfaces.clear()
        self._sprites.clear()
        self._glows.clear()
        self._discs.clear()

    @property
    def sprite_count(self) -> int:
        return len(self._sprites)

    def texture_surface(self, project_id: int) -> pygame.Surface:
        cached = self._texture_surfaces.get(project_id)
        if cached is not None:
            return cached
        rgba = self._textures.get(project_id)
        # surfarray indexes (x, y); the texture is (row, column)
        surface = pygame.surfarray.make_surface(np.ascontiguousarray(rgba[..., :3].transpose(1, 0, 2)))
        self._texture_surfaces[project_id] = surface
        return surface

    def planet_sprite(self, project_id: int, diameter: int, spin: float = 0.0) -> pygame.Surface:
        """Shaded disc showing the visible half of the texture, rotated by ``spin``."""

        if diameter <= 0:
            raise ValueError("Planet sprite diameter must be positive")
        diameter = min(diameter, self._cfg.max_sprite_diameter)
        step = int((spin / (2 * math.pi)) * SPIN_STEPS) % SPIN_STEPS
        key = (project_id, diameter, step)
        cached = self._sprites.get(key)
        if cached is not None:
            self._sprites.move_to_end(key)
            return cached

        texture = self.texture_surface(project_id)
        width, height = texture.get_size()
        offset = int(step / SPIN_STEPS * width)
        window = pygame.Surface((width // 2, height))
        window.blit(texture, (-offset, 0))
        if offset > width // 2:
            window.blit(texture, (width - offset, 0))
        scaled = pygame.transform.smoothscale(window, (diameter, diameter))

        sprite = pygame.Surface((diameter, diameter), pygame.SRCALPHA)
        sprite.blit(scaled, (0, 0))
        alpha, shade = _sphere_shading(diameter)
        rgb = pygame.surfarray.pixels3d(sprite)
        rgb[...] = (rgb * shade[..., None]).astype(np.uint8)
        del rgb
        pixels_alpha = pygame.surfarray.pixels_alpha(sprite)
        pixels_alpha[...] = alpha
        del pixels_alpha

        self._sprites[key] = sprite
        if len(self._sprites) > self._max_sprites:
            self._sprites.popitem(last=False)
        return sprite

    def glow_sprite(self, radius: int, color: tuple[int, int, int]) -> pygame.Surface:
        """Radial gradient, opaque at the center and transparent at the rim."""

        radius = max(1, radius)
        key = (radius, color)
        cached = self._glows.get(key)
        if cached is not None:
            return cached
        size = radius * 2
        surface = pygame.Surface((size, size), pygame.SRCALPHA)
        coords = np.arange(size, dtype=float) + 0.5 - radius
        xx, yy = np.meshgrid(coords, coords, indexing="ij")
        falloff = np.clip(1.0 - np.sqrt(xx * xx + yy * yy) / radius, 0.0, 1.0)
        surface.fill((*color, 0))
        pixels_alpha = pygame.surfarray.pixels_alpha(surface)
        pixels_alpha[...] = (falloff**1.5 * 255).astype(np.uint8)
        del pixels_alpha
        self._glows[key] = surface
        return surface

    def disc_sprite(self, radius: int, color: Color) -> pygame.Surface:
        radius = max(1, radius)
        key = (radius, color)
        cached = self._discs.get(key)
        if cached is not None:
            return cached
        surface = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
        pygame.draw.circle(surface, color, (radius, radius), radius)
        self._discs[key] = surface
        return surface


_TEXT_SURFACE_CACHE_MAX_SIZE = 256
_TEXT_SURFACE_CACHE: OrderedDict[tuple[int, str, Color], pygame.Surface] = OrderedDict()


def get_text_surface(font: pygame.font.Font, text: str, color: Color) -> pygame.Surface:
    """Return a cached rendered surface for the given font, text and color."""

    key = (id(font), text, color)
    cached = _TEXT_SURFACE_CACHE.get(key)
    if cached is not None:
        _TEXT_SURFACE_CACHE.move_to_end(key)
        return cached
    rendered = font.render(text, True, color)
    _TEXT_SURFACE_CACHE[key] = rendered
    if len(_TEXT_SURFACE_CACHE) > _TEXT_SURFACE_CACHE_MAX_SIZE:
        _TEXT_SURFACE_CACHE.popitem(last=False)
    return rendered


def load_font(preferred_names: Iterable[str], size: int, *, bold: bool = False) -> pygame.font.Font:
    names = list(preferred_names)
    for name in names:
        match = pygame.font.match_font(name, bold=bold)
        if match:
            return pygame.font.Font(match, size)
    fallback = names[0] if names else None
    return pygame.font.SysFont(fallback, size, bold=bold)


__all__ = [
    "AssetLibrary",
    "Color",
    "get_text_surface",
    "hex_to_rgb",
    "load_font",
]
