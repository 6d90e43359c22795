from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Iterable, Sequence, TYPE_CHECKING

import numpy as np
import pygame

from .assets import AssetLibrary, Color, get_text_surface
from .projection import Projection

if TYPE_CHECKING:  # pragma: no cover
    from orbit_viz.core.config import RenderCfg
    from orbit_viz.core.model import TrailSample


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


@dataclass(frozen=True)
class Star:
    x: float
    y: float
    depth: float
    sprite: pygame.Surface


STAR_TINTS = ((255, 244, 232), (220, 230, 255), (255, 255, 255), (200, 215, 255))


def generate_starfield(
    num_stars: int,
    *,
    size: tuple[int, int],
    rng: random.Random | None = None,
) -> list[Star]:
    """Background stars; ``depth`` in (0.2, 1] sets parallax, size and brightness."""

    rng = rng or random.Random()
    width, height = size
    sprites: dict[tuple[int, int, int], pygame.Surface] = {}
    stars = []
    for _ in range(num_stars):
        depth = 0.2 + 0.8 * rng.random() ** 2
        radius = 2 if depth > 0.85 else 1
        alpha = int(70 + 110 * depth)
        tint = rng.randrange(len(STAR_TINTS))
        key = (radius, alpha, tint)
        sprite = sprites.get(key)
        if sprite is None:
            sprite = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
            pygame.draw.circle(sprite, (*STAR_TINTS[tint], alpha), (radius, radius), radius)
            sprites[key] = sprite
        stars.append(Star(rng.uniform(0, width), rng.uniform(0, height), depth, sprite))
    return stars


def draw_starfield(surface: pygame.Surface, starfield: Iterable[Star], heading: float) -> None:
    """Stars scroll horizontally as the camera swings around, near layers faster."""

    width, height = surface.get_size()
    turn = heading / (2 * math.pi) * width
    for star in starfield:
        half = star.sprite.get_width() // 2
        sx = int((star.x + turn * star.depth) % width)
        sy = int(star.y % height)
        surface.blit(star.sprite, (sx - half, sy - half))


def draw_polyline(
    surface: pygame.Surface,
    projection: Projection,
    points: np.ndarray,
    color: tuple[int, int, int],
    alpha: int,
    *,
    dashed: bool = False,
    width: int = 1,
) -> None:
    """Project a world-space polyline; segments behind the camera are skipped."""

    if alpha <= 0 or len(points) < 2:
        return
    screen, _, visible = projection.project_many(points)
    overlay = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
    rgba = (*color, alpha)
    for i in range(len(points) - 1):
        if dashed and i % 2:
            continue
        if not (visible[i] and visible[i + 1]):
            continue
        start = (float(screen[i, 0]), float(screen[i, 1]))
        end = (float(screen[i + 1, 0]), float(screen[i + 1, 1]))
        pygame.draw.line(overlay, rgba, start, end, width)
    surface.blit(overlay, (0, 0))


def draw_planet(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    *,
    project_id: int,
    spin: float,
    assets: AssetLibrary,
) -> None:
    if radius <= 0:
        return
    sprite = assets.planet_sprite(project_id, radius * 2, spin)
    surface.blit(sprite, sprite.get_rect(center=position))


def draw_glow(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    opacity: float,
    *,
    color: tuple[int, int, int],
    assets: AssetLibrary,
) -> None:
    opacity = _clamp(opacity, 0.0, 1.0)
    if opacity <= 0.0 or radius <= 0:
        return
    glow = assets.glow_sprite(radius, color).copy()
    glow.set_alpha(int(255 * opacity))
    surface.blit(glow, glow.get_rect(center=position), special_flags=0)


def draw_ring(
    surface: pygame.Surface,
    position: tuple[int, int],
    inner_radius: int,
    outer_radius: int,
    *,
    color: tuple[int, int, int],
    alpha: int,
    tilt: float = 0.35,
    rotation: float = 0.0,
) -> None:
    """Flat ring seen at an angle, drawn as a squashed ellipse band."""

    if outer_radius <= 0 or alpha <= 0:
        return
    width = outer_radius * 2
    height = max(2, int(width * tilt))
    ring = pygame.Surface((width, height), pygame.SRCALPHA)
    band = max(1, outer_radius - inner_radius)
    pygame.draw.ellipse(ring, (*color, alpha), ring.get_rect(), band)
    if rotation:
        ring = pygame.transform.rotate(ring, math.degrees(rotation) % 360)
    surface.blit(ring, ring.get_rect(center=position))


def draw_particles(
    surface: pygame.Surface,
    projection: Projection,
    points: np.ndarray,
    *,
    color: tuple[int, int, int],
    alpha: int,
) -> None:
    screen, _, visible = projection.project_many(points)
    for (sx, sy), shown in zip(screen, visible):
        if shown:
            surface.fill((*color, alpha), pygame.Rect(int(sx), int(sy), 2, 2))


def draw_moon(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    gray: int,
    *,
    assets: AssetLibrary,
) -> None:
    sprite = assets.disc_sprite(max(1, radius), (gray, gray, gray, 255))
    surface.blit(sprite, sprite.get_rect(center=position))


def draw_trail(
    surface: pygame.Surface,
    projection: Projection,
    samples: Sequence["TrailSample"],
) -> None:
    if not samples:
        return
    points = np.array([s.position for s in samples], dtype=float)
    screen, depth, visible = projection.project_many(points)
    for sample, (sx, sy), z, shown in zip(samples, screen, depth, visible):
        if not shown:
            continue
        radius = projection.pixel_radius(sample.size, float(z))
        alpha = int(255 * _clamp(sample.opacity, 0.0, 1.0))
        dot = pygame.Surface((radius * 2, radius * 2), pygame.SRCALPHA)
        pygame.draw.circle(dot, (*sample.color, alpha), (radius, radius), radius)
        surface.blit(dot, (int(sx) - radius, int(sy) - radius))


def draw_indicator(
    surface: pygame.Surface,
    position: tuple[int, int],
    heading: tuple[float, float],
    size: int,
    *,
    color: tuple[int, int, int],
    glow_opacity: float,
    assets: AssetLibrary,
) -> None:
    """Arrow-shaped rocket pointing along ``heading`` with an engine glow behind."""

    size = max(3, size)
    hx, hy = heading
    norm = math.hypot(hx, hy)
    if norm < 1e-6:
        hx, hy = 0.0, -1.0
    else:
        hx, hy = hx / norm, hy / norm
    px, py = -hy, hx
    x, y = position
    nose = (x + hx * size, y + hy * size)
    left = (x - hx * size * 0.6 + px * size * 0.45, y - hy * size * 0.6 + py * size * 0.45)
    right = (x - hx * size * 0.6 - px * size * 0.45, y - hy * size * 0.6 - py * size * 0.45)
    tail = (int(x - hx * size * 0.9), int(y - hy * size * 0.9))

    draw_glow(surface, tail, max(2, size // 2), glow_opacity, color=(255, 170, 80), assets=assets)
    pygame.draw.polygon(surface, (204, 204, 204), [nose, left, right])
    pygame.draw.polygon(surface, color, [nose, left, right], 2)


def draw_massive_body(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    *,
    ring_color: tuple[int, int, int],
    ring_rotation: float,
    scale: float,
) -> None:
    radius = max(2, int(radius * scale))
    draw_ring(
        surface,
        position,
        int(radius * 1.1),
        int(radius * 1.3),
        color=ring_color,
        alpha=128,
        tilt=0.45,
        rotation=ring_rotation,
    )
    pygame.draw.circle(surface, (0, 0, 0), position, radius)


def draw_home_marker(
    surface: pygame.Surface,
    position: tuple[int, int],
    radius: int,
    ring_rotations: Sequence[float],
    *,
    render_cfg: "RenderCfg",
    scale: float,
) -> None:
    radius = max(3, int(radius * scale))
    inner_color, outer_color = render_cfg.home_ring_colors
    draw_ring(
        surface,
        position,
        int(radius * 20 / 12),
        int(radius * 22 / 12),
        color=outer_color,
        alpha=128,
        rotation=ring_rotations[1] + math.pi / 4,
    )
    draw_ring(
        surface,
        position,
        int(radius * 15 / 12),
        int(radius * 17 / 12),
        color=inner_color,
        alpha=178,
        rotation=ring_rotations[0],
    )
    pygame.draw.circle(surface, render_cfg.home_color, position, radius)
    pygame.draw.circle(surface, (255, 255, 255), position, max(1, radius // 3))


def draw_label(
    surface: pygame.Surface,
    font: pygame.font.Font,
    text: str,
    position: tuple[int, int],
    color: Color,
) -> None:
    if not text:
        return
    label = get_text_surface(font, text, color)
    rect = label.get_rect()
    rect.midbottom = position
    surface.blit(label, rect)


def sphere_outline(center: np.ndarray, radius: float, segments: int = 48) -> list[np.ndarray]:
    """Three great circles of a sphere, for the dashed folder boundary."""

    angles = np.linspace(0.0, 2 * math.pi, segments + 1)
    cos, sin = np.cos(angles) * radius, np.sin(angles) * radius
    zeros = np.zeros_like(angles)
    return [
        center + np.stack([cos, zeros, sin], axis=1),
        center + np.stack([cos, sin, zeros], axis=1),
        center + np.stack([zeros, cos, sin], axis=1),
    ]


__all__ = [
    "Star",
    "draw_glow",
    "draw_home_marker",
    "draw_indicator",
    "draw_label",
    "draw_massive_body",
    "draw_moon",
    "draw_particles",
    "draw_planet",
    "draw_polyline",
    "draw_ring",
    "draw_starfield",
    "draw_trail",
    "generate_starfield",
    "sphere_outline",
]
