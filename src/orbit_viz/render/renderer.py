"""Pygame adapter that paints a :class:`Scene` back to front."""
from __future__ import annotations

import math
import random
from typing import Callable, Optional

import numpy as np
import pygame

from ..core.config import INDICATOR_CFG, RENDER_CFG, IndicatorCfg, RenderCfg
from ..scene.orchestrator import Scene
from .assets import AssetLibrary, hex_to_rgb, load_font
from .draw import (
    draw_glow,
    draw_home_marker,
    draw_indicator,
    draw_label,
    draw_massive_body,
    draw_moon,
    draw_particles,
    draw_planet,
    draw_polyline,
    draw_ring,
    draw_starfield,
    draw_trail,
    generate_starfield,
    sphere_outline,
)
from .projection import Projection

DrawCall = tuple[float, Callable[[], None]]


class SceneRenderer:
    """
    Painter's-algorithm renderer.

    Lines (orbits, boundaries, routes) go first, then every sprite sorted
    by camera depth, farthest first, then labels on top.
    """

    def __init__(
        self,
        size: tuple[int, int],
        assets: AssetLibrary,
        *,
        cfg: RenderCfg = RENDER_CFG,
        indicator_cfg: IndicatorCfg = INDICATOR_CFG,
        star_seed: Optional[int] = 42,
    ) -> None:
        self._cfg = cfg
        self._indicator_cfg = indicator_cfg
        self.assets = assets
        self.projection = Projection(size, cfg=cfg)
        self._starfield = generate_starfield(cfg.star_count, size=size, rng=random.Random(star_seed))
        self._star_seed = star_seed
        self.show_labels = True
        self._label_font: Optional[pygame.font.Font] = None

    def resize(self, size: tuple[int, int]) -> None:
        if size == self.projection.size:
            return
        self.projection.update_size(size)
        self._starfield = generate_starfield(
            self._cfg.star_count, size=size, rng=random.Random(self._star_seed)
        )

    def _font(self) -> pygame.font.Font:
        if self._label_font is None:
            self._label_font = load_font(["consolas", "dejavusansmono", "couriernew"], 14)
        return self._label_font

    # ----- public -----
    def render(self, surface: pygame.Surface, scene: Scene) -> Projection:
        """Draw one frame of ``scene`` and return the projection used for picking."""

        self.resize(surface.get_size())
        projection = self.projection
        projection.set_from_state(scene.camera.state)

        surface.fill(self._cfg.background_color)
        draw_starfield(surface, self._starfield, scene.camera.horizontal_angle)
        if scene.disposed:
            return projection

        self._draw_lines(surface, scene)
        calls: list[DrawCall] = []
        self._collect_massive_bodies(surface, scene, calls)
        self._collect_bodies(surface, scene, calls)
        self._collect_indicators(surface, scene, calls)
        self._collect_home(surface, scene, calls)
        calls.sort(key=lambda item: item[0], reverse=True)
        for _, call in calls:
            call()
        if self.show_labels:
            self._draw_labels(surface, scene)
        return projection

    # ----- lines -----
    def _draw_lines(self, surface: pygame.Surface, scene: Scene) -> None:
        projection = self.projection
        for massive in scene.massive_bodies:
            if not massive.folder.projects:
                continue
            color = hex_to_rgb(massive.folder.color)
            for circle in sphere_outline(massive.center, massive.boundary_radius):
                draw_polyline(surface, projection, circle, color, self._cfg.boundary_alpha, dashed=True)
        for body in scene.bodies:
            if body.orbit_line is not None:
                draw_polyline(
                    surface, projection, body.orbit_line, hex_to_rgb(body.color), self._cfg.orbit_line_alpha
                )
        for indicator in scene.indicators:
            if not indicator.segments:
                continue
            points = np.concatenate([segment.waypoints for segment in indicator.segments])
            draw_polyline(surface, projection, points, indicator.color, 90, dashed=True)

    # ----- sprites -----
    def _collect_massive_bodies(self, surface: pygame.Surface, scene: Scene, calls: list[DrawCall]) -> None:
        for massive in scene.massive_bodies:
            projected = self.projection.project(massive.center)
            if projected is None:
                continue
            sx, sy, depth = projected
            radius = self.projection.pixel_radius(massive.radius, depth)
            ring_color = hex_to_rgb(massive.folder.color)

            def call(massive=massive, pos=(sx, sy), radius=radius, ring_color=ring_color) -> None:
                draw_massive_body(
                    surface,
                    pos,
                    radius,
                    ring_color=ring_color,
                    ring_rotation=massive.ring_rotation,
                    scale=massive.scale,
                )

            calls.append((depth, call))

    def _collect_bodies(self, surface: pygame.Surface, scene: Scene, calls: list[DrawCall]) -> None:
        projection = self.projection
        cfg = self._cfg
        for body in scene.bodies:
            projected = projection.project(body.position)
            if projected is None:
                continue
            sx, sy, depth = projected
            radius = projection.pixel_radius(body.radius * body.scale, depth)

            def call(body=body, pos=(sx, sy), radius=radius) -> None:
                if body.glow_opacity is not None:
                    draw_glow(
                        surface,
                        pos,
                        int(radius * 1.2) + 2,
                        body.glow_opacity,
                        color=cfg.critical_glow_color,
                        assets=self.assets,
                    )
                if body.halo is not None:
                    draw_particles(
                        surface,
                        projection,
                        body.position + body.halo,
                        color=cfg.thriving_halo_color,
                        alpha=int(255 * 0.6),
                    )
                draw_planet(
                    surface,
                    pos,
                    radius,
                    project_id=body.project.id,
                    spin=body.spin,
                    assets=self.assets,
                )
                if body.emissive > 0.1:
                    draw_glow(
                        surface,
                        pos,
                        radius + 4,
                        body.emissive,
                        color=hex_to_rgb(body.color),
                        assets=self.assets,
                    )
                if body.has_ring:
                    draw_ring(
                        surface,
                        pos,
                        int(radius * 1.5),
                        int(radius * 2.0),
                        color=cfg.completed_ring_color,
                        alpha=int(255 * 0.5),
                        tilt=0.25,
                    )

            calls.append((depth, call))

            for moon in body.moons:
                moon_projected = projection.project(body.position + moon.local_position)
                if moon_projected is None:
                    continue
                mx, my, moon_depth = moon_projected
                moon_radius = projection.pixel_radius(moon.radius, moon_depth)
                calls.append(
                    (
                        moon_depth,
                        lambda pos=(mx, my), r=moon_radius, gray=moon.gray: draw_moon(
                            surface, pos, r, gray, assets=self.assets
                        ),
                    )
                )

    def _collect_indicators(self, surface: pygame.Surface, scene: Scene, calls: list[DrawCall]) -> None:
        projection = self.projection
        for indicator in scene.indicators:
            projected = projection.project(indicator.position)
            if projected is None:
                continue
            sx, sy, depth = projected
            ahead = projection.project(indicator.position + indicator.forward)
            heading = (ahead[0] - sx, ahead[1] - sy) if ahead is not None else (0.0, -1.0)
            size = projection.pixel_radius(self._indicator_cfg.pick_radius * indicator.scale, depth) + 2

            def call(indicator=indicator, pos=(sx, sy), heading=heading, size=size) -> None:
                draw_trail(surface, projection, indicator.trail_samples)
                draw_indicator(
                    surface,
                    pos,
                    heading,
                    size,
                    color=indicator.color,
                    glow_opacity=indicator.glow_opacity,
                    assets=self.assets,
                )

            calls.append((depth, call))

    def _collect_home(self, surface: pygame.Surface, scene: Scene, calls: list[DrawCall]) -> None:
        home = scene.home
        projected = self.projection.project(home.position)
        if projected is None:
            return
        sx, sy, depth = projected
        radius = self.projection.pixel_radius(home.radius, depth)

        def call() -> None:
            draw_home_marker(
                surface,
                (sx, sy),
                radius,
                home.ring_rotations,
                render_cfg=self._cfg,
                scale=home.scale,
            )

        calls.append((depth, call))

    # ----- labels -----
    def _draw_labels(self, surface: pygame.Surface, scene: Scene) -> None:
        font = self._font()
        color = self._cfg.label_color
        projection = self.projection
        for massive in scene.massive_bodies:
            projected = projection.project(massive.center + np.array([0.0, massive.radius * 3, 0.0]))
            if projected is not None:
                draw_label(surface, font, massive.folder.name, projected[:2], color)
        for body in scene.bodies:
            projected = projection.project(body.position + np.array([0.0, body.radius * 1.6, 0.0]))
            if projected is not None:
                draw_label(surface, font, body.project.name, projected[:2], color)
        projected = projection.project(scene.home.position + np.array([0.0, scene.home.radius * 2, 0.0]))
        if projected is not None:
            draw_label(surface, font, "Home", projected[:2], color)


def draw_fps(surface: pygame.Surface, font: pygame.font.Font, fps: float, cfg: RenderCfg = RENDER_CFG) -> None:
    fps_text = font.render(f"FPS: {fps:.1f}", True, cfg.label_color)
    fps_text.set_alpha(cfg.fps_text_alpha)
    width, height = surface.get_size()
    surface.blit(fps_text, fps_text.get_rect(bottomright=(width - 16, height - 16)))


def draw_status(surface: pygame.Surface, font: pygame.font.Font, scene: Scene, cfg: RenderCfg = RENDER_CFG) -> None:
    """Top-left HUD line with the camera mode and entity counts."""

    camera = scene.camera
    lines = [
        f"View: {camera.mode}{' (manual)' if camera.manual_control else ''}",
        f"Planets: {len(scene.bodies)}  Missions in flight: {len(scene.indicators)}",
        f"Heading: {math.degrees(camera.horizontal_angle) % 360:.0f} deg  Distance: {camera.distance:.0f}",
    ]
    for index, text in enumerate(lines):
        rendered = font.render(text, True, cfg.label_color)
        surface.blit(rendered, (16, 16 + index * (font.get_linesize() + 2)))


__all__ = ["SceneRenderer", "draw_fps", "draw_status"]
