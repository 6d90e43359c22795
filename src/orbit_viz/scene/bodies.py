"""Live orbital state for every project body and its moons."""
from __future__ import annotations

import logging
import math
from typing import Iterator, Optional, Sequence

import numpy as np

from ..core.config import LAYOUT_CFG, ORBIT_CFG, SCENE_CFG, LayoutCfg, OrbitCfg, SceneCfg
from ..core.layout import folder_centroid, planet_radius
from ..core.model import BodyInstance, HealthStatus, MoonInstance, Project, SizeClass, ThemeFolder
from ..core.noise import hash_random, seeded_random
from .resources import GEOMETRY, MATERIAL, TEXTURE, ResourceRegistry

logger = logging.getLogger(__name__)


def orbit_speed(size: SizeClass | str, distance: float, cfg: OrbitCfg = ORBIT_CFG) -> float:
    """Angular rate falling off with distance from the folder center."""

    key = size.value if isinstance(size, SizeClass) else str(size)
    base = cfg.base_orbit_speeds.get(key, cfg.default_orbit_speed)
    return base * (cfg.orbit_speed_normalizer / max(distance, 1.0))


def create_moons(project_id: int, body_radius: float, max_count: int = SCENE_CFG.moon_max_count) -> list[MoonInstance]:
    """Zero to ``max_count - 1`` moons, fully determined by the project id."""

    count = math.floor(hash_random(project_id * 45.678) * max_count)
    moons = []
    for i in range(count):
        moon = MoonInstance(
            orbit_angle=hash_random(project_id * 78.901 + i) * math.pi * 2,
            orbit_distance=body_radius + 5 + i * 3,
            orbit_speed=0.8 - i * 0.2,
            radius=0.3 + hash_random(project_id * 56.789 + i) * 0.5,
            gray=math.floor(120 + hash_random(project_id * 67.890 + i) * 80),
        )
        moon.refresh()
        moons.append(moon)
    return moons


def orbit_line_points(center: np.ndarray, distance: float, segments: int) -> np.ndarray:
    angles = np.linspace(0.0, math.pi * 2, segments + 1)
    points = np.empty((segments + 1, 3), dtype=float)
    points[:, 0] = center[0] + distance * np.cos(angles)
    points[:, 1] = center[1]
    points[:, 2] = center[2] + distance * np.sin(angles)
    return points


def halo_particles(project_id: int, radius: float, count: int) -> np.ndarray:
    """Static particle cloud in a cube of side ``3 * radius`` around the body."""

    random = seeded_random(project_id * 91.337 + 0.5)
    values = [random() for _ in range(count * 3)]
    return (np.array(values, dtype=float).reshape(count, 3) - 0.5) * radius * 3


def critical_glow_opacity(time: float, rate: float = SCENE_CFG.critical_pulse_rate) -> float:
    return math.sin(time * rate) * 0.2 + 0.3


class BodyManager:
    """Owns one :class:`BodyInstance` per project and advances their orbits."""

    def __init__(
        self,
        folders: Sequence[ThemeFolder],
        resources: ResourceRegistry,
        *,
        cfg: SceneCfg = SCENE_CFG,
        orbit_cfg: OrbitCfg = ORBIT_CFG,
        layout_cfg: LayoutCfg = LAYOUT_CFG,
    ) -> None:
        self._resources = resources
        self._cfg = cfg
        self._orbit_cfg = orbit_cfg
        self._layout_cfg = layout_cfg
        self._bodies: dict[int, BodyInstance] = {}
        self._time = 0.0

        for folder in folders:
            pivot = folder_centroid(folder)
            for project in folder.projects:
                self._bodies[project.id] = self._create(project, folder, pivot)

        logger.debug("Created %d bodies", len(self._bodies))

    def _create(self, project: Project, folder: ThemeFolder, pivot: np.ndarray) -> BodyInstance:
        position = project.position_vector()
        dx = position[0] - pivot[0]
        dz = position[2] - pivot[2]
        distance = math.hypot(dx, dz)
        radius = planet_radius(project.size, self._layout_cfg)

        body = BodyInstance(
            project=project,
            folder_id=folder.id,
            pivot=pivot.copy(),
            orbit_angle=math.atan2(dz, dx),
            orbit_distance=distance,
            orbit_speed=orbit_speed(project.size, distance, self._orbit_cfg),
            radius=radius,
            color=project.color or folder.color,
            position=position,
            moons=create_moons(project.id, radius, self._cfg.moon_max_count),
            orbit_line=orbit_line_points(pivot, distance, self._orbit_cfg.orbit_line_segments),
        )

        owner = f"body:{project.id}"
        body.handles = self._resources.allocate_many(
            owner,
            [
                (GEOMETRY, "sphere"),
                (MATERIAL, "surface"),
                (TEXTURE, "terrain"),
                (GEOMETRY, "orbit_line"),
                (MATERIAL, "orbit_line"),
                (TEXTURE, "label"),
                (MATERIAL, "label"),
            ],
        )
        for index, moon in enumerate(body.moons):
            moon.handles = self._resources.allocate_many(
                owner, [(GEOMETRY, f"moon_{index}"), (MATERIAL, f"moon_{index}")]
            )

        if project.health == HealthStatus.CRITICAL:
            body.glow_opacity = critical_glow_opacity(0.0, self._cfg.critical_pulse_rate)
            body.handles += self._resources.allocate_many(owner, [(GEOMETRY, "glow"), (MATERIAL, "glow")])
        elif project.health == HealthStatus.THRIVING:
            body.halo = halo_particles(project.id, radius, self._cfg.thriving_particle_count)
            body.handles += self._resources.allocate_many(owner, [(GEOMETRY, "halo"), (MATERIAL, "halo")])

        if project.status == "completed":
            body.has_ring = True
            body.handles += self._resources.allocate_many(owner, [(GEOMETRY, "ring"), (MATERIAL, "ring")])
        return body

    # ------------------------------------------------------------------
    def get(self, project_id: int) -> Optional[BodyInstance]:
        return self._bodies.get(project_id)

    def all(self) -> list[BodyInstance]:
        return list(self._bodies.values())

    def __iter__(self) -> Iterator[BodyInstance]:
        return iter(self._bodies.values())

    def __len__(self) -> int:
        return len(self._bodies)

    @property
    def time(self) -> float:
        return self._time

    def tick(self, dt: float) -> None:
        self._time += dt
        spin_step = self._orbit_cfg.spin_speed * dt
        for body in self._bodies.values():
            body.orbit_angle += body.orbit_speed * dt
            body.refresh_position()
            body.project.set_position(body.position)
            body.spin += spin_step

            for moon in body.moons:
                moon.orbit_angle += moon.orbit_speed * dt
                moon.refresh()

            if body.glow_opacity is not None:
                body.glow_opacity = critical_glow_opacity(self._time, self._cfg.critical_pulse_rate)

    def dispose(self) -> int:
        released = 0
        for body in self._bodies.values():
            released += self._resources.release_all_of(body.handles)
            for moon in body.moons:
                released += self._resources.release_all_of(moon.handles)
        self._bodies.clear()
        return released


__all__ = [
    "BodyManager",
    "create_moons",
    "critical_glow_opacity",
    "halo_particles",
    "orbit_line_points",
    "orbit_speed",
]
