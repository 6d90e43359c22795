"""Folder-center massive bodies: camera anchors and transfer-orbit foci."""
from __future__ import annotations

import logging
from typing import Iterator, Optional, Sequence

import numpy as np

from ..core.config import LAYOUT_CFG, ORBIT_CFG, SCENE_CFG, LayoutCfg, OrbitCfg, SceneCfg
from ..core.layout import folder_boundary_radius, folder_centroid
from ..core.model import MassiveBodyInstance, ThemeFolder
from .resources import GEOMETRY, MATERIAL, TEXTURE, ResourceRegistry

logger = logging.getLogger(__name__)


class MassiveBodyManager:
    """One massive body per folder, kept at the live centroid of its members."""

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
        self._orbit_cfg = orbit_cfg
        self._layout_cfg = layout_cfg
        self._bodies: dict[int, MassiveBodyInstance] = {}

        for folder in folders:
            center = folder_centroid(folder)
            body = MassiveBodyInstance(
                folder=folder,
                center=center,
                mass=orbit_cfg.default_folder_mass,
                radius=cfg.massive_body_radius,
                boundary_radius=folder_boundary_radius(folder, center, layout_cfg),
            )
            specs = [
                (GEOMETRY, "core"),
                (MATERIAL, "core"),
                (GEOMETRY, "accretion_ring"),
                (MATERIAL, "accretion_ring"),
                (TEXTURE, "label"),
                (MATERIAL, "label"),
            ]
            if folder.projects:
                specs += [(GEOMETRY, "boundary"), (MATERIAL, "boundary")]
            body.handles = resources.allocate_many(f"folder:{folder.id}", specs)
            self._bodies[folder.id] = body

        logger.debug("Created %d massive bodies", len(self._bodies))

    def get(self, folder_id: int) -> Optional[MassiveBodyInstance]:
        return self._bodies.get(folder_id)

    def all(self) -> list[MassiveBodyInstance]:
        return list(self._bodies.values())

    def __iter__(self) -> Iterator[MassiveBodyInstance]:
        return iter(self._bodies.values())

    def __len__(self) -> int:
        return len(self._bodies)

    def center(self, folder_id: int) -> Optional[np.ndarray]:
        body = self._bodies.get(folder_id)
        return None if body is None else body.center

    def centers(self) -> dict[int, np.ndarray]:
        return {folder_id: body.center for folder_id, body in self._bodies.items()}

    def masses(self) -> dict[int, float]:
        return {folder_id: body.mass for folder_id, body in self._bodies.items()}

    def tick(self, dt: float) -> None:
        ring_step = self._orbit_cfg.accretion_ring_speed * dt
        for body in self._bodies.values():
            body.center[:] = folder_centroid(body.folder)
            body.boundary_radius = folder_boundary_radius(body.folder, body.center, self._layout_cfg)
            body.ring_rotation += ring_step

    def dispose(self) -> int:
        released = sum(self._resources.release_all_of(b.handles) for b in self._bodies.values())
        self._bodies.clear()
        return released


__all__ = ["MassiveBodyManager"]
