# src/orbit_viz/core/layout.py
"""Static placement of projects inside their theme-folder clusters."""

from __future__ import annotations

import colorsys
import logging
import math
from typing import Sequence

import numpy as np

from .config import LAYOUT_CFG, LayoutCfg
from .model import Project, SizeClass, ThemeFolder
from .noise import hash_random

logger = logging.getLogger(__name__)

GOLDEN_ANGLE_FACTOR = math.pi * (1.0 + math.sqrt(5.0))


def _size_key(size: SizeClass | str) -> str:
    return size.value if isinstance(size, SizeClass) else str(size)


def planet_radius(size: SizeClass | str, cfg: LayoutCfg = LAYOUT_CFG) -> float:
    """Visual sphere radius for a size class; unknown classes read as medium."""

    return cfg.planet_radii.get(_size_key(size), cfg.default_planet_radius)


def orbit_radius_for(size: SizeClass | str, cfg: LayoutCfg = LAYOUT_CFG) -> float:
    return planet_radius(size, cfg) + cfg.orbit_clearance


def folder_center(index: int, count: int, cfg: LayoutCfg = LAYOUT_CFG) -> np.ndarray:
    """Folders sit on a ring around the origin; a single folder sits at it."""

    angle = (index / count) * math.pi * 2 if count else 0.0
    radius = cfg.folder_ring_radius if count > 1 else 0.0
    return np.array(
        [
            math.cos(angle) * radius,
            (index % 3 - 1) * cfg.folder_band_height,
            math.sin(angle) * radius,
        ],
        dtype=float,
    )


def fibonacci_point(
    index: int,
    count: int,
    center: Sequence[float] | np.ndarray,
    radius: float,
) -> np.ndarray:
    """Point ``index`` of ``count`` on a golden-angle spiral over a sphere."""

    phi = math.acos(1.0 - 2.0 * (index + 0.5) / count)
    theta = GOLDEN_ANGLE_FACTOR * index
    offset = np.array(
        [
            math.sin(phi) * math.cos(theta),
            math.sin(phi) * math.sin(theta),
            math.cos(phi),
        ],
        dtype=float,
    )
    return np.asarray(center, dtype=float) + radius * offset


def planet_color(project_id: int) -> str:
    """Stable ``#rrggbb`` colour: random hue, saturation 60-90 %, lightness 50-70 %."""

    hue = hash_random(project_id * 12.345)
    saturation = 0.60 + hash_random(project_id * 23.456) * 0.30
    lightness = 0.50 + hash_random(project_id * 34.567) * 0.20
    r, g, b = colorsys.hls_to_rgb(hue, lightness, saturation)
    return "#{:02x}{:02x}{:02x}".format(round(r * 255), round(g * 255), round(b * 255))


def layout(folders: Sequence[ThemeFolder], cfg: LayoutCfg = LAYOUT_CFG) -> None:
    """
    Assign positions, orbit radii and colours to every auto-positioned project.

    Mutates the snapshot in place. A project keeps its stored position when all
    three axes are set and ``use_auto_positioning`` is off.

    Args:
        folders: Ordered theme folders; index order drives the ring placement
        cfg: Layout constants
    """
    count = len(folders)
    for f_index, folder in enumerate(folders):
        center = folder_center(f_index, count, cfg)
        members = len(folder.projects)
        for p_index, project in enumerate(folder.projects):
            if project.has_manual_position:
                continue

            project.set_position(fibonacci_point(p_index, members, center, cfg.cluster_radius))
            if project.orbit_radius is None:
                project.orbit_radius = orbit_radius_for(project.size, cfg)
            if not project.color:
                project.color = planet_color(project.id)

        logger.debug(
            "Laid out folder %s (%d projects) around %s", folder.id, members, center.round(2)
        )


def folder_centroid(folder: ThemeFolder) -> np.ndarray:
    """Mean of member positions; the origin for an empty folder."""

    if not folder.projects:
        return np.zeros(3, dtype=float)
    return np.mean([p.position_vector() for p in folder.projects], axis=0)


def folder_boundary_radius(
    folder: ThemeFolder,
    center: Sequence[float] | np.ndarray,
    cfg: LayoutCfg = LAYOUT_CFG,
) -> float:
    """Radius of the sphere enclosing every member, plus padding."""

    if not folder.projects:
        return cfg.empty_boundary_radius
    center = np.asarray(center, dtype=float)
    farthest = max(float(np.linalg.norm(p.position_vector() - center)) for p in folder.projects)
    return farthest + cfg.boundary_padding


__all__ = [
    "fibonacci_point",
    "folder_boundary_radius",
    "folder_center",
    "folder_centroid",
    "layout",
    "orbit_radius_for",
    "planet_color",
    "planet_radius",
]
