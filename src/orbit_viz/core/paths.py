# src/orbit_viz/core/paths.py
"""Multi-stop indicator routes built from chained transfer orbits."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import numpy as np

from .config import ORBIT_CFG, OrbitCfg
from .model import AssistBody, PathSegment, Project, SizeClass
from .orbital import (
    gravitational_parameter,
    gravity_assist_multiplier,
    hohmann_transfer,
    influence_radius,
    path_length,
)

logger = logging.getLogger(__name__)

SEGMENT_DEPARTURE = "departure"
SEGMENT_TRANSFER = "transfer"
SEGMENT_GRAVITY_ASSIST = "gravity_assist"
SEGMENT_ARRIVAL = "arrival"


def planet_mass(size: SizeClass | str, cfg: OrbitCfg = ORBIT_CFG) -> float:
    key = size.value if isinstance(size, SizeClass) else str(size)
    return cfg.planet_masses.get(key, cfg.planet_masses["medium"])


@dataclass(frozen=True, eq=False)
class _Stop:
    position: np.ndarray
    mass: float
    project: Optional[Project] = None


def _central_body(
    start: _Stop,
    end: _Stop,
    folder_centers: Mapping[int, np.ndarray],
    folder_masses: Mapping[int, float],
    cfg: OrbitCfg,
) -> tuple[np.ndarray, float]:
    if start.project is not None and end.project is not None:
        folder_id = start.project.folder_id
        if folder_id == end.project.folder_id and folder_id in folder_centers:
            mass = folder_masses.get(folder_id, cfg.default_folder_mass)
            return np.asarray(folder_centers[folder_id], dtype=float), gravitational_parameter(mass, cfg)
    return np.zeros(3, dtype=float), cfg.origin_gm


def _assist_body(
    position: np.ndarray,
    sample: np.ndarray,
    mass: float,
    influence: float,
    base_multiplier: float,
    cfg: OrbitCfg,
) -> AssistBody:
    multiplier = gravity_assist_multiplier(sample, position, mass, influence, cfg)
    return AssistBody(
        position=position.copy(),
        mass=mass,
        gm=gravitational_parameter(mass, cfg),
        influence_radius=influence,
        speed_multiplier=min(max(multiplier, base_multiplier), cfg.max_assist_multiplier),
    )


def _find_assist(
    waypoints: np.ndarray,
    stops: Sequence[_Stop],
    segment_index: int,
    folder_centers: Mapping[int, np.ndarray],
    folder_masses: Mapping[int, float],
    cfg: OrbitCfg,
) -> Optional[AssistBody]:
    # First match along the path wins, folder centers before route planets.
    for sample in waypoints:
        for folder_id, center in folder_centers.items():
            center = np.asarray(center, dtype=float)
            mass = folder_masses.get(folder_id, cfg.default_folder_mass)
            influence = influence_radius(mass, cfg.folder_reference_radius)
            if np.linalg.norm(sample - center) < influence:
                return _assist_body(
                    center, sample, mass, influence, cfg.folder_assist_multiplier, cfg
                )

        for index, stop in enumerate(stops):
            if index in (segment_index, segment_index + 1) or stop.project is None:
                continue
            influence = influence_radius(stop.mass, cfg.planet_reference_radius)
            if np.linalg.norm(sample - stop.position) < influence:
                return _assist_body(
                    stop.position, sample, stop.mass, influence, cfg.planet_assist_multiplier, cfg
                )
    return None


def generate_path(
    route: Sequence[Project],
    home: Sequence[float] | np.ndarray,
    folder_centers: Mapping[int, np.ndarray],
    folder_masses: Mapping[int, float],
    cfg: OrbitCfg = ORBIT_CFG,
) -> list[PathSegment]:
    """
    Build the segment chain home -> route[0] -> ... -> route[-1] -> home.

    Args:
        route: Ordered projects to visit, read at their current positions
        home: Start and end point of the trip
        folder_centers: Live folder centroid per folder id
        folder_masses: Massive-body mass per folder id
        cfg: Orbital constants

    Returns:
        ``len(route) + 1`` segments; empty when the route is empty
    """
    if not route:
        return []

    home = np.asarray(home, dtype=float)
    stops = [_Stop(home.copy(), 0.0)]
    stops.extend(_Stop(p.position_vector(), planet_mass(p.size, cfg), p) for p in route)
    stops.append(_Stop(home.copy(), 0.0))

    segments: list[PathSegment] = []
    last = len(stops) - 2
    for i in range(len(stops) - 1):
        start, end = stops[i], stops[i + 1]
        center, gm = _central_body(start, end, folder_centers, folder_masses, cfg)
        transfer = hohmann_transfer(start.position, end.position, center, gm, cfg)
        assist = _find_assist(transfer.waypoints, stops, i, folder_centers, folder_masses, cfg)

        if assist is not None:
            kind = SEGMENT_GRAVITY_ASSIST
        elif i == 0:
            kind = SEGMENT_DEPARTURE
        elif i == last:
            kind = SEGMENT_ARRIVAL
        else:
            kind = SEGMENT_TRANSFER

        segments.append(
            PathSegment(
                type=kind,
                start=start.position.copy(),
                end=end.position.copy(),
                semi_major_axis=transfer.semi_major_axis,
                eccentricity=transfer.eccentricity,
                periapsis_direction=transfer.periapsis_direction.copy(),
                waypoints=transfer.waypoints,
                length=path_length(transfer.waypoints),
                assist=assist,
            )
        )

    logger.debug(
        "Generated %d segments for route %s", len(segments), [p.id for p in route]
    )
    return segments


def should_recalculate(
    route: Sequence[Project],
    segments: Sequence[PathSegment],
    threshold: Optional[float] = None,
    cfg: OrbitCfg = ORBIT_CFG,
) -> bool:
    """True when there is no path yet or any stop drifted past ``threshold``.

    Segment ``i`` arrives at ``route[i]`` (segment 0 leaves home), so each
    project is compared against the end point of the segment that reaches it.
    """
    if not segments or len(segments) != len(route) + 1:
        return True
    limit = cfg.recalculation_threshold if threshold is None else threshold
    for project, segment in zip(route, segments):
        if np.linalg.norm(project.position_vector() - segment.end) > limit:
            return True
    return False


__all__ = [
    "SEGMENT_ARRIVAL",
    "SEGMENT_DEPARTURE",
    "SEGMENT_GRAVITY_ASSIST",
    "SEGMENT_TRANSFER",
    "generate_path",
    "planet_mass",
    "should_recalculate",
]
