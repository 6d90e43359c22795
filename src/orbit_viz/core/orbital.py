# src/orbit_viz/core/orbital.py
"""Keplerian helpers for indicator transfer paths.

All units are scene units with a normalised gravitational constant; nothing
here is meant to be physically exact, only to produce believable curves.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Union

import numpy as np

from .config import ORBIT_CFG, OrbitCfg

Vec3 = Union[Sequence[float], np.ndarray]

UP = np.array([0.0, 1.0, 0.0])
X_AXIS = np.array([1.0, 0.0, 0.0])


@dataclass(frozen=True, eq=False)
class TransferOrbit:
    semi_major_axis: float
    eccentricity: float
    periapsis_direction: np.ndarray
    waypoints: np.ndarray


def _vec(value: Vec3) -> np.ndarray:
    return np.asarray(value, dtype=float)


def gravitational_parameter(mass: float, cfg: OrbitCfg = ORBIT_CFG) -> float:
    return cfg.gravitational_constant * mass


def influence_radius(mass: float, reference_orbit_radius: float) -> float:
    """Sphere-of-influence approximation ``a * (m / 1000) ** 0.4``."""

    return reference_orbit_radius * math.pow(max(mass, 0.0) / 1000.0, 0.4)


def gravity_assist_multiplier(
    position: Vec3,
    body_position: Vec3,
    body_mass: float,
    influence: float,
    cfg: OrbitCfg = ORBIT_CFG,
) -> float:
    """Speed multiplier in [1.0, max] for a point near a massive body."""

    if influence <= 0.0:
        return 1.0
    distance = float(np.linalg.norm(_vec(position) - _vec(body_position)))
    if distance >= influence:
        return 1.0

    proximity = 1.0 - distance / influence
    mass_factor = math.log10(max(body_mass, 0.0) + 1.0) / 3.0
    return min(1.0 + proximity * mass_factor * 1.5, cfg.max_assist_multiplier)


def _semi_minor_direction(periapsis_direction: np.ndarray) -> np.ndarray:
    direction = np.cross(periapsis_direction, UP)
    if np.linalg.norm(direction) < 0.01:
        direction = np.cross(periapsis_direction, X_AXIS)
    return direction / np.linalg.norm(direction)


def sample_elliptical_orbit(
    center: Vec3,
    semi_major_axis: float,
    eccentricity: float,
    periapsis_direction: Vec3,
    start: Vec3,
    end: Vec3,
    samples: int = 64,
) -> np.ndarray:
    """
    Sample the shorter arc of an ellipse from ``start``'s to ``end``'s true anomaly.

    Args:
        center: Focus of the ellipse (the central body)
        semi_major_axis: Ellipse semi-major axis
        eccentricity: Ellipse eccentricity in [0, 1)
        periapsis_direction: Unit vector from the focus to periapsis
        start: Departure point, used only for its angle
        end: Arrival point, used only for its angle
        samples: Number of steps; ``samples + 1`` points are returned

    Returns:
        ``(samples + 1, 3)`` array of waypoints
    """
    center = _vec(center)
    periapsis = _vec(periapsis_direction)
    minor = _semi_minor_direction(periapsis)

    def true_anomaly(point: np.ndarray) -> float:
        rel = point - center
        return math.atan2(float(rel @ minor), float(rel @ periapsis))

    start_angle = true_anomaly(_vec(start))
    sweep = true_anomaly(_vec(end)) - start_angle
    if sweep > math.pi:
        sweep -= 2 * math.pi
    elif sweep < -math.pi:
        sweep += 2 * math.pi

    angles = start_angle + np.linspace(0.0, 1.0, samples + 1) * sweep
    r = semi_major_axis * (1.0 - eccentricity**2) / (1.0 + eccentricity * np.cos(angles))
    x = r * np.cos(angles)
    y = r * np.sin(angles)
    return center + np.outer(x, periapsis) + np.outer(y, minor)


def hohmann_transfer(
    start: Vec3,
    end: Vec3,
    central_body: Vec3,
    central_gm: float,
    cfg: OrbitCfg = ORBIT_CFG,
) -> TransferOrbit:
    """Transfer ellipse between two points around ``central_body``.

    ``central_gm`` is carried for callers that want it; the geometric
    construction does not depend on it.
    """
    start = _vec(start)
    end = _vec(end)
    central_body = _vec(central_body)

    r1 = float(np.linalg.norm(start - central_body))
    r2 = float(np.linalg.norm(end - central_body))
    semi_major_axis = (r1 + r2) / 2.0
    eccentricity = abs(r2 - r1) / (r1 + r2) if r1 + r2 > 0.0 else 0.0

    periapsis_point = start if r1 < r2 else end
    offset = periapsis_point - central_body
    norm = float(np.linalg.norm(offset))
    periapsis_direction = offset / norm if norm > 1e-9 else X_AXIS.copy()

    if min(r1, r2) < 1e-9:
        # an endpoint sits on the focus, the ellipse degenerates to a line
        steps = np.linspace(0.0, 1.0, cfg.transfer_samples + 1)[:, None]
        waypoints = start + (end - start) * steps
    else:
        waypoints = sample_elliptical_orbit(
            central_body,
            semi_major_axis,
            eccentricity,
            periapsis_direction,
            start,
            end,
            cfg.transfer_samples,
        )
    return TransferOrbit(semi_major_axis, eccentricity, periapsis_direction, waypoints)


def path_length(waypoints: Sequence[Vec3] | np.ndarray) -> float:
    points = np.asarray(waypoints, dtype=float)
    if len(points) < 2:
        return 0.0
    return float(np.sum(np.linalg.norm(np.diff(points, axis=0), axis=1)))


__all__ = [
    "TransferOrbit",
    "gravitational_parameter",
    "gravity_assist_multiplier",
    "hohmann_transfer",
    "influence_radius",
    "path_length",
    "sample_elliptical_orbit",
]
