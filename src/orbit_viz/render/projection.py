"""Perspective projection between world space and the pygame window."""
from __future__ import annotations

import math
from typing import Optional

import numpy as np

from ..core.config import RENDER_CFG, RenderCfg
from ..scene.camera import CameraState
from ..scene.interaction import Ray

WORLD_UP = np.array([0.0, 1.0, 0.0])


class Projection:
    """Pinhole camera looking from ``position`` towards ``look_at``."""

    def __init__(self, size: tuple[int, int], *, cfg: RenderCfg = RENDER_CFG) -> None:
        self._cfg = cfg
        self._size = size
        self.position = np.zeros(3, dtype=float)
        self.forward = np.array([0.0, 0.0, -1.0])
        self.right = np.array([1.0, 0.0, 0.0])
        self.up = WORLD_UP.copy()

    @property
    def size(self) -> tuple[int, int]:
        return self._size

    def update_size(self, size: tuple[int, int]) -> None:
        self._size = size

    @property
    def focal_length(self) -> float:
        """Pixels per world unit at unit depth."""

        half_fov = math.radians(self._cfg.fov_degrees) / 2.0
        return (self._size[1] / 2.0) / math.tan(half_fov)

    def set_view(self, position: np.ndarray, look_at: np.ndarray) -> None:
        position = np.asarray(position, dtype=float)
        forward = np.asarray(look_at, dtype=float) - position
        norm = float(np.linalg.norm(forward))
        if norm < 1e-9:
            return
        forward /= norm
        right = np.cross(forward, WORLD_UP)
        if np.linalg.norm(right) < 1e-6:
            right = np.array([1.0, 0.0, 0.0])
        right /= np.linalg.norm(right)
        self.position = position.copy()
        self.forward = forward
        self.right = right
        self.up = np.cross(right, forward)

    def set_from_state(self, state: CameraState) -> None:
        self.set_view(state.position, state.look_at)

    def to_camera(self, points: np.ndarray) -> np.ndarray:
        """``(N, 3)`` world points to (right, up, depth) camera coordinates."""

        rel = np.atleast_2d(np.asarray(points, dtype=float)) - self.position
        return np.stack([rel @ self.right, rel @ self.up, rel @ self.forward], axis=1)

    def project_many(self, points: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return screen xy ``(N, 2)``, depth ``(N,)`` and a visibility mask."""

        cam = self.to_camera(points)
        depth = cam[:, 2]
        visible = (depth > self._cfg.near_plane) & (depth < self._cfg.far_plane)
        safe = np.where(visible, depth, 1.0)
        focal = self.focal_length
        width, height = self._size
        screen = np.empty((len(cam), 2), dtype=float)
        screen[:, 0] = width / 2.0 + cam[:, 0] * focal / safe
        screen[:, 1] = height / 2.0 - cam[:, 1] * focal / safe
        return screen, depth, visible

    def project(self, point: np.ndarray) -> Optional[tuple[int, int, float]]:
        screen, depth, visible = self.project_many(point)
        if not visible[0]:
            return None
        return int(round(screen[0, 0])), int(round(screen[0, 1])), float(depth[0])

    def pixel_radius(self, radius: float, depth: float) -> int:
        if depth <= 0.0:
            return 0
        return max(1, int(round(radius * self.focal_length / depth)))

    def ray(self, sx: float, sy: float) -> Ray:
        width, height = self._size
        focal = self.focal_length
        direction = (
            self.forward
            + self.right * ((sx - width / 2.0) / focal)
            + self.up * ((height / 2.0 - sy) / focal)
        )
        return Ray(self.position.copy(), direction / np.linalg.norm(direction))


__all__ = ["Projection"]
