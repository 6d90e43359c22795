"""Pointer handling: ray picks against the scene and camera drag/zoom."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional, Sequence

import numpy as np

from ..core.config import CAMERA_CFG, CameraCfg
from .camera import CameraController, FolderMode, HomeMode, TaskPovMode

logger = logging.getLogger(__name__)

KIND_INDICATOR = "indicator"
KIND_PROJECT = "project"
KIND_MASSIVE_BODY = "massive_body"
KIND_HOME = "home"
INTERACTIVE_KINDS = frozenset({KIND_INDICATOR, KIND_PROJECT, KIND_MASSIVE_BODY, KIND_HOME})

HOVER_SCALE = {KIND_INDICATOR: 1.2, KIND_MASSIVE_BODY: 1.2, KIND_HOME: 1.1}
HOVER_EMISSIVE = 0.5
BASE_EMISSIVE = 0.1
DRAG_CLICK_TOLERANCE = 3.0


@dataclass(frozen=True, eq=False)
class Ray:
    origin: np.ndarray
    direction: np.ndarray


@dataclass(eq=False)
class PickTarget:
    """One pickable sphere; ``parent`` names the key of the owning target."""

    key: str
    kind: str
    entity: Any
    position: Callable[[], np.ndarray]
    radius: float
    parent: Optional[str] = None


def ray_sphere(
    origin: np.ndarray, direction: np.ndarray, center: np.ndarray, radius: float
) -> Optional[float]:
    """Distance along the (normalised) ray to the first hit, or None."""

    norm = float(np.linalg.norm(direction))
    if norm < 1e-12 or radius <= 0.0:
        return None
    d = direction / norm
    oc = origin - center
    b = float(oc @ d)
    c = float(oc @ oc) - radius * radius
    disc = b * b - c
    if disc < 0.0:
        return None
    root = math.sqrt(disc)
    t = -b - root
    if t < 0.0:
        t = -b + root
    return t if t >= 0.0 else None


class PickTable:
    """Flat table of pickable spheres with parent links."""

    def __init__(self) -> None:
        self._targets: dict[str, PickTarget] = {}

    def add(self, target: PickTarget) -> PickTarget:
        self._targets[target.key] = target
        return target

    def remove(self, key: str) -> None:
        self._targets.pop(key, None)
        for child in [t.key for t in self._targets.values() if t.parent == key]:
            self.remove(child)

    def get(self, key: str) -> Optional[PickTarget]:
        return self._targets.get(key)

    def clear(self) -> None:
        self._targets.clear()

    def __len__(self) -> int:
        return len(self._targets)

    def __iter__(self) -> Iterator[PickTarget]:
        return iter(self._targets.values())

    def intersect(self, ray: Ray) -> Optional[tuple[PickTarget, float]]:
        origin = np.asarray(ray.origin, dtype=float)
        direction = np.asarray(ray.direction, dtype=float)
        best: Optional[tuple[PickTarget, float]] = None
        for target in self._targets.values():
            scale = getattr(target.entity, "scale", 1.0) or 1.0
            hit = ray_sphere(origin, direction, target.position(), target.radius * scale)
            if hit is not None and (best is None or hit < best[1]):
                best = (target, hit)
        return best

    def resolve(self, target: Optional[PickTarget]) -> Optional[PickTarget]:
        """Walk up the parent chain to the first interactive ancestor."""

        seen: set[str] = set()
        current = target
        while current is not None and current.key not in seen:
            if current.kind in INTERACTIVE_KINDS:
                return current
            seen.add(current.key)
            current = self._targets.get(current.parent) if current.parent else None
        return None

    def pick(self, ray: Ray) -> tuple[Optional[PickTarget], bool]:
        """Return ``(interactive target or None, anything hit)``."""

        hit = self.intersect(ray)
        if hit is None:
            return None, False
        return self.resolve(hit[0]), True


@dataclass
class InteractionCallbacks:
    on_indicator_click: Optional[Callable[[Any], None]] = None
    on_project_click: Optional[Callable[[Any], None]] = None
    on_theme_folder_click: Optional[Callable[[Any], None]] = None
    on_home_click: Optional[Callable[[], None]] = None
    on_empty_click: Optional[Callable[[], None]] = None


def apply_hover_effect(target: PickTarget) -> None:
    if target.kind == KIND_PROJECT:
        target.entity.emissive = HOVER_EMISSIVE
    elif target.kind in HOVER_SCALE:
        target.entity.scale = HOVER_SCALE[target.kind]


def reset_hover_effect(target: PickTarget) -> None:
    if target.kind == KIND_PROJECT:
        target.entity.emissive = BASE_EMISSIVE
    elif target.kind in HOVER_SCALE:
        target.entity.scale = 1.0


class InteractionHandler:
    """Turns pointer events into hover state, click callbacks and camera input."""

    def __init__(
        self,
        picks: PickTable,
        camera: CameraController,
        callbacks: Optional[InteractionCallbacks] = None,
        *,
        cfg: CameraCfg = CAMERA_CFG,
    ) -> None:
        self._picks = picks
        self._camera = camera
        self._callbacks = callbacks or InteractionCallbacks()
        self._cfg = cfg
        self.hovered: Optional[PickTarget] = None
        self.dragging = False
        self.cursor = "grab"
        self.last_drag_velocity = 0.0
        self._last_x = 0.0
        self._drag_travel = 0.0

    # ----- pointer -----
    def pointer_down(self, x: float, y: float) -> None:
        self.dragging = True
        self._last_x = x
        self._drag_travel = 0.0
        self.cursor = "grabbing"

    def pointer_move(self, x: float, y: float, ray: Optional[Ray] = None) -> None:
        if self.dragging:
            dx = x - self._last_x
            self._last_x = x
            if dx == 0:
                return
            self._drag_travel += abs(dx)
            self.last_drag_velocity = abs(dx)
            angle = self._camera.horizontal_angle - dx * self._cfg.drag_sensitivity
            self._camera.update_manual_angle(angle, self.last_drag_velocity)
            return

        if ray is None:
            return
        target, _ = self._picks.pick(ray)
        if target is not self.hovered:
            if self.hovered is not None:
                reset_hover_effect(self.hovered)
            self.hovered = target
            if target is not None:
                apply_hover_effect(target)
        self.cursor = "pointer" if target is not None else "grab"

    def pointer_up(self) -> bool:
        """End a drag; True when the pointer travelled far enough to not be a click."""

        was_drag = self.dragging and self._drag_travel > DRAG_CLICK_TOLERANCE
        self.dragging = False
        self._drag_travel = 0.0
        self.cursor = "grab"
        return was_drag

    def wheel(self, delta: float) -> None:
        """Positive ``delta`` zooms in."""

        if delta == 0:
            return
        distance = self._camera.distance * self._cfg.wheel_zoom_factor ** (-delta)
        self._camera.update_manual_distance(distance)

    def click(self, ray: Ray) -> Optional[PickTarget]:
        target, hit_anything = self._picks.pick(ray)
        if target is None:
            if not hit_anything and self._callbacks.on_empty_click:
                self._callbacks.on_empty_click()
            return None

        self._camera.disable_manual_control()
        callbacks = self._callbacks
        if target.kind == KIND_INDICATOR:
            self._camera.set_mode(TaskPovMode(target.entity.task.id))
            if callbacks.on_indicator_click:
                callbacks.on_indicator_click(target.entity.task)
        elif target.kind == KIND_PROJECT:
            self._camera.set_mode(FolderMode(target.entity.folder_id))
            if callbacks.on_project_click:
                callbacks.on_project_click(target.entity.project)
        elif target.kind == KIND_MASSIVE_BODY:
            self._camera.set_mode(FolderMode(target.entity.folder.id))
            if callbacks.on_theme_folder_click:
                callbacks.on_theme_folder_click(target.entity.folder)
        elif target.kind == KIND_HOME:
            self._camera.set_mode(HomeMode())
            if callbacks.on_home_click:
                callbacks.on_home_click()
        logger.debug("Clicked %s", target.key)
        return target

    def forget(self, keys: Sequence[str]) -> None:
        if self.hovered is not None and self.hovered.key in keys:
            self.hovered = None

    def dispose(self) -> None:
        if self.hovered is not None:
            reset_hover_effect(self.hovered)
            self.hovered = None
        self.dragging = False
        self._callbacks = InteractionCallbacks()


__all__ = [
    "INTERACTIVE_KINDS",
    "InteractionCallbacks",
    "InteractionHandler",
    "KIND_HOME",
    "KIND_INDICATOR",
    "KIND_MASSIVE_BODY",
    "KIND_PROJECT",
    "PickTable",
    "PickTarget",
    "Ray",
    "apply_hover_effect",
    "ray_sphere",
    "reset_hover_effect",
]
