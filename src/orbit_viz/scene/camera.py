"""Mode-based camera: automatic framing blended with manual drag/zoom.

The camera is an immutable :class:`CameraState` advanced by the pure
:func:`next_frame_state`; :class:`CameraController` is a thin stateful shell
around it for the scene and the pointer handler.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Callable, Mapping, Optional, Union

import numpy as np

from ..core.config import CAMERA_CFG, CameraCfg

logger = logging.getLogger(__name__)


def _clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def _vec(values) -> np.ndarray:
    return np.array(values, dtype=float)


@dataclass(frozen=True)
class HomeMode:
    def __str__(self) -> str:
        return "home"


@dataclass(frozen=True)
class FolderMode:
    folder_id: int

    def __str__(self) -> str:
        return f"folder:{self.folder_id}"


@dataclass(frozen=True)
class TaskPovMode:
    task_id: int

    def __str__(self) -> str:
        return f"task_pov:{self.task_id}"


CameraMode = Union[HomeMode, FolderMode, TaskPovMode]


@dataclass(frozen=True, eq=False)
class ManualOverride:
    """Locked spherical coordinates around the mode's orbit center."""

    orbit_center: np.ndarray
    horizontal_angle: float
    vertical_angle: float
    distance: float

    def position(self, orbit_center: Optional[np.ndarray] = None) -> np.ndarray:
        center = self.orbit_center if orbit_center is None else orbit_center
        horizontal = math.cos(self.vertical_angle) * self.distance
        return center + _vec(
            [
                math.cos(self.horizontal_angle) * horizontal,
                math.sin(self.vertical_angle) * self.distance,
                math.sin(self.horizontal_angle) * horizontal,
            ]
        )


@dataclass(frozen=True, eq=False)
class CameraState:
    mode: CameraMode
    position: np.ndarray
    look_at: np.ndarray
    target_position: np.ndarray
    target_look_at: np.ndarray
    orbit_center: np.ndarray
    manual: Optional[ManualOverride] = None
    lerp_speed: float = CAMERA_CFG.base_lerp_speed

    @property
    def is_manual(self) -> bool:
        return self.manual is not None

    @property
    def distance(self) -> float:
        if self.manual is not None:
            return self.manual.distance
        return float(np.linalg.norm(self.position - self.orbit_center))

    @property
    def horizontal_angle(self) -> float:
        if self.manual is not None:
            return self.manual.horizontal_angle
        rel = self.position - self.orbit_center
        return math.atan2(rel[2], rel[0])


@dataclass(frozen=True, eq=False)
class CameraInputs:
    """Per-frame world lookups the camera needs to re-aim."""

    folder_centers: Mapping[int, np.ndarray] = field(default_factory=dict)
    indicator_position: Optional[np.ndarray] = None
    indicator_forward: Optional[np.ndarray] = None


def initial_state(cfg: CameraCfg = CAMERA_CFG) -> CameraState:
    return CameraState(
        mode=HomeMode(),
        position=_vec(cfg.home_position),
        look_at=_vec(cfg.home_look_at),
        target_position=_vec(cfg.home_position),
        target_look_at=_vec(cfg.home_look_at),
        orbit_center=_vec(cfg.home_look_at),
        lerp_speed=cfg.base_lerp_speed,
    )


# ===== TRANSITIONS =====
def set_mode(state: CameraState, mode: CameraMode) -> CameraState:
    """Enter ``mode``; manual control is always cleared."""

    return replace(state, mode=mode, manual=None)


def enable_manual_control(state: CameraState) -> CameraState:
    """Lock the current spherical coordinates around the orbit center."""

    if state.manual is not None:
        return state
    rel = state.position - state.orbit_center
    horizontal = math.hypot(rel[0], rel[2])
    manual = ManualOverride(
        orbit_center=state.orbit_center.copy(),
        horizontal_angle=math.atan2(rel[2], rel[0]),
        vertical_angle=math.atan2(rel[1], horizontal),
        distance=float(np.linalg.norm(rel)),
    )
    return replace(state, manual=manual)


def disable_manual_control(state: CameraState, cfg: CameraCfg = CAMERA_CFG) -> CameraState:
    return replace(state, manual=None, lerp_speed=cfg.base_lerp_speed)


def update_manual_angle(
    state: CameraState,
    angle: float,
    drag_velocity: Optional[float] = None,
    cfg: CameraCfg = CAMERA_CFG,
) -> CameraState:
    """Set the horizontal angle; faster drags make the camera follow faster."""

    state = enable_manual_control(state)
    lerp_speed = state.lerp_speed
    if drag_velocity is not None:
        factor = min(abs(drag_velocity) / cfg.drag_velocity_scale, 1.0)
        lerp_speed = cfg.min_lerp_speed + factor * (cfg.max_lerp_speed - cfg.min_lerp_speed)
    return replace(
        state,
        manual=replace(state.manual, horizontal_angle=angle),
        lerp_speed=lerp_speed,
    )


def update_manual_distance(
    state: CameraState, distance: float, cfg: CameraCfg = CAMERA_CFG
) -> CameraState:
    state = enable_manual_control(state)
    clamped = _clamp(distance, cfg.min_distance, cfg.max_distance)
    return replace(state, manual=replace(state.manual, distance=clamped))


# ===== FRAME UPDATE =====
def _targets(
    state: CameraState, inputs: CameraInputs, cfg: CameraCfg
) -> tuple[np.ndarray, np.ndarray, np.ndarray, Optional[ManualOverride]]:
    mode = state.mode
    target_position = state.target_position
    target_look_at = state.target_look_at
    orbit_center = state.orbit_center
    manual = state.manual

    if isinstance(mode, HomeMode):
        orbit_center = _vec(cfg.home_look_at)
        if manual is not None:
            manual = replace(manual, orbit_center=orbit_center)
            target_position = manual.position()
            target_look_at = orbit_center.copy()
        else:
            target_position = _vec(cfg.home_position)
            target_look_at = _vec(cfg.home_look_at)

    elif isinstance(mode, FolderMode):
        center = inputs.folder_centers.get(mode.folder_id)
        if center is not None:
            orbit_center = _vec(center)
            if manual is not None:
                manual = replace(manual, orbit_center=orbit_center)
                target_position = manual.position()
            else:
                target_position = orbit_center + _vec(cfg.folder_offset)
            target_look_at = orbit_center.copy()

    elif isinstance(mode, TaskPovMode):
        if inputs.indicator_position is not None and inputs.indicator_forward is not None:
            position = _vec(inputs.indicator_position)
            forward = _vec(inputs.indicator_forward)
            target_position = (
                position - forward * cfg.pov_follow_distance + _vec([0.0, cfg.pov_height, 0.0])
            )
            target_look_at = position + forward * cfg.pov_lookahead

    return target_position, target_look_at, orbit_center, manual


def next_frame_state(
    state: CameraState,
    inputs: CameraInputs,
    dt: float,
    cfg: CameraCfg = CAMERA_CFG,
) -> CameraState:
    """Re-aim at the mode's target and move a smoothing step towards it."""

    target_position, target_look_at, orbit_center, manual = _targets(state, inputs, cfg)
    alpha = _clamp(state.lerp_speed * dt, 0.0, 1.0)
    return replace(
        state,
        position=state.position + (target_position - state.position) * alpha,
        look_at=state.look_at + (target_look_at - state.look_at) * alpha,
        target_position=np.array(target_position, dtype=float),
        target_look_at=np.array(target_look_at, dtype=float),
        orbit_center=orbit_center,
        manual=manual,
    )


InputsProvider = Callable[[CameraMode], CameraInputs]


class CameraController:
    """Stateful wrapper that feeds :func:`next_frame_state` every frame."""

    def __init__(
        self,
        inputs_provider: Optional[InputsProvider] = None,
        *,
        cfg: CameraCfg = CAMERA_CFG,
    ) -> None:
        self._cfg = cfg
        self._inputs_provider = inputs_provider
        self.state = initial_state(cfg)

    @property
    def mode(self) -> CameraMode:
        return self.state.mode

    @property
    def position(self) -> np.ndarray:
        return self.state.position

    @property
    def look_at(self) -> np.ndarray:
        return self.state.look_at

    @property
    def manual_control(self) -> bool:
        return self.state.is_manual

    @property
    def horizontal_angle(self) -> float:
        return self.state.horizontal_angle

    @property
    def distance(self) -> float:
        return self.state.distance

    def set_mode(self, mode: CameraMode) -> None:
        if mode != self.state.mode:
            logger.debug("Camera mode %s -> %s", self.state.mode, mode)
        self.state = set_mode(self.state, mode)

    def enable_manual_control(self) -> None:
        self.state = enable_manual_control(self.state)

    def disable_manual_control(self) -> None:
        self.state = disable_manual_control(self.state, self._cfg)

    def update_manual_angle(self, angle: float, drag_velocity: Optional[float] = None) -> None:
        self.state = update_manual_angle(self.state, angle, drag_velocity, self._cfg)

    def update_manual_distance(self, distance: float) -> None:
        self.state = update_manual_distance(self.state, distance, self._cfg)

    def update(self, dt: float, inputs: Optional[CameraInputs] = None) -> CameraState:
        if inputs is None:
            inputs = self._inputs_provider(self.state.mode) if self._inputs_provider else CameraInputs()
        self.state = next_frame_state(self.state, inputs, dt, self._cfg)
        return self.state


__all__ = [
    "CameraController",
    "CameraInputs",
    "CameraMode",
    "CameraState",
    "FolderMode",
    "HomeMode",
    "ManualOverride",
    "TaskPovMode",
    "disable_manual_control",
    "enable_manual_control",
    "initial_state",
    "next_frame_state",
    "set_mode",
    "update_manual_angle",
    "update_manual_distance",
]
