"""Scene orchestrator: builds every manager from a snapshot and drives ticks."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from ..core.config import (
    CAMERA_CFG,
    INDICATOR_CFG,
    LAYOUT_CFG,
    ORBIT_CFG,
    SCENE_CFG,
    CameraCfg,
    IndicatorCfg,
    LayoutCfg,
    OrbitCfg,
    SceneCfg,
)
from ..core.layout import layout
from ..core.logging_utils import SessionRecorder
from ..core.model import (
    BodyInstance,
    HomeMarker,
    IndicatorInstance,
    MassiveBodyInstance,
    Project,
    Task,
    ThemeFolder,
)
from ..core.textures import TextureCache
from ..core.timekeeping import clamp_delta
from .bodies import BodyManager
from .camera import CameraController, CameraInputs, CameraMode, TaskPovMode
from .indicators import IndicatorManager
from .interaction import (
    KIND_HOME,
    KIND_INDICATOR,
    KIND_MASSIVE_BODY,
    KIND_PROJECT,
    InteractionCallbacks,
    InteractionHandler,
    PickTable,
    PickTarget,
)
from .massive_bodies import MassiveBodyManager
from .resources import GEOMETRY, MATERIAL, TEXTURE, ResourceRegistry

logger = logging.getLogger(__name__)


class Scene:
    """
    One rendering session over a snapshot.

    Construction order: layout, massive bodies, bodies, indicators, camera,
    interaction. The host drives :meth:`tick` and must call :meth:`dispose`
    (or use the scene as a context manager) when the session ends.
    """

    def __init__(
        self,
        folders: Sequence[ThemeFolder],
        callbacks: Optional[InteractionCallbacks] = None,
        cfg: SceneCfg = SCENE_CFG,
        recorder: Optional[SessionRecorder] = None,
        *,
        texture_size: Optional[int] = None,
        layout_cfg: LayoutCfg = LAYOUT_CFG,
        orbit_cfg: OrbitCfg = ORBIT_CFG,
        indicator_cfg: IndicatorCfg = INDICATOR_CFG,
        camera_cfg: CameraCfg = CAMERA_CFG,
    ) -> None:
        self.folders = list(folders)
        self.cfg = cfg
        self.recorder = recorder
        self.time = 0.0
        self.frame = 0
        self.disposed = False
        self._indicator_cfg = indicator_cfg

        self.resources = ResourceRegistry()
        self.textures = TextureCache(texture_size)

        layout(self.folders, layout_cfg)
        self.massive_bodies = MassiveBodyManager(
            self.folders, self.resources, cfg=cfg, orbit_cfg=orbit_cfg, layout_cfg=layout_cfg
        )
        self.bodies = BodyManager(
            self.folders, self.resources, cfg=cfg, orbit_cfg=orbit_cfg, layout_cfg=layout_cfg
        )
        self.indicators = IndicatorManager(
            self.folders,
            self.resources,
            centers=self.massive_bodies.centers,
            masses=self.massive_bodies.masses,
            home=cfg.home_position,
            cfg=indicator_cfg,
            orbit_cfg=orbit_cfg,
        )
        self.home = HomeMarker(position=np.array(cfg.home_position, dtype=float), radius=cfg.home_radius)
        self.home.handles = self.resources.allocate_many(
            "home",
            [
                (GEOMETRY, "sphere"),
                (MATERIAL, "sphere"),
                (GEOMETRY, "ring_inner"),
                (MATERIAL, "ring_inner"),
                (GEOMETRY, "ring_outer"),
                (MATERIAL, "ring_outer"),
                (TEXTURE, "label"),
                (MATERIAL, "label"),
            ],
        )

        self.camera = CameraController(self._camera_inputs, cfg=camera_cfg)
        self.picks = PickTable()
        self._register_home()
        for massive in self.massive_bodies:
            self._register_massive_body(massive)
        for body in self.bodies:
            self._register_body(body)
        for indicator in self.indicators:
            self._register_indicator(indicator)

        self._user_callbacks = callbacks or InteractionCallbacks()
        self.interaction = InteractionHandler(
            self.picks, self.camera, self._recording_callbacks(), cfg=camera_cfg
        )

        if recorder is not None:
            recorder.write_meta(
                {
                    "folders": len(self.folders),
                    "projects": len(self.bodies),
                    "indicators": len(self.indicators),
                    "skipped_indicators": list(self.indicators.skipped),
                    "max_frame_delta": cfg.max_frame_delta,
                }
            )
        logger.debug(
            "Scene ready: %d folders, %d bodies, %d indicators, %d resources",
            len(self.folders),
            len(self.bodies),
            len(self.indicators),
            self.resources.live_count(),
        )

    # ----- pick table -----
    def _register_home(self) -> None:
        home = self.home
        self.picks.add(PickTarget("home", KIND_HOME, home, lambda: home.position, home.radius))

    def _register_massive_body(self, massive: MassiveBodyInstance) -> None:
        key = f"folder:{massive.folder.id}"
        self.picks.add(PickTarget(key, KIND_MASSIVE_BODY, massive, lambda: massive.center, massive.radius))
        self.picks.add(
            PickTarget(
                f"accretion:{massive.folder.id}",
                "accretion_ring",
                massive,
                lambda: massive.center,
                massive.radius * 1.3,
                parent=key,
            )
        )

    def _register_body(self, body: BodyInstance) -> None:
        key = f"project:{body.project.id}"
        self.picks.add(PickTarget(key, KIND_PROJECT, body, lambda: body.position, body.radius))
        for index, moon in enumerate(body.moons):
            self.picks.add(
                PickTarget(
                    f"moon:{body.project.id}:{index}",
                    "moon",
                    moon,
                    lambda moon=moon: body.position + moon.local_position,
                    moon.radius,
                    parent=key,
                )
            )
        if body.glow_opacity is not None:
            self.picks.add(
                PickTarget(f"glow:{body.project.id}", "glow", body, lambda: body.position, body.radius * 1.2, parent=key)
            )
        if body.has_ring:
            self.picks.add(
                PickTarget(f"ring:{body.project.id}", "ring", body, lambda: body.position, body.radius * 1.5, parent=key)
            )

    def _register_indicator(self, indicator: IndicatorInstance) -> None:
        self.picks.add(
            PickTarget(
                f"indicator:{indicator.task.id}",
                KIND_INDICATOR,
                indicator,
                lambda: indicator.position,
                self._indicator_cfg.pick_radius,
            )
        )

    # ----- callbacks -----
    def _recording_callbacks(self) -> InteractionCallbacks:
        user = self._user_callbacks

        def forward(event: str, handler, entity_id=None):
            def callback(*args):
                self._record_event(event, entity_id(*args) if entity_id else "")
                if handler:
                    handler(*args)

            return callback

        return InteractionCallbacks(
            on_indicator_click=forward("indicator_click", user.on_indicator_click, lambda task: task.id),
            on_project_click=forward("project_click", user.on_project_click, lambda project: project.id),
            on_theme_folder_click=forward("folder_click", user.on_theme_folder_click, lambda folder: folder.id),
            on_home_click=forward("home_click", user.on_home_click),
            on_empty_click=forward("empty_click", user.on_empty_click),
        )

    def _record_event(self, kind: str, entity_id: object = "", details: str = "") -> None:
        if self.recorder is not None:
            self.recorder.log_event([self.time, kind, entity_id, details])

    # ----- queries -----
    def _camera_inputs(self, mode: CameraMode) -> CameraInputs:
        if isinstance(mode, TaskPovMode):
            indicator = self.indicators.get(mode.task_id)
            if indicator is not None:
                return CameraInputs(
                    folder_centers=self.massive_bodies.centers(),
                    indicator_position=indicator.position,
                    indicator_forward=indicator.forward,
                )
        return CameraInputs(folder_centers=self.massive_bodies.centers())

    def folder_center(self, folder_id: int) -> Optional[np.ndarray]:
        return self.massive_bodies.center(folder_id)

    # ----- lifecycle -----
    def add_indicator(self, task: Task, project: Project) -> Optional[IndicatorInstance]:
        if self.disposed:
            return None
        self.remove_indicator(task.id)
        indicator = self.indicators.add(task, project)
        self._register_indicator(indicator)
        return indicator

    def remove_indicator(self, task_id: int) -> bool:
        key = f"indicator:{task_id}"
        self.interaction.forget([key])
        self.picks.remove(key)
        return self.indicators.remove(task_id)

    def tick(self, dt: float) -> None:
        """Advance one frame; a no-op once disposed."""

        if self.disposed:
            return
        dt = clamp_delta(dt, self.cfg.max_frame_delta)
        self.time += dt
        self.frame += 1

        self.massive_bodies.tick(dt)
        self.bodies.tick(dt)
        self.indicators.tick(dt)
        for index, speed in enumerate(self.cfg.home_ring_speeds):
            self.home.ring_rotations[index] += speed * dt
        self.camera.update(dt)

        if self.recorder is not None and self.frame % max(1, self.cfg.record_every_ticks) == 0:
            self._record_frame(dt)

    def _record_frame(self, dt: float) -> None:
        indicators = self.indicators.all()
        mean_progress = (
            sum(i.progress for i in indicators) / len(indicators) if indicators else 0.0
        )
        x, y, z = self.camera.position
        self.recorder.log_frame(
            [self.time, dt, x, y, z, str(self.camera.mode), len(indicators), mean_progress]
        )

    def dispose(self) -> int:
        """Release every resource and stop ticking; safe to call twice."""

        if self.disposed:
            return 0
        self.interaction.dispose()
        released = self.indicators.dispose()
        released += self.bodies.dispose()
        released += self.massive_bodies.dispose()
        released += self.resources.release_all_of(self.home.handles)
        released += self.resources.release_everything()
        self.textures.clear()
        self.picks.clear()
        self._record_event("dispose", "", f"released={released}")
        self.disposed = True
        logger.debug("Scene disposed, released %d resources", released)
        return released

    def __enter__(self) -> "Scene":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.dispose()
        return None


__all__ = ["Scene"]
