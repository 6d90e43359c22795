"""Travelling indicators ("rockets") for recurring tasks."""
from __future__ import annotations

import logging
import math
from typing import Iterator, Optional, Sequence

import numpy as np

from ..core.config import INDICATOR_CFG, ORBIT_CFG, SCENE_CFG, IndicatorCfg, OrbitCfg
from ..core.model import (
    CommitmentType,
    IndicatorInstance,
    Priority,
    Project,
    Task,
    TaskStatus,
    ThemeFolder,
    TrailSample,
    iter_tasks,
    project_index,
)
from ..core.paths import SEGMENT_GRAVITY_ASSIST, generate_path, should_recalculate
from .resources import GEOMETRY, MATERIAL, TEXTURE, ResourceRegistry

logger = logging.getLogger(__name__)


def wants_indicator(task: Task) -> bool:
    """Only open recurring commitments get a travelling indicator."""

    return task.status != TaskStatus.COMPLETED and task.is_recurring


def indicator_speed(commitment: CommitmentType | str, cfg: IndicatorCfg = INDICATOR_CFG) -> float:
    key = commitment.value if isinstance(commitment, CommitmentType) else str(commitment)
    return cfg.speeds.get(key, cfg.default_speed)


def priority_color(priority: Priority | str, cfg: IndicatorCfg = INDICATOR_CFG) -> tuple[int, int, int]:
    key = priority.value if isinstance(priority, Priority) else str(priority)
    return cfg.priority_colors.get(key, cfg.default_color)


def engine_glow_opacity(time: float, rate: float = INDICATOR_CFG.glow_pulse_rate) -> float:
    return math.sin(time * rate) * 0.3 + 0.7


def _unit(vector: np.ndarray) -> Optional[np.ndarray]:
    norm = float(np.linalg.norm(vector))
    if norm < 1e-9:
        return None
    return vector / norm


class IndicatorManager:
    """Creates and animates one :class:`IndicatorInstance` per eligible task.

    ``centers`` and ``masses`` are callables returning the live folder center
    and mass maps; multi-stop routes are planned against them.
    """

    def __init__(
        self,
        folders: Sequence[ThemeFolder],
        resources: ResourceRegistry,
        *,
        centers=None,
        masses=None,
        home: Sequence[float] = SCENE_CFG.home_position,
        cfg: IndicatorCfg = INDICATOR_CFG,
        orbit_cfg: OrbitCfg = ORBIT_CFG,
    ) -> None:
        self._resources = resources
        self._centers = centers or dict
        self._masses = masses or dict
        self._home = np.asarray(home, dtype=float)
        self._cfg = cfg
        self._orbit_cfg = orbit_cfg
        self._projects: dict[int, Project] = project_index(folders)
        self._indicators: dict[int, IndicatorInstance] = {}
        self._time = 0.0
        self.skipped: list[int] = []

        for task in iter_tasks(folders):
            if not wants_indicator(task):
                continue
            project = self._projects.get(task.project_id)
            if project is None:
                logger.debug("Skipping indicator for task %s: project %s missing", task.id, task.project_id)
                self.skipped.append(task.id)
                continue
            self.add(task, project)

        logger.debug("Created %d indicators (%d skipped)", len(self._indicators), len(self.skipped))

    @property
    def home(self) -> np.ndarray:
        return self._home

    # ------------------------------------------------------------------
    def add(self, task: Task, project: Project) -> IndicatorInstance:
        """Create (or replace) the indicator for ``task`` targeting ``project``."""

        if task.id in self._indicators:
            self.remove(task.id)

        indicator = IndicatorInstance(
            task=task,
            project=project,
            speed=indicator_speed(task.commitment_type, self._cfg),
            color=priority_color(task.priority, self._cfg),
            trail_length=self._cfg.trail_length,
            position=self._home.copy(),
        )
        indicator.route = self._resolve_route(task)
        heading = _unit(project.position_vector() - self._home)
        if heading is not None:
            indicator.forward = heading

        specs = [
            (GEOMETRY, "hull"),
            (MATERIAL, "hull"),
            (GEOMETRY, "nose"),
            (MATERIAL, "nose"),
            (GEOMETRY, "fins"),
            (MATERIAL, "fins"),
            (TEXTURE, "engine_glow"),
            (MATERIAL, "engine_glow"),
            (GEOMETRY, "trail"),
            (MATERIAL, "trail"),
        ]
        if indicator.is_multi_stop:
            specs += [(GEOMETRY, "path_line"), (MATERIAL, "path_line")]
            self._plan(indicator)
        indicator.handles = self._resources.allocate_many(f"indicator:{task.id}", specs)

        self._indicators[task.id] = indicator
        return indicator

    def remove(self, task_id: int) -> bool:
        indicator = self._indicators.pop(task_id, None)
        if indicator is None:
            return False
        self._resources.release_all_of(indicator.handles)
        return True

    def get(self, task_id: int) -> Optional[IndicatorInstance]:
        return self._indicators.get(task_id)

    def all(self) -> list[IndicatorInstance]:
        return list(self._indicators.values())

    def __iter__(self) -> Iterator[IndicatorInstance]:
        return iter(self._indicators.values())

    def __len__(self) -> int:
        return len(self._indicators)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._indicators

    def _resolve_route(self, task: Task) -> list[Project]:
        route = []
        for project_id in task.route:
            project = self._projects.get(project_id)
            if project is None:
                logger.debug("Task %s route drops missing project %s", task.id, project_id)
                continue
            route.append(project)
        return route

    def _plan(self, indicator: IndicatorInstance) -> None:
        indicator.segments = generate_path(
            indicator.route,
            self._home,
            self._centers(),
            self._masses(),
            self._orbit_cfg,
        )
        indicator.segment_index = min(indicator.segment_index, len(indicator.segments) - 1)

    # ------------------------------------------------------------------
    def tick(self, dt: float) -> None:
        self._time += dt
        glow = engine_glow_opacity(self._time, self._cfg.glow_pulse_rate)
        for indicator in self._indicators.values():
            if indicator.is_multi_stop:
                self._advance_route(indicator, dt)
            else:
                self._advance_shuttle(indicator, dt)
            indicator.glow_opacity = glow
            self._update_trail(indicator)

    def _advance_shuttle(self, indicator: IndicatorInstance, dt: float) -> None:
        step = indicator.speed * self._cfg.speed_normalizer * dt
        progress = indicator.progress + step * indicator.direction
        if progress >= 1.0:
            progress = 1.0
            indicator.direction = -1
        elif progress <= 0.0:
            progress = 0.0
            indicator.direction = 1
        indicator.progress = progress

        target = indicator.project.position_vector()
        span = target - self._home
        indicator.position[:] = self._home + span * progress

        ahead = min(1.0, max(0.0, progress + self._cfg.lookahead_progress * indicator.direction))
        heading = _unit(self._home + span * ahead - indicator.position)
        if heading is not None:
            indicator.forward = heading

    def _advance_route(self, indicator: IndicatorInstance, dt: float) -> None:
        # stops keep orbiting, so the chain is checked every frame
        if indicator.route and should_recalculate(indicator.route, indicator.segments, cfg=self._orbit_cfg):
            self._plan(indicator)
            logger.debug("Regenerated path for task %s", indicator.task.id)
        segment = indicator.current_segment
        if segment is None:
            return

        boost = 1.0
        if segment.type == SEGMENT_GRAVITY_ASSIST and segment.assist is not None:
            boost = segment.assist.speed_multiplier
        indicator.segment_progress += indicator.speed * self._cfg.speed_normalizer * dt * boost

        if indicator.segment_progress >= 1.0:
            indicator.segment_progress = 0.0
            indicator.segment_index = (indicator.segment_index + 1) % len(indicator.segments)
            segment = indicator.segments[indicator.segment_index]

        count = len(indicator.segments)
        indicator.progress = min(1.0, (indicator.segment_index + indicator.segment_progress) / count)

        indicator.position[:] = segment.point_at(indicator.segment_progress)
        lookahead = self._cfg.lookahead_progress
        if indicator.segment_progress + lookahead <= 1.0:
            delta = segment.point_at(indicator.segment_progress + lookahead) - indicator.position
        else:
            delta = indicator.position - segment.point_at(indicator.segment_progress - lookahead)
        heading = _unit(delta)
        if heading is not None:
            indicator.forward = heading

    def _update_trail(self, indicator: IndicatorInstance) -> None:
        indicator.trail.appendleft(indicator.position.copy())
        length = indicator.trail_length
        samples = []
        for index, position in enumerate(indicator.trail):
            recency = 1.0 - index / length
            samples.append(
                TrailSample(
                    position=position,
                    size=self._cfg.trail_max_size * recency,
                    opacity=self._cfg.trail_max_opacity * recency,
                    color=tuple(int(round(c * recency)) for c in indicator.color),
                )
            )
        indicator.trail_samples = samples

    def dispose(self) -> int:
        released = sum(self._resources.release_all_of(i.handles) for i in self._indicators.values())
        self._indicators.clear()
        return released


__all__ = [
    "IndicatorManager",
    "engine_glow_opacity",
    "indicator_speed",
    "priority_color",
    "wants_indicator",
]
