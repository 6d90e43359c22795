"""Data models for the visualization snapshot and the live scene entities."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional

import numpy as np


class SizeClass(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    MASSIVE = "massive"


class HealthStatus(str, Enum):
    THRIVING = "thriving"
    STABLE = "stable"
    CRITICAL = "critical"
    LIFE_SUPPORT = "life_support"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    CANCELLED = "cancelled"


class CommitmentType(str, Enum):
    ONE_TIME = "one_time"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


RECURRING_COMMITMENTS = frozenset(
    {CommitmentType.DAILY, CommitmentType.WEEKLY, CommitmentType.MONTHLY}
)


# =======================
#   SNAPSHOT ENTITIES
# =======================
@dataclass
class Task:
    """A mission; recurring ones get a travelling indicator."""

    id: int
    project_id: int
    title: str
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.TODO
    commitment_type: CommitmentType = CommitmentType.ONE_TIME
    route: list[int] = field(default_factory=list)
    description: Optional[str] = None
    deadline: Optional[str] = None
    time_commitment_minutes: int = 0

    @property
    def is_recurring(self) -> bool:
        return self.commitment_type in RECURRING_COMMITMENTS


@dataclass
class Project:
    """A planet. Position axes are ``None`` until laid out or set manually."""

    id: int
    folder_id: int
    name: str
    size: SizeClass = SizeClass.MEDIUM
    health: HealthStatus = HealthStatus.STABLE
    status: str = "active"
    position_x: Optional[float] = None
    position_y: Optional[float] = None
    position_z: Optional[float] = None
    orbit_radius: Optional[float] = None
    use_auto_positioning: bool = True
    color: Optional[str] = None
    description: Optional[str] = None
    tasks: list[Task] = field(default_factory=list)

    @property
    def has_manual_position(self) -> bool:
        return (
            self.position_x is not None
            and self.position_y is not None
            and self.position_z is not None
            and not self.use_auto_positioning
        )

    def position_vector(self) -> np.ndarray:
        return np.array(
            [self.position_x or 0.0, self.position_y or 0.0, self.position_z or 0.0],
            dtype=float,
        )

    def set_position(self, position: np.ndarray) -> None:
        self.position_x = float(position[0])
        self.position_y = float(position[1])
        self.position_z = float(position[2])


@dataclass
class ThemeFolder:
    """A galaxy: an ordered group of projects around a massive body."""

    id: int
    name: str
    color: str = "#3b82f6"
    icon: Optional[str] = None
    projects: list[Project] = field(default_factory=list)


def iter_projects(folders: Iterable[ThemeFolder]) -> Iterator[Project]:
    for folder in folders:
        yield from folder.projects


def iter_tasks(folders: Iterable[ThemeFolder]) -> Iterator[Task]:
    for project in iter_projects(folders):
        yield from project.tasks


def project_index(folders: Iterable[ThemeFolder]) -> dict[int, Project]:
    return {project.id: project for project in iter_projects(folders)}


# =======================
#   SCENE ENTITIES
# =======================
@dataclass(frozen=True, eq=False)
class AssistBody:
    position: np.ndarray
    mass: float
    gm: float
    influence_radius: float
    speed_multiplier: float


@dataclass(frozen=True, eq=False)
class PathSegment:
    """One leg of an indicator route; immutable once generated."""

    type: str
    start: np.ndarray
    end: np.ndarray
    semi_major_axis: float
    eccentricity: float
    periapsis_direction: np.ndarray
    waypoints: np.ndarray
    length: float
    assist: Optional[AssistBody] = None
    base_speed: float = 1.0

    def point_at(self, progress: float) -> np.ndarray:
        """Position at ``progress`` in [0, 1] along the sampled polyline."""

        count = len(self.waypoints)
        if count == 1:
            return self.waypoints[0].copy()
        scaled = min(max(progress, 0.0), 1.0) * (count - 1)
        index = min(int(scaled), count - 2)
        frac = scaled - index
        return self.waypoints[index] + (self.waypoints[index + 1] - self.waypoints[index]) * frac


@dataclass
class MoonInstance:
    orbit_angle: float
    orbit_distance: float
    orbit_speed: float
    radius: float
    gray: int
    local_position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=float))
    handles: list = field(default_factory=list)

    def refresh(self) -> None:
        self.local_position[:] = (
            self.orbit_distance * np.cos(self.orbit_angle),
            0.0,
            self.orbit_distance * np.sin(self.orbit_angle),
        )


@dataclass
class BodyInstance:
    """Live state of one project in the scene."""

    project: Project
    folder_id: int
    pivot: np.ndarray
    orbit_angle: float
    orbit_distance: float
    orbit_speed: float
    radius: float
    color: str
    position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=float))
    spin: float = 0.0
    moons: list[MoonInstance] = field(default_factory=list)
    orbit_line: Optional[np.ndarray] = None
    glow_opacity: Optional[float] = None
    halo: Optional[np.ndarray] = None
    has_ring: bool = False
    emissive: float = 0.1
    scale: float = 1.0
    handles: list = field(default_factory=list)

    def refresh_position(self) -> None:
        self.position[:] = (
            self.pivot[0] + self.orbit_distance * np.cos(self.orbit_angle),
            self.pivot[1],
            self.pivot[2] + self.orbit_distance * np.sin(self.orbit_angle),
        )


@dataclass
class TrailSample:
    position: np.ndarray
    size: float
    opacity: float
    color: tuple[int, int, int]


@dataclass
class IndicatorInstance:
    """Live state of one recurring task's rocket."""

    task: Task
    project: Project
    speed: float
    color: tuple[int, int, int]
    trail_length: int
    progress: float = 0.0
    direction: int = 1
    position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=float))
    forward: np.ndarray = field(default_factory=lambda: np.array([0.0, 0.0, 1.0]))
    route: list[Project] = field(default_factory=list)
    segments: list[PathSegment] = field(default_factory=list)
    segment_index: int = 0
    segment_progress: float = 0.0
    glow_opacity: float = 1.0
    scale: float = 1.0
    trail: deque = field(init=False)
    trail_samples: list[TrailSample] = field(default_factory=list)
    handles: list = field(default_factory=list)

    def __post_init__(self) -> None:
        self.trail = deque(maxlen=self.trail_length)

    @property
    def is_multi_stop(self) -> bool:
        return bool(self.route)

    @property
    def current_segment(self) -> Optional[PathSegment]:
        if not self.segments:
            return None
        return self.segments[min(self.segment_index, len(self.segments) - 1)]


@dataclass
class HomeMarker:
    """The pickable home base every indicator departs from."""

    position: np.ndarray
    radius: float
    ring_rotations: list[float] = field(default_factory=lambda: [0.0, 0.0])
    scale: float = 1.0
    handles: list = field(default_factory=list)


@dataclass
class MassiveBodyInstance:
    folder: ThemeFolder
    center: np.ndarray
    mass: float
    radius: float
    ring_rotation: float = 0.0
    boundary_radius: float = 0.0
    scale: float = 1.0
    handles: list = field(default_factory=list)


__all__ = [
    "AssistBody",
    "BodyInstance",
    "CommitmentType",
    "HealthStatus",
    "HomeMarker",
    "IndicatorInstance",
    "MassiveBodyInstance",
    "MoonInstance",
    "PathSegment",
    "Priority",
    "Project",
    "RECURRING_COMMITMENTS",
    "SizeClass",
    "Task",
    "TaskStatus",
    "ThemeFolder",
    "TrailSample",
    "iter_projects",
    "iter_tasks",
    "project_index",
]
