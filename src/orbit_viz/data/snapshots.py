"""Snapshot parsing and the built-in demo snapshot."""
from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Type, TypeVar

from ..core.model import (
    CommitmentType,
    HealthStatus,
    Priority,
    Project,
    SizeClass,
    Task,
    TaskStatus,
    ThemeFolder,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


class SnapshotError(ValueError):
    """Raised when a snapshot document does not have the expected shape."""


def _require(record: Mapping[str, Any], key: str, kind: str) -> Any:
    if not isinstance(record, Mapping):
        raise SnapshotError(f"{kind} entry must be an object, got {type(record).__name__}")
    if record.get(key) is None:
        raise SnapshotError(f"{kind} is missing required field '{key}'")
    return record[key]


def _int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise SnapshotError(f"'{field_name}' must be an integer, got {value!r}")
    return int(value)


def _optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise SnapshotError(f"'{field_name}' must be numeric, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise SnapshotError(f"'{field_name}' must be numeric, got {value!r}") from exc


def _enum(enum_cls: Type[E], value: Any, default: E, field_name: str) -> E:
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise SnapshotError(f"Unknown {field_name} '{value}'") from exc


def _list(record: Mapping[str, Any], key: str) -> list:
    value = record.get(key) or []
    if not isinstance(value, list):
        raise SnapshotError(f"'{key}' must be a list")
    return value


def task_from_dict(record: Mapping[str, Any], project_id: Optional[int] = None) -> Task:
    task_id = _int(_require(record, "id", "mission"), "id")
    owner = record.get("planet_id", project_id)
    if owner is None:
        raise SnapshotError(f"mission {task_id} has no planet_id")
    route = [_int(pid, "planet_route") for pid in _list(record, "planet_route")]
    return Task(
        id=task_id,
        project_id=_int(owner, "planet_id"),
        title=str(record.get("title", "")),
        priority=_enum(Priority, record.get("priority"), Priority.MEDIUM, "priority"),
        status=_enum(TaskStatus, record.get("status"), TaskStatus.TODO, "status"),
        commitment_type=_enum(
            CommitmentType,
            record.get("commitment_type"),
            CommitmentType.ONE_TIME,
            "commitment_type",
        ),
        route=route,
        description=record.get("description"),
        deadline=record.get("deadline"),
        time_commitment_minutes=_int(record.get("time_commitment_minutes") or 0, "time_commitment_minutes"),
    )


def project_from_dict(record: Mapping[str, Any], folder_id: Optional[int] = None) -> Project:
    project_id = _int(_require(record, "id", "planet"), "id")
    owner = record.get("galaxy_id", folder_id)
    if owner is None:
        raise SnapshotError(f"planet {project_id} has no galaxy_id")
    project = Project(
        id=project_id,
        folder_id=_int(owner, "galaxy_id"),
        name=str(record.get("name", "")),
        size=_enum(SizeClass, record.get("size"), SizeClass.MEDIUM, "size"),
        health=_enum(
            HealthStatus,
            record.get("health_status", record.get("health")),
            HealthStatus.STABLE,
            "health_status",
        ),
        status=str(record.get("status") or "active"),
        position_x=_optional_float(record.get("position_x"), "position_x"),
        position_y=_optional_float(record.get("position_y"), "position_y"),
        position_z=_optional_float(record.get("position_z"), "position_z"),
        orbit_radius=_optional_float(record.get("orbit_radius"), "orbit_radius"),
        use_auto_positioning=bool(record.get("use_auto_positioning", True)),
        color=record.get("color") or None,
        description=record.get("description"),
    )
    project.tasks = [task_from_dict(m, project_id) for m in _list(record, "missions")]
    return project


def folder_from_dict(record: Mapping[str, Any]) -> ThemeFolder:
    folder_id = _int(_require(record, "id", "galaxy"), "id")
    return ThemeFolder(
        id=folder_id,
        name=str(record.get("name", "")),
        color=record.get("color") or "#3b82f6",
        icon=record.get("icon"),
        projects=[project_from_dict(p, folder_id) for p in _list(record, "planets")],
    )


def snapshot_from_dicts(records: Iterable[Mapping[str, Any]]) -> list[ThemeFolder]:
    """Build theme folders from galaxy -> planets -> missions records."""

    if isinstance(records, (str, bytes, Mapping)):
        raise SnapshotError("snapshot must be a list of galaxies")
    folders = [folder_from_dict(record) for record in records]
    logger.debug(
        "Parsed snapshot: %d folders, %d projects",
        len(folders),
        sum(len(f.projects) for f in folders),
    )
    return folders


def load_snapshot(path: str | Path) -> list[ThemeFolder]:
    """Read a JSON snapshot; accepts a bare list or ``{"galaxies": [...]}``."""

    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"{path} is not valid JSON: {exc}") from exc
    if isinstance(document, Mapping):
        document = document.get("galaxies")
        if document is None:
            raise SnapshotError(f"{path} has no 'galaxies' list")
    return snapshot_from_dicts(document)


# =======================
#   DEMO DATA
# =======================
DEMO_SNAPSHOT: tuple[dict, ...] = (
    {
        "id": 1,
        "name": "Work",
        "color": "#3b82f6",
        "planets": [
            {
                "id": 101,
                "name": "Website Relaunch",
                "size": "large",
                "health_status": "thriving",
                "missions": [
                    {"id": 1001, "title": "Standup notes", "priority": "high", "commitment_type": "daily"},
                    {"id": 1002, "title": "Ship landing page", "priority": "critical"},
                ],
            },
            {
                "id": 102,
                "name": "Quarterly Report",
                "size": "medium",
                "health_status": "critical",
                "missions": [
                    {
                        "id": 1003,
                        "title": "Collect metrics",
                        "priority": "critical",
                        "commitment_type": "weekly",
                        "planet_route": [102, 103, 201],
                    },
                ],
            },
            {"id": 103, "name": "Hiring", "size": "small", "status": "completed"},
        ],
    },
    {
        "id": 2,
        "name": "Health",
        "color": "#22c55e",
        "planets": [
            {
                "id": 201,
                "name": "Marathon",
                "size": "massive",
                "missions": [
                    {"id": 2001, "title": "Long run", "priority": "medium", "commitment_type": "weekly"},
                    {"id": 2002, "title": "Stretching", "priority": "low", "commitment_type": "daily"},
                ],
            },
            {
                "id": 202,
                "name": "Meal Prep",
                "size": "small",
                "health_status": "life_support",
                "missions": [
                    {"id": 2003, "title": "Groceries", "priority": "medium", "commitment_type": "monthly"},
                    {
                        "id": 2004,
                        "title": "Old habit",
                        "commitment_type": "daily",
                        "status": "completed",
                    },
                ],
            },
        ],
    },
    {
        "id": 3,
        "name": "Learning",
        "color": "#a855f7",
        "planets": [
            {"id": 301, "name": "Rust Book", "size": "medium", "health_status": "thriving"},
            {
                "id": 302,
                "name": "Piano",
                "size": "small",
                "missions": [
                    {"id": 3001, "title": "Scales", "priority": "high", "commitment_type": "daily"},
                ],
            },
            {"id": 303, "name": "Astronomy", "size": "large"},
        ],
    },
)


def demo_snapshot() -> list[ThemeFolder]:
    """Fresh copy of the built-in demo data; callers may mutate it freely."""

    return snapshot_from_dicts(DEMO_SNAPSHOT)


__all__ = [
    "DEMO_SNAPSHOT",
    "SnapshotError",
    "demo_snapshot",
    "folder_from_dict",
    "load_snapshot",
    "project_from_dict",
    "snapshot_from_dicts",
    "task_from_dict",
]
