"""
Shared pytest fixtures for the orbital view tests.

Provides:
  - ``src/`` on sys.path so ``orbit_viz`` and the scripts import uncovered
  - Snapshot builders for folders, projects and tasks
  - The built-in demo snapshot
"""

import os
import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Ensure src/ and the repo root are on sys.path so we can import the
# package and the scripts
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
for path in (SRC_DIR, PROJECT_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

# pygame must never try to open a real window during tests.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

from orbit_viz.core.model import (  # noqa: E402
    CommitmentType,
    HealthStatus,
    Priority,
    Project,
    SizeClass,
    Task,
    TaskStatus,
    ThemeFolder,
)
from orbit_viz.data.snapshots import demo_snapshot  # noqa: E402


# ---------------------------------------------------------------------------
# Snapshot helpers
# ---------------------------------------------------------------------------

class SnapshotBuilder:
    """Stateless helpers that build small snapshots for one test."""

    @staticmethod
    def task(
        task_id: int,
        project_id: int,
        *,
        commitment: CommitmentType = CommitmentType.DAILY,
        status: TaskStatus = TaskStatus.TODO,
        priority: Priority = Priority.MEDIUM,
        route=None,
    ) -> Task:
        return Task(
            id=task_id,
            project_id=project_id,
            title=f"task {task_id}",
            priority=priority,
            status=status,
            commitment_type=commitment,
            route=list(route or []),
        )

    @staticmethod
    def project(
        project_id: int,
        folder_id: int,
        *,
        size: SizeClass = SizeClass.MEDIUM,
        health: HealthStatus = HealthStatus.STABLE,
        status: str = "active",
        tasks=None,
    ) -> Project:
        return Project(
            id=project_id,
            folder_id=folder_id,
            name=f"project {project_id}",
            size=size,
            health=health,
            status=status,
            tasks=list(tasks or []),
        )

    @staticmethod
    def folder(folder_id: int, projects=None, color: str = "#3b82f6") -> ThemeFolder:
        return ThemeFolder(id=folder_id, name=f"folder {folder_id}", color=color, projects=list(projects or []))

    def folders(self, per_folder: int, count: int) -> list[ThemeFolder]:
        """``count`` folders of ``per_folder`` plain projects, ids ``f * 100 + i``."""
        return [
            self.folder(f, [self.project(f * 100 + i, f) for i in range(1, per_folder + 1)])
            for f in range(1, count + 1)
        ]


@pytest.fixture()
def snapshot() -> SnapshotBuilder:
    return SnapshotBuilder()


@pytest.fixture()
def demo_folders() -> list[ThemeFolder]:
    """Fresh copy of the demo data for each test."""
    return demo_snapshot()


@pytest.fixture()
def single_daily(snapshot: SnapshotBuilder) -> list[ThemeFolder]:
    """One folder, one medium project, one open daily task."""
    task = snapshot.task(1, 10, commitment=CommitmentType.DAILY)
    return [snapshot.folder(1, [snapshot.project(10, 1, tasks=[task])])]
