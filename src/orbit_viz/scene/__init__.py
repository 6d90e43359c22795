"""Live scene state: entity managers, camera, picking and the orchestrator."""

from .camera import CameraController, CameraInputs, CameraState, FolderMode, HomeMode, TaskPovMode
from .interaction import InteractionCallbacks, InteractionHandler, Ray
from .orchestrator import Scene
from .resources import ResourceRegistry

__all__ = [
    "CameraController",
    "CameraInputs",
    "CameraState",
    "FolderMode",
    "HomeMode",
    "InteractionCallbacks",
    "InteractionHandler",
    "Ray",
    "ResourceRegistry",
    "Scene",
    "TaskPovMode",
]
