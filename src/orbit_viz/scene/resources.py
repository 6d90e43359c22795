"""Bookkeeping for graphics resources allocated on behalf of scene entities."""
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)

GEOMETRY = "geometry"
MATERIAL = "material"
TEXTURE = "texture"
RESOURCE_KINDS = (GEOMETRY, MATERIAL, TEXTURE)


@dataclass(frozen=True)
class ResourceHandle:
    id: int
    kind: str
    owner: str
    label: str = ""


ReleaseListener = Callable[[ResourceHandle], None]


class ResourceRegistry:
    """Tracks every live handle so teardown can prove nothing leaked."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._live: dict[int, ResourceHandle] = {}
        self._listeners: list[ReleaseListener] = []
        self.allocated_total = 0
        self.released_total = 0

    def allocate(self, kind: str, owner: str, label: str = "") -> ResourceHandle:
        if kind not in RESOURCE_KINDS:
            raise ValueError(f"Unknown resource kind '{kind}'")
        handle = ResourceHandle(next(self._ids), kind, owner, label)
        self._live[handle.id] = handle
        self.allocated_total += 1
        return handle

    def allocate_many(self, owner: str, specs: Iterable[tuple[str, str]]) -> list[ResourceHandle]:
        return [self.allocate(kind, owner, label) for kind, label in specs]

    def release(self, handle: ResourceHandle) -> bool:
        """Release one handle; returns False if it was already released."""

        if self._live.pop(handle.id, None) is None:
            return False
        self.released_total += 1
        for listener in self._listeners:
            listener(handle)
        return True

    def release_all_of(self, handles: Iterable[ResourceHandle]) -> int:
        return sum(1 for handle in list(handles) if self.release(handle))

    def release_owner(self, owner: str) -> int:
        return self.release_all_of([h for h in self._live.values() if h.owner == owner])

    def release_everything(self) -> int:
        released = self.release_all_of(list(self._live.values()))
        if released:
            logger.debug("Released %d leftover resources", released)
        return released

    def live_count(self, kind: Optional[str] = None) -> int:
        if kind is None:
            return len(self._live)
        return sum(1 for h in self._live.values() if h.kind == kind)

    def live_handles(self, owner: Optional[str] = None) -> list[ResourceHandle]:
        return [h for h in self._live.values() if owner is None or h.owner == owner]

    def is_live(self, handle: ResourceHandle) -> bool:
        return handle.id in self._live

    def add_release_listener(self, listener: ReleaseListener) -> None:
        self._listeners.append(listener)

    def remove_release_listener(self, listener: ReleaseListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)


__all__ = [
    "GEOMETRY",
    "MATERIAL",
    "RESOURCE_KINDS",
    "ResourceHandle",
    "ResourceRegistry",
    "TEXTURE",
]
