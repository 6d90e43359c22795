"""
Tests for resource bookkeeping.

Verifies:
  - Allocation ids, kinds and counters
  - Release is idempotent and notifies listeners
  - Owner-scoped and global release
"""

import pytest

from orbit_viz.scene.resources import GEOMETRY, MATERIAL, TEXTURE, ResourceRegistry


@pytest.fixture()
def registry():
    return ResourceRegistry()


def test_allocate(registry):
    a = registry.allocate(GEOMETRY, "body:1", "sphere")
    b = registry.allocate(TEXTURE, "body:1", "terrain")
    assert a.id != b.id
    assert registry.live_count() == 2
    assert registry.live_count(TEXTURE) == 1
    assert registry.allocated_total == 2


def test_unknown_kind(registry):
    with pytest.raises(ValueError, match="Unknown resource kind"):
        registry.allocate("shader", "body:1")


def test_release_once(registry):
    handle = registry.allocate(MATERIAL, "home")
    assert registry.release(handle) is True
    assert registry.release(handle) is False
    assert not registry.is_live(handle)
    assert registry.released_total == 1


def test_release_owner(registry):
    registry.allocate_many("a", [(GEOMETRY, "x"), (MATERIAL, "x")])
    registry.allocate_many("b", [(GEOMETRY, "y")])
    assert registry.release_owner("a") == 2
    assert [h.owner for h in registry.live_handles()] == ["b"]
    assert registry.release_everything() == 1
    assert registry.live_count() == 0


def test_release_listener(registry):
    seen = []
    registry.add_release_listener(seen.append)
    handle = registry.allocate(TEXTURE, "body:3", "terrain")
    registry.release(handle)
    registry.release(handle)
    assert seen == [handle]
    registry.remove_release_listener(seen.append)
    registry.release(registry.allocate(TEXTURE, "body:4"))
    assert seen == [handle]
