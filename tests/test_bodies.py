"""
Tests for the body and massive-body managers.

Verifies:
  - One body per project, orbiting the folder pivot at constant distance
  - Orbit speed falls off with distance
  - Moons are deterministic and bounded in count
  - Health and status decorations (glow, halo, ring)
  - Massive bodies follow the live centroid
  - Resource handles are released on dispose
"""

import math

import numpy as np
import pytest

from orbit_viz.core.layout import layout
from orbit_viz.core.model import HealthStatus
from orbit_viz.scene.bodies import (
    BodyManager,
    create_moons,
    critical_glow_opacity,
    halo_particles,
    orbit_line_points,
    orbit_speed,
)
from orbit_viz.scene.massive_bodies import MassiveBodyManager
from orbit_viz.scene.resources import ResourceRegistry


@pytest.fixture()
def laid_out(snapshot):
    folders = snapshot.folders(per_folder=3, count=2)
    layout(folders)
    return folders


# ─── Helpers ─────────────────────────────────────────────────

class TestBodyHelpers:
    def test_orbit_speed_falls_with_distance(self):
        assert orbit_speed("medium", 10.0) > orbit_speed("medium", 40.0)

    def test_orbit_speed_formula(self):
        assert orbit_speed("small", 30.0) == pytest.approx(0.15)

    def test_orbit_speed_near_zero_distance_is_finite(self):
        assert math.isfinite(orbit_speed("large", 0.0))

    def test_moons_deterministic(self):
        a = create_moons(123, 3.3)
        b = create_moons(123, 3.3)
        assert [m.orbit_angle for m in a] == [m.orbit_angle for m in b]
        assert [m.gray for m in a] == [m.gray for m in b]

    def test_moon_count_bounded(self):
        counts = {len(create_moons(pid, 3.3)) for pid in range(1, 200)}
        assert counts <= {0, 1, 2, 3}
        assert len(counts) > 1

    def test_moon_spacing(self):
        for pid in range(1, 60):
            moons = create_moons(pid, 2.0)
            for index, moon in enumerate(moons):
                assert moon.orbit_distance == pytest.approx(2.0 + 5 + index * 3)
                assert np.linalg.norm(moon.local_position) == pytest.approx(moon.orbit_distance)

    def test_orbit_line_closed(self):
        points = orbit_line_points(np.array([1.0, 2.0, 3.0]), 10.0, 16)
        assert points.shape == (17, 3)
        np.testing.assert_allclose(points[0], points[-1], atol=1e-9)
        np.testing.assert_allclose(points[:, 1], 2.0)

    def test_halo_seeded(self):
        np.testing.assert_array_equal(halo_particles(5, 2.0, 10), halo_particles(5, 2.0, 10))
        assert np.all(np.abs(halo_particles(5, 2.0, 10)) <= 3.0)

    def test_critical_glow_range(self):
        values = [critical_glow_opacity(t * 0.1) for t in range(200)]
        assert min(values) >= 0.1 - 1e-9
        assert max(values) <= 0.5 + 1e-9


# ─── Body manager ────────────────────────────────────────────

class TestBodyManager:
    def test_one_body_per_project(self, laid_out):
        manager = BodyManager(laid_out, ResourceRegistry())
        assert len(manager) == 6
        assert manager.get(101).project.id == 101
        assert manager.get(999) is None

    def test_orbit_keeps_distance_at_pivot_height(self, laid_out):
        manager = BodyManager(laid_out, ResourceRegistry())
        body = manager.get(102)
        start_distance = body.orbit_distance
        for _ in range(50):
            manager.tick(0.1)
        offset = body.position - body.pivot
        assert math.hypot(offset[0], offset[2]) == pytest.approx(start_distance)
        assert body.position[1] == pytest.approx(body.pivot[1])

    def test_tick_writes_project_position(self, laid_out):
        manager = BodyManager(laid_out, ResourceRegistry())
        manager.tick(0.5)
        body = manager.get(201)
        np.testing.assert_allclose(body.project.position_vector(), body.position)

    def test_angle_advances_by_speed(self, laid_out):
        manager = BodyManager(laid_out, ResourceRegistry())
        body = manager.get(101)
        before = body.orbit_angle
        manager.tick(0.1)
        assert body.orbit_angle - before == pytest.approx(body.orbit_speed * 0.1)

    def test_decorations(self, snapshot):
        folder = snapshot.folder(
            1,
            [
                snapshot.project(1, 1, health=HealthStatus.CRITICAL),
                snapshot.project(2, 1, health=HealthStatus.THRIVING),
                snapshot.project(3, 1, status="completed"),
            ],
        )
        layout([folder])
        manager = BodyManager([folder], ResourceRegistry())
        critical, thriving, completed = manager.get(1), manager.get(2), manager.get(3)
        assert critical.glow_opacity is not None and critical.halo is None
        assert thriving.halo is not None and thriving.glow_opacity is None
        assert completed.has_ring and not critical.has_ring

    def test_glow_pulses(self, snapshot):
        folder = snapshot.folder(1, [snapshot.project(1, 1, health=HealthStatus.CRITICAL)])
        layout([folder])
        manager = BodyManager([folder], ResourceRegistry())
        manager.tick(0.1)
        assert manager.get(1).glow_opacity == pytest.approx(critical_glow_opacity(0.1))

    def test_dispose_releases_all(self, laid_out):
        registry = ResourceRegistry()
        manager = BodyManager(laid_out, registry)
        assert registry.live_count() > 0
        released = manager.dispose()
        assert released == registry.allocated_total
        assert registry.live_count() == 0
        assert len(manager) == 0


# ─── Massive bodies ──────────────────────────────────────────

class TestMassiveBodyManager:
    def test_one_per_folder_at_centroid(self, laid_out):
        manager = MassiveBodyManager(laid_out, ResourceRegistry())
        assert len(manager) == 2
        folder = laid_out[0]
        expected = np.mean([p.position_vector() for p in folder.projects], axis=0)
        np.testing.assert_allclose(manager.center(folder.id), expected)

    def test_follows_live_centroid(self, laid_out):
        manager = MassiveBodyManager(laid_out, ResourceRegistry())
        center = manager.center(1)
        for project in laid_out[0].projects:
            project.position_x += 10.0
        manager.tick(0.1)
        assert manager.center(1) is center
        expected = np.mean([p.position_vector() for p in laid_out[0].projects], axis=0)
        np.testing.assert_allclose(center, expected)

    def test_ring_rotates(self, laid_out):
        manager = MassiveBodyManager(laid_out, ResourceRegistry())
        manager.tick(0.2)
        assert manager.get(1).ring_rotation == pytest.approx(0.1)

    def test_empty_folder(self, snapshot):
        registry = ResourceRegistry()
        manager = MassiveBodyManager([snapshot.folder(4)], registry)
        np.testing.assert_array_equal(manager.center(4), np.zeros(3))
        assert manager.get(4).boundary_radius == pytest.approx(50.0)
        assert not [h for h in registry.live_handles() if h.label == "boundary"]

    def test_maps(self, laid_out):
        manager = MassiveBodyManager(laid_out, ResourceRegistry())
        assert set(manager.centers()) == {1, 2}
        assert manager.masses() == {1: 1000.0, 2: 1000.0}

    def test_dispose(self, laid_out):
        registry = ResourceRegistry()
        manager = MassiveBodyManager(laid_out, registry)
        manager.dispose()
        assert registry.live_count() == 0
