"""
Tests for the multi-stop path generator.

Verifies:
  - Segment chain shape: home -> stops -> home
  - Segment types (departure, transfer, arrival, gravity assist)
  - Central body selection for same-folder legs
  - Assist multipliers stay within configured bounds
  - Recalculation triggers on drift and on segment-count mismatch
"""

import numpy as np
import pytest

from orbit_viz.core.config import ORBIT_CFG
from orbit_viz.core.model import SizeClass
from orbit_viz.core.paths import (
    SEGMENT_ARRIVAL,
    SEGMENT_DEPARTURE,
    SEGMENT_GRAVITY_ASSIST,
    SEGMENT_TRANSFER,
    generate_path,
    planet_mass,
    should_recalculate,
)

HOME = np.zeros(3)


def _place(project, x, y, z):
    project.position_x, project.position_y, project.position_z = x, y, z
    return project


# ─── Fixtures ────────────────────────────────────────────────

@pytest.fixture()
def far_route(snapshot):
    """Three planets far from each other, with no folder centers in play."""
    return [
        _place(snapshot.project(1, 1), 200.0, 0.0, 0.0),
        _place(snapshot.project(2, 2), 0.0, 0.0, 400.0),
        _place(snapshot.project(3, 3), -300.0, 0.0, 0.0),
    ]


# ─── Generation ──────────────────────────────────────────────

class TestGeneratePath:
    def test_empty_route(self):
        assert generate_path([], HOME, {}, {}) == []

    def test_segment_chain(self, far_route):
        segments = generate_path(far_route, HOME, {}, {})
        assert len(segments) == len(far_route) + 1
        np.testing.assert_allclose(segments[0].start, HOME)
        np.testing.assert_allclose(segments[-1].end, HOME)
        for project, segment in zip(far_route, segments):
            np.testing.assert_allclose(segment.end, project.position_vector())
        for previous, following in zip(segments, segments[1:]):
            np.testing.assert_allclose(previous.end, following.start)

    def test_segment_types_without_assists(self, far_route):
        kinds = [s.type for s in generate_path(far_route, HOME, {}, {})]
        assert kinds == [SEGMENT_DEPARTURE, SEGMENT_TRANSFER, SEGMENT_TRANSFER, SEGMENT_ARRIVAL]

    def test_lengths_positive(self, far_route):
        for segment in generate_path(far_route, HOME, {}, {}):
            assert segment.length > 0.0
            assert segment.waypoints.shape == (ORBIT_CFG.transfer_samples + 1, 3)

    def test_folder_center_assist(self, far_route):
        # a heavy folder right on the departure leg
        centers = {9: np.array([100.0, 0.0, 0.0])}
        segments = generate_path(far_route, HOME, centers, {9: 1000.0})
        first = segments[0]
        assert first.type == SEGMENT_GRAVITY_ASSIST
        np.testing.assert_allclose(first.assist.position, centers[9])
        assert ORBIT_CFG.folder_assist_multiplier <= first.assist.speed_multiplier <= 2.5

    def test_route_planet_assist(self, snapshot):
        route = [
            _place(snapshot.project(1, 1, size=SizeClass.SMALL), 200.0, 0.0, 0.0),
            _place(snapshot.project(2, 2, size=SizeClass.SMALL), -200.0, 0.0, 0.0),
            _place(snapshot.project(3, 3, size=SizeClass.MASSIVE), 100.0, 0.0, 0.0),
        ]
        segments = generate_path(route, HOME, {}, {})
        # home -> planet 1 passes straight through planet 3
        assert segments[0].type == SEGMENT_GRAVITY_ASSIST
        assert segments[0].assist.mass == pytest.approx(planet_mass(SizeClass.MASSIVE))
        assert segments[0].assist.speed_multiplier >= ORBIT_CFG.planet_assist_multiplier

    def test_same_folder_leg_orbits_folder_center(self, snapshot):
        route = [
            _place(snapshot.project(1, 5), 40.0, 0.0, 0.0),
            _place(snapshot.project(2, 5), 10.0, 0.0, 60.0),
        ]
        # a massless folder exerts no assist, so only the central body changes
        segments = generate_path(route, np.array([500.0, 0.0, 0.0]), {5: np.array([10.0, 0.0, 0.0])}, {5: 0.0})
        middle = segments[1]
        assert middle.semi_major_axis == pytest.approx(45.0)
        assert middle.eccentricity == pytest.approx(30.0 / 90.0)

    def test_planet_mass_defaults_to_medium(self):
        assert planet_mass("unknown") == ORBIT_CFG.planet_masses["medium"]


# ─── Recalculation ───────────────────────────────────────────

class TestShouldRecalculate:
    def test_no_segments(self, far_route):
        assert should_recalculate(far_route, []) is True

    def test_fresh_path_is_current(self, far_route):
        segments = generate_path(far_route, HOME, {}, {})
        assert should_recalculate(far_route, segments) is False

    def test_small_drift_tolerated(self, far_route):
        segments = generate_path(far_route, HOME, {}, {})
        far_route[1].position_x += 4.0
        assert should_recalculate(far_route, segments) is False

    def test_drift_past_threshold(self, far_route):
        segments = generate_path(far_route, HOME, {}, {})
        far_route[2].position_z += 6.0
        assert should_recalculate(far_route, segments) is True

    def test_first_stop_drift_detected(self, far_route):
        segments = generate_path(far_route, HOME, {}, {})
        far_route[0].position_y += 10.0
        assert should_recalculate(far_route, segments) is True

    def test_custom_threshold(self, far_route):
        segments = generate_path(far_route, HOME, {}, {})
        far_route[0].position_x += 2.0
        assert should_recalculate(far_route, segments, threshold=1.0) is True

    def test_route_length_change(self, far_route):
        segments = generate_path(far_route, HOME, {}, {})
        assert should_recalculate(far_route[:2], segments) is True
