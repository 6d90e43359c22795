"""
Tests for frame timing.

Verifies:
  - Delta clamping for stalls and clock skew
  - FrameTimer counts frames and elapsed time with an injected clock
"""

import pytest

from orbit_viz.core.timekeeping import FrameTimer, clamp_delta


class FakeClock:
    def __init__(self, *times):
        self._times = list(times)

    def __call__(self):
        return self._times.pop(0)


@pytest.mark.parametrize(
    "dt, expected",
    [(0.016, 0.016), (0.5, 0.1), (0.0, 0.0), (-0.2, 0.0)],
)
def test_clamp_delta(dt, expected):
    assert clamp_delta(dt, 0.1) == pytest.approx(expected)


def test_timer_ticks():
    timer = FrameTimer(max_delta=0.1, clock=FakeClock(10.0, 10.02, 11.0, 11.05))
    assert timer.tick() == pytest.approx(0.02)
    assert timer.tick() == pytest.approx(0.1)
    assert timer.tick() == pytest.approx(0.05)
    assert timer.frames == 3
    assert timer.elapsed == pytest.approx(0.17)


def test_timer_reset():
    timer = FrameTimer(clock=FakeClock(0.0, 0.05, 5.0))
    timer.tick()
    timer.reset()
    assert timer.frames == 0
    assert timer.elapsed == 0.0
    assert timer.last_time == 5.0
