"""Frame timing for the host loop."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from .config import SCENE_CFG


def clamp_delta(dt: float, max_delta: float = SCENE_CFG.max_frame_delta) -> float:
    """Negative deltas read as zero; stalls are capped at ``max_delta``."""

    if dt <= 0.0:
        return 0.0
    return min(dt, max_delta)


@dataclass
class FrameTimer:
    """High resolution timer based on :func:`time.perf_counter`.

    ``tick`` returns the clamped delta since the previous tick so that a
    stalled window never produces one oversized animation step.
    """

    max_delta: float = SCENE_CFG.max_frame_delta
    clock: Callable[[], float] = time.perf_counter
    last_time: float = field(default=-1.0)
    elapsed: float = 0.0
    frames: int = 0

    def __post_init__(self) -> None:
        if self.last_time < 0.0:
            self.last_time = self.clock()

    def tick(self) -> float:
        now = self.clock()
        dt = clamp_delta(now - self.last_time, self.max_delta)
        self.last_time = now
        self.elapsed += dt
        self.frames += 1
        return dt

    def reset(self) -> None:
        self.last_time = self.clock()
        self.elapsed = 0.0
        self.frames = 0


__all__ = ["FrameTimer", "clamp_delta"]
