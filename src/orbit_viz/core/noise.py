"""Seeded gradient noise used by the planet texture generator.

The permutation table is shuffled with a sine-based hash rather than
``random.Random`` so that a numeric seed (the project id) always yields the
same table on every platform and in every process.
"""
from __future__ import annotations

import math
from typing import Callable, Union

import numpy as np

ArrayLike = Union[float, np.ndarray]


def hash_random(value: float) -> float:
    """Single sine-hash sample in [0, 1)."""

    x = math.sin(value) * 10000.0
    return x - math.floor(x)


def seeded_random(seed: float) -> Callable[[], float]:
    """Return a generator of pseudo-random floats in [0, 1) for ``seed``."""

    state = float(seed)

    def next_value() -> float:
        nonlocal state
        state = math.sin(state) * 10000.0
        return state - math.floor(state)

    return next_value


def _fade(t: ArrayLike) -> ArrayLike:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(t: ArrayLike, a: ArrayLike, b: ArrayLike) -> ArrayLike:
    return a + t * (b - a)


def _grad(hash_value: int, x: float, y: float) -> float:
    h = hash_value & 3
    u = x if h < 2 else y
    v = y if h < 2 else x
    return (u if (h & 1) == 0 else -u) + (v if (h & 2) == 0 else -v)


def _grad_array(hash_value: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    h = hash_value & 3
    low = h < 2
    u = np.where(low, x, y)
    v = np.where(low, y, x)
    return np.where((h & 1) == 0, u, -u) + np.where((h & 2) == 0, v, -v)


class PerlinNoise:
    """2D improved gradient noise with a seedable permutation table."""

    def __init__(self, seed: float) -> None:
        self.seed = seed
        permutation = list(range(256))
        random = seeded_random(seed)
        for i in range(255, 0, -1):
            j = int(math.floor(random() * (i + 1)))
            permutation[i], permutation[j] = permutation[j], permutation[i]
        self._permutation = tuple(permutation)
        self._p = permutation + permutation
        self._p_array = np.array(self._p, dtype=np.int64)

    @property
    def permutation(self) -> tuple[int, ...]:
        return self._permutation

    def noise(self, x: ArrayLike, y: ArrayLike) -> ArrayLike:
        """Sample noise at ``(x, y)``; accepts scalars or numpy arrays."""

        if np.isscalar(x) and np.isscalar(y):
            return self._noise_scalar(float(x), float(y))
        x_arr, y_arr = np.broadcast_arrays(
            np.asarray(x, dtype=float), np.asarray(y, dtype=float)
        )
        return self._noise_array(x_arr, y_arr)

    __call__ = noise

    def _noise_scalar(self, x: float, y: float) -> float:
        p = self._p
        xf = math.floor(x)
        yf = math.floor(y)
        X = int(xf) & 255
        Y = int(yf) & 255
        x -= xf
        y -= yf
        u = _fade(x)
        v = _fade(y)

        a = p[X] + Y
        aa = p[a]
        ab = p[a + 1]
        b = p[X + 1] + Y
        ba = p[b]
        bb = p[b + 1]

        return _lerp(
            v,
            _lerp(u, _grad(p[aa], x, y), _grad(p[ba], x - 1, y)),
            _lerp(u, _grad(p[ab], x, y - 1), _grad(p[bb], x - 1, y - 1)),
        )

    def _noise_array(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        p = self._p_array
        xf = np.floor(x)
        yf = np.floor(y)
        X = xf.astype(np.int64) & 255
        Y = yf.astype(np.int64) & 255
        x = x - xf
        y = y - yf
        u = _fade(x)
        v = _fade(y)

        a = p[X] + Y
        aa = p[a]
        ab = p[a + 1]
        b = p[X + 1] + Y
        ba = p[b]
        bb = p[b + 1]

        return _lerp(
            v,
            _lerp(u, _grad_array(p[aa], x, y), _grad_array(p[ba], x - 1, y)),
            _lerp(u, _grad_array(p[ab], x, y - 1), _grad_array(p[bb], x - 1, y - 1)),
        )


def noise(seed: float) -> Callable[[ArrayLike, ArrayLike], ArrayLike]:
    """Functional form: ``noise(seed)(x, y)``."""

    return PerlinNoise(seed).noise


def octave_noise(
    source: PerlinNoise | Callable[[ArrayLike, ArrayLike], ArrayLike],
    x: ArrayLike,
    y: ArrayLike,
    octaves: int,
    persistence: float,
) -> ArrayLike:
    """Sum ``octaves`` layers of doubling frequency, normalised to [-1, 1]."""

    if octaves < 1:
        raise ValueError("octaves must be at least 1")
    sample = source.noise if isinstance(source, PerlinNoise) else source

    total: ArrayLike = 0.0
    frequency = 1.0
    amplitude = 1.0
    max_value = 0.0
    for _ in range(octaves):
        total = total + sample(x * frequency, y * frequency) * amplitude
        max_value += amplitude
        amplitude *= persistence
        frequency *= 2.0

    result = total / max_value
    if np.isscalar(result):
        return max(-1.0, min(1.0, float(result)))
    return np.clip(result, -1.0, 1.0)


__all__ = ["PerlinNoise", "hash_random", "noise", "octave_noise", "seeded_random"]
