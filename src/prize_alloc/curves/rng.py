"""
Seeded pseudo-random sources for synthetic curve generation.

Curve generation takes any ``RandomSource`` so tests can feed a fixed
sequence and check exact parameter values.
"""

import math
from typing import Protocol

_MASK = 0xFFFFFFFF


class RandomSource(Protocol):
    """Anything that yields uniform floats in [0, 1)."""

    def random(self) -> float:
        ...


def _imul(a: int, b: int) -> int:
    """32-bit integer multiply, wrapping like C unsigned arithmetic."""
    return (a * b) & _MASK


class Mulberry32:
    """
    Mulberry32 generator: 32 bits of state, one uniform per call.

    The stream is a pure function of the seed, so identical seeds give
    identical curve parameters across runs and platforms.

    Example:
        >>> rng = Mulberry32(1337)
        >>> u = rng.random()  # same value on every run
    """

    def __init__(self, seed: int):
        self.seed = seed
        self._state = seed & _MASK

    def random(self) -> float:
        self._state = (self._state + 0x6D2B79F5) & _MASK
        a = self._state
        t = _imul(a ^ (a >> 15), a | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK
        return ((t ^ (t >> 14)) & _MASK) / 4294967296

    def __repr__(self) -> str:
        return f"Mulberry32(seed={self.seed})"


def standard_normal(rng: RandomSource) -> float:
    """
    Draw one standard normal value via Box-Muller.

    Zero uniforms are redrawn because log(0) is undefined.
    """
    u = 0.0
    while u == 0.0:
        u = rng.random()
    v = 0.0
    while v == 0.0:
        v = rng.random()
    return math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)
