"""
Measurement noise sources.

The simulator only needs "the next standard-normal deviate"; anything with
a ``next_standard_normal()`` method can be injected.
"""

from typing import Optional, Protocol
import math
import numpy as np


class NoiseSource(Protocol):
    """Producer of independent N(0, 1) deviates."""

    def next_standard_normal(self) -> float:
        ...


class BoxMullerNoise:
    """
    Standard-normal generator using the Box-Muller transform.

    Each deviate consumes two uniform draws from a numpy Generator:

        z = sqrt(-2 ln u1) * cos(2 pi u2),   u1, u2 in (0, 1)

    Seeded instances are reproducible; ``seed=None`` draws entropy from
    the operating system.

    Example:
        >>> noise = BoxMullerNoise(seed=42)
        >>> z = noise.next_standard_normal()
    """

    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self._rng = np.random.default_rng(seed)

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def _uniform_open(self) -> float:
        # Generator.random() is in [0, 1); zero would make log() blow up
        u = 0.0
        while u == 0.0:
            u = float(self._rng.random())
        return u

    def next_standard_normal(self) -> float:
        u1 = self._uniform_open()
        u2 = self._uniform_open()
        return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
