"""
Numeric helpers used by the revenue predictor.

The sampler takes any object exposing ``random() -> float`` in [0, 1):
``random.Random(seed)`` in tests, ``random.SystemRandom()`` in production.
"""

from __future__ import annotations

import math
import random
from typing import Optional, Protocol


class RandomSource(Protocol):
    def random(self) -> float: ...


def make_random_source(seed: Optional[int] = None) -> RandomSource:
    """Seeded generator when a seed is given, OS entropy otherwise."""
    if seed is None:
        return random.SystemRandom()
    return random.Random(seed)


def gaussian_sample(mean: float, std_dev: float, rng: RandomSource) -> float:
    """
    Box–Muller transform over two uniform draws in (0, 1].

    ``1 - rng.random()`` keeps the first draw away from zero so the log is
    always defined.
    """
    u1 = 1.0 - rng.random()
    u2 = 1.0 - rng.random()
    standard_normal = math.sqrt(-2.0 * math.log(u1)) * math.sin(2.0 * math.pi * u2)
    return mean + std_dev * standard_normal


def clamp(value: float, lower: float, upper: float) -> float:
    return min(upper, max(lower, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))
