# flapper/game/rng.py
from __future__ import annotations
import random
from typing import Protocol


class RandomSource(Protocol):
    """Uniform random source used for obstacle placement."""

    def random(self) -> float: ...

    def uniform(self, a: float, b: float) -> float: ...


class SeededRandom:
    """
    Seeded wrapper around random.Random.
    seed=None picks a fresh seed and keeps it in `.seed` so a run can be replayed.
    """
    def __init__(self, seed: int | None = None):
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)
