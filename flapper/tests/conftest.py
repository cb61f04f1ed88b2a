# flapper/tests/conftest.py
from __future__ import annotations
from typing import Sequence
import pytest


class ScriptedRandom:
    """Replays a fixed list of draws in [0,1), cycling."""
    def __init__(self, draws: Sequence[float]):
        self.draws = list(draws)
        self.calls = 0

    def random(self) -> float:
        v = self.draws[self.calls % len(self.draws)]
        self.calls += 1
        return v

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.random()


@pytest.fixture
def scripted_rng():
    return ScriptedRandom
