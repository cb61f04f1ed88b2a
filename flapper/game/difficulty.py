# flapper/game/difficulty.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple
from .config import (
    BASE_GRAVITY, BASE_FLAP_IMPULSE, BASE_SCROLL_SPEED,
    MAX_SPEED_MULTIPLIER, SPEED_STEP_SCORE, SPEED_STEP,
    GAP_BANDS, PLACEMENT_BANDS
)


@dataclass(frozen=True)
class DifficultyParams:
    """Physics parameters derived from the score. Never stored on their own."""
    score: int
    speed_multiplier: float
    gravity: float
    flap_impulse: float
    scroll_speed: float


def speed_multiplier(score: int) -> float:
    steps = max(0, int(score)) // SPEED_STEP_SCORE
    return min(1.0 + steps * SPEED_STEP, MAX_SPEED_MULTIPLIER)


def params_for_score(score: int) -> DifficultyParams:
    m = speed_multiplier(score)
    return DifficultyParams(
        score=int(score),
        speed_multiplier=m,
        gravity=BASE_GRAVITY * m,
        flap_impulse=BASE_FLAP_IMPULSE * m,
        scroll_speed=BASE_SCROLL_SPEED * m,
    )


def gap_band(score: int) -> Tuple[float, float]:
    """(base_gap, gap_variance) for the band containing `score`."""
    for upper, base_gap, variance in GAP_BANDS:
        if upper is None or score <= upper:
            return base_gap, variance
    # table always ends with an open row
    raise LookupError(f"no gap band for score {score}")


def placement_factor(score: int) -> float:
    """Share of the play band where a gap center may land."""
    for below, factor in PLACEMENT_BANDS:
        if below is None or score < below:
            return factor
    raise LookupError(f"no placement band for score {score}")
