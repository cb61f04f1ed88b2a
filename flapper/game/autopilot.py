# flapper/game/autopilot.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, Optional
from .config import (
    HEIGHT, GROUND_HEIGHT, CHEAT_CODE, AUTOPILOT_OBSTACLES,
    AUTOPILOT_CEILING_MARGIN, AUTOPILOT_GROUND_MARGIN, AUTOPILOT_BUFFER_ZONE
)
from .level import Obstacle, next_ahead
from .player import Actor

logger = logging.getLogger(__name__)


class CheatCodeMatcher:
    """
    Position-by-position matcher over a fixed symbol sequence.
    - a key equal to the expected symbol advances the index (wrapping around)
      and reports a match, so every correct key (re)engages the autopilot
    - a wrong key is ignored: progress is kept, not reset
    Only reset() (new session) clears the index.
    """
    def __init__(self, code: str = CHEAT_CODE):
        if not code:
            raise ValueError("cheat code must not be empty")
        self.symbols = tuple(code.lower())
        self.index = 0

    def feed(self, key: str) -> bool:
        """Returns True when `key` is the expected next symbol."""
        if not key:
            return False
        if key.lower() != self.symbols[self.index]:
            return False
        self.index = (self.index + 1) % len(self.symbols)
        return True

    def reset(self):
        self.index = 0


@dataclass
class Autopilot:
    """Temporary automatic controller, bounded by a count of obstacles."""
    active: bool = False
    remaining: int = 0

    def activate(self, obstacles: int = AUTOPILOT_OBSTACLES):
        self.active = True
        self.remaining = int(obstacles)
        logger.info(f"Autopilot engaged for {self.remaining} obstacles")

    def on_obstacle_passed(self):
        """Count one passed obstacle; hands control back at zero."""
        if not self.active:
            return
        self.remaining -= 1
        if self.remaining <= 0:
            self.remaining = 0
            self.active = False
            logger.info("Autopilot exhausted, manual control restored")

    def reset(self):
        self.active = False
        self.remaining = 0


def target_y(next_obstacle: Optional[Obstacle]) -> float:
    """Gap center of the next obstacle, or mid-viewport when none is ahead."""
    if next_obstacle is None:
        return HEIGHT / 2
    return next_obstacle.gap_center


def decide_flap(actor: Actor, obstacles: Iterable[Obstacle]) -> bool:
    """
    Steering rule, evaluated once per tick while the autopilot is engaged:
      - near the ceiling: never flap
      - near the ground: always flap
      - otherwise flap when the actor's center is below target + buffer
    """
    if actor.y < AUTOPILOT_CEILING_MARGIN:
        return False
    if actor.y + actor.height > HEIGHT - GROUND_HEIGHT - AUTOPILOT_GROUND_MARGIN:
        return True
    ahead = next_ahead(obstacles, actor.x)
    return actor.center_y > target_y(ahead) + AUTOPILOT_BUFFER_ZONE
