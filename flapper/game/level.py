# flapper/game/level.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
from .config import (
    WIDTH, HEIGHT, GROUND_HEIGHT, PIPE_WIDTH, PIPE_SPACING, MIN_HEIGHT,
    GAP_MIN, GAP_MAX, MAX_CENTER_SHIFT, CENTER_SHIFT_RATIO,
    FIRST_OBSTACLE_DELAY_TICKS
)
from .difficulty import gap_band, placement_factor
from .rng import RandomSource, SeededRandom

logger = logging.getLogger(__name__)


@dataclass
class Obstacle:
    """A pipe pair; the open gap spans [gap_top, gap_bottom]."""
    world_x: float
    gap_top: float
    gap_bottom: float
    passed: bool = False

    @property
    def gap_size(self) -> float:
        return self.gap_bottom - self.gap_top

    @property
    def gap_center(self) -> float:
        return (self.gap_top + self.gap_bottom) / 2

    @property
    def right(self) -> float:
        return self.world_x + PIPE_WIDTH


def next_ahead(obstacles: Iterable[Obstacle], actor_x: float) -> Optional[Obstacle]:
    """First obstacle not yet passed whose trailing edge is still at or past actor_x."""
    for ob in obstacles:
        if not ob.passed and ob.right >= actor_x:
            return ob
    return None


def _clamp(v: float, lo: float, hi: float) -> float:
    return lo if v < lo else (hi if v > hi else v)


def safe_zone(score: int) -> Tuple[float, float]:
    """(start, end) of the band where a gap center may be placed."""
    play_top = float(MIN_HEIGHT)
    play_bottom = float(HEIGHT - GROUND_HEIGHT - MIN_HEIGHT)
    play_h = play_bottom - play_top
    zone_h = play_h * placement_factor(score)
    start = play_top + (play_h - zone_h) / 2
    return start, start + zone_h


class ObstacleGenerator:
    """
    Produces the next obstacle from the score and the previous obstacle.
    Every derived value is clamped, so the output always fits the viewport.
    """
    def __init__(self, rng: RandomSource):
        self.rng = rng

    def gap_for(self, score: int) -> float:
        base_gap, variance = gap_band(score)
        jitter = self.rng.uniform(-1.0, 1.0)
        return _clamp(base_gap + jitter * variance, GAP_MIN, GAP_MAX)

    def center_for(self, score: int, previous: Optional[Obstacle]) -> float:
        start, end = safe_zone(score)
        if previous is None:
            return start + self.rng.random() * (end - start)

        # bounded drift from the previous gap keeps the path flyable
        max_shift = min(MAX_CENTER_SHIFT, CENTER_SHIFT_RATIO * (end - start))
        prev_c = previous.gap_center
        lo = max(start, prev_c - max_shift)
        hi = min(end, prev_c + max_shift)
        if lo > hi:
            lo = hi = _clamp(prev_c, start, end)
        return lo + self.rng.random() * (hi - lo)

    def generate(self, score: int, previous: Optional[Obstacle] = None) -> Obstacle:
        gap = self.gap_for(score)
        center = self.center_for(score, previous)
        max_top = HEIGHT - gap - MIN_HEIGHT - GROUND_HEIGHT
        top = _clamp(center - gap / 2, float(MIN_HEIGHT), max_top)
        return Obstacle(world_x=float(WIDTH), gap_top=top, gap_bottom=top + gap)


class ObstacleField:
    """
    Ordered ribbon of obstacles scrolling left.
    The first spawn is a scheduled event (due tick); afterwards a new
    obstacle appears every PIPE_SPACING px of travel.
    """
    def __init__(self, rng: RandomSource | None = None,
                 first_delay_ticks: int = FIRST_OBSTACLE_DELAY_TICKS):
        self.rng = rng if rng is not None else SeededRandom()
        self.generator = ObstacleGenerator(self.rng)
        self.first_delay_ticks = int(first_delay_ticks)
        self.obstacles: List[Obstacle] = []
        self.last_spawned: Optional[Obstacle] = None
        self._spawn_cursor: float | None = None   # x of the last spawn, scrolled with the world
        self._first_due_tick: int = self.first_delay_ticks

    def reset(self, now_tick: int = 0):
        self.obstacles = []
        self.last_spawned = None
        self._spawn_cursor = None
        self._first_due_tick = now_tick + self.first_delay_ticks

    def advance(self, speed: float, actor_x: float) -> List[Obstacle]:
        """
        Scroll every obstacle, flag the ones whose trailing edge crossed
        actor_x, and cull the ones fully off the left edge.
        Returns the obstacles that became passed on this call.
        """
        newly_passed: List[Obstacle] = []
        for ob in self.obstacles:
            ob.world_x -= speed
            if not ob.passed and ob.world_x + PIPE_WIDTH < actor_x:
                ob.passed = True
                newly_passed.append(ob)

        self.obstacles = [ob for ob in self.obstacles if ob.world_x + PIPE_WIDTH >= 0]
        return newly_passed

    def maybe_spawn(self, tick: int, score: int, speed: float) -> Optional[Obstacle]:
        """Spawn if the schedule says so. Call once per playing tick, after advance()."""
        spawned = None
        if self._spawn_cursor is None:
            if tick < self._first_due_tick:
                return None
            spawned = self._spawn(score)
        elif self._spawn_cursor - speed <= WIDTH - PIPE_SPACING:
            spawned = self._spawn(score)
        # the cursor scrolls on every scheduled tick, spawn ticks included
        self._spawn_cursor -= speed
        return spawned

    def _spawn(self, score: int) -> Obstacle:
        ob = self.generator.generate(score, self.last_spawned)
        self.obstacles.append(ob)
        self.last_spawned = ob
        self._spawn_cursor = float(WIDTH)
        logger.debug(f"Spawned obstacle gap=[{ob.gap_top:.1f}, {ob.gap_bottom:.1f}] score={score}")
        return ob
