# flapper/game/collision.py
from __future__ import annotations
from typing import Iterable, Optional
from .config import HEIGHT, GROUND_HEIGHT, PIPE_WIDTH
from .level import Obstacle
from .player import Actor

GROUND = "ground"
CEILING = "ceiling"
OBSTACLE = "obstacle"


def hits_ground(actor: Actor) -> bool:
    return actor.y + actor.height >= HEIGHT - GROUND_HEIGHT


def hits_ceiling(actor: Actor) -> bool:
    return actor.y <= 0


def overlaps_x(actor: Actor, ob: Obstacle) -> bool:
    return actor.x + actor.width > ob.world_x and actor.x < ob.world_x + PIPE_WIDTH


def hits_obstacle(actor: Actor, ob: Obstacle) -> bool:
    """Box vs pipe pair: inside the pipe columns and outside the gap."""
    if not overlaps_x(actor, ob):
        return False
    return actor.y < ob.gap_top or actor.y + actor.height > ob.gap_bottom


def detect_collision(actor: Actor, obstacles: Iterable[Obstacle],
                     autopilot_active: bool = False) -> Optional[str]:
    """
    Returns the death cause ("ground" | "ceiling" | "obstacle") or None.
    Autopilot makes the actor immune to obstacles, never to ground or ceiling.
    Reads its inputs only.
    """
    if hits_ground(actor):
        return GROUND
    if hits_ceiling(actor):
        return CEILING
    if autopilot_active:
        return None
    for ob in obstacles:
        if hits_obstacle(actor, ob):
            return OBSTACLE
    return None
