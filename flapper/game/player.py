# flapper/game/player.py
from __future__ import annotations
from dataclasses import dataclass
from .config import (
    ACTOR_X, ACTOR_W, ACTOR_H, HEIGHT,
    ROTATION_FACTOR, ROTATION_MIN, ROTATION_MAX
)


@dataclass
class Actor:
    """
    The flapping actor. x never changes, the world scrolls instead.
    y is the TOP of the actor box, vy is positive downward.
    """
    x: float = float(ACTOR_X)
    y: float = HEIGHT / 2
    vy: float = 0.0
    width: float = float(ACTOR_W)
    height: float = float(ACTOR_H)
    rotation: float = 0.0

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def reset(self):
        self.x = float(ACTOR_X)
        self.y = HEIGHT / 2
        self.vy = 0.0
        self.rotation = 0.0


def rotation_for(vy: float) -> float:
    """Display tilt in degrees; has no effect on the simulation."""
    return min(max(vy * ROTATION_FACTOR, ROTATION_MIN), ROTATION_MAX)


def apply_gravity(actor: Actor, gravity: float):
    """One integration step: velocity first, then position. No sub-stepping."""
    actor.vy += gravity
    actor.y += actor.vy
    actor.rotation = rotation_for(actor.vy)


def flap(actor: Actor, impulse: float):
    """Overwrite vertical velocity with the (negative) impulse."""
    actor.vy = impulse
    actor.rotation = rotation_for(actor.vy)
