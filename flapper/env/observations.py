# flapper/env/observations.py
from __future__ import annotations
import numpy as np

from flapper.game.config import (
    WIDTH, HEIGHT, GROUND_HEIGHT, ACTOR_H, PIPE_WIDTH, MAX_VY, MAX_SPEED_MULTIPLIER
)
from flapper.game.level import next_ahead
from flapper.game.session import RenderSnapshot

OBS_SIZE = 7
OBS_LOW = np.zeros(OBS_SIZE, dtype=np.float32)
OBS_LOW[1] = -1.0
OBS_HIGH = np.ones(OBS_SIZE, dtype=np.float32)


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else (1.0 if x > 1.0 else x)



def build_observation(snap: RenderSnapshot) -> np.ndarray:
    """
    Returns (7,) float32:
      [y_norm, vy_norm, dx_next, gap_top, gap_bottom, autopilot, speed]
    - y_norm: actor top over the flyable height, in [0,1]
    - vy_norm: vy clipped to [-MAX_VY, MAX_VY], scaled to [-1,1]
    - dx_next: distance from the actor to the trailing edge of the next pipe, 1.0 if none
    - gap_top/gap_bottom: next gap bounds over HEIGHT (open sky when none)
    - autopilot: 1.0 while engaged
    - speed: speed multiplier mapped from [1, MAX] to [0,1]
    """
    a = snap.actor
    flyable = max(1.0, HEIGHT - GROUND_HEIGHT - ACTOR_H)
    y_norm = _clamp01(a.y / flyable)
    vy_norm = max(-1.0, min(1.0, a.vy / MAX_VY))

    ob = next_ahead(snap.obstacles, a.x)
    if ob is None:
        dx = 1.0
        gap_top = 0.0
        gap_bot = (HEIGHT - GROUND_HEIGHT) / HEIGHT
    else:
        dx = _clamp01((ob.right - a.x) / (WIDTH + PIPE_WIDTH))
        gap_top = _clamp01(ob.gap_top / HEIGHT)
        gap_bot = _clamp01(ob.gap_bottom / HEIGHT)

    speed = _clamp01((snap.speed_multiplier - 1.0) / max(1e-6, MAX_SPEED_MULTIPLIER - 1.0))
    autopilot = 1.0 if snap.autopilot.active else 0.0

    return np.array([y_norm, vy_norm, dx, gap_top, gap_bot, autopilot, speed], dtype=np.float32)
