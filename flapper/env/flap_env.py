# flapper/env/flap_env.py
from __future__ import annotations
from typing import Optional, Dict, Any
import numpy as np
import gymnasium as gym
import pygame

from flapper.game.config import WIDTH, HEIGHT, FPS
from flapper.game.leaderboard import LeaderboardStore, MemoryStore
from flapper.game.render import draw_world, draw_hud
from flapper.game.session import GameSession, Phase
from flapper.env.observations import build_observation, OBS_LOW, OBS_HIGH


class FlapEnv(gym.Env):
    """
    Flapper Gymnasium environment (vector observations).
    - One simulation tick per frame, 60 frames per second.
    - Agent acts every `frame_skip` frames (default 2) -> 30 decisions/sec.
    - Observation: shape (7,), float32 (see build_observation).
    The episode starts already PLAYING: reset() performs the launch flap.
    """
    metadata = {"render_modes": ["human", "rgb_array"], "render_fps": FPS}

    def __init__(self,
                 render_mode: Optional[str] = None,
                 frame_skip: int = 2,
                 time_limit_seconds: Optional[float] = 60.0,
                 player_name: str = "agent"):
        super().__init__()
        assert frame_skip >= 1, "frame_skip must be >= 1"
        self.render_mode = render_mode
        self.frame_skip = int(frame_skip)
        self.player_name = player_name

        self.time_limit_decisions = None
        if time_limit_seconds is not None:
            self.time_limit_decisions = int(FPS * time_limit_seconds / self.frame_skip)

        # Actions: 0 = NOOP, 1 = FLAP
        self.action_space = gym.spaces.Discrete(2)
        self.observation_space = gym.spaces.Box(low=OBS_LOW, high=OBS_HIGH, dtype=np.float32)

        # --- Runtime state ---
        self.session: Optional[GameSession] = None
        self.timestep: int = 0
        self.current_seed: Optional[int] = None

        # Episodes never touch the player's scores on disk
        self.leaderboard = LeaderboardStore(MemoryStore())

        # Rendering
        self.screen = None
        self.clock = None
        self.font = None

    # -------------------- Core API --------------------

    def reset(self, *, seed: Optional[int] = None, options: Optional[Dict[str, Any]] = None):
        super().reset(seed=seed)  # initializes self.np_random

        # A given seed drives obstacle placement directly; otherwise derive one
        # from np_random so the episode stays reproducible from its info.
        if seed is not None:
            level_seed = int(seed)
        else:
            level_seed = int(self.np_random.integers(0, 2**31 - 1))

        self.session = GameSession(leaderboard=self.leaderboard, seed=level_seed)
        self.session.start_session(self.player_name)
        self.session.flap()

        self.timestep = 0
        self.current_seed = level_seed

        obs = self._get_obs()
        info = {"seed": self.current_seed, "score": 0}
        return obs, info

    def step(self, action: int):
        assert self.action_space.contains(action), f"Invalid action {action}"
        assert self.session is not None

        if int(action) == 1:
            self.session.flap()

        for _ in range(self.frame_skip):
            if self.session.tick() != Phase.PLAYING:
                break

        alive = self.session.phase == Phase.PLAYING
        reward = 1.0 if alive else -1.0

        self.timestep += 1
        terminated = not alive
        truncated = False
        if (self.time_limit_decisions is not None) and (self.timestep >= self.time_limit_decisions):
            truncated = True

        obs = self._get_obs()
        info = {
            "score": self.session.score,
            "timestep": self.timestep,
            "seed": self.current_seed,
            "autopilot": self.session.autopilot.active,
            "death_cause": self.session.death_cause,
        }

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    # -------------------- Helpers --------------------

    def _get_obs(self) -> np.ndarray:
        assert self.session is not None
        obs = build_observation(self.session.snapshot())
        return np.clip(obs, OBS_LOW, OBS_HIGH)

    # -------------------- Rendering --------------------

    def render(self):
        if self.render_mode is None or self.session is None:
            return

        if self.screen is None:
            pygame.init()
            if self.render_mode == "human":
                self.screen = pygame.display.set_mode((WIDTH, HEIGHT))
                pygame.display.set_caption("Flapper — Gym Env")
            else:
                self.screen = pygame.Surface((WIDTH, HEIGHT))
            self.clock = pygame.time.Clock()
            self.font = pygame.font.SysFont("couriernew", 20, bold=True)

        if self.render_mode == "human":
            # Pump the event queue so the OS doesn't think we're hung
            pygame.event.pump()

        snap = self.session.snapshot()
        draw_world(self.screen, snap)
        draw_hud(self.screen, snap, self.font)

        if self.render_mode == "human":
            pygame.display.flip()
            if self.clock is not None:
                self.clock.tick(self.metadata.get("render_fps", FPS))
            return None

        # (H, W, 3) uint8
        arr = pygame.surfarray.array3d(self.screen)  # (W, H, 3)
        return np.transpose(arr, (1, 0, 2))

    def close(self):
        if self.screen is not None:
            if self.render_mode == "human":
                pygame.display.quit()
            pygame.quit()
            self.screen = None
            self.clock = None
            self.font = None
