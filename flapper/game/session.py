"""
Session state machine for one player at the machine.

Phases:
    START: waiting for a player name
    READY: actor shown, world frozen until the first flap
    PLAYING: physics, obstacles, scoring, collisions and autopilot run
    GAME_OVER: world frozen, score committed, waiting for a restart

One call to tick() is one atomic simulation step. Inputs (flap, start,
restart, cheat keys) mutate the session synchronously when applied.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Callable, List, Optional, Tuple

from .autopilot import Autopilot, CheatCodeMatcher, decide_flap
from .collision import detect_collision
from .config import FIRST_OBSTACLE_DELAY_TICKS
from .difficulty import DifficultyParams, params_for_score
from .leaderboard import LeaderboardStore, MemoryStore
from .level import Obstacle, ObstacleField
from .player import Actor, apply_gravity, flap as flap_actor
from .rng import RandomSource, SeededRandom

logger = logging.getLogger(__name__)

CUE_FLAP = "flap"
CUE_SCORE = "score"
CUE_GAME_OVER = "game_over"

CAUSE_ERROR = "error"


class Phase(Enum):
    START = auto()
    READY = auto()
    PLAYING = auto()
    GAME_OVER = auto()


class InvalidPlayerName(ValueError):
    """Raised by start_session() for an empty or blank name."""


@dataclass(frozen=True)
class RenderSnapshot:
    """Detached copy of everything a renderer needs for one frame."""
    actor: Actor
    obstacles: Tuple[Obstacle, ...]
    score: int
    phase: Phase
    autopilot: Autopilot
    high_score: int
    player_name: Optional[str]
    tick: int
    death_cause: Optional[str]
    speed_multiplier: float


CueListener = Callable[[str], None]
PhaseListener = Callable[[Phase, Phase], None]


class GameSession:
    """
    Owns the actor, the obstacle field, the score and the autopilot, and
    drives them through the phase machine.

    Audio cues ("flap", "score", "game_over") and phase changes are
    published to listeners as fire-and-forget notifications.
    """

    VALID_TRANSITIONS = {
        (Phase.START, Phase.READY),
        (Phase.READY, Phase.PLAYING),
        (Phase.PLAYING, Phase.GAME_OVER),
        (Phase.GAME_OVER, Phase.READY),
    }

    def __init__(self,
                 leaderboard: LeaderboardStore | None = None,
                 rng: RandomSource | None = None,
                 seed: int | None = None,
                 first_delay_ticks: int = FIRST_OBSTACLE_DELAY_TICKS):
        self.rng = rng if rng is not None else SeededRandom(seed)
        self.leaderboard = leaderboard if leaderboard is not None else LeaderboardStore(MemoryStore())
        self.field = ObstacleField(self.rng, first_delay_ticks=first_delay_ticks)
        self.actor = Actor()
        self.autopilot = Autopilot()
        self.cheat = CheatCodeMatcher()
        self.params: DifficultyParams = params_for_score(0)

        self.phase = Phase.START
        self.player_name: Optional[str] = None
        self.score = 0
        self.tick_count = 0          # playing ticks since the last READY
        self.death_cause: Optional[str] = None

        self._cue_listeners: List[CueListener] = []
        self._phase_listeners: List[PhaseListener] = []

    # -------------------- Listeners --------------------

    def add_cue_listener(self, callback: CueListener) -> Callable[[], None]:
        """Subscribe to audio cues. Returns an unsubscribe function."""
        self._cue_listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._cue_listeners:
                self._cue_listeners.remove(callback)

        return unsubscribe

    def add_phase_listener(self, callback: PhaseListener) -> Callable[[], None]:
        self._phase_listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._phase_listeners:
                self._phase_listeners.remove(callback)

        return unsubscribe

    def _emit(self, cue: str):
        for listener in list(self._cue_listeners):
            try:
                listener(cue)
            except Exception as e:
                logger.error(f"Error in cue listener for {cue!r}: {e}")

    # -------------------- Phase machine --------------------

    @property
    def obstacles(self) -> List[Obstacle]:
        return self.field.obstacles

    @property
    def high_score(self) -> int:
        return self.leaderboard.high_score

    def can_transition(self, to_phase: Phase) -> bool:
        return (self.phase, to_phase) in self.VALID_TRANSITIONS

    def _transition(self, to_phase: Phase) -> bool:
        if not self.can_transition(to_phase):
            logger.warning(f"Invalid transition: {self.phase.name} -> {to_phase.name}")
            return False

        old_phase = self.phase
        self.phase = to_phase
        logger.info(f"Session transition: {old_phase.name} -> {to_phase.name}")

        for listener in list(self._phase_listeners):
            try:
                listener(old_phase, to_phase)
            except Exception as e:
                logger.error(f"Error in phase listener: {e}")
        return True

    def _enter_ready(self) -> bool:
        if not self.can_transition(Phase.READY):
            logger.warning(f"Cannot get ready from {self.phase.name}")
            return False
        # wipe everything scoped to one play-through
        self.actor.reset()
        self.field.reset(now_tick=0)
        self.score = 0
        self.params = params_for_score(0)
        self.autopilot.reset()
        self.cheat.reset()
        self.tick_count = 0
        self.death_cause = None
        return self._transition(Phase.READY)

    # -------------------- Inputs --------------------

    def start_session(self, name: str) -> bool:
        """START -> READY for `name`. Blank names raise InvalidPlayerName and change nothing."""
        if self.phase != Phase.START:
            logger.warning(f"start_session ignored in {self.phase.name}")
            return False
        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidPlayerName("player name must not be empty")
        self.player_name = cleaned
        return self._enter_ready()

    def restart(self) -> bool:
        """GAME_OVER -> READY, keeping the player name."""
        if self.phase != Phase.GAME_OVER:
            logger.warning(f"restart ignored in {self.phase.name}")
            return False
        return self._enter_ready()

    def flap(self) -> bool:
        """
        Player flap. In READY it also starts play. Ignored while the
        autopilot flies and outside READY/PLAYING.
        Returns True if the input was consumed.
        """
        if self.phase == Phase.READY:
            self._transition(Phase.PLAYING)
            if not self.autopilot.active:
                self._do_flap()
            return True
        if self.phase == Phase.PLAYING:
            if self.autopilot.active:
                logger.debug("Manual flap ignored while autopilot is engaged")
                return False
            self._do_flap()
            return True
        return False

    def cheat_key(self, letter: str) -> bool:
        """Feed one key to the cheat matcher. Returns True if it engaged the autopilot."""
        if not self.cheat.feed(letter):
            return False
        if self.phase not in (Phase.READY, Phase.PLAYING):
            logger.info(f"Cheat key accepted in {self.phase.name}, nothing to pilot")
            return False
        self.autopilot.activate()
        return True

    def _do_flap(self):
        flap_actor(self.actor, self.params.flap_impulse)
        self._emit(CUE_FLAP)

    # -------------------- Simulation --------------------

    def tick(self) -> Phase:
        """
        Advance one frame. Does nothing outside PLAYING.
        Nothing raised inside the step escapes: it ends the session instead.
        """
        if self.phase != Phase.PLAYING:
            return self.phase
        try:
            self._step()
        except Exception:
            logger.exception("Simulation step failed, forcing game over")
            self.death_cause = CAUSE_ERROR
            self._game_over()
        return self.phase

    def _step(self):
        self.tick_count += 1

        if self.autopilot.active and decide_flap(self.actor, self.field.obstacles):
            self._do_flap()

        apply_gravity(self.actor, self.params.gravity)

        for _ in self.field.advance(self.params.scroll_speed, self.actor.x):
            self._on_obstacle_passed()

        self.field.maybe_spawn(self.tick_count, self.score, self.params.scroll_speed)

        cause = detect_collision(self.actor, self.field.obstacles, self.autopilot.active)
        if cause is not None:
            self.death_cause = cause
            self._game_over()

    def _on_obstacle_passed(self):
        self.score += 1
        # difficulty only steps here, never per tick
        self.params = params_for_score(self.score)
        self.autopilot.on_obstacle_passed()
        self._emit(CUE_SCORE)

    def _game_over(self):
        if not self._transition(Phase.GAME_OVER):
            return
        logger.info(f"Game over for {self.player_name}: score={self.score} cause={self.death_cause}")
        try:
            if self.player_name:
                self.leaderboard.add(self.player_name, self.score)
            if self.leaderboard.record_high_score(self.score):
                logger.info(f"New high score: {self.score}")
        except Exception as e:
            logger.error(f"Could not commit score: {e}")
        self._emit(CUE_GAME_OVER)

    def snapshot(self) -> RenderSnapshot:
        return RenderSnapshot(
            actor=replace(self.actor),
            obstacles=tuple(replace(ob) for ob in self.field.obstacles),
            score=self.score,
            phase=self.phase,
            autopilot=replace(self.autopilot),
            high_score=self.high_score,
            player_name=self.player_name,
            tick=self.tick_count,
            death_cause=self.death_cause,
            speed_multiplier=self.params.speed_multiplier,
        )
