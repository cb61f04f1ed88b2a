import pytest

from flapper.game.config import (
    HEIGHT, GROUND_HEIGHT, ACTOR_H, BASE_FLAP_IMPULSE, AUTOPILOT_OBSTACLES
)
from flapper.game.leaderboard import LeaderboardStore, MemoryStore
from flapper.game.level import Obstacle
from flapper.game.session import GameSession, InvalidPlayerName, Phase

NO_SPAWN = 10**9


def make_session(**kw):
    kw.setdefault("seed", 1234)
    kw.setdefault("first_delay_ticks", NO_SPAWN)
    return GameSession(**kw)


def playing_session(**kw):
    s = make_session(**kw)
    s.start_session("ada")
    s.flap()
    s.actor.y, s.actor.vy = 300.0, 0.0
    return s


def record_cues(session):
    cues = []
    session.add_cue_listener(cues.append)
    return cues


def test_blank_name_is_rejected_without_side_effects():
    s = make_session()
    for bad in ("", "   ", None):
        with pytest.raises(InvalidPlayerName):
            s.start_session(bad)
    assert s.phase == Phase.START
    assert s.player_name is None


def test_start_goes_to_ready_and_freezes_world():
    s = make_session()
    assert s.start_session("  ada  ") is True
    assert s.phase == Phase.READY
    assert s.player_name == "ada"

    y = s.actor.y
    for _ in range(10):
        assert s.tick() == Phase.READY
    assert s.actor.y == y
    assert s.start_session("bob") is False


def test_first_flap_starts_play_and_flaps():
    s = make_session()
    cues = record_cues(s)
    s.start_session("ada")
    assert s.flap() is True
    assert s.phase == Phase.PLAYING
    assert s.actor.vy == BASE_FLAP_IMPULSE
    assert cues == ["flap"]


def test_flap_ignored_outside_ready_and_playing():
    s = make_session()
    assert s.flap() is False
    assert s.phase == Phase.START


def test_gravity_tick_inside_session():
    s = playing_session()
    s.actor.y, s.actor.vy = 200.0, 0.0
    s.tick()
    assert s.actor.vy == pytest.approx(0.2)
    assert s.actor.y == pytest.approx(200.2)


def test_ground_collision_ends_game_and_persists_score():
    store = MemoryStore()
    s = playing_session(leaderboard=LeaderboardStore(store))
    cues = record_cues(s)
    s.score = 3
    s.actor.y = HEIGHT - GROUND_HEIGHT - ACTOR_H - 0.1
    s.actor.vy = 1.0

    assert s.tick() == Phase.GAME_OVER
    assert s.death_cause == "ground"
    assert cues == ["game_over"]
    entries = s.leaderboard.entries
    assert [(e.name, e.score) for e in entries] == [("ada", 3)]
    assert s.high_score == 3
    assert store.get("flapper.leaderboard")[0]["score"] == 3

    # frozen after game over
    y = s.actor.y
    s.tick()
    assert s.actor.y == y


def test_passing_an_obstacle_scores_exactly_once():
    s = playing_session()
    cues = record_cues(s)
    ob = Obstacle(world_x=20.5, gap_top=250.0, gap_bottom=400.0)
    s.field.obstacles = [ob]

    s.tick()
    assert ob.passed
    assert s.score == 1
    assert cues == ["score"]

    for _ in range(5):
        s.tick()
    assert s.score == 1
    assert s.phase == Phase.PLAYING


def test_difficulty_only_steps_on_passes():
    s = playing_session()
    s.score = 50
    s.tick()
    # score changed behind its back: parameters are not recomputed per tick
    assert s.params.speed_multiplier == 1.0

    s.score = 9
    s.field.obstacles = [Obstacle(world_x=20.5, gap_top=250.0, gap_bottom=400.0)]
    s.tick()
    assert s.score == 10
    assert s.params.speed_multiplier == pytest.approx(1.03)
    assert s.params.gravity == pytest.approx(0.2 * 1.03)


def test_cheat_code_engages_autopilot():
    s = playing_session()
    assert s.cheat_key("b") is True
    assert s.autopilot.active
    assert s.autopilot.remaining == AUTOPILOT_OBSTACLES
    assert s.cheat.index == 1


def test_each_correct_cheat_key_refills_autopilot():
    s = playing_session()
    s.cheat_key("b")
    s.autopilot.remaining = 3
    assert s.cheat_key("x") is False
    assert s.autopilot.remaining == 3
    assert s.cheat_key("u") is True
    assert s.autopilot.remaining == AUTOPILOT_OBSTACLES
    assert s.cheat.index == 2


def test_cheat_code_before_start_does_nothing():
    s = make_session()
    assert [s.cheat_key(k) for k in "butter"] == [False] * 6
    assert not s.autopilot.active


def test_manual_flap_ignored_while_autopilot_flies():
    s = playing_session()
    s.autopilot.activate()
    s.actor.vy = 1.5
    assert s.flap() is False
    assert s.actor.vy == 1.5


def test_autopilot_is_immune_to_obstacles_but_not_ground():
    s = playing_session()
    s.autopilot.activate()
    s.field.obstacles = [Obstacle(world_x=70.0, gap_top=400.0, gap_bottom=480.0)]
    assert s.tick() == Phase.PLAYING

    # deep enough that the emergency flap cannot lift it clear in one tick
    s.actor.y = HEIGHT - GROUND_HEIGHT
    s.actor.vy = 0.0
    assert s.tick() == Phase.GAME_OVER
    assert s.death_cause == "ground"


def test_obstacles_are_lethal_without_autopilot():
    s = playing_session()
    s.field.obstacles = [Obstacle(world_x=70.0, gap_top=400.0, gap_bottom=480.0)]
    assert s.tick() == Phase.GAME_OVER
    assert s.death_cause == "obstacle"


def test_autopilot_hands_back_control_after_fifteen_passes():
    s = playing_session()
    s.autopilot.activate()
    for i in range(AUTOPILOT_OBSTACLES):
        assert s.autopilot.active
        s.actor.y, s.actor.vy = 300.0, 0.0
        s.field.obstacles = [Obstacle(world_x=19.5, gap_top=250.0, gap_bottom=400.0)]
        s.tick()
        assert s.score == i + 1
    assert not s.autopilot.active
    assert s.phase == Phase.PLAYING

    s.actor.vy = 0.0
    assert s.flap() is True
    assert s.actor.vy < 0


def test_restart_resets_session_state():
    s = playing_session()
    for k in "but":
        s.cheat_key(k)
    s.autopilot.activate()
    s.score = 4
    s.field.obstacles = [Obstacle(world_x=300.0, gap_top=250.0, gap_bottom=400.0)]
    s.actor.y = -5.0
    s.tick()
    assert s.phase == Phase.GAME_OVER

    assert s.restart() is True
    assert s.phase == Phase.READY
    assert s.score == 0
    assert s.obstacles == []
    assert not s.autopilot.active
    assert s.cheat.index == 0
    assert s.actor.vy == 0.0
    assert s.player_name == "ada"
    assert s.params.speed_multiplier == 1.0


def test_restart_only_from_game_over():
    s = playing_session()
    assert s.restart() is False
    assert s.phase == Phase.PLAYING


def test_high_score_never_decreases_across_sessions():
    s = playing_session()
    s.score = 7
    s.actor.y = -5.0
    s.tick()
    assert s.high_score == 7

    s.restart()
    s.flap()
    s.score = 2
    s.actor.y = -5.0
    s.tick()
    assert s.phase == Phase.GAME_OVER
    assert s.high_score == 7
    assert [e.score for e in s.leaderboard.entries] == [7, 2]


def test_errors_inside_a_tick_force_game_over(monkeypatch):
    s = playing_session()

    def boom(*_args, **_kw):
        raise RuntimeError("bad obstacle state")

    monkeypatch.setattr(s.field, "advance", boom)
    assert s.tick() == Phase.GAME_OVER
    assert s.death_cause == "error"
    assert s.leaderboard.entries[0].name == "ada"


def test_listener_failures_do_not_break_the_game():
    s = make_session()

    def bad_listener(_cue):
        raise RuntimeError("speaker unplugged")

    s.add_cue_listener(bad_listener)
    s.add_phase_listener(lambda old, new: 1 / 0)
    s.start_session("ada")
    assert s.flap() is True
    assert s.phase == Phase.PLAYING


def test_unsubscribe_stops_cues():
    s = make_session()
    cues = []
    unsubscribe = s.add_cue_listener(cues.append)
    s.start_session("ada")
    unsubscribe()
    s.flap()
    assert cues == []


def test_snapshot_is_detached():
    s = playing_session()
    s.field.obstacles = [Obstacle(world_x=300.0, gap_top=250.0, gap_bottom=400.0)]
    snap = s.snapshot()
    snap.actor.y = -999.0
    snap.obstacles[0].world_x = -999.0
    assert s.actor.y == 300.0
    assert s.obstacles[0].world_x == 300.0
    assert snap.phase == Phase.PLAYING
    assert snap.player_name == "ada"


def test_score_is_monotonic_over_long_runs():
    for seed in (1, 2, 3):
        s = GameSession(seed=seed)
        s.start_session("bot")
        s.flap()
        for k in "butter":
            s.cheat_key(k)
        last = 0
        for t in range(3000):
            if s.tick() != Phase.PLAYING:
                break
            assert s.score >= last
            last = s.score


def test_same_seed_same_obstacles():
    def run(seed):
        s = GameSession(seed=seed, first_delay_ticks=1)
        s.start_session("bot")
        s.flap()
        s.autopilot.activate(obstacles=10**6)
        for _ in range(600):
            s.tick()
        return [(ob.world_x, ob.gap_top, ob.gap_bottom) for ob in s.obstacles], s.score

    assert run(99) == run(99)
