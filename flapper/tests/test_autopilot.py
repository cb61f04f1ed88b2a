import pytest

from flapper.game.autopilot import Autopilot, CheatCodeMatcher, decide_flap
from flapper.game.config import AUTOPILOT_OBSTACLES
from flapper.game.level import Obstacle
from flapper.game.player import Actor


def feed_all(matcher, keys):
    return [matcher.feed(k) for k in keys]


def test_every_correct_key_reports_a_match():
    m = CheatCodeMatcher("butter")
    assert feed_all(m, "butter") == [True] * 6
    assert m.index == 0


def test_wrong_key_keeps_progress():
    m = CheatCodeMatcher("butter")
    assert feed_all(m, "bu") == [True, True]
    assert m.feed("x") is False
    assert m.index == 2
    assert m.feed("t") is True
    assert m.index == 3


def test_out_of_order_key_is_not_a_match():
    m = CheatCodeMatcher("butter")
    assert m.feed("u") is False
    assert m.index == 0


def test_code_wraps_and_matches_again():
    m = CheatCodeMatcher("butter")
    feed_all(m, "butter")
    assert m.feed("B") is True
    assert m.index == 1


def test_reset_clears_progress():
    m = CheatCodeMatcher("butter")
    feed_all(m, "butt")
    m.reset()
    assert m.index == 0
    assert feed_all(m, "er") == [False, False]
    assert m.feed("b") is True


def test_empty_code_rejected():
    with pytest.raises(ValueError):
        CheatCodeMatcher("")


def test_autopilot_exhausts_after_its_obstacles():
    ap = Autopilot()
    ap.activate()
    assert ap.remaining == AUTOPILOT_OBSTACLES == 15
    for _ in range(14):
        ap.on_obstacle_passed()
        assert ap.active
    ap.on_obstacle_passed()
    assert not ap.active
    assert ap.remaining == 0

    # passes while inactive change nothing
    ap.on_obstacle_passed()
    assert ap.remaining == 0


def test_reactivation_refills():
    ap = Autopilot()
    ap.activate()
    for _ in range(10):
        ap.on_obstacle_passed()
    ap.activate()
    assert ap.remaining == 15


def test_emergency_margins():
    high_gap = [Obstacle(world_x=200, gap_top=100, gap_bottom=200)]
    low_gap = [Obstacle(world_x=200, gap_top=350, gap_bottom=480)]
    # close to the ceiling: never flap, even far below a high target would say otherwise
    assert decide_flap(Actor(y=10.0), high_gap) is False
    # close to the ground: always flap, even if the target is lower
    assert decide_flap(Actor(y=440.0), low_gap) is True


def test_tracks_next_gap_center():
    gap = [Obstacle(world_x=200, gap_top=100, gap_bottom=200)]
    assert decide_flap(Actor(y=200.0), gap) is True     # center 212.5 > 150 + 15
    assert decide_flap(Actor(y=100.0), gap) is False    # center 112.5


def test_targets_mid_screen_without_obstacles():
    assert decide_flap(Actor(y=300.0), []) is False     # 312.5 <= 315
    assert decide_flap(Actor(y=310.0), []) is True      # 322.5 > 315


def test_passed_obstacles_are_ignored():
    passed = Obstacle(world_x=0, gap_top=400, gap_bottom=480, passed=True)
    ahead = Obstacle(world_x=200, gap_top=100, gap_bottom=200)
    assert decide_flap(Actor(y=200.0), [passed, ahead]) is True
