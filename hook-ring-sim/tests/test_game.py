"""Tests for the attempt state machine and scripted play."""

import pytest

from hookring import config as cfg
from hookring import game, physics
from hookring.config import ConfigError
from hookring.types import (
    FLYING,
    IDLE,
    READY,
    AttemptEndedEvent,
    CapturedEvent,
    GameWonEvent,
    MatchWonEvent,
    ScoredEvent,
    Vec2,
)


def _grab(state):
    """Grab the ring where it currently hangs."""
    pos = physics.ring_position(state.anchor, state.config.rope_length, state.ring.angle)
    return game.begin_drag(state, pos)


def _tick_until(state, predicate, max_frames=600):
    """Tick until an event matching ``predicate`` shows up. Returns (state, all events)."""
    seen = []
    for _ in range(max_frames):
        state, events = game.tick(state)
        seen.extend(events)
        if any(predicate(e) for e in events):
            return state, seen
    raise AssertionError("event never happened")


def _settle_config():
    # Ring hangs straight down and is let go with no speed
    return cfg.update_config(cfg.DEFAULTS, hold_start_angle=0.0, release_scale=0.0)


def test_new_game_is_idle_at_hold():
    """A new game waits in idle with the ring at the hold angle."""
    state = game.create_game()
    assert state.mode == IDLE
    assert state.ring.angle == cfg.DEFAULTS.hold_start_angle
    assert state.ring.ang_vel == 0.0
    assert state.score.server == 1
    assert state.tip == physics.hook_tip(state.anchor, state.config)


def test_ready_only_from_idle():
    """ready() arms from idle; repeated calls are ignored."""
    state = game.ready(game.create_game())
    assert state.mode == READY
    assert game.ready(state) is state

    flying = game.release(state)
    assert game.ready(flying) is flying


def test_release_ignored_outside_ready():
    """Release from idle does nothing."""
    state = game.create_game()
    assert game.release(state) is state


def test_drag_needs_ready_and_a_grab():
    """Drag is ignored in idle and without grabbing the ring first."""
    idle = game.create_game()
    assert game.begin_drag(idle, Vec2(0, 0)) is idle
    assert game.drag_to(idle, 0.3) is idle

    state = game.ready(idle)
    assert game.drag_to(state, 0.3) is state

    far = game.begin_drag(state, Vec2(state.anchor.x, state.anchor.y))
    assert not far.dragging


def test_drag_clamped_to_swing_limit():
    """Dragging to 2.0 rad stores exactly MAX_SWING with zero velocity."""
    state = _grab(game.ready(game.create_game()))
    assert state.dragging

    state = game.drag_to(state, 2.0)
    assert state.ring.angle == 1.55
    assert state.ring.ang_vel == 0.0

    state = game.drag_to(state, -2.0)
    assert state.ring.angle == -1.55


def test_move_drag_follows_pointer():
    """The pointer position is turned into an angle around the anchor."""
    state = _grab(game.ready(game.create_game()))
    point = physics.ring_position(state.anchor, 150, 0.3)
    state = game.move_drag(state, point)
    assert state.ring.angle == pytest.approx(0.3)

    state = game.end_drag(state)
    assert not state.dragging
    assert game.move_drag(state, Vec2(0, 0)) is state


def test_release_velocity_from_hold_angle():
    """Release at the hold angle → velocity clamp(-hold * 0.30, -0.6, 0.6)."""
    state = game.ready(game.create_game())
    state = game.release(state)
    hold = cfg.DEFAULTS.hold_start_angle
    assert state.mode == FLYING
    assert state.ring.ang_vel == pytest.approx(max(-0.6, min(0.6, -hold * 0.30)))
    assert state.attempt_start == state.t
    assert not state.dragging


def test_capture_freezes_then_scores():
    """Capture emits first; the point follows after the settle delay."""
    state = game.release(game.ready(game.create_game()))
    state, events = _tick_until(state, lambda e: isinstance(e, CapturedEvent))
    assert not any(isinstance(e, ScoredEvent) for e in events)
    assert state.latched
    assert state.mode == FLYING
    assert game.snapshot(state).snapped
    assert state.ring.ang_vel == 0.0

    frozen = state.ring.angle
    state, _ = game.tick(state)
    assert state.ring.angle == frozen
    assert game.ready(state) is state

    state, events = _tick_until(state, lambda e: isinstance(e, ScoredEvent))
    scored = [e for e in events if isinstance(e, ScoredEvent)][0]
    ended = [e for e in events if isinstance(e, AttemptEndedEvent)][0]
    assert scored.player == 1
    assert (scored.p1_points, scored.p2_points) == (1, 0)
    assert ended.reason == "captured"
    assert ended.player == 1
    assert state.mode == IDLE
    assert not state.latched
    assert state.score.p1_points == 1
    assert state.score.server == 2
    assert state.ring.angle == cfg.DEFAULTS.hold_start_angle


def test_capture_scores_once_per_attempt():
    """One capture, one point, one attempt end."""
    state, events = game.play_attempt(game.create_game())
    assert sum(isinstance(e, CapturedEvent) for e in events) == 1
    assert sum(isinstance(e, ScoredEvent) for e in events) == 1
    assert sum(isinstance(e, AttemptEndedEvent) for e in events) == 1
    assert state.score.p1_points == 1


def test_settled_attempt_ends_without_score():
    """A ring that just hangs there ends the attempt as settled."""
    state, events = game.play_attempt(game.create_game(_settle_config()))
    ended = [e for e in events if isinstance(e, AttemptEndedEvent)]
    assert [e.reason for e in ended] == ["settled"]
    assert not any(isinstance(e, ScoredEvent) for e in events)
    assert state.score.p1_points == 0
    assert state.score.server == 2
    assert state.mode == IDLE


def test_timeout_attempt():
    """An undamped swing that never reaches the hook times out after 5.5s."""
    config = cfg.update_config(
        cfg.DEFAULTS, damping=1.0, release_scale=0.0, hold_start_angle=0.5, hook_angle=-1.2,
    )
    state, events = game.play_attempt(game.create_game(config))
    ended = [e for e in events if isinstance(e, AttemptEndedEvent)]
    assert [e.reason for e in ended] == ["timeout"]
    assert ended[0].t > cfg.MAX_ATTEMPT_TIME
    assert state.score.server == 2


def test_serve_alternates_every_attempt():
    """Misses or not, the turn passes after each attempt."""
    state = game.create_game(_settle_config())
    servers = []
    for _ in range(4):
        state, _ = game.play_attempt(state)
        servers.append(state.score.server)
    assert servers == [2, 1, 2, 1]


def test_game_loser_serves_next_game():
    """After a game the loser starts the next one."""
    result = game.play_match([0.95], [0.0], target=3, best_of=3)
    assert result.winner == 1
    assert (result.p1_sets, result.p2_sets) == (2, 0)
    # Game one: P1, P2, P1, P2, P1 → 3-0, then P2 opens game two
    assert [a.player for a in result.attempts[:6]] == [1, 2, 1, 2, 1, 2]
    assert result.attempts[4].score == (0, 0, 1, 0)
    assert len(result.attempts) == 11


def test_match_win_announced_before_reset():
    """MatchWon arrives first; the full reset follows after a short delay."""
    state = game.create_game(target=2, best_of=1)
    state, _ = game.play_attempt(state, 0.95)   # P1 hooks: 1-0
    state, _ = game.play_attempt(state, 0.0)    # P2 misses
    state = game.release(game.ready(state))     # P1 again for 2-0
    state, events = _tick_until(state, lambda e: isinstance(e, MatchWonEvent))

    won = [e for e in events if isinstance(e, MatchWonEvent)][0]
    assert won.player == 1
    assert (won.p1_sets, won.p2_sets) == (1, 0)
    assert any(isinstance(e, GameWonEvent) for e in events)
    assert state.score.winner == 1
    assert game.snapshot(state).match_winner == 1
    assert game.ready(state) is state

    generation = state.generation
    for _ in range(20):
        state, _ = game.tick(state)
    assert state.generation == generation + 1
    assert state.score.winner is None
    assert (state.score.p1_sets, state.score.p2_sets) == (0, 0)
    assert state.score.server == 1
    assert state.mode == IDLE
    assert not state.timers


def test_reset_cancels_pending_score():
    """Resetting between capture and scoring drops the point."""
    state = game.release(game.ready(game.create_game()))
    state, _ = _tick_until(state, lambda e: isinstance(e, CapturedEvent))
    state = game.reset(state)

    events = []
    for _ in range(30):
        state, ev = game.tick(state)
        events.extend(ev)
    assert not any(isinstance(e, ScoredEvent) for e in events)
    assert state.score.p1_points == 0
    assert state.mode == IDLE


def test_set_configuration_moves_hook_and_resets_ring():
    """Editing the hook angle moves the tip; a held ring goes back to the hold angle."""
    state = _grab(game.ready(game.create_game()))
    state = game.drag_to(state, 0.2)
    state = game.set_configuration(state, hook_angle=-0.5, hold_start_angle=0.8)
    assert state.tip == physics.hook_tip(state.anchor, state.config)
    assert state.config.hook_angle == -0.5
    assert state.ring.angle == 0.8


def test_set_configuration_leaves_flight_alone():
    """Mid-flight edits do not teleport the ring."""
    state = game.release(game.ready(game.create_game()))
    state, _ = game.tick(state)
    angle = state.ring.angle
    state = game.set_configuration(state, capture_radius=10)
    assert state.ring.angle == angle
    assert state.mode == FLYING


def test_set_configuration_validation():
    """Unknown fields are rejected; out-of-range values are clamped."""
    state = game.create_game()
    with pytest.raises(ConfigError):
        game.set_configuration(state, rope=100)
    with pytest.raises(ConfigError):
        game.set_configuration(state, gravity="strong")
    assert game.set_configuration(state, damping=0.0).config.damping == cfg.MIN_DAMPING
    assert game.set_configuration(state, damping=1.5).config.damping == 1.0
    assert game.set_configuration(state, damping=0.3).config.damping == 0.3


def test_hold_angle_kept_on_the_rail():
    """A hold angle beyond the rail parks the ring at the rail limit."""
    state = game.set_configuration(game.create_game(), hold_start_angle=2.0)
    assert state.ring.angle == cfg.MAX_SWING
    state = game.ready(state)
    assert state.ring.angle == cfg.MAX_SWING
    assert game.snapshot(state).angle == cfg.MAX_SWING

    state = game.create_game(cfg.update_config(cfg.DEFAULTS, hold_start_angle=-3.0))
    assert state.ring.angle == -cfg.MAX_SWING


@pytest.mark.parametrize("arm", [False, True])
def test_ring_only_moves_while_flying(arm):
    """Ticking an idle or ready attempt leaves the ring where it is."""
    state = game.create_game()
    if arm:
        state = game.ready(state)
    before = state.ring.copy()
    mode = state.mode

    for _ in range(50):
        state, events = game.tick(state)
        assert events == []

    assert state.ring.angle == before.angle
    assert state.ring.ang_vel == before.ang_vel
    assert state.mode == mode
    assert state.frame == 50


def test_apply_preset():
    state = game.apply_preset(game.create_game(), "hard")
    assert state.config.capture_radius == 16
    assert state.config.release_scale == pytest.approx(0.34)
    assert state.config.hook_angle == cfg.DEFAULTS.hook_angle


def test_snapshot_reflects_state():
    """Snapshot carries derived ring position and the score fields."""
    state = game.ready(game.create_game())
    snap = game.snapshot(state)
    assert snap.mode == READY
    assert snap.ring_pos == physics.ring_position(state.anchor, state.config.rope_length, state.ring.angle)
    assert snap.hook_tip == state.tip
    assert (snap.p1_points, snap.p2_points, snap.p1_sets, snap.p2_sets) == (0, 0, 0, 0)
    assert snap.server == 1
    assert not snap.snapped


def test_scripted_match_is_deterministic():
    """Replaying the same angles gives the same match."""
    a = game.play_match([0.95, 0.6], [0.0, 0.95], target=5)
    b = game.play_match([0.95, 0.6], [0.0, 0.95], target=5)
    assert a.winner == b.winner
    assert [x.reason for x in a.attempts] == [x.reason for x in b.attempts]
    assert a.stats == b.stats


def test_scripted_match_stats():
    result = game.play_match([0.95], [0.0], target=3)
    s = result.stats
    assert s["total_attempts"] == len(result.attempts)
    assert s["p1_captures"] == 6
    assert s["p2_captures"] == 0
    assert s["p1_capture_rate"] == 1.0
    assert s["reasons"]["settled"] == s["p2_attempts"]


def test_scripted_match_gives_up_without_winner():
    """Two perfect players at win-by-two never finish; the attempt cap stops it."""
    result = game.play_match([0.95], [0.95], target=3, max_attempts=40)
    assert result.winner is None
    assert len(result.attempts) == 40
