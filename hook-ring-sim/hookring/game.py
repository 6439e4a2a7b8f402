"""Attempt state machine — intents, per-frame ticks, scripted attempts and matches.

Every function takes a GameState and returns a new one; nothing is shared
between calls. Modes move idle -> ready -> flying -> idle:

- ready():    idle -> ready, ring held at the configured start angle
- drag:       ready only, while the ring is grabbed; sets the angle directly
- release():  ready -> flying, initial velocity from the held angle
- tick():     advances the simulated clock, fires due timers, flies the ring
- An attempt ends on capture (after a short freeze), timeout, or settling

Intents that do not fit the current mode are ignored.
"""

import itertools
from dataclasses import dataclass, field
from typing import Optional

from hookring.types import (
    FLYING,
    IDLE,
    READY,
    AttemptEndedEvent,
    CapturedEvent,
    GameWonEvent,
    MatchWonEvent,
    NudgeEvent,
    RingState,
    Score,
    ScoredEvent,
    Snapshot,
    Vec2,
)
from hookring import config as cfg
from hookring import physics, presets, scoring, timers


@dataclass
class GameState:
    """Everything the simulation owns. Presentation reads it via snapshot()."""
    config: cfg.Config = cfg.DEFAULTS
    anchor: Vec2 = field(default_factory=cfg.ANCHOR.copy)
    tip: Vec2 = field(default_factory=Vec2)
    ring: RingState = field(default_factory=RingState)
    mode: str = IDLE
    score: Score = field(default_factory=scoring.create_score)
    latched: bool = False  # a capture has been seen this attempt
    dragging: bool = False
    attempt_start: float = 0.0
    t: float = 0.0
    frame: int = 0
    generation: int = 0
    timers: list = field(default_factory=list)
    target: int = cfg.TARGET
    best_of: int = cfg.BEST_OF

    def copy(self) -> "GameState":
        return GameState(
            config=self.config,
            anchor=self.anchor.copy(),
            tip=self.tip.copy(),
            ring=self.ring.copy(),
            mode=self.mode,
            score=self.score.copy(),
            latched=self.latched,
            dragging=self.dragging,
            attempt_start=self.attempt_start,
            t=self.t,
            frame=self.frame,
            generation=self.generation,
            timers=list(self.timers),
            target=self.target,
            best_of=self.best_of,
        )


def _held_ring(config: cfg.Config) -> RingState:
    return RingState(angle=physics.clamp_swing(config.hold_start_angle))


def create_game(
    config: Optional[cfg.Config] = None,
    anchor: Optional[Vec2] = None,
    target: int = cfg.TARGET,
    best_of: int = cfg.BEST_OF,
) -> GameState:
    """Create a new match in idle mode with the ring at the hold position."""
    config = config or cfg.DEFAULTS
    anchor = anchor.copy() if anchor is not None else cfg.ANCHOR.copy()
    return GameState(
        config=config,
        anchor=anchor,
        tip=physics.hook_tip(anchor, config),
        ring=_held_ring(config),
        target=target,
        best_of=best_of,
    )


# --- Intents ---


def ready(state: GameState) -> GameState:
    """Arm a new attempt. Refused while a scheduled task is still pending."""
    if state.mode != IDLE or state.timers:
        return state
    s = state.copy()
    s.mode = READY
    s.ring = _held_ring(s.config)
    s.latched = False
    s.dragging = False
    return s


def begin_drag(state: GameState, point: Vec2) -> GameState:
    """Grab the ring if ``point`` is on (or just around) it."""
    if state.mode != READY:
        return state
    pos = physics.ring_position(state.anchor, state.config.rope_length, state.ring.angle)
    if pos.distance_to(point) > cfg.RING_RADIUS + cfg.GRAB_SLACK:
        return state
    s = state.copy()
    s.dragging = True
    s.ring.ang_vel = 0.0
    return s


def drag_to(state: GameState, angle: float) -> GameState:
    """Hold the grabbed ring at ``angle``, clamped to the swing rail."""
    if state.mode != READY or not state.dragging:
        return state
    s = state.copy()
    s.ring = RingState(angle=physics.clamp_swing(angle))
    return s


def move_drag(state: GameState, point: Vec2) -> GameState:
    if state.mode != READY or not state.dragging:
        return state
    return drag_to(state, physics.angle_from_point(state.anchor, point))


def end_drag(state: GameState) -> GameState:
    if not state.dragging:
        return state
    s = state.copy()
    s.dragging = False
    return s


def release(state: GameState) -> GameState:
    """Let go of the ring; it starts flying with velocity from the held angle."""
    if state.mode != READY:
        return state
    s = state.copy()
    s.ring = RingState(
        angle=s.ring.angle,
        ang_vel=physics.release_velocity(s.ring.angle, s.config.release_scale),
    )
    s.mode = FLYING
    s.attempt_start = s.t
    s.dragging = False
    return s


def reset(state: GameState) -> GameState:
    """Full match reset. Pending timers from before the reset never fire."""
    s = create_game(state.config, state.anchor, state.target, state.best_of)
    s.t = state.t
    s.frame = state.frame
    s.generation = state.generation + 1
    return s


def set_configuration(state: GameState, **changes) -> GameState:
    """Merge ``changes`` into the configuration and move the hook.

    Unless the ring is mid-flight it goes back to the hold position.

    Raises:
        ConfigError: for unknown fields or non-numeric values.
    """
    s = state.copy()
    s.config = cfg.update_config(s.config, **changes)
    s.tip = physics.hook_tip(s.anchor, s.config)
    if s.mode != FLYING:
        s.ring = _held_ring(s.config)
    return s


def replace_configuration(state: GameState, config: cfg.Config) -> GameState:
    """Swap in a whole configuration (defaults, loaded snapshot)."""
    return set_configuration(state, **config.to_dict())


def apply_preset(state: GameState, name: str) -> GameState:
    """Apply a difficulty preset on top of the current configuration."""
    return set_configuration(state, **presets.get_preset(name))


# --- Ticking ---


def _end_attempt(
    s: GameState,
    reason: str,
    events: list,
    player: Optional[int] = None,
    alternate: bool = True,
) -> GameState:
    if player is None:
        player = s.score.server
    events.append(AttemptEndedEvent(reason=reason, player=player, t=s.t))
    s.mode = IDLE
    s.latched = False
    s.dragging = False
    if alternate:
        s.score.server = scoring.alternate_server(s.score.server)
    s.ring = _held_ring(s.config)
    return s


def _apply_score(s: GameState, events: list) -> GameState:
    if s.mode != FLYING or not s.latched:
        return s

    player = s.score.server
    s.score = scoring.record_point(s.score, player, s.target, s.best_of)
    last = s.score.history[-1]
    events.append(ScoredEvent(player=player, p1_points=last["p1"], p2_points=last["p2"], t=s.t))

    game_won = s.score.game_winner is not None
    if game_won:
        events.append(GameWonEvent(
            player=s.score.game_winner,
            p1_sets=s.score.p1_sets,
            p2_sets=s.score.p2_sets,
            t=s.t,
        ))
    if s.score.winner is not None:
        events.append(MatchWonEvent(
            player=s.score.winner,
            p1_sets=s.score.p1_sets,
            p2_sets=s.score.p2_sets,
            t=s.t,
        ))
        s.timers = timers.schedule(s.timers, s.t, cfg.MATCH_RESET_DELAY, timers.RESET_MATCH, s.generation)

    # A won game already handed the serve to its loser
    return _end_attempt(s, "captured", events, player=player, alternate=not game_won)


def _fire_timers(s: GameState, events: list) -> GameState:
    due, s.timers = timers.pop_due(s.timers, s.t, s.generation)
    for tm in due:
        if tm.generation != s.generation:
            continue
        if tm.action == timers.APPLY_SCORE:
            s = _apply_score(s, events)
        elif tm.action == timers.RESET_MATCH:
            s = reset(s)
    return s


def _fly(s: GameState, events: list) -> GameState:
    c = s.config
    ring = physics.step_pendulum(s.ring, c.gravity, c.damping)
    pos = physics.ring_position(s.anchor, c.rope_length, ring.angle)
    before = ring.ang_vel
    ring, decision = physics.check_capture(ring, pos, s.tip, c.capture_radius, s.latched)
    s.ring = ring

    if decision == "captured":
        s.latched = True
        events.append(CapturedEvent(pos=pos, t=s.t, player=s.score.server))
        s.timers = timers.schedule(s.timers, s.t, cfg.CAPTURE_SETTLE_DELAY, timers.APPLY_SCORE, s.generation)
        return s
    if decision == "nudged":
        events.append(NudgeEvent(pos=pos, t=s.t, delta=ring.ang_vel - before))

    if s.t - s.attempt_start > cfg.MAX_ATTEMPT_TIME:
        return _end_attempt(s, "timeout", events)
    if physics.is_settled(ring):
        return _end_attempt(s, "settled", events)
    return s


def tick(state: GameState, dt: float = cfg.FRAME_TIME) -> tuple[GameState, list]:
    """Advance one frame. Returns the new state and the events it produced.

    A captured ring stays frozen on the hook until its point is applied.
    """
    s = state.copy()
    s.t += dt
    s.frame += 1
    events: list = []

    s = _fire_timers(s, events)
    if s.mode == FLYING and not s.latched:
        s = _fly(s, events)
    return s, events


def snapshot(state: GameState) -> Snapshot:
    """Read-only view of the state for drawing and HUD."""
    sc = state.score
    return Snapshot(
        frame=state.frame,
        t=state.t,
        mode=state.mode,
        angle=state.ring.angle,
        ring_pos=physics.ring_position(state.anchor, state.config.rope_length, state.ring.angle),
        hook_tip=state.tip.copy(),
        anchor=state.anchor.copy(),
        p1_points=sc.p1_points,
        p2_points=sc.p2_points,
        p1_sets=sc.p1_sets,
        p2_sets=sc.p2_sets,
        server=sc.server,
        dragging=state.dragging,
        snapped=state.latched,
        match_winner=sc.winner,
    )


# --- Scripted play ---


@dataclass
class AttemptResult:
    """One scripted attempt and how it ended."""
    player: int
    hold_angle: float
    reason: str
    frames: int
    events: list
    score: tuple  # (p1_points, p2_points, p1_sets, p2_sets) after the attempt


@dataclass
class MatchResult:
    """A full scripted match."""
    winner: Optional[int]
    p1_sets: int
    p2_sets: int
    attempts: list  # list[AttemptResult]
    stats: dict = field(default_factory=dict)


def play_attempt(
    state: GameState,
    hold_angle: Optional[float] = None,
    max_frames: int = 1000,
    dt: float = cfg.FRAME_TIME,
) -> tuple[GameState, list]:
    """Run one attempt end to end: ready, hold at ``hold_angle``, release, fly.

    Ticks until the game is idle again with nothing scheduled (or
    ``max_frames`` runs out). With no ``hold_angle`` the ring is released
    from the configured start angle.
    """
    s = ready(state)
    if s.mode != READY:
        return state, []

    if hold_angle is not None:
        grip = physics.ring_position(s.anchor, s.config.rope_length, s.ring.angle)
        s = begin_drag(s, grip)
        s = drag_to(s, hold_angle)
        s = end_drag(s)
    s = release(s)

    events: list = []
    for _ in range(max_frames):
        s, ev = tick(s, dt)
        events.extend(ev)
        if s.mode == IDLE and not s.timers:
            break
    return s, events


def play_match(
    p1_angles: list,
    p2_angles: list,
    config: Optional[cfg.Config] = None,
    target: int = cfg.TARGET,
    best_of: int = cfg.BEST_OF,
    max_attempts: int = 500,
) -> MatchResult:
    """Replay fixed hold angles for both players until the match is decided.

    Each player's angles are cycled. Stops after ``max_attempts`` if nobody
    wins, in which case ``winner`` is None.
    """
    state = create_game(config, target=target, best_of=best_of)
    angles = {1: itertools.cycle(p1_angles), 2: itertools.cycle(p2_angles)}
    attempts: list[AttemptResult] = []
    final: Optional[MatchWonEvent] = None

    for _ in range(max_attempts):
        player = state.score.server
        hold = next(angles[player])
        start_frame = state.frame
        state, events = play_attempt(state, hold)

        ended = [e for e in events if isinstance(e, AttemptEndedEvent)]
        won = [e for e in events if isinstance(e, MatchWonEvent)]
        sets = (won[0].p1_sets, won[0].p2_sets) if won else (state.score.p1_sets, state.score.p2_sets)
        points = (0, 0) if won else (state.score.p1_points, state.score.p2_points)
        attempts.append(AttemptResult(
            player=player,
            hold_angle=hold,
            reason=ended[0].reason if ended else "timeout",
            frames=state.frame - start_frame,
            events=events,
            score=points + sets,
        ))
        if won:
            final = won[0]
            break

    return MatchResult(
        winner=final.player if final else None,
        p1_sets=final.p1_sets if final else state.score.p1_sets,
        p2_sets=final.p2_sets if final else state.score.p2_sets,
        attempts=attempts,
        stats=_compute_match_stats(attempts),
    )


def _compute_match_stats(attempts: list) -> dict:
    """Per-player attempt and capture counts plus how attempts ended."""
    reasons = {}
    for a in attempts:
        reasons[a.reason] = reasons.get(a.reason, 0) + 1

    stats = {"total_attempts": len(attempts), "reasons": reasons}
    for p in (1, 2):
        mine = [a for a in attempts if a.player == p]
        captures = sum(1 for a in mine if a.reason == "captured")
        stats[f"p{p}_attempts"] = len(mine)
        stats[f"p{p}_captures"] = captures
        stats[f"p{p}_capture_rate"] = round(captures / len(mine), 3) if mine else 0.0

    frames = [a.frames for a in attempts]
    stats["avg_attempt_frames"] = round(sum(frames) / max(len(frames), 1), 1)
    return stats
