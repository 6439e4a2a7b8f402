"""Pendulum physics — gravity, damping, swing rail, hook capture and funnel assist."""

import math
from typing import Optional, Union

from hookring.types import CapturedEvent, NudgeEvent, RingState, Vec2
from hookring import config as cfg


def ring_position(anchor: Vec2, rope_length: float, angle: float) -> Vec2:
    """Ring centre on the swing arc for a given angle from straight down."""
    return Vec2(
        anchor.x + rope_length * math.sin(angle),
        anchor.y + rope_length * math.cos(angle),
    )


def hook_tip(anchor: Vec2, config: cfg.Config) -> Vec2:
    """Hook tip position; the inset pulls the tip in from the swing arc."""
    return ring_position(anchor, config.rope_length - config.hook_inset, config.hook_angle)


def angle_from_point(anchor: Vec2, point: Vec2) -> float:
    """Angle of ``point`` around the anchor, 0 at straight down."""
    return math.atan2(point.x - anchor.x, point.y - anchor.y)


def clamp_swing(angle: float) -> float:
    return max(-cfg.MAX_SWING, min(cfg.MAX_SWING, angle))


def release_velocity(angle: float, release_scale: float) -> float:
    """Initial angular velocity when the ring is let go at ``angle``."""
    power = -angle * release_scale
    return max(-cfg.MAX_RELEASE_SPEED, min(cfg.MAX_RELEASE_SPEED, power))


def aim_readout(angle: float) -> tuple[float, float]:
    """Return (degrees, power percent) for the aiming HUD."""
    deg = math.degrees(angle)
    return deg, min(100.0, abs(deg) / 180 * 100)


def _apply_swing_limit(ring: RingState) -> RingState:
    """Hard rail at +-MAX_SWING; the ring bounces back softly."""
    if ring.angle > cfg.MAX_SWING:
        ring.angle = cfg.MAX_SWING
        ring.ang_vel *= cfg.RAIL_BOUNCE
    elif ring.angle < -cfg.MAX_SWING:
        ring.angle = -cfg.MAX_SWING
        ring.ang_vel *= cfg.RAIL_BOUNCE
    return ring


def step_pendulum(ring: RingState, gravity: float, damping: float) -> RingState:
    """Advance the ring one frame (semi-implicit Euler) and return the new state."""
    nxt = ring.copy()
    nxt.ang_acc = -gravity * math.sin(nxt.angle)
    nxt.ang_vel = (nxt.ang_vel + nxt.ang_acc) * damping
    nxt.angle = nxt.angle + nxt.ang_vel
    return _apply_swing_limit(nxt)


def _moving_toward(pos: Vec2, tip: Vec2, ang_vel: float) -> bool:
    return (pos.x - tip.x) * ang_vel < 0 or abs(ang_vel) > cfg.FUNNEL_MIN_SPEED


def _funnel_direction(ring: RingState, pos: Vec2, tip: Vec2) -> float:
    if ring.ang_vel > 0:
        return 1.0
    if ring.ang_vel < 0:
        return -1.0
    # At rest: follow the tangent that points toward the tip
    dx = tip.x - pos.x
    dy = tip.y - pos.y
    return 1.0 if dx * math.cos(ring.angle) - dy * math.sin(ring.angle) >= 0 else -1.0


def check_capture(
    ring: RingState,
    pos: Vec2,
    tip: Vec2,
    capture_radius: float,
    latched: bool = False,
) -> tuple[RingState, Optional[str]]:
    """Decide whether the ring at ``pos`` lands on the hook.

    Returns the (possibly modified) ring and the decision: ``"captured"``
    (velocity zeroed), ``"nudged"`` (funnel pushed it toward the tip), or
    None. Once ``latched`` is set, nothing happens.
    """
    if latched:
        return ring, None

    d = pos.distance_to(tip)
    if d < capture_radius:
        ring = ring.copy()
        ring.ang_vel = 0.0
        return ring, "captured"

    if d < capture_radius * cfg.FUNNEL_FACTOR and _moving_toward(pos, tip, ring.ang_vel):
        direction = _funnel_direction(ring, pos, tip)
        ring = ring.copy()
        ring.ang_vel += direction * cfg.FUNNEL_NUDGE
        return ring, "nudged"

    return ring, None


def is_settled(ring: RingState) -> bool:
    """Ring hangs (almost) still near the bottom."""
    return abs(ring.ang_vel) < cfg.STOP_VEL and abs(ring.angle) < cfg.STOP_NEAR


def simulate_swing(
    initial: RingState,
    config: cfg.Config,
    anchor: Vec2 = cfg.ANCHOR,
    max_frames: int = round(cfg.MAX_ATTEMPT_TIME / cfg.FRAME_TIME),
    dt: float = cfg.FRAME_TIME,
) -> tuple[list[RingState], list[Union[CapturedEvent, NudgeEvent]]]:
    """Fly the ring freely from ``initial`` until capture, settling, or ``max_frames``.

    Returns (states, events) where states holds the initial state followed by
    one entry per simulated frame.
    """
    ring = initial.copy()
    states = [ring.copy()]
    events: list[Union[CapturedEvent, NudgeEvent]] = []
    tip = hook_tip(anchor, config)

    for frame in range(1, max_frames + 1):
        ring = step_pendulum(ring, config.gravity, config.damping)
        pos = ring_position(anchor, config.rope_length, ring.angle)
        before = ring.ang_vel
        ring, decision = check_capture(ring, pos, tip, config.capture_radius)
        states.append(ring.copy())

        if decision == "captured":
            events.append(CapturedEvent(pos=pos, t=frame * dt))
            break
        if decision == "nudged":
            events.append(NudgeEvent(pos=pos, t=frame * dt, delta=ring.ang_vel - before))
        if is_settled(ring):
            break

    return states, events
