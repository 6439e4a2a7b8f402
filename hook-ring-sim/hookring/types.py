"""Core data types for the Hook & Ring simulation."""

import math
from dataclasses import dataclass, field
from typing import Optional

# Attempt modes
IDLE = "idle"
READY = "ready"
FLYING = "flying"

# Reasons an attempt can end
ATTEMPT_END_REASONS = ("captured", "timeout", "settled")


@dataclass
class Vec2:
    """2D point in screen space (y grows downward)."""
    x: float = 0.0
    y: float = 0.0

    def distance_to(self, other: "Vec2") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def copy(self) -> "Vec2":
        return Vec2(self.x, self.y)


@dataclass
class RingState:
    """Pendulum state of the ring. The angle is the single source of truth for position."""
    angle: float = 0.0
    ang_vel: float = 0.0
    ang_acc: float = 0.0

    def copy(self) -> "RingState":
        return RingState(self.angle, self.ang_vel, self.ang_acc)


@dataclass
class Score:
    """Current match score."""
    p1_points: int = 0
    p2_points: int = 0
    p1_sets: int = 0
    p2_sets: int = 0
    server: int = 1  # 1 or 2, whose attempt it is
    history: list = field(default_factory=list)
    game_winner: Optional[int] = None  # set only on the point that closed a game
    winner: Optional[int] = None  # match winner

    def copy(self) -> "Score":
        return Score(
            p1_points=self.p1_points,
            p2_points=self.p2_points,
            p1_sets=self.p1_sets,
            p2_sets=self.p2_sets,
            server=self.server,
            history=list(self.history),
            game_winner=self.game_winner,
            winner=self.winner,
        )


@dataclass
class CapturedEvent:
    """The ring landed on the hook (freeze-frame for presentation)."""
    pos: Vec2
    t: float
    player: int = 0


@dataclass
class NudgeEvent:
    """The capture funnel nudged a near miss toward the hook tip."""
    pos: Vec2
    t: float
    delta: float


@dataclass
class ScoredEvent:
    """A point was awarded."""
    player: int
    p1_points: int
    p2_points: int
    t: float


@dataclass
class GameWonEvent:
    """A game was won; sets after the win."""
    player: int
    p1_sets: int
    p2_sets: int
    t: float


@dataclass
class MatchWonEvent:
    """The match is over; final set score."""
    player: int
    p1_sets: int
    p2_sets: int
    t: float


@dataclass
class AttemptEndedEvent:
    """An attempt resolved."""
    reason: str  # one of ATTEMPT_END_REASONS
    player: int
    t: float


@dataclass
class Snapshot:
    """Everything the presentation layer needs to draw one frame."""
    frame: int
    t: float
    mode: str
    angle: float
    ring_pos: Vec2
    hook_tip: Vec2
    anchor: Vec2
    p1_points: int
    p2_points: int
    p1_sets: int
    p2_sets: int
    server: int
    dragging: bool = False
    snapped: bool = False  # ring sits on the hook tip
    match_winner: Optional[int] = None
