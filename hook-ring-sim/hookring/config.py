"""Rig layout, gameplay constants, and the live-tunable configuration.

Lengths are in screen units (pixels), angles in radians measured from
straight down (left of down is negative), and physics runs per frame:
gravity is rad/frame^2 and angular velocity is rad/frame.
"""

import json
import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Optional

from hookring.types import Vec2

# Play area
CANVAS_WIDTH = 900
CANVAS_HEIGHT = 560
FLOOR_Y = 500
MARGIN_X = CANVAS_WIDTH * 0.12
PLAY_LEFT = MARGIN_X
PLAY_RIGHT = CANVAS_WIDTH - MARGIN_X
ANCHOR = Vec2((PLAY_LEFT + PLAY_RIGHT) / 2, 90)

# Swing limits
MAX_SWING = 1.55  # ~89 degrees either side of down
RAIL_BOUNCE = -0.2  # velocity multiplier when the ring hits the swing rail
STOP_VEL = 0.0025
STOP_NEAR = 0.05
MAX_ATTEMPT_TIME = 5.5  # seconds of simulated time

# Ring and grab
RING_RADIUS = 14
GRAB_SLACK = 16  # extra grab distance around the ring
MAX_RELEASE_SPEED = 0.6  # rad/frame

# Capture funnel
FUNNEL_FACTOR = 1.35  # funnel reaches out to capture_radius * FUNNEL_FACTOR
FUNNEL_NUDGE = 0.0009  # rad/frame added per nudged frame
FUNNEL_MIN_SPEED = 0.01  # any faster motion counts as approaching the tip

# Scoring
TARGET = 21
BEST_OF = 3

# Scheduled delays (seconds)
CAPTURE_SETTLE_DELAY = 0.110  # freeze on the hook before the point is applied
MATCH_RESET_DELAY = 0.090  # announce the winner before the full reset

FRAME_TIME = 1.0 / 60.0

# Persistence
STORAGE_KEY = "hook-and-ring-config-v1"

# Clamp bounds for edited values
MIN_DAMPING = 1e-6
MIN_ROPE_LENGTH = 1.0
MIN_CAPTURE_RADIUS = 1.0


class ConfigError(ValueError):
    """Raised when a configuration edit names an unknown field or a non-number."""


@dataclass(frozen=True)
class Config:
    """Live-tunable physical and gameplay parameters."""
    hook_angle: float = -0.22
    rope_length: float = 260.0
    hook_inset: float = 0.0  # 0 puts the hook tip exactly on the swing arc
    capture_radius: float = 28.0
    gravity: float = 0.0040
    damping: float = 0.9990
    release_scale: float = 0.30
    hold_start_angle: float = 0.95  # held out to the right

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULTS = Config()
FIELD_NAMES = tuple(f.name for f in fields(Config))


def _clamped(values: dict) -> dict:
    """Pull every value back inside the range the integrator can handle."""
    v = dict(values)
    v["damping"] = min(1.0, max(MIN_DAMPING, v["damping"]))
    v["rope_length"] = max(MIN_ROPE_LENGTH, v["rope_length"])
    v["hook_inset"] = min(max(0.0, v["hook_inset"]), v["rope_length"] - MIN_ROPE_LENGTH)
    v["capture_radius"] = max(MIN_CAPTURE_RADIUS, v["capture_radius"])
    v["gravity"] = max(0.0, v["gravity"])
    v["release_scale"] = max(0.0, v["release_scale"])
    return v


def _as_number(value) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value


def update_config(config: Config, **changes) -> Config:
    """Return a copy of ``config`` with ``changes`` merged in and clamped.

    Raises:
        ConfigError: if a key is not a Config field or a value is not a finite number.
    """
    for key, value in changes.items():
        if key not in FIELD_NAMES:
            raise ConfigError(f"Unknown configuration field: {key!r}")
        if _as_number(value) is None:
            raise ConfigError(f"Configuration field {key!r} must be a finite number, got {value!r}")

    merged = config.to_dict()
    merged.update({k: float(v) for k, v in changes.items()})
    return replace(config, **_clamped(merged))


def config_from_dict(data) -> Config:
    """Build a Config from a flat mapping, keeping defaults for anything unusable."""
    values = DEFAULTS.to_dict()
    if isinstance(data, dict):
        for key in FIELD_NAMES:
            number = _as_number(data.get(key))
            if number is not None:
                values[key] = number
    return Config(**_clamped(values))


def load_config(path: str) -> Config:
    """Load the persisted configuration snapshot.

    A missing file, malformed JSON, or a different schema key all fall back
    to the defaults without raising.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return DEFAULTS
    if not isinstance(data, dict):
        return DEFAULTS
    return config_from_dict(data.get(STORAGE_KEY))


def save_config(config: Config, path: str) -> None:
    """Write ``config`` as a flat snapshot under the schema key."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump({STORAGE_KEY: config.to_dict()}, f, indent=2)
