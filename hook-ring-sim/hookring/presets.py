"""Difficulty presets for the configuration panel.

Each preset only overrides the values that change how forgiving the hook is;
everything else keeps whatever the player has tuned.
"""

from hookring import config as cfg

DIFFICULTY_PRESETS = {
    "easy": {
        "label": "Easy",
        "capture_radius": 38,
        "release_scale": 0.22,
        "gravity": 0.0045,
    },
    "normal": {
        "label": "Normal",
        "capture_radius": 28,
        "release_scale": 0.30,
        "gravity": 0.0040,
    },
    "hard": {
        "label": "Hard",
        "capture_radius": 16,
        "release_scale": 0.34,
        "gravity": 0.0036,
    },
}


def get_preset(key: str) -> dict:
    """Return the configuration overrides for a preset key."""
    preset = DIFFICULTY_PRESETS[key]
    return {k: v for k, v in preset.items() if k != "label"}


def preset_config(key: str, base: cfg.Config = cfg.DEFAULTS) -> cfg.Config:
    """Return ``base`` with the preset applied."""
    return cfg.update_config(base, **get_preset(key))


def list_presets() -> list[str]:
    """Return all available preset keys."""
    return list(DIFFICULTY_PRESETS.keys())
