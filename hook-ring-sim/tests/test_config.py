"""Tests for configuration clamping and persistence."""

import dataclasses
import json

import pytest

from hookring import config as cfg
from hookring.config import ConfigError


def test_defaults():
    """Built-in defaults match the tuned rig."""
    d = cfg.DEFAULTS
    assert d.hook_angle == -0.22
    assert d.rope_length == 260
    assert d.hook_inset == 0
    assert d.capture_radius == 28
    assert d.gravity == 0.0040
    assert d.damping == 0.9990
    assert d.release_scale == 0.30
    assert d.hold_start_angle == 0.95


def test_config_is_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.DEFAULTS.gravity = 1.0


def test_update_config_merges_and_keeps_the_rest():
    c = cfg.update_config(cfg.DEFAULTS, capture_radius=40, gravity=0.005)
    assert c.capture_radius == 40
    assert c.gravity == 0.005
    assert c.rope_length == cfg.DEFAULTS.rope_length
    assert cfg.DEFAULTS.capture_radius == 28


def test_update_config_clamps():
    """Out-of-range edits are pulled back to values the integrator can use."""
    c = cfg.update_config(cfg.DEFAULTS, rope_length=100, hook_inset=250)
    assert c.hook_inset == 99
    assert c.rope_length > c.hook_inset >= 0

    c = cfg.update_config(cfg.DEFAULTS, hook_inset=-5, capture_radius=0, gravity=-1, release_scale=-0.2)
    assert c.hook_inset == 0
    assert c.capture_radius == cfg.MIN_CAPTURE_RADIUS
    assert c.gravity == 0
    assert c.release_scale == 0

    assert cfg.update_config(cfg.DEFAULTS, damping=-3).damping == cfg.MIN_DAMPING
    assert cfg.update_config(cfg.DEFAULTS, damping=1.2).damping == 1.0
    assert cfg.update_config(cfg.DEFAULTS, damping=0.3).damping == 0.3
    assert cfg.update_config(cfg.DEFAULTS, damping=0).damping > 0


@pytest.mark.parametrize("value", ["0.5", None, True, float("nan"), float("inf")])
def test_update_config_rejects_non_numbers(value):
    with pytest.raises(ConfigError):
        cfg.update_config(cfg.DEFAULTS, damping=value)


def test_update_config_rejects_unknown_field():
    with pytest.raises(ConfigError):
        cfg.update_config(cfg.DEFAULTS, friction=0.3)


def test_load_missing_file_gives_defaults(tmp_path):
    assert cfg.load_config(str(tmp_path / "nope.json")) == cfg.DEFAULTS


def test_load_malformed_json_gives_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert cfg.load_config(str(path)) == cfg.DEFAULTS


def test_load_wrong_schema_gives_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"hook-and-ring-config-v0": {"capture_radius": 40}}), encoding="utf-8")
    assert cfg.load_config(str(path)) == cfg.DEFAULTS

    path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    assert cfg.load_config(str(path)) == cfg.DEFAULTS


def test_load_keeps_good_fields_only(tmp_path):
    """Bad or unknown fields fall back individually; good ones survive."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({cfg.STORAGE_KEY: {
        "capture_radius": 40,
        "gravity": "heavy",
        "damping": 0,
        "colour": "red",
    }}), encoding="utf-8")
    c = cfg.load_config(str(path))
    assert c.capture_radius == 40
    assert c.gravity == cfg.DEFAULTS.gravity
    assert c.damping == cfg.MIN_DAMPING


def test_save_then_load(tmp_path):
    path = str(tmp_path / "config.json")
    c = cfg.update_config(cfg.DEFAULTS, hook_angle=-0.4, capture_radius=16)
    cfg.save_config(c, path)

    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    assert list(raw) == [cfg.STORAGE_KEY]
    assert raw[cfg.STORAGE_KEY]["hook_angle"] == -0.4
    assert cfg.load_config(path) == c
