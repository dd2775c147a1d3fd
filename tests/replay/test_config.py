from __future__ import annotations

import importlib

import pytest

import ob_replay.settings as settings_mod
from ob_core.reconstructor import ReconstructOptions
from ob_replay.config import ReplayConfig, load_config


@pytest.fixture
def reload_settings(monkeypatch):
    yield
    monkeypatch.undo()
    importlib.reload(settings_mod)


def test_invalid_env_does_not_crash(monkeypatch, reload_settings):
    monkeypatch.setenv("REPLAY_DEPTH", "not-a-number")
    monkeypatch.setenv("REPLAY_EMIT_ALL", "nope")
    monkeypatch.setenv("REPLAY_LOG_LEVEL", "   ")

    importlib.reload(settings_mod)

    assert settings_mod.REPLAY_DEPTH is None
    assert settings_mod.REPLAY_EMIT_ALL is False
    assert settings_mod.REPLAY_LOG_LEVEL == "INFO"


def test_env_values_parsed(monkeypatch, reload_settings):
    monkeypatch.setenv("REPLAY_DEPTH", "25")
    monkeypatch.setenv("REPLAY_EMIT_ALL", "0")

    importlib.reload(settings_mod)

    assert settings_mod.REPLAY_DEPTH == 25
    assert settings_mod.REPLAY_EMIT_ALL is False


def test_defaults_mean_all_levels_and_emit_all(monkeypatch):
    monkeypatch.setattr(settings_mod, "REPLAY_DEPTH", None)
    monkeypatch.setattr(settings_mod, "REPLAY_EMIT_ALL", True)

    cfg = ReplayConfig.from_mapping()
    assert cfg.options() == ReconstructOptions(depth=None, emit_all=True)


def test_yaml_overrides_env_defaults(tmp_path, monkeypatch):
    monkeypatch.setattr(settings_mod, "REPLAY_DEPTH", 50)
    path = tmp_path / "replay.yaml"
    path.write_text("depth: 5\nemit_all: false\nlog_level: DEBUG\n", encoding="utf-8")

    cfg = ReplayConfig.from_file(path)
    assert cfg.depth == 5
    assert cfg.emit_all is False
    assert cfg.log_level == "DEBUG"
    assert cfg.options() == ReconstructOptions(depth=5, emit_all=False)


def test_yaml_missing_keys_fall_back_to_env(tmp_path, monkeypatch):
    monkeypatch.setattr(settings_mod, "REPLAY_DEPTH", 7)
    path = tmp_path / "replay.yaml"
    path.write_text("log_level: WARNING\n", encoding="utf-8")

    assert ReplayConfig.from_file(path).depth == 7


def test_empty_yaml_is_empty_mapping(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == {}


def test_non_mapping_yaml_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping"):
        load_config(path)


def test_negative_depth_rejected():
    with pytest.raises(ValueError, match="depth"):
        ReplayConfig.from_mapping({"depth": -3})
