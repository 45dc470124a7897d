"""
Tests for settings loading
"""
import pytest
from pydantic import ValidationError

from guessmon.config import Settings, load_settings
from guessmon.models import DifficultyConfig


def test_defaults():
    settings = Settings()
    assert settings.sync.batch_size == 10
    assert settings.difficulty(None).label == "Normal"
    assert settings.difficulty("easy").choice_count == 4
    assert settings.difficulty("missing") is None


def test_explicit_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_settings(str(tmp_path / "nope.yaml"))


def test_load_yaml(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text(
        "sync:\n  enabled: false\n  batch_size: 5\n"
        "difficulties:\n  blitz: {label: Blitz, duration: 5, max_hints: 0, base_score: 300, choice_count: 4}\n"
        "default_difficulty: blitz\n",
        encoding="utf-8",
    )
    settings = load_settings(str(path))
    assert settings.sync.enabled is False
    assert settings.sync.batch_size == 5
    assert settings.difficulty(None).base_score == 300


def test_env_var_path(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text("tick_interval: 0.5\n", encoding="utf-8")
    monkeypatch.setenv("GUESSMON_CONFIG", str(path))
    assert load_settings().tick_interval == 0.5


def test_invalid_choice_count():
    with pytest.raises(ValidationError):
        DifficultyConfig(choice_count=3)
