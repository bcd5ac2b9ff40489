"""Tests for web configuration."""

import pytest

from photo_trail.web.config import ENV_DB_PATH, ENV_GEOCODER, WebConfig


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv(ENV_DB_PATH, str(tmp_path / "env" / "trail.db"))
    monkeypatch.setenv(ENV_GEOCODER, "mock")
    config = WebConfig()
    assert config.db_path == str(tmp_path / "env" / "trail.db")
    assert config.geocoder == "mock"
    assert (tmp_path / "env").is_dir()


def test_save_and_load_round_trip(tmp_path):
    config_path = tmp_path / "config.json"
    WebConfig(
        db_path=str(tmp_path / "trail.db"),
        tick_interval_ms=250,
        auto_zoom_enabled=False,
        recursive=False,
    ).save_to_file(config_path)

    loaded = WebConfig.load_from_file(config_path)
    assert loaded.tick_interval_ms == 250
    assert loaded.auto_zoom_enabled is False
    assert loaded.recursive is False
    assert loaded.db_path == str(tmp_path / "trail.db")


def test_unreadable_file_falls_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.setenv(ENV_DB_PATH, str(tmp_path / "trail.db"))
    config_path = tmp_path / "config.json"
    config_path.write_text("{not json")
    config = WebConfig.load_from_file(config_path)
    assert config.tick_interval_ms == 1000
    assert config.auto_zoom_enabled is True


def test_negative_interval_is_rejected(tmp_path):
    with pytest.raises(ValueError, match="tick_interval_ms"):
        WebConfig(db_path=str(tmp_path / "trail.db"), tick_interval_ms=-5)
