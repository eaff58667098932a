"""
Tests for application settings (defaults, YAML file, environment).
"""

import logging

import pytest
import yaml
from pydantic import ValidationError

from timetracker.infra import config
from timetracker.infra.config import AppSettings
from timetracker.infra.logging_setup import configure_logging


@pytest.fixture
def dirs(tmp_path, monkeypatch):
    """Run from an empty directory so no workspace config/settings.yaml is picked up"""
    monkeypatch.chdir(tmp_path)
    for name in ("POLL_INTERVAL_MS", "THROTTLE_MS", "QUEUE_SIZE", "LOG_LEVEL"):
        monkeypatch.delenv(f"TIMETRACKER_{name}", raising=False)
    return {"config_dir": tmp_path / "cfg", "data_dir": tmp_path / "data"}


def write_yaml(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data), encoding="utf-8")


def test_defaults(dirs):
    settings = AppSettings(**dirs)

    assert settings.poll_interval_ms == 250
    assert settings.throttle_ms == 100
    assert settings.queue_size == 64
    assert settings.log_level == "INFO"
    assert settings.log_file == dirs["data_dir"] / "timetracker.log"
    assert dirs["config_dir"].is_dir()
    assert dirs["data_dir"].is_dir()


def test_yaml_in_config_dir(dirs):
    write_yaml(dirs["config_dir"] / "settings.yaml", {"throttle_ms": 50, "log_level": "DEBUG"})

    settings = AppSettings(**dirs)
    assert settings.throttle_ms == 50
    assert settings.log_level == "DEBUG"


def test_workspace_yaml_wins_over_config_dir(dirs, tmp_path):
    write_yaml(dirs["config_dir"] / "settings.yaml", {"queue_size": 8})
    write_yaml(tmp_path / "config" / "settings.yaml", {"queue_size": 16})

    assert AppSettings(**dirs).queue_size == 16


def test_environment_overrides_yaml(dirs, monkeypatch):
    write_yaml(dirs["config_dir"] / "settings.yaml", {"throttle_ms": 50})
    monkeypatch.setenv("TIMETRACKER_THROTTLE_MS", "20")

    assert AppSettings(**dirs).throttle_ms == 20


def test_arguments_override_yaml(dirs):
    write_yaml(dirs["config_dir"] / "settings.yaml", {"poll_interval_ms": 500})

    assert AppSettings(poll_interval_ms=10, **dirs).poll_interval_ms == 10


def test_unknown_yaml_keys_are_ignored(dirs):
    write_yaml(dirs["config_dir"] / "settings.yaml", {"theme": "dark"})

    assert not hasattr(AppSettings(**dirs), "theme")


def test_invalid_yaml_value_fails(dirs):
    write_yaml(dirs["config_dir"] / "settings.yaml", {"throttle_ms": -1})

    with pytest.raises(ValidationError):
        AppSettings(**dirs)


def test_get_settings_is_shared(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setattr(config, "_settings", None)

    first = config.get_settings()
    assert config.get_settings() is first
    assert config.reload_settings() is not first


def test_configure_logging_writes_to_file(dirs):
    settings = AppSettings(log_level="debug", **dirs)
    logger = logging.getLogger("timetracker")
    handler = configure_logging(settings)
    try:
        logging.getLogger("timetracker.tests").debug("hello from test")
        handler.flush()

        assert logger.level == logging.DEBUG
        assert not logger.propagate
        assert "hello from test" in settings.log_file.read_text(encoding="utf-8")
    finally:
        logger.removeHandler(handler)
        handler.close()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
