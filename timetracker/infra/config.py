"""
Application configuration built on pydantic-settings.

Precedence, lowest first: field defaults, a settings.yaml file, then
TIMETRACKER_* environment variables. Values passed to the constructor beat
all three.

These are settings for the program itself (paths, logging, input timing).
The user's name and email are data and live in the database instead.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Set

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SETTINGS_FILE = "settings.yaml"


def _user_dir(kind: str) -> Path:
    """Per-user base directory for 'config' or 'data' files"""
    if os.name == 'nt':
        return Path(os.getenv('APPDATA', Path.home()))
    if kind == 'config':
        return Path.home() / '.config'
    return Path.home() / '.local' / 'share'


class AppSettings(BaseSettings):
    """Runtime settings for the terminal UI, storage paths and logging."""

    model_config = SettingsConfigDict(
        env_prefix='TIMETRACKER_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    app_name: str = "TimeTracker"
    config_dir: Optional[Path] = None
    data_dir: Optional[Path] = None

    log_level: str = "INFO"
    log_file: Optional[Path] = None

    # Key input
    poll_interval_ms: int = Field(default=250, ge=1, description="Terminal poll timeout")
    throttle_ms: int = Field(default=100, ge=0, description="Minimum spacing between forwarded keys")
    queue_size: int = Field(default=64, ge=1, description="Capacity of the key hand-off queue")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._resolve_paths()
        self._apply_yaml(explicit=set(kwargs))

    def _resolve_paths(self):
        folder = self.app_name.lower()
        self.config_dir = self.config_dir or _user_dir('config') / folder
        self.data_dir = self.data_dir or _user_dir('data') / folder
        for directory in (self.config_dir, self.data_dir):
            directory.mkdir(parents=True, exist_ok=True)

        if self.log_file is None:
            self.log_file = self.data_dir / 'timetracker.log'

    def settings_file(self) -> Optional[Path]:
        """config/settings.yaml under the working directory, else the one in config_dir"""
        for candidate in (Path("config") / SETTINGS_FILE, self.config_dir / SETTINGS_FILE):
            if candidate.exists():
                return candidate
        return None

    def _apply_yaml(self, explicit: Set[str]):
        """Fill fields from YAML unless given explicitly or through the environment"""
        path = self.settings_file()
        if path is None:
            return

        with open(path, 'r', encoding='utf-8') as f:
            data: Dict[str, Any] = yaml.safe_load(f) or {}

        for key, value in data.items():
            if key not in type(self).model_fields or key in explicit:
                continue
            if f"TIMETRACKER_{key.upper()}" in os.environ:
                continue
            # Bad values fail here rather than at first use
            checked = type(self).model_validate({**self.model_dump(), key: value})
            setattr(self, key, getattr(checked, key))


_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Process-wide settings, built on first use"""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Rebuild the process-wide settings from the current sources"""
    global _settings
    _settings = AppSettings()
    return _settings
