"""Configuration loading for coursegate.

Settings come from an optional YAML file, then ``COURSEGATE_*`` environment
variables override individual values:

    db_path: data/coursegate.db
    lock_timeout: 5.0
    busy_timeout: 5.0
    log_dir: logs
    log_level: INFO
    credits:
      CS101: 4
      CS201: 3
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_DB_PATH = "coursegate.db"

# Environment variable -> settings field
ENV_OVERRIDES = {
    "COURSEGATE_DB_PATH": "db_path",
    "COURSEGATE_LOCK_TIMEOUT": "lock_timeout",
    "COURSEGATE_BUSY_TIMEOUT": "busy_timeout",
    "COURSEGATE_LOG_DIR": "log_dir",
    "COURSEGATE_LOG_LEVEL": "log_level",
}


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


def _positive_float(value: Any, name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e
    if number <= 0:
        raise ConfigError(f"{name} must be positive, got {number}")
    return number


@dataclass
class Settings:
    """coursegate runtime settings."""

    db_path: str = DEFAULT_DB_PATH
    lock_timeout: float = 5.0
    busy_timeout: float = 5.0
    log_dir: str = "logs"
    log_level: str = "INFO"
    credits: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create settings from a dictionary.

        Args:
            data: Settings dictionary, e.g. from YAML. Missing keys keep defaults.

        Returns:
            Parsed settings object.

        Raises:
            ConfigError: If a key is unknown or a value is invalid.
        """
        known = {"db_path", "lock_timeout", "busy_timeout", "log_dir", "log_level", "credits"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown settings: {', '.join(unknown)}")

        settings = cls()
        if "db_path" in data:
            settings.db_path = str(data["db_path"])
        if "lock_timeout" in data:
            settings.lock_timeout = _positive_float(data["lock_timeout"], "lock_timeout")
        if "busy_timeout" in data:
            settings.busy_timeout = _positive_float(data["busy_timeout"], "busy_timeout")
        if "log_dir" in data:
            settings.log_dir = str(data["log_dir"])
        if "log_level" in data:
            settings.log_level = str(data["log_level"]).upper()

        credits = data.get("credits") or {}
        if not isinstance(credits, dict):
            raise ConfigError(f"credits must be a mapping, got {type(credits).__name__}")
        try:
            settings.credits = {str(k): float(v) for k, v in credits.items()}
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid credit weight: {e}") from e

        return settings


def load_settings(
    config_path: Path | str | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """Load settings from an optional YAML file and the environment.

    Args:
        config_path: Path to a YAML settings file (optional).
        environ: Environment to read overrides from. Defaults to os.environ.

    Returns:
        Parsed settings object.

    Raises:
        ConfigError: If the file doesn't exist or a value is invalid.
    """
    data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")
        try:
            with open(config_path) as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(
                f"Configuration must be a YAML mapping, got {type(loaded).__name__}"
            )
        data.update(loaded)

    env = os.environ if environ is None else environ
    for variable, key in ENV_OVERRIDES.items():
        if env.get(variable):
            data[key] = env[variable]

    return Settings.from_dict(data)
