"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from countdown.config.models import CountdownConfig
from countdown.config.paths import get_config_path

# (section, key, environment variable)
ENV_OVERRIDES = [
    ("time_fixer", "url", "COUNTDOWN_TIME_FIXER_URL"),
    ("scheduler", "timezone", "COUNTDOWN_TIMEZONE"),
]


def _get_default_config_paths() -> list[Path]:
    """Get ordered list of default config file locations."""
    return [
        Path("countdown.toml"),  # Current directory
        get_config_path(),  # ~/.countdown/config.toml (or COUNTDOWN_HOME)
    ]


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Let environment variables win over values from the file."""
    for section_key, key, env_var in ENV_OVERRIDES:
        value = os.environ.get(env_var)
        if not value:
            continue
        section = config.get(section_key)
        if not isinstance(section, dict):
            section = {}
            config[section_key] = section
        section[key] = value
    return config


def load_config(path: Path | None = None) -> CountdownConfig:
    """Load configuration from a TOML file.

    Args:
        path: Explicit path to config file. If None, searches default
            locations and falls back to defaults when none exists.

    Returns:
        Validated CountdownConfig instance.

    Raises:
        FileNotFoundError: If an explicit path does not exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
        pydantic.ValidationError: If the values are invalid.
    """
    config_path: Path | None = None

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for default_path in _get_default_config_paths():
            expanded = default_path.expanduser()
            if expanded.exists():
                config_path = expanded
                break

    raw_config: dict[str, Any] = {}
    if config_path is not None:
        with config_path.open("rb") as f:
            raw_config = tomllib.load(f)

    raw_config = _apply_env_overrides(raw_config)

    return CountdownConfig.model_validate(raw_config)


def get_default_config() -> CountdownConfig:
    """Get a default configuration."""
    return CountdownConfig()
