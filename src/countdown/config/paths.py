"""Centralized path management for countdown.

All state (config, logs) lives under a single base directory, which can be
overridden with the COUNTDOWN_HOME environment variable.

Default locations:
- Linux/macOS: ~/.countdown
- Windows: %USERPROFILE%\\.countdown
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_VAR = "COUNTDOWN_HOME"


@lru_cache(maxsize=1)
def get_countdown_home() -> Path:
    """Get the base directory for all countdown data.

    Resolution order:
    1. COUNTDOWN_HOME environment variable (if set)
    2. Platform default (~/.countdown)
    """
    if env_home := os.environ.get(ENV_VAR):
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".countdown"


def get_config_path() -> Path:
    """Get the default config file path."""
    return get_countdown_home() / "config.toml"


def get_logs_path() -> Path:
    """Get the JSONL log directory."""
    return get_countdown_home() / "logs"
