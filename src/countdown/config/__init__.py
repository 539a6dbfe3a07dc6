"""Configuration module."""

from countdown.config.loader import get_default_config, load_config
from countdown.config.models import (
    ConfigError,
    CountdownConfig,
    LoggingConfig,
    SchedulerConfig,
    TimeFixerConfig,
)
from countdown.config.paths import get_config_path, get_countdown_home, get_logs_path

__all__ = [
    "ConfigError",
    "CountdownConfig",
    "LoggingConfig",
    "SchedulerConfig",
    "TimeFixerConfig",
    "get_config_path",
    "get_countdown_home",
    "get_default_config",
    "get_logs_path",
    "load_config",
]
