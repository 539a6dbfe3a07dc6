"""Configuration models using Pydantic."""

from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator

DEFAULT_TICK_INTERVAL_MS = 500
DEFAULT_DRIFT_THRESHOLD_MS = 10000


class ConfigError(Exception):
    """Configuration error."""

    pass


class SchedulerConfig(BaseModel):
    """Configuration for the countdown scheduler loop.

    The tick runs on a fixed cadence regardless of how close any deadline
    is. Two clock samples further apart than ``drift_threshold_ms`` mean the
    local clock probably jumped.
    """

    tick_interval_ms: int = Field(default=DEFAULT_TICK_INTERVAL_MS, gt=0)
    drift_threshold_ms: int = Field(default=DEFAULT_DRIFT_THRESHOLD_MS, gt=0)
    # Reference time (ms epoch) to offset against, usually the server's
    base_time: int | None = None
    # IANA name used for weekday math; None = system local time
    timezone: str | None = None
    # Abort an in-flight resync on pause() instead of letting it re-arm
    cancel_resync_on_pause: bool = False

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    def tzinfo(self) -> ZoneInfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None


class TimeFixerConfig(BaseModel):
    """Configuration for the HTTP time-fixer."""

    url: str | None = None
    timeout: float = Field(default=5.0, gt=0)
    method: Literal["HEAD", "GET"] = "HEAD"


class LoggingConfig(BaseModel):
    """Configuration for log output."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_to_file: bool = False


class CountdownConfig(BaseModel):
    """Root configuration model."""

    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    time_fixer: TimeFixerConfig = Field(default_factory=TimeFixerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    locale: Literal["en", "zh"] = "en"
