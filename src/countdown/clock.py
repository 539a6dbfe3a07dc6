"""Wall-clock sampling in milliseconds."""

import time
from collections.abc import Callable
from datetime import UTC, datetime, tzinfo

# Returns milliseconds since the epoch
Clock = Callable[[], int]

# Moments a datetime can hold in any timezone, one day inside the year 1 to 9999 range
MIN_MS = int(datetime(1, 1, 2, tzinfo=UTC).timestamp() * 1000)
MAX_MS = int(datetime(9999, 12, 30, tzinfo=UTC).timestamp() * 1000)


def wall_clock_ms() -> int:
    """Sample the system clock in whole milliseconds."""
    return time.time_ns() // 1_000_000


def in_range(moment: int | float) -> bool:
    return MIN_MS <= moment <= MAX_MS


def to_datetime(moment: int | float, tz: tzinfo | None = None) -> datetime:
    """Convert a ms timestamp to an aware datetime (system local if tz is None)."""
    if tz is None:
        return datetime.fromtimestamp(moment / 1000).astimezone()
    return datetime.fromtimestamp(moment / 1000, tz)


def from_datetime(value: datetime) -> int:
    """Convert a datetime to ms since the epoch. Naive values are local time."""
    return int(value.timestamp() * 1000)
