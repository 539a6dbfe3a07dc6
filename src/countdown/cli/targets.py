"""Parsing of deadline arguments given on the command line."""

import re
from datetime import datetime

from countdown.clock import from_datetime

# Relative durations: 90s, 15m, 1h30m, 2d, 1d12h
_RELATIVE_RE = re.compile(
    r"^\+?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?$", re.IGNORECASE
)


def parse_relative_ms(value: str) -> int | None:
    """Parse a relative duration into milliseconds, or None if it is not one."""
    text = value.strip()
    m = _RELATIVE_RE.match(text)
    if not m or not any(m.groups()):
        return None
    days, hours, minutes, seconds = (int(g or 0) for g in m.groups())
    return (((days * 24 + hours) * 60 + minutes) * 60 + seconds) * 1000


def parse_target(value: str, now_ms: int) -> int:
    """Resolve a deadline argument to ms since the epoch.

    Accepts a relative duration (``90s``, ``1h30m``) counted from
    ``now_ms`` or an ISO-8601 datetime (naive values are local time).

    Raises:
        ValueError: If the value is neither.
    """
    relative = parse_relative_ms(value)
    if relative is not None:
        return now_ms + relative
    try:
        return from_datetime(datetime.fromisoformat(value.strip()))
    except ValueError:
        raise ValueError(
            f"Invalid target {value!r}: use a duration like 90s or 1h30m, "
            "or an ISO datetime"
        ) from None
