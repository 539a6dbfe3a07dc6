"""Calendar-aware breakdown of the time left until a deadline."""

from dataclasses import dataclass
from datetime import tzinfo

from countdown.clock import to_datetime

SECONDS_PER_DAY = 86400


def weekday(moment: int | float, tz: tzinfo | None = None) -> int:
    """Day of the week for a ms timestamp, Sunday = 0."""
    return (to_datetime(moment, tz).weekday() + 1) % 7


@dataclass(frozen=True)
class Count:
    """Remaining time for one task at one evaluation moment.

    ``days`` counts whole 24 hour buckets. ``day`` is the calendar-adjusted
    count: a deadline 20 hours away that lands on the next calendar day
    reads as 1, not 0.
    """

    duration: int  # ms, target minus moment
    moment: int  # ms since epoch at evaluation
    day: int
    days: int
    hour: int
    minute: int
    second: int

    @property
    def out_time(self) -> bool:
        return self.duration < 0

    @property
    def second_total(self) -> int:
        """Signed remaining time in milliseconds."""
        return self.duration

    @property
    def seconds_total(self) -> int:
        return self.duration // 1000

    def to_dict(self) -> dict[str, int | bool]:
        return {
            "day": self.day,
            "days": self.days,
            "outTime": self.out_time,
            "hour": self.hour,
            "minute": self.minute,
            "second": self.second,
            "secondTotal": self.second_total,
        }


def calculate(duration: int | float, moment: int | float, tz: tzinfo | None = None) -> Count:
    """Build the ``Count`` for ``duration`` ms remaining as seen at ``moment``."""
    duration = int(duration)
    moment = int(moment)
    seconds = duration // 1000
    days = seconds // SECONDS_PER_DAY

    today = weekday(moment, tz)
    destiny = weekday(moment + duration, tz)
    days_off = destiny - today if destiny >= today else destiny - today + 7

    return Count(
        duration=duration,
        moment=moment,
        day=days + 1 if days % 7 != days_off else days,
        days=days,
        hour=(seconds % SECONDS_PER_DAY) // 3600,
        minute=(seconds % 3600) // 60,
        second=seconds % 60,
    )
