"""In-process countdown scheduler with clock drift correction.

Public API:
- Countdown: scheduler that evaluates deadline tasks on a fixed tick
- Count: calendar-aware breakdown of the time left, delivered to callbacks
- HttpDateTimeFixer: resyncs the clock from an HTTP server's Date header

Errors:
- ValidationError, TaskExecutionError, ResyncError (all CountdownError)
"""

from countdown.count import Count, calculate
from countdown.errors import (
    CountdownError,
    ResyncError,
    TaskExecutionError,
    ValidationError,
)
from countdown.fixers import HttpDateTimeFixer, ResyncToken, TimeFixer, TokenTimeFixer
from countdown.formatting import countdown_text, day_label, format_count
from countdown.registry import TaskRegistry
from countdown.scheduler import Countdown, SchedulerState, SchedulerStatus

__all__ = [
    "Count",
    "Countdown",
    "CountdownError",
    "HttpDateTimeFixer",
    "ResyncError",
    "ResyncToken",
    "SchedulerState",
    "SchedulerStatus",
    "TaskExecutionError",
    "TaskRegistry",
    "TimeFixer",
    "TokenTimeFixer",
    "ValidationError",
    "calculate",
    "countdown_text",
    "day_label",
    "format_count",
]
