"""Index-stable registry of scheduled tasks.

Slots are never reused or compacted. Removing a task swaps its slot to
``Removed`` so indices held by callers stay valid for a later ``shift``.
"""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from countdown.clock import MAX_MS, MIN_MS, in_range
from countdown.count import Count
from countdown.errors import ValidationError

logger = logging.getLogger(__name__)

TaskCallback = Callable[[Count], Any]


@dataclass(frozen=True)
class Active:
    """A slot with a live callback."""

    callback: TaskCallback


@dataclass(frozen=True)
class Removed:
    """A slot whose task was removed. Skipped during evaluation."""


REMOVED = Removed()


@dataclass
class ScheduledTask:
    """A deadline and what to do with its ``Count``."""

    target_time: int  # ms since epoch
    slot: Active | Removed
    index: int

    @property
    def is_active(self) -> bool:
        return isinstance(self.slot, Active)


def ensure_callable(value: Any, name: str = "callback") -> None:
    if not callable(value):
        raise ValidationError(f"{name} must be callable, got {type(value).__name__}")


def ensure_target(target_time: int) -> None:
    if not in_range(target_time):
        raise ValidationError(
            f"target time {target_time} is outside {MIN_MS}..{MAX_MS} ms"
        )


class TaskRegistry:
    """Ordered collection of scheduled tasks; insertion order is evaluation order."""

    def __init__(self) -> None:
        self._tasks: list[ScheduledTask] = []

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[ScheduledTask]:
        return iter(self._tasks)

    @property
    def active_count(self) -> int:
        return sum(1 for task in self._tasks if task.is_active)

    def get(self, index: int) -> ScheduledTask:
        if index < 0 or index >= len(self._tasks):
            raise IndexError(f"No task at slot {index}")
        return self._tasks[index]

    def add(self, target_time: int, callback: TaskCallback) -> int:
        ensure_callable(callback)
        ensure_target(target_time)
        index = len(self._tasks)
        self._tasks.append(
            ScheduledTask(target_time=target_time, slot=Active(callback), index=index)
        )
        logger.debug(
            "countdown_task_added",
            extra={"task.index": index, "task.target_time": target_time},
        )
        return index

    def shift(self, index: int, target_time: int, callback: TaskCallback) -> None:
        ensure_callable(callback)
        ensure_target(target_time)
        self._replace(index, target_time, Active(callback))

    def remove(self, index: int) -> None:
        task = self.get(index)
        self._replace(index, task.target_time, REMOVED)

    def _replace(self, index: int, target_time: int, slot: Active | Removed) -> None:
        task = self.get(index)
        task.target_time = target_time
        task.slot = slot
        logger.debug(
            "countdown_task_shifted",
            extra={
                "task.index": index,
                "task.target_time": target_time,
                "task.active": isinstance(slot, Active),
            },
        )
