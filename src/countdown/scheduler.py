"""Countdown scheduler: evaluates deadline tasks on a fixed tick.

The scheduler owns the task registry, the clock offset and the repeating
tick. Each tick samples the clock; if the gap since the previous sample
exceeds the drift threshold and a time-fixer is registered, it resyncs the
offset instead of evaluating. Otherwise every task is evaluated and gets a
fresh ``Count``.

The tick callbacks are module functions that take a ``TickContext``; the
scheduler only builds the context and delegates to them.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import tzinfo
from enum import Enum
from functools import partial
from typing import Any

from countdown.clock import Clock, wall_clock_ms
from countdown.config.models import SchedulerConfig
from countdown.count import Count, calculate
from countdown.errors import ResyncError, TaskExecutionError
from countdown.fixers import ResyncToken
from countdown.registry import Active, TaskCallback, TaskRegistry, ensure_callable

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[BaseException], None]

# Heartbeat every 120 ticks (~1 min at 500ms)
HEARTBEAT_INTERVAL = 120


class SchedulerStatus(Enum):
    IDLE = "idle"
    ARMED = "armed"
    CORRECTING = "correcting"


@dataclass
class SchedulerState:
    """Mutable scheduler state shared by the tick callbacks."""

    time_offset: int = 0  # ms, system clock minus reference clock
    last_moment: int = 0  # ms, raw clock sample of the last tick or resync
    status: SchedulerStatus = SchedulerStatus.IDLE
    timer: asyncio.TimerHandle | None = None
    time_fixer: Callable[..., Awaitable[Any]] | None = None
    fixer_takes_token: bool = False
    resync_task: asyncio.Task[None] | None = None
    resync_token: ResyncToken | None = None
    last_failures: list[TaskExecutionError] = field(default_factory=list)
    pending_callbacks: set[asyncio.Future[Any]] = field(default_factory=set)

    @property
    def resync_in_flight(self) -> bool:
        return self.resync_task is not None and not self.resync_task.done()


@dataclass
class TickContext:
    """Everything a tick needs, passed explicitly across async boundaries."""

    state: SchedulerState
    registry: TaskRegistry
    config: SchedulerConfig
    clock: Clock
    loop: asyncio.AbstractEventLoop
    report: ErrorHandler
    tz: tzinfo | None = None
    tick_count: int = 0


def evaluate_tasks(ctx: TickContext) -> list[TaskExecutionError]:
    """Evaluate every active task once and return the failures in order."""
    state = ctx.state
    baseline = state.last_moment
    moment = ctx.clock() - state.time_offset
    failures: list[TaskExecutionError] = []

    for task in ctx.registry:
        if not isinstance(task.slot, Active):
            continue

        duration = task.target_time - moment
        if duration < 0:
            # Overdue: deliver only if the clock has not jumped since the last tick
            fresh = ctx.clock()
            if abs(fresh - baseline) > ctx.config.drift_threshold_ms:
                logger.debug(
                    "countdown_overdue_suppressed",
                    extra={"task.index": task.index, "time.gap_ms": fresh - baseline},
                )
                continue

        try:
            result = task.slot.callback(calculate(duration, moment, ctx.tz))
        except Exception as e:
            failure = TaskExecutionError(task.index, e)
            failure.__cause__ = e
            failures.append(failure)
            continue

        if inspect.isawaitable(result):
            _track_callback(ctx, task.index, result)

    if failures:
        failures[0].failures = failures
    state.last_failures = failures
    return failures


def _track_callback(ctx: TickContext, index: int, awaitable: Awaitable[Any]) -> None:
    future = asyncio.ensure_future(awaitable, loop=ctx.loop)
    ctx.state.pending_callbacks.add(future)
    future.add_done_callback(partial(_on_callback_done, ctx, index))


def _on_callback_done(ctx: TickContext, index: int, future: asyncio.Future[Any]) -> None:
    ctx.state.pending_callbacks.discard(future)
    if future.cancelled():
        return
    if (error := future.exception()) is not None:
        failure = TaskExecutionError(index, error)
        failure.__cause__ = error
        ctx.report(failure)


def fix_offset(ctx: TickContext, reference: int | None) -> None:
    state = ctx.state
    moment = ctx.clock()
    state.time_offset = moment - (reference if reference is not None else moment)
    state.last_moment = ctx.clock()
    logger.debug(
        "countdown_offset_fixed",
        extra={"time.offset_ms": state.time_offset, "time.reference": reference},
    )


def arm(ctx: TickContext) -> None:
    """Schedule the next tick."""
    state = ctx.state
    if state.timer is not None:
        state.timer.cancel()
    state.timer = ctx.loop.call_later(
        ctx.config.tick_interval_ms / 1000, _on_tick, ctx
    )
    state.status = SchedulerStatus.ARMED


def _report_failures(ctx: TickContext, failures: list[TaskExecutionError]) -> None:
    if not failures:
        return
    if len(failures) > 1:
        logger.warning(
            "countdown_task_failures_dropped",
            extra={
                "task.failure_count": len(failures),
                "task.indexes": [f.index for f in failures],
            },
        )
    ctx.report(failures[0])


def _on_tick(ctx: TickContext) -> None:
    state = ctx.state
    state.timer = None
    ctx.tick_count += 1
    if ctx.tick_count % HEARTBEAT_INTERVAL == 0:
        logger.info(
            "countdown_heartbeat",
            extra={
                "tick.count": ctx.tick_count,
                "task.active": ctx.registry.active_count,
                "time.offset_ms": state.time_offset,
            },
        )

    moment = ctx.clock()
    gap = moment - state.last_moment
    if state.time_fixer is not None and abs(gap) > ctx.config.drift_threshold_ms:
        logger.info("countdown_drift_detected", extra={"time.gap_ms": gap})
        _start_resync(ctx)
        return

    failures = evaluate_tasks(ctx)
    state.last_moment = ctx.clock()
    arm(ctx)
    _report_failures(ctx, failures)


def evaluate_out_of_band(ctx: TickContext) -> None:
    _report_failures(ctx, evaluate_tasks(ctx))


def _start_resync(ctx: TickContext) -> None:
    state = ctx.state
    token = ResyncToken()
    state.status = SchedulerStatus.CORRECTING
    state.resync_token = token
    state.resync_task = ctx.loop.create_task(resync(ctx, token))


def _coerce_reference(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ResyncError(f"Time-fixer returned {type(value).__name__}, expected ms")
    return int(value)


async def resync(ctx: TickContext, token: ResyncToken) -> None:
    """Ask the time-fixer for a reference time, fix the offset and re-arm.

    Failures still re-arm the tick and are then handed to the error
    handler. A cancelled token means pause() asked for the resync to be
    abandoned: nothing is re-armed.
    """
    state = ctx.state
    fixer = state.time_fixer
    if fixer is None:
        arm(ctx)
        return

    try:
        if state.fixer_takes_token:
            result = await fixer(token)
        else:
            result = await fixer()
        reference = _coerce_reference(result)
    except asyncio.CancelledError:
        logger.info("countdown_resync_cancelled")
        raise
    except Exception as e:
        if token.cancelled:
            logger.info("countdown_resync_cancelled", extra={"error.message": str(e)})
            return
        if isinstance(e, ResyncError):
            error = e
        else:
            error = ResyncError(f"Time-fixer failed: {e}")
            error.__cause__ = e
        logger.warning("countdown_resync_failed", extra={"error.message": str(e)})
        # Keep the old offset; the next drift check starts from this sample
        state.last_moment = ctx.clock()
        arm(ctx)
        ctx.report(error)
        return

    if token.cancelled:
        logger.info("countdown_resync_cancelled")
        return

    fix_offset(ctx, reference)
    logger.info(
        "countdown_resynced",
        extra={"time.offset_ms": state.time_offset, "time.reference": reference},
    )
    arm(ctx)


class Countdown:
    """Tracks deadline tasks and delivers a ``Count`` to each on every tick.

    Must be created while an event loop is running (or given one); the
    first tick is armed by the constructor.

    Example:
        countdown = Countdown(base_time=server_now_ms)

        def show(count: Count) -> None:
            print(format_count(count))

        index = countdown.add_task(deadline_ms, show)
        ...
        countdown.pause()
    """

    def __init__(
        self,
        *,
        base_time: int | None = None,
        config: SchedulerConfig | None = None,
        clock: Clock | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        error_handler: ErrorHandler | None = None,
    ):
        self._config = config or SchedulerConfig()
        self._loop = loop or asyncio.get_running_loop()
        self._error_handler = error_handler
        self._registry = TaskRegistry()
        self._state = SchedulerState()
        self._ctx = TickContext(
            state=self._state,
            registry=self._registry,
            config=self._config,
            clock=clock or wall_clock_ms,
            loop=self._loop,
            report=self._report,
            tz=self._config.tzinfo(),
        )

        if base_time is None:
            base_time = self._config.base_time
        self.fix_time_offset(base_time)
        arm(self._ctx)

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def status(self) -> SchedulerStatus:
        return self._state.status

    @property
    def tasks(self) -> TaskRegistry:
        return self._registry

    @property
    def time_offset(self) -> int:
        return self._state.time_offset

    @property
    def last_failures(self) -> list[TaskExecutionError]:
        return self._state.last_failures

    def now(self) -> int:
        """Current moment in ms, corrected by the reference offset."""
        return self._ctx.clock() - self._state.time_offset

    def calculate(self, duration: int, moment: int) -> Count:
        return calculate(duration, moment, self._ctx.tz)

    def add_task(self, time: int, callback: TaskCallback) -> int:
        """Register a deadline and return its slot index.

        All tasks are evaluated once right away, outside the tick cadence,
        so the callback may run twice in quick succession.
        """
        index = self._registry.add(time, callback)
        self._loop.call_soon(evaluate_out_of_band, self._ctx)
        return index

    def remove_task(self, index: int) -> "Countdown":
        self._registry.remove(index)
        return self

    def shift_task(self, index: int, time: int, callback: TaskCallback) -> "Countdown":
        self._registry.shift(index, time, callback)
        return self

    def add_time_fixer(
        self, callback: Callable[..., Awaitable[Any]], *, pass_token: bool = False
    ) -> "Countdown":
        """Register the async reference clock, replacing any earlier one.

        With ``pass_token`` the fixer is called with the resync's
        ``ResyncToken`` so it can stop early when pause() cancels it.
        """
        ensure_callable(callback, "time fixer")
        self._state.time_fixer = callback
        self._state.fixer_takes_token = pass_token
        return self

    def process_tasks(self, *, raise_on_error: bool = True) -> list[TaskExecutionError]:
        """Evaluate all tasks now.

        Returns the callback failures in evaluation order. With
        ``raise_on_error`` the first failure is raised instead; the full
        list is on its ``failures`` attribute.
        """
        failures = evaluate_tasks(self._ctx)
        if failures and raise_on_error:
            raise failures[0]
        return failures

    def fix_time_offset(self, reference: int | None = None) -> "Countdown":
        fix_offset(self._ctx, reference)
        return self

    def pause(self) -> None:
        """Stop ticking. Tasks and offset are kept.

        An in-flight resync is only abandoned when the scheduler is
        configured with ``cancel_resync_on_pause``; otherwise it finishes
        and re-arms the tick.
        """
        state = self._state
        if state.timer is not None:
            state.timer.cancel()
            state.timer = None
        state.status = SchedulerStatus.IDLE

        if self._config.cancel_resync_on_pause and state.resync_in_flight:
            if state.resync_token is not None:
                state.resync_token.cancel()
            if state.resync_task is not None:
                state.resync_task.cancel()
        logger.debug("countdown_paused", extra={"task.count": len(self._registry)})

    def resume(self) -> "Countdown":
        """Re-arm the tick after pause(). No-op while armed or resyncing."""
        state = self._state
        if state.timer is None and not state.resync_in_flight:
            state.last_moment = self._ctx.clock()
            arm(self._ctx)
        return self

    async def aclose(self) -> None:
        """Pause and wait out any in-flight resync or async callbacks."""
        self.pause()
        pending: list[asyncio.Future[Any]] = list(self._state.pending_callbacks)
        if self._state.resync_in_flight and self._state.resync_task is not None:
            if self._state.resync_token is not None:
                self._state.resync_token.cancel()
            self._state.resync_task.cancel()
            pending.append(self._state.resync_task)
        for future in pending:
            future.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def _report(self, error: BaseException) -> None:
        if self._error_handler is not None:
            self._error_handler(error)
            return
        self._loop.call_exception_handler(
            {
                "message": f"countdown: {error}",
                "exception": error,
            }
        )
