"""Shared test fixtures and factories."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime

import pytest

from countdown.config.models import SchedulerConfig
from countdown.config.paths import get_countdown_home
from countdown.scheduler import Countdown

# Monday 2026-01-05 12:00:00 UTC
START_MS = int(datetime(2026, 1, 5, 12, 0, tzinfo=UTC).timestamp() * 1000)


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point COUNTDOWN_HOME at a temp dir and keep the cwd free of config files."""
    home = tmp_path / "countdown-home"
    monkeypatch.setenv("COUNTDOWN_HOME", str(home))
    for var in ("COUNTDOWN_TIME_FIXER_URL", "COUNTDOWN_TIMEZONE", "COUNTDOWN_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    get_countdown_home.cache_clear()
    yield home
    get_countdown_home.cache_clear()


# =============================================================================
# Scheduler Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def errors() -> list[BaseException]:
    """Collects failures the scheduler reports from async contexts."""
    return []


@pytest.fixture
def scheduler_config() -> SchedulerConfig:
    # Long tick so tests drive evaluation explicitly
    return SchedulerConfig(tick_interval_ms=60_000, timezone="UTC")


@pytest.fixture
async def countdown(
    clock: FakeClock,
    errors: list[BaseException],
    scheduler_config: SchedulerConfig,
) -> AsyncGenerator[Countdown, None]:
    scheduler = Countdown(
        config=scheduler_config, clock=clock, error_handler=errors.append
    )
    yield scheduler
    await scheduler.aclose()


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1"})
