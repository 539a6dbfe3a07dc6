"""Tests for deadline argument parsing."""

from datetime import UTC, datetime

import pytest

from countdown.cli.targets import parse_relative_ms, parse_target
from tests.conftest import START_MS


class TestParseRelative:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("90s", 90_000),
            ("15m", 900_000),
            ("1h30m", 5_400_000),
            ("2d", 172_800_000),
            ("1d12h", 129_600_000),
            ("+10s", 10_000),
            ("0s", 0),
        ],
    )
    def test_durations(self, value, expected):
        assert parse_relative_ms(value) == expected

    @pytest.mark.parametrize("value", ["", "soon", "10", "2026-01-05"])
    def test_not_a_duration(self, value):
        assert parse_relative_ms(value) is None


class TestParseTarget:
    def test_relative_to_now(self):
        assert parse_target("1m", START_MS) == START_MS + 60_000

    def test_iso_datetime(self):
        expected = int(datetime(2026, 1, 6, 9, 30, tzinfo=UTC).timestamp() * 1000)
        assert parse_target("2026-01-06T09:30:00+00:00", START_MS) == expected

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid target"):
            parse_target("next tuesday", START_MS)
