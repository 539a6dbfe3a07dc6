"""Time-fixers: async sources of a reference timestamp.

The scheduler calls its time-fixer when two clock samples are further apart
than the drift threshold (system sleep, manual clock change) and uses the
returned timestamp to recompute its offset.

Public types:
- TimeFixer: ``async () -> ms epoch``
- TokenTimeFixer: ``async (token) -> ms epoch``, can observe cancellation
- ResyncToken: cancellation flag handed to token-aware fixers
- HttpDateTimeFixer: reads the ``Date`` header of an HTTP server
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC
from email.utils import parsedate_to_datetime
from typing import Protocol

import httpx

from countdown.clock import Clock, from_datetime, wall_clock_ms
from countdown.config.models import ConfigError, TimeFixerConfig
from countdown.errors import ResyncError

logger = logging.getLogger(__name__)


class TimeFixer(Protocol):
    """Returns a reference timestamp in ms, or None for "no reference"."""

    async def __call__(self) -> int | float | None: ...


class TokenTimeFixer(Protocol):
    """Time-fixer that is handed the resync's cancellation token."""

    async def __call__(self, token: ResyncToken) -> int | float | None: ...


class ResyncToken:
    """Cancellation flag for one resync attempt."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()


class HttpDateTimeFixer:
    """Use an HTTP server's ``Date`` header as the reference clock.

    The header only has second precision; half of the measured round trip
    is added to approximate the server time at the moment of receipt.

    Example:
        fixer = HttpDateTimeFixer("https://example.com")
        countdown.add_time_fixer(fixer, pass_token=True)
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 5.0,
        method: str = "HEAD",
        client: httpx.AsyncClient | None = None,
        clock: Clock = wall_clock_ms,
    ):
        self._url = url
        self._timeout = timeout
        self._method = method.upper()
        self._client = client
        self._clock = clock

    @classmethod
    def from_config(cls, config: TimeFixerConfig) -> HttpDateTimeFixer:
        if not config.url:
            raise ConfigError("time_fixer.url is not configured")
        return cls(config.url, timeout=config.timeout, method=config.method)

    @property
    def url(self) -> str:
        return self._url

    async def __call__(self, token: ResyncToken | None = None) -> int:
        if token is None:
            return await self._fetch()
        if token.cancelled:
            raise ResyncError("Resync cancelled before request")

        fetch = asyncio.ensure_future(self._fetch())
        cancelled = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({fetch, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancelled.cancel()

        if not fetch.done():
            fetch.cancel()
            try:
                await fetch
            except asyncio.CancelledError:
                pass
            raise ResyncError("Resync cancelled while waiting for response")
        return fetch.result()

    async def _fetch(self) -> int:
        started = self._clock()
        try:
            if self._client is not None:
                response = await self._client.request(
                    self._method, self._url, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.request(self._method, self._url)
        except httpx.HTTPError as e:
            logger.warning(
                "time_fixer_request_failed",
                extra={"http.url": self._url, "error.message": str(e)},
            )
            raise ResyncError(f"Request to {self._url} failed: {e}") from e
        finished = self._clock()

        header = response.headers.get("date")
        if not header:
            raise ResyncError(f"No Date header in response from {self._url}")
        try:
            parsed = parsedate_to_datetime(header)
        except (TypeError, ValueError) as e:
            raise ResyncError(f"Unparseable Date header: {header!r}") from e
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        server_time = from_datetime(parsed)

        reference = server_time + (finished - started) // 2
        logger.debug(
            "time_fixer_reference",
            extra={
                "http.url": self._url,
                "http.status_code": response.status_code,
                "time.reference": reference,
                "time.round_trip_ms": finished - started,
            },
        )
        return reference
