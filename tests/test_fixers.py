"""Tests for time-fixers."""

import asyncio

import httpx
import pytest

from countdown.config.models import ConfigError, TimeFixerConfig
from countdown.errors import ResyncError
from countdown.fixers import HttpDateTimeFixer, ResyncToken
from tests.conftest import START_MS, FakeClock

DATE_HEADER = "Mon, 05 Jan 2026 12:00:00 GMT"


def make_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestResyncToken:
    async def test_starts_uncancelled(self):
        assert ResyncToken().cancelled is False

    async def test_cancel_wakes_waiters(self):
        token = ResyncToken()
        waiter = asyncio.create_task(token.wait())
        await asyncio.sleep(0)
        assert not waiter.done()

        token.cancel()
        await asyncio.wait_for(waiter, timeout=1)

        assert token.cancelled


class TestHttpDateTimeFixer:
    async def test_reads_date_header(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, headers={"Date": DATE_HEADER})

        async with make_client(handler) as client:
            fixer = HttpDateTimeFixer(
                "https://time.example.com", client=client, clock=FakeClock()
            )
            reference = await fixer()

        assert reference == START_MS
        assert requests[0].method == "HEAD"

    async def test_adds_half_round_trip(self):
        clock = FakeClock()

        def handler(request: httpx.Request) -> httpx.Response:
            clock.advance(400)
            return httpx.Response(200, headers={"Date": DATE_HEADER})

        async with make_client(handler) as client:
            fixer = HttpDateTimeFixer("https://time.example.com", client=client, clock=clock)
            assert await fixer() == START_MS + 200

    async def test_get_method(self):
        methods: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            methods.append(request.method)
            return httpx.Response(200, headers={"Date": DATE_HEADER})

        async with make_client(handler) as client:
            fixer = HttpDateTimeFixer("https://time.example.com", method="get", client=client)
            await fixer()

        assert methods == ["GET"]

    async def test_missing_date_header(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200)

        async with make_client(handler) as client:
            fixer = HttpDateTimeFixer("https://time.example.com", client=client)
            with pytest.raises(ResyncError, match="No Date header"):
                await fixer()

    async def test_unparseable_date_header(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"Date": "sometime soon"})

        async with make_client(handler) as client:
            fixer = HttpDateTimeFixer("https://time.example.com", client=client)
            with pytest.raises(ResyncError, match="Unparseable"):
                await fixer()

    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            fixer = HttpDateTimeFixer("https://time.example.com", client=client)
            with pytest.raises(ResyncError) as exc_info:
                await fixer()

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    async def test_cancelled_token_skips_request(self):
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, headers={"Date": DATE_HEADER})

        token = ResyncToken()
        token.cancel()

        async with make_client(handler) as client:
            fixer = HttpDateTimeFixer("https://time.example.com", client=client)
            with pytest.raises(ResyncError, match="cancelled"):
                await fixer(token)

        assert calls == []

    async def test_token_cancels_pending_request(self):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(10)
            return httpx.Response(200, headers={"Date": DATE_HEADER})

        token = ResyncToken()
        asyncio.get_running_loop().call_later(0.01, token.cancel)

        async with make_client(handler) as client:
            fixer = HttpDateTimeFixer("https://time.example.com", client=client)
            with pytest.raises(ResyncError, match="cancelled"):
                await asyncio.wait_for(fixer(token), timeout=2)

    async def test_token_allows_completed_request(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"Date": DATE_HEADER})

        async with make_client(handler) as client:
            fixer = HttpDateTimeFixer(
                "https://time.example.com", client=client, clock=FakeClock()
            )
            assert await fixer(ResyncToken()) == START_MS

    def test_from_config(self):
        fixer = HttpDateTimeFixer.from_config(
            TimeFixerConfig(url="https://time.example.com", timeout=2.0)
        )
        assert fixer.url == "https://time.example.com"

    def test_from_config_requires_url(self):
        with pytest.raises(ConfigError):
            HttpDateTimeFixer.from_config(TimeFixerConfig())
