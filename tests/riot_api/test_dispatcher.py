"""
Tests for the serialized, rate-limited request dispatcher.
"""

import asyncio
import time

import httpx
import pytest

from rankwatch.core.riot_api.dispatcher import RequestDispatcher
from rankwatch.core.riot_api.errors import (
    AuthenticationError,
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ResponseDecodeError,
    RiotAPIError,
    ServiceUnavailableError,
)
from rankwatch.core.riot_api.rate_limiter import RateLimiter

URL = "https://euw1.api.riotgames.com/lol/summoner/v4/summoners/by-puuid/abc"


class ScriptedHandler:
    """MockTransport handler replaying a fixed list of responses."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)


def make_dispatcher(handler, limiters=None, **kwargs) -> RequestDispatcher:
    session = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    kwargs.setdefault("poll_interval_seconds", 0.001)
    kwargs.setdefault("cooldown_seconds", 0.01)
    return RequestDispatcher(
        session, limiters or [RateLimiter(100, 1.0)], **kwargs
    )


class TestRequestDispatcher:
    """Test cases for RequestDispatcher."""

    @pytest.mark.asyncio
    async def test_success_returns_decoded_json(self):
        """Test a 200 response is decoded."""
        handler = ScriptedHandler(httpx.Response(200, json={"puuid": "abc"}))
        dispatcher = make_dispatcher(handler)

        result = await dispatcher.execute(URL)

        assert result == {"puuid": "abc"}
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_no_content_returns_none(self):
        """Test an empty 2xx body is returned as None."""
        dispatcher = make_dispatcher(ScriptedHandler(httpx.Response(204)))

        assert await dispatcher.execute(URL) is None

    @pytest.mark.asyncio
    async def test_rate_limited_once_then_success(self):
        """Test one 429 is retried after the cool-down and is invisible to callers."""
        handler = ScriptedHandler(
            httpx.Response(429, headers={"Retry-After": "1"}),
            httpx.Response(200, json=["EUW1_1"]),
        )
        dispatcher = make_dispatcher(handler)

        result = await dispatcher.execute(URL)

        assert result == ["EUW1_1"]
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_rate_limited_twice_raises(self):
        """Test a second 429 surfaces as RateLimitError without further retries."""
        handler = ScriptedHandler(
            httpx.Response(429, headers={"Retry-After": "7"}),
            httpx.Response(429, headers={"Retry-After": "7"}),
        )
        dispatcher = make_dispatcher(handler)

        with pytest.raises(RateLimitError) as exc_info:
            await dispatcher.execute(URL)

        assert exc_info.value.status_code == 429
        assert exc_info.value.retry_after == 7.0
        assert exc_info.value.is_rate_limit()
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_cooldown_sleeps_before_retry(self):
        """Test the retry waits for the configured cool-down."""
        handler = ScriptedHandler(
            httpx.Response(429), httpx.Response(200, json={})
        )
        dispatcher = make_dispatcher(handler, cooldown_seconds=0.05)

        started = time.monotonic()
        await dispatcher.execute(URL)

        assert time.monotonic() - started >= 0.04

    @pytest.mark.asyncio
    async def test_not_found_is_distinguished(self):
        """Test a 404 raises NotFoundError and is not retried."""
        handler = ScriptedHandler(httpx.Response(404, json={"status": {}}))
        dispatcher = make_dispatcher(handler)

        with pytest.raises(NotFoundError) as exc_info:
            await dispatcher.execute(URL)

        assert exc_info.value.is_not_found()
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,error_type",
        [
            (400, BadRequestError),
            (401, AuthenticationError),
            (403, ForbiddenError),
            (503, ServiceUnavailableError),
        ],
    )
    async def test_typed_errors(self, status, error_type):
        """Test known statuses map to their error classes."""
        dispatcher = make_dispatcher(ScriptedHandler(httpx.Response(status)))

        with pytest.raises(error_type) as exc_info:
            await dispatcher.execute(URL)

        assert exc_info.value.status_code == status

    @pytest.mark.asyncio
    async def test_unexpected_status_carries_code(self):
        """Test other non-2xx statuses raise RiotAPIError with the status code."""
        handler = ScriptedHandler(httpx.Response(500, json={"message": "boom"}))
        dispatcher = make_dispatcher(handler)

        with pytest.raises(RiotAPIError) as exc_info:
            await dispatcher.execute(URL)

        assert exc_info.value.status_code == 500
        assert exc_info.value.response_data == {"message": "boom"}
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self):
        """Test transport failures reach the caller unchanged."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        dispatcher = make_dispatcher(handler)

        with pytest.raises(httpx.ConnectError):
            await dispatcher.execute(URL)

    @pytest.mark.asyncio
    async def test_invalid_json_raises_decode_error(self):
        """Test a 2xx body that is not JSON raises ResponseDecodeError."""
        handler = ScriptedHandler(httpx.Response(200, content=b"<html>oops</html>"))
        dispatcher = make_dispatcher(handler)

        with pytest.raises(ResponseDecodeError):
            await dispatcher.execute(URL)

    @pytest.mark.asyncio
    async def test_waits_for_limiter_capacity(self):
        """Test a call blocks until the limiter window frees up."""
        handler = ScriptedHandler(
            httpx.Response(200, json={}), httpx.Response(200, json={})
        )
        dispatcher = make_dispatcher(handler, limiters=[RateLimiter(1, 0.05)])

        started = time.monotonic()
        await dispatcher.execute(URL)
        await dispatcher.execute(URL)

        assert time.monotonic() - started >= 0.04
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_calls_are_serialized(self):
        """Test concurrent callers never have two requests in flight."""
        in_flight = 0
        max_in_flight = 0

        async def handler(request):
            nonlocal in_flight, max_in_flight
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)
            await asyncio.sleep(0.005)
            in_flight -= 1
            return httpx.Response(200, json={"ok": True})

        dispatcher = make_dispatcher(handler)

        results = await asyncio.gather(*(dispatcher.execute(URL) for _ in range(5)))

        assert results == [{"ok": True}] * 5
        assert max_in_flight == 1

    @pytest.mark.asyncio
    async def test_request_callback_counts_http_calls(self):
        """Test the callback fires once per HTTP call, retries included."""
        calls = []
        handler = ScriptedHandler(httpx.Response(429), httpx.Response(200, json={}))
        dispatcher = make_dispatcher(
            handler, request_callback=lambda metric, count: calls.append((metric, count))
        )

        await dispatcher.execute(URL)

        assert calls == [("requests_made", 1), ("requests_made", 1)]
