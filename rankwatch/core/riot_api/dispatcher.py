"""Serialized, rate-limited request dispatcher for the Riot API."""

import asyncio
from typing import Any, Callable, Dict, Optional, Sequence

import httpx
import structlog

from .errors import ResponseDecodeError, error_for_status
from .rate_limiter import RateLimiter, acquire_all

logger = structlog.get_logger(__name__)


class RequestDispatcher:
    """Single point through which every outbound Riot API call is funneled.

    Calls are processed one at a time behind an ``asyncio.Lock`` (FIFO), so
    the rate limiters' bookkeeping is never raced by concurrent callers.
    Before each HTTP call the dispatcher polls until every limiter grants
    capacity. A 429 response triggers one retry after ``cooldown_seconds``;
    a second 429 is raised as ``RateLimitError``.
    """

    def __init__(
        self,
        session: httpx.AsyncClient,
        limiters: Sequence[RateLimiter],
        poll_interval_seconds: float = 0.05,
        cooldown_seconds: float = 10.0,
        request_callback: Optional[Callable[[str, int], None]] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            session: HTTP client used for every request
            limiters: Limiters that must all grant capacity (short and long window)
            poll_interval_seconds: Sleep between capacity checks
            cooldown_seconds: Sleep after a 429 before the single retry
            request_callback: Optional callback for tracking API requests (metric_name, count)
        """
        self.session = session
        self.limiters = list(limiters)
        self.poll_interval_seconds = poll_interval_seconds
        self.cooldown_seconds = cooldown_seconds
        self.request_callback = request_callback
        self._lock = asyncio.Lock()

    async def execute(
        self,
        url: str,
        method: str = "GET",
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Issue a request through the serialized, rate-limited pipeline.

        Args:
            url: Request URL
            method: HTTP method
            params: Query parameters

        Returns:
            Decoded JSON body (dict or list)

        Raises:
            NotFoundError: On 404 (callers treat this as a negative result)
            RateLimitError: When the retried request is rejected with 429 again
            RiotAPIError: For any other non-2xx status or an undecodable body
            httpx.RequestError: Transport failures, propagated unchanged
        """
        async with self._lock:
            response = await self._send(url, method, params)

            if response.status_code == 429:
                logger.warning(
                    "Rate limited by Riot API, cooling down before retry",
                    url=url,
                    cooldown_seconds=self.cooldown_seconds,
                    retry_after=response.headers.get("Retry-After"),
                )
                await asyncio.sleep(self.cooldown_seconds)
                response = await self._send(url, method, params)

            return self._handle_response(response, url)

    async def wait_for_capacity(self) -> None:
        """Sleep in bounded steps until every limiter grants one request."""
        while not acquire_all(self.limiters):
            await asyncio.sleep(self.poll_interval_seconds)

    async def _send(
        self, url: str, method: str, params: Optional[Dict[str, Any]]
    ) -> httpx.Response:
        """Wait for capacity and perform one HTTP call."""
        await self.wait_for_capacity()
        response = await self.session.request(method, url, params=params)

        if self.request_callback:
            self.request_callback("requests_made", 1)

        logger.debug(
            "Riot API request completed",
            method=method,
            url=url,
            status_code=response.status_code,
        )
        return response

    def _handle_response(self, response: httpx.Response, url: str) -> Any:
        """Map a final response to decoded data or a typed error."""
        status = response.status_code

        if 200 <= status < 300:
            if status == 204 or not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise ResponseDecodeError(
                    "Invalid JSON response", status_code=status, url=url
                ) from e

        self._raise_for_status(response, url)

    @staticmethod
    def _raise_for_status(response: httpx.Response, url: str) -> None:
        """Raise the RiotAPIError subclass matching a non-2xx status."""
        raise error_for_status(
            response.status_code,
            url=url,
            response_data=_safe_json(response),
            retry_after=_parse_retry_after(response.headers.get("Retry-After")),
        )


def _safe_json(response: httpx.Response) -> Optional[Dict[str, Any]]:
    """Best-effort decode of an error body for diagnostics."""
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else {"body": data}


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Parse a delta-seconds Retry-After header; HTTP dates are ignored."""
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None
