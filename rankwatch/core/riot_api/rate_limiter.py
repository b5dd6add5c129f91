"""Sliding-log rate limiter for the Riot API request budget."""

import threading
import time
from collections import deque
from typing import Callable, Deque, Iterable

import structlog

logger = structlog.get_logger(__name__)


class RateLimiter:
    """Sliding-log limiter allowing ``max_requests`` per rolling ``window``.

    Every granted request is recorded with its timestamp; a request is allowed
    only while fewer than ``max_requests`` timestamps fall inside the last
    ``window`` seconds, so a burst straddling a window boundary cannot exceed
    the configured rate.

    ``allow`` and ``check`` are safe to call from multiple threads or tasks.
    """

    def __init__(
        self,
        max_requests: int,
        window: float,
        clock: Callable[[], float] = time.monotonic,
        name: str = "default",
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Requests permitted per window
            window: Window length in seconds
            clock: Monotonic time source (injectable for tests)
            name: Label used in log records
        """
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window <= 0:
            raise ValueError("window must be positive")

        self.max_requests = max_requests
        self.window = window
        self.name = name
        self._clock = clock
        self._timestamps: Deque[float] = deque()
        self._lock = threading.Lock()

    def _evict_expired(self, now: float) -> None:
        """Drop timestamps that left the rolling window. Caller holds the lock."""
        cutoff = now - self.window
        while self._timestamps and self._timestamps[0] <= cutoff:
            self._timestamps.popleft()

    def allow(self) -> bool:
        """Consume one unit of capacity if available.

        Returns:
            True if the request was granted and recorded, False otherwise
        """
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            if len(self._timestamps) < self.max_requests:
                self._timestamps.append(now)
                return True
            return False

    def check(self) -> bool:
        """Report whether capacity is available without consuming it."""
        with self._lock:
            self._evict_expired(self._clock())
            return len(self._timestamps) < self.max_requests

    def get_current_usage(self) -> int:
        """Number of requests recorded inside the current window."""
        with self._lock:
            self._evict_expired(self._clock())
            return len(self._timestamps)

    def get_wait_time(self) -> float:
        """Seconds until the oldest recorded request leaves the window."""
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            if len(self._timestamps) < self.max_requests:
                return 0.0
            return max(0.0, self._timestamps[0] + self.window - now)

    def __repr__(self) -> str:
        return (
            f"RateLimiter(name={self.name!r}, max_requests={self.max_requests}, "
            f"window={self.window})"
        )


def acquire_all(limiters: Iterable[RateLimiter]) -> bool:
    """Consume one unit from every limiter if all of them have capacity.

    Composition is a logical AND: nothing is consumed unless every limiter
    currently reports capacity. Callers must serialize calls (the dispatcher
    does) so no other consumer can spend a token between check and allow.
    """
    limiters = list(limiters)
    if not all(limiter.check() for limiter in limiters):
        return False

    for limiter in limiters:
        if not limiter.allow():
            logger.warning(
                "Rate limiter capacity vanished between check and allow",
                limiter=limiter.name,
            )
            return False
    return True
