"""
Outbound request rate limiter.

Grants at most ``max_requests`` permissions per window. A window opens at
the first grant after a reset and lasts ``period`` seconds. Callers that
arrive while the window is full queue on a single asyncio.Lock and are
released in arrival order once the window elapses.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable

from .config import InterlinkConfig

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 5
DEFAULT_PERIOD_SECONDS = 1.0


class RateLimiter:
    """
    Fixed-window FIFO rate limiter shared by all dispatch call sites.

    Args:
        max_requests: Grants allowed per window. Default: 5
        period: Window length in seconds. Default: 1.0
        clock: Monotonic time source
        sleep: Coroutine used to wait out a full window
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        period: float = DEFAULT_PERIOD_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if period <= 0:
            raise ValueError("period must be positive")
        self.max_requests = max_requests
        self.period = period
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._window_start: float | None = None
        self._count = 0
        self._waiting = 0

    @classmethod
    def from_config(cls, config: InterlinkConfig) -> "RateLimiter":
        return cls(max_requests=config.max_requests_per_second, period=1.0)

    @property
    def waiting(self) -> int:
        """Number of callers queued for permission."""
        return self._waiting

    def _reset_if_elapsed(self, now: float) -> None:
        if self._window_start is None or now - self._window_start >= self.period:
            self._window_start = None
            self._count = 0

    async def acquire(self) -> None:
        """Wait until a request may be issued and consume one permission."""
        self._waiting += 1
        try:
            # The lock is held across the wait so later callers stay queued
            # behind the head of line.
            async with self._lock:
                now = self._clock()
                self._reset_if_elapsed(now)

                if self._count >= self.max_requests:
                    delay = self._window_start + self.period - now
                    logger.debug(f"Rate limit reached, waiting {delay:.3f}s")
                    await self._sleep(delay)
                    self._reset_if_elapsed(self._clock())
                    if self._count >= self.max_requests:
                        # Clock did not advance past the window edge.
                        self._window_start = None
                        self._count = 0

                if self._window_start is None:
                    self._window_start = self._clock()
                self._count += 1
        finally:
            self._waiting -= 1
