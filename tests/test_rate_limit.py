"""Tests for RateLimiter."""

import asyncio
import time

import pytest

from mcp_interlink import InterlinkConfig, RateLimiter


class FakeClock:
    """Manually advanced monotonic clock whose sleep moves time forward."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.now += max(0.0, seconds)
        await asyncio.sleep(0)


class TestRateLimiter:
    """Tests for RateLimiter."""

    def test_from_config(self):
        """Ceiling comes from max_requests_per_second over one second."""
        limiter = RateLimiter.from_config(InterlinkConfig(max_requests_per_second=7))
        assert limiter.max_requests == 7
        assert limiter.period == 1.0

    def test_invalid_arguments(self):
        """Non-positive limits are rejected."""
        with pytest.raises(ValueError):
            RateLimiter(max_requests=0)
        with pytest.raises(ValueError):
            RateLimiter(period=0)

    @pytest.mark.asyncio
    async def test_under_limit_does_not_wait(self):
        """Requests within the ceiling are granted immediately."""
        clock = FakeClock()
        limiter = RateLimiter(max_requests=5, clock=clock, sleep=clock.sleep)

        for _ in range(5):
            await limiter.acquire()

        assert clock.now == 0.0

    @pytest.mark.asyncio
    async def test_concurrent_acquires_fifo(self):
        """With N=2, five concurrent callers are granted 2, 2, 1 per window in order."""
        clock = FakeClock()
        limiter = RateLimiter(max_requests=2, period=1.0, clock=clock, sleep=clock.sleep)
        grants: list[tuple[int, float]] = []

        async def worker(index):
            await limiter.acquire()
            grants.append((index, clock.now))

        await asyncio.gather(*(worker(i) for i in range(5)))

        assert [index for index, _ in grants] == [0, 1, 2, 3, 4]
        assert [at for _, at in grants] == [0.0, 0.0, 1.0, 1.0, 2.0]

    @pytest.mark.asyncio
    async def test_window_resets_after_period(self):
        """A new window opens once the period has elapsed."""
        clock = FakeClock()
        limiter = RateLimiter(max_requests=1, period=1.0, clock=clock, sleep=clock.sleep)

        await limiter.acquire()
        clock.now = 5.0
        await limiter.acquire()

        assert clock.now == 5.0

    @pytest.mark.asyncio
    async def test_window_measured_from_first_grant(self):
        """The wait runs until one period after the window's first grant."""
        clock = FakeClock()
        limiter = RateLimiter(max_requests=2, period=1.0, clock=clock, sleep=clock.sleep)

        clock.now = 10.0
        await limiter.acquire()
        clock.now = 10.6
        await limiter.acquire()
        await limiter.acquire()

        assert clock.now == pytest.approx(11.0)

    @pytest.mark.asyncio
    async def test_waiting_count(self):
        """Queued callers are visible through waiting."""
        clock = FakeClock()
        release = asyncio.Event()

        async def blocked_sleep(seconds):
            await release.wait()
            clock.now += seconds

        limiter = RateLimiter(max_requests=1, clock=clock, sleep=blocked_sleep)
        await limiter.acquire()

        tasks = [asyncio.create_task(limiter.acquire()) for _ in range(3)]
        await asyncio.sleep(0)
        assert limiter.waiting == 3

        release.set()
        await asyncio.gather(*tasks)
        assert limiter.waiting == 0

    @pytest.mark.asyncio
    async def test_real_clock_spreads_requests(self):
        """With the real clock, excess requests are pushed into later windows."""
        limiter = RateLimiter(max_requests=2, period=0.1)

        start = time.monotonic()
        await asyncio.gather(*(limiter.acquire() for _ in range(5)))
        elapsed = time.monotonic() - start

        assert elapsed >= 0.18
