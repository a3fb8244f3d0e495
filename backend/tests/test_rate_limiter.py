from datetime import datetime, timedelta, timezone

import pytest

from social_api.core.exceptions import RateLimitError
from social_api.services.rate_limiter import RateLimiter

pytestmark = pytest.mark.asyncio


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


async def test_blocks_after_max_attempts():
    limiter = RateLimiter(max_attempts=3, window=timedelta(minutes=1), clock=FakeClock())

    for _ in range(3):
        await limiter.check_rate_limit("login_ip_1.2.3.4")

    with pytest.raises(RateLimitError) as exc_info:
        await limiter.check_rate_limit("login_ip_1.2.3.4")
    assert "Try again in 61 seconds" in exc_info.value.detail


async def test_window_slides():
    clock = FakeClock()
    limiter = RateLimiter(max_attempts=2, window=timedelta(seconds=10), clock=clock)

    await limiter.check_rate_limit("key")
    clock.advance(6)
    await limiter.check_rate_limit("key")
    with pytest.raises(RateLimitError):
        await limiter.check_rate_limit("key")

    # первая попытка выпала из окна
    clock.advance(5)
    await limiter.check_rate_limit("key")
    with pytest.raises(RateLimitError):
        await limiter.check_rate_limit("key")


async def test_identifiers_are_independent():
    limiter = RateLimiter(max_attempts=1, clock=FakeClock())

    await limiter.check_rate_limit("a")
    await limiter.check_rate_limit("b")
    with pytest.raises(RateLimitError):
        await limiter.check_rate_limit("a")


async def test_clear_attempts():
    limiter = RateLimiter(max_attempts=1, clock=FakeClock())

    await limiter.check_rate_limit("a")
    await limiter.clear_attempts("a")
    await limiter.check_rate_limit("a")
    await limiter.clear_attempts("never-seen")
