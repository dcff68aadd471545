"""Tests for the table-backed sliding-window rate limiter."""
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from starlette.datastructures import Headers

from core.rate_limit_config import RateLimitResult, client_ip, rate_limit_key
from core.rate_limiter import RateLimiter
from models.rate_limit import RateLimitRecord


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(session_factory: async_sessionmaker[AsyncSession], clock: FakeClock) -> RateLimiter:
    return RateLimiter(session_factory, clock=clock)


async def _count(session_factory: async_sessionmaker[AsyncSession], key: str | None = None) -> int:
    query = select(func.count()).select_from(RateLimitRecord)
    if key is not None:
        query = query.where(RateLimitRecord.key == key)
    async with session_factory() as session:
        return await session.scalar(query)


class TestAllow:
    """Tests for RateLimiter.allow."""

    async def test__allow__rejects_after_limit_then_recovers(
        self, limiter: RateLimiter, clock: FakeClock,
    ) -> None:
        results = [await limiter.allow("k", 3, 1000) for _ in range(4)]
        assert results == [True, True, True, False]

        clock.advance(1.5)

        assert await limiter.allow("k", 3, 1000) is True

    async def test__allow__keys_are_independent(self, limiter: RateLimiter) -> None:
        assert await limiter.allow("a", 1, 1000) is True
        assert await limiter.allow("a", 1, 1000) is False
        assert await limiter.allow("b", 1, 1000) is True

    async def test__allow__rejected_request_is_not_recorded(
        self,
        limiter: RateLimiter,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        for _ in range(5):
            await limiter.allow("k", 2, 1000)

        assert await _count(session_factory, "k") == 2

    async def test__allow__prunes_expired_records_for_all_keys(
        self,
        limiter: RateLimiter,
        clock: FakeClock,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        await limiter.allow("stale", 10, 1000)
        clock.advance(2)

        await limiter.allow("fresh", 10, 1000)

        assert await _count(session_factory, "stale") == 0
        assert await _count(session_factory) == 1

    async def test__allow__records_inside_window_still_count(
        self, limiter: RateLimiter, clock: FakeClock,
    ) -> None:
        assert await limiter.allow("k", 1, 1000) is True
        clock.advance(0.5)
        assert await limiter.allow("k", 1, 1000) is False


class TestCheck:
    """Tests for RateLimiter.check result details."""

    async def test__check__remaining_decreases(self, limiter: RateLimiter) -> None:
        first = await limiter.check("k", 3, 60_000)
        second = await limiter.check("k", 3, 60_000)

        assert (first.remaining, second.remaining) == (2, 1)
        assert first.limit == 3
        assert first.retry_after == 0

    async def test__check__rejection_sets_retry_after_in_seconds(
        self, limiter: RateLimiter, clock: FakeClock,
    ) -> None:
        await limiter.check("k", 1, 60_000)
        result = await limiter.check("k", 1, 60_000)

        assert result.allowed is False
        assert result.remaining == 0
        assert result.retry_after == 60
        assert result.reset == int(clock.now) + 60

    async def test__check__fails_open_when_store_unavailable(self, tmp_path: Path) -> None:
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'x.db'}")
        limiter = RateLimiter(async_sessionmaker(engine))

        result = await limiter.check("k", 1, 1000)

        assert result.allowed is True
        await engine.dispose()


class TestRateLimitConfig:
    """Tests for client IP derivation and result headers."""

    def test__client_ip__prefers_cloudflare_header(self) -> None:
        headers = Headers({
            "cf-connecting-ip": "1.1.1.1",
            "x-real-ip": "2.2.2.2",
            "x-forwarded-for": "3.3.3.3",
        })
        assert client_ip(headers) == "1.1.1.1"

    def test__client_ip__falls_back_to_real_ip(self) -> None:
        headers = Headers({"x-real-ip": "2.2.2.2", "x-forwarded-for": "3.3.3.3"})
        assert client_ip(headers) == "2.2.2.2"

    def test__client_ip__uses_first_forwarded_entry(self) -> None:
        headers = Headers({"x-forwarded-for": "3.3.3.3, 10.0.0.1, 10.0.0.2"})
        assert client_ip(headers) == "3.3.3.3"

    def test__client_ip__unknown_without_headers(self) -> None:
        assert client_ip(Headers({})) == "unknown"

    def test__rate_limit_key__format(self) -> None:
        assert rate_limit_key("1.2.3.4") == "rate_limit:1.2.3.4"

    def test__result_headers__include_retry_after_only_when_rejected(self) -> None:
        allowed = RateLimitResult(allowed=True, limit=5, remaining=4, reset=100, retry_after=0)
        rejected = RateLimitResult(allowed=False, limit=5, remaining=0, reset=100, retry_after=60)

        assert "Retry-After" not in allowed.headers()
        assert allowed.headers()["X-RateLimit-Remaining"] == "4"
        assert rejected.headers()["Retry-After"] == "60"
