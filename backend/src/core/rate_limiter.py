"""
Sliding-window rate limiting backed by the ``rate_limits`` table.

This module contains the enforcement logic - the "how" of rate limiting.
For key derivation and the result type, see rate_limit_config.py.

Each check runs prune, count and insert inside one transaction on its own
session, so a rejected request never leaves a record behind and the request's
own unit of work is unaffected. The prune step deletes expired records for
every key, not just the one being checked.
"""
import logging
import math
import time
from collections.abc import Callable

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.rate_limit_config import RateLimitResult
from models.rate_limit import RateLimitRecord

logger = logging.getLogger(__name__)


class RateLimiter:
    """Counts requests per key within a trailing time window."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def check(self, key: str, limit: int, window_ms: int) -> RateLimitResult:
        """
        Check if a request is allowed and record it when it is.

        Falls back to allowing the request if the counter store is unavailable.
        """
        now_ms = self._now_ms()
        window_start = now_ms - window_ms
        reset = math.ceil((now_ms + window_ms) / 1000)

        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    delete(RateLimitRecord).where(RateLimitRecord.timestamp < window_start),
                )
                count = await session.scalar(
                    select(func.count())
                    .select_from(RateLimitRecord)
                    .where(RateLimitRecord.key == key),
                ) or 0

                if count >= limit:
                    logger.warning(
                        "rate_limit_exceeded",
                        extra={"key": key, "limit": limit, "window_ms": window_ms},
                    )
                    return RateLimitResult(
                        allowed=False,
                        limit=limit,
                        remaining=0,
                        reset=reset,
                        retry_after=math.ceil(window_ms / 1000),
                    )

                session.add(RateLimitRecord(key=key, timestamp=now_ms))
        except SQLAlchemyError:
            logger.warning(
                "rate_limit_store_unavailable",
                extra={"key": key},
                exc_info=True,
            )
            return RateLimitResult(
                allowed=True, limit=limit, remaining=limit, reset=0, retry_after=0,
            )

        return RateLimitResult(
            allowed=True,
            limit=limit,
            remaining=max(0, limit - count - 1),
            reset=reset,
            retry_after=0,
        )

    async def allow(self, key: str, limit: int, window_ms: int) -> bool:
        """Return True when the request is within the limit (and record it)."""
        result = await self.check(key, limit, window_ms)
        return result.allowed
