"""Append-only request records used by the rate limiter."""
from sqlalchemy import BigInteger, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class RateLimitRecord(Base):
    """One accepted request for a rate limit key, timestamped in epoch milliseconds."""

    __tablename__ = "rate_limits"
    __table_args__ = (
        Index("ix_rate_limits_key_timestamp", "key", "timestamp"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    key: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
