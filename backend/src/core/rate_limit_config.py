"""
Rate limiting policy and types.

This module holds the "what" of rate limiting (key derivation, result type);
enforcement against the counter table lives in rate_limiter.py. The numeric
limits come from Settings (RATE_LIMIT_REQUESTS / RATE_LIMIT_WINDOW_MS).
"""
from dataclasses import dataclass

from starlette.datastructures import Headers

UNKNOWN_CLIENT = "unknown"

# Checked in order; the first header present wins.
CLIENT_IP_HEADERS = ("cf-connecting-ip", "x-real-ip", "x-forwarded-for")


@dataclass
class RateLimitResult:
    """Result of a rate limit check with all info needed for headers."""

    allowed: bool
    limit: int  # Max requests in current window
    remaining: int  # Requests remaining in current window
    reset: int  # Unix timestamp when window resets
    retry_after: int  # Seconds until retry allowed (0 if allowed)

    def headers(self) -> dict[str, str]:
        """X-RateLimit-* headers, plus Retry-After when the request was rejected."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


def client_ip(headers: Headers) -> str:
    """
    Derive the client IP used as the rate limit key.

    Proxy headers are trusted as-is. For X-Forwarded-For only the first
    (client-most) entry is used.
    """
    for name in CLIENT_IP_HEADERS:
        value = headers.get(name)
        if value:
            first = value.split(",")[0].strip()
            if first:
                return first
    return UNKNOWN_CLIENT


def rate_limit_key(ip: str) -> str:
    return f"rate_limit:{ip}"
