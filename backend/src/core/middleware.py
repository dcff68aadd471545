"""
Global router middlewares.

Each factory returns an ``async (ctx, call_next) -> Response`` callable for
``Router.use``. They are registered in this order: response timing, security
headers, rate limiting, database connection check.
"""
import logging
import time

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import Response

from core.error_handler import Handler, error_response
from core.metrics import PerformanceMonitor
from core.rate_limit_config import client_ip, rate_limit_key
from core.rate_limiter import RateLimiter
from core.request_context import RequestContext
from core.router import Middleware
from services.exceptions import RateLimitError, ServiceUnavailableError

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'self'",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}


def apply_security_headers(response: Response) -> Response:
    """Add security headers, keeping any value the handler already set."""
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


def response_time_middleware(monitor: PerformanceMonitor) -> Middleware:
    """Record request count, latency and 5xx responses; expose latency as X-Response-Time."""

    async def middleware(ctx: RequestContext, call_next: Handler) -> Response:
        monitor.record_request()
        start = time.perf_counter()
        try:
            response = await call_next(ctx)
        except Exception:
            monitor.record_error()
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000
        monitor.record_response_time(elapsed_ms)
        if response.status_code >= 500:
            monitor.record_error()
        response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"
        return response

    return middleware


async def security_headers_middleware(ctx: RequestContext, call_next: Handler) -> Response:
    return apply_security_headers(await call_next(ctx))


def rate_limit_middleware(limiter: RateLimiter, limit: int, window_ms: int) -> Middleware:
    """Reject clients that exceed limit requests per window_ms with a 429."""

    async def middleware(ctx: RequestContext, call_next: Handler) -> Response:
        key = rate_limit_key(client_ip(ctx.headers))
        result = await limiter.check(key, limit, window_ms)
        if not result.allowed:
            error = RateLimitError(headers=result.headers())
            return error_response(error.message, error.status_code, error.headers)

        response = await call_next(ctx)
        if result.reset:
            for name, value in result.headers().items():
                response.headers.setdefault(name, value)
        return response

    return middleware


def connection_check_middleware(exempt_paths: tuple[str, ...] = ()) -> Middleware:
    """
    Answer 503 before running the handler when the database does not respond.

    Paths in exempt_paths (the health check) report database state themselves.
    """

    async def middleware(ctx: RequestContext, call_next: Handler) -> Response:
        if ctx.db is not None and ctx.path not in exempt_paths:
            try:
                await ctx.db.execute(text("SELECT 1"))
            except (SQLAlchemyError, OSError):
                logger.exception("database_connection_failed", extra={"path": ctx.path})
                error = ServiceUnavailableError("Database connection failed")
                return error_response(error.message, error.status_code)
        return await call_next(ctx)

    return middleware
