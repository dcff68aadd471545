"""Route table for the bookmark API."""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from api.controllers import auth, bookmarks, system, users
from core.auth import with_auth
from core.config import Settings
from core.metrics import PerformanceMonitor
from core.middleware import (
    connection_check_middleware,
    rate_limit_middleware,
    response_time_middleware,
    security_headers_middleware,
)
from core.rate_limiter import RateLimiter
from core.router import Router

HEALTH_PATH = "/health"


def build_router(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
    monitor: PerformanceMonitor,
) -> Router:
    """Build the frozen application router."""
    router = Router()

    # Registration order is execution order on the way in.
    router.use(response_time_middleware(monitor))
    router.use(security_headers_middleware)
    router.use(rate_limit_middleware(
        RateLimiter(session_factory),
        settings.rate_limit_requests,
        settings.rate_limit_window_ms,
    ))
    router.use(connection_check_middleware(exempt_paths=(HEALTH_PATH,)))

    router.post("/api/auth/register", auth.register)
    router.post("/api/auth/login", auth.login)
    router.post("/api/user/verify", with_auth(users.verify))
    router.get("/api/user/info", with_auth(users.info))

    router.get("/api/bookmarks", with_auth(bookmarks.list_bookmarks))
    router.post("/api/bookmarks", with_auth(bookmarks.create_bookmark))
    router.get("/api/bookmarks/:id", with_auth(bookmarks.get_bookmark))
    router.put("/api/bookmarks/:id", with_auth(bookmarks.update_bookmark))
    router.delete("/api/bookmarks/:id", with_auth(bookmarks.delete_bookmark))

    router.get("/api/metrics", with_auth(system.metrics_handler(monitor)))
    router.get(HEALTH_PATH, system.health)

    return router.freeze()
