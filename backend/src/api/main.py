"""ASGI application entry point."""
import logging
import logging.config
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from api.routes import build_router
from core.config import Settings, get_settings
from core.error_handler import error_response_for
from core.metrics import PerformanceMonitor
from core.middleware import apply_security_headers
from core.request_context import RequestContext
from db.session import build_engine, build_session_factory, init_db, session_scope

logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization, X-CSRF-Token"
CORS_MAX_AGE = "86400"

ALL_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


def configure_logging(level: str) -> None:
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": "%(asctime)s %(levelname)s:%(name)s:%(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
        },
        "root": {
            "level": level.upper(),
            "handlers": ["console"],
        },
        "loggers": {
            "sqlalchemy.engine": {"level": "WARNING"},
            "httpx": {"level": "WARNING"},
        },
    })


def cors_headers(origin: str | None, default_origin: str) -> dict[str, str]:
    """CORS headers reflecting the request Origin, or default_origin when absent."""
    return {
        "Access-Control-Allow-Origin": origin or default_origin,
        "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
        "Access-Control-Max-Age": CORS_MAX_AGE,
        "Vary": "Origin",
    }


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Add CORS headers to all responses, including errors and preflights."""

    def __init__(self, app: ASGIApp, default_origin: str) -> None:
        super().__init__(app)
        self.default_origin = default_origin

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request and add CORS headers to response."""
        response = await call_next(request)
        response.headers.update(cors_headers(request.headers.get("origin"), self.default_origin))
        return response


async def handle_request(request: Request) -> Response:
    """
    Hand every request to the application router.

    Each request runs in one database session. It is committed when the
    response is successful and rolled back for any error status. Anything
    raised outside the handlers' own error layer (a failing middleware or
    commit) is translated here.
    """
    if request.method == "OPTIONS":
        return apply_security_headers(Response(status_code=204))

    state = request.app.state
    body = await request.body()
    try:
        async with session_scope(state.session_factory) as session:
            ctx = RequestContext(
                method=request.method,
                path=request.url.path,
                headers=request.headers,
                query=dict(request.query_params),
                body=body,
                db=session,
                settings=state.settings,
            )
            response = await state.router.dispatch(ctx)
            if response.status_code >= 400:
                await session.rollback()
    except Exception as e:
        response = apply_security_headers(error_response_for(e))
    return response


def create_app(
    settings: Settings | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use; defaults to the cached environment settings.
        session_factory: Session factory to use. When omitted an engine is
            built from ``settings.database_url`` and tables are created on
            startup.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    engine = None
    if session_factory is None:
        engine = build_engine(settings)
        session_factory = build_session_factory(engine)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
        """Create tables on startup and release the engine on shutdown."""
        if engine is not None:
            await init_db(engine)
        yield
        if engine is not None:
            await engine.dispose()

    app = FastAPI(
        title="Bookmark Manager API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    monitor = PerformanceMonitor()
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.monitor = monitor
    app.state.router = build_router(settings, session_factory, monitor)

    app.add_middleware(CORSHeadersMiddleware, default_origin=settings.cors_origin)
    app.add_api_route(
        "/{full_path:path}",
        handle_request,
        methods=ALL_METHODS,
        include_in_schema=False,
    )

    logger.info("app_created", extra={"routes": len(app.state.router.routes)})
    return app
