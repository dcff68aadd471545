"""Health and metrics handlers."""
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import Response

from core.error_handler import Handler, json_response
from core.metrics import PerformanceMonitor
from core.request_context import RequestContext

logger = logging.getLogger(__name__)


async def health(ctx: RequestContext) -> Response:
    """
    GET /health.

    Returns 200 with ``database: "healthy"`` or 503 with ``database: "unhealthy"``.
    """
    try:
        await ctx.db.execute(text("SELECT 1"))
        db_status = "healthy"
    except (SQLAlchemyError, OSError):
        logger.exception("Database health check failed")
        db_status = "unhealthy"

    status = "healthy" if db_status == "healthy" else "unhealthy"
    return json_response(
        {"status": status, "database": db_status},
        status_code=200 if status == "healthy" else 503,
    )


def metrics_handler(monitor: PerformanceMonitor) -> Handler:
    """Build the GET /api/metrics handler for a monitor."""

    async def metrics(ctx: RequestContext) -> Response:  # noqa: ARG001
        return json_response(monitor.snapshot())

    return metrics
