"""Translation of handler outcomes to JSON responses."""
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any

from fastapi.responses import JSONResponse
from starlette.responses import Response

from core.request_context import RequestContext
from services.exceptions import AppError

logger = logging.getLogger(__name__)

Handler = Callable[[RequestContext], Awaitable[Response]]


def json_response(
    data: Any,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Serialize data as a JSON response."""
    return JSONResponse(content=data, status_code=status_code, headers=headers)


def error_response(
    message: str,
    status_code: int,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the ``{"error": message}`` body used by every failing request."""
    return json_response({"error": message}, status_code=status_code, headers=headers)


def error_response_for(exc: Exception) -> JSONResponse:
    """
    Map an exception to an error response.

    AppError subclasses carry their own status, message and headers. Anything
    else is logged with its traceback and reported as a generic 500 so that
    internal details never reach the client.
    """
    if isinstance(exc, AppError):
        return error_response(exc.message, exc.status_code, exc.headers or None)
    logger.exception("unhandled_error", extra={"error_type": type(exc).__name__})
    return error_response("Internal server error", 500)


def with_error_handling(handler: Handler) -> Handler:
    """Wrap a handler so that any exception it raises becomes an error response."""

    @wraps(handler)
    async def wrapped(ctx: RequestContext) -> Response:
        try:
            return await handler(ctx)
        except Exception as e:
            return error_response_for(e)

    return wrapped
