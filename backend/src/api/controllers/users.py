"""Handlers for the authenticated user's own account."""
from starlette.responses import Response

from core.error_handler import json_response
from core.request_context import RequestContext
from schemas.user import UserPublic
from services import user_service
from services.exceptions import NotFoundError


async def _current_user(ctx: RequestContext) -> Response:
    user = await user_service.get_user_by_id(ctx.db, ctx.user.id)
    if user is None:
        raise NotFoundError("User not found")
    return json_response(UserPublic.model_validate(user).model_dump(mode="json"))


async def verify(ctx: RequestContext) -> Response:
    """POST /api/user/verify - confirm the token still maps to an existing user."""
    return await _current_user(ctx)


async def info(ctx: RequestContext) -> Response:
    """GET /api/user/info."""
    return await _current_user(ctx)
