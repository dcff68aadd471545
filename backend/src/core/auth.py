"""Bearer token authentication for router handlers."""
import logging
from functools import wraps

from starlette.responses import Response

from core.error_handler import Handler
from core.request_context import AuthenticatedUser, RequestContext
from core.token_codec import extract_bearer_token, verify_token
from services.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

WWW_AUTHENTICATE = {"WWW-Authenticate": "Bearer"}


def authenticate(ctx: RequestContext) -> AuthenticatedUser:
    """
    Decode the identity carried by the request's bearer token.

    The signed payload is trusted as-is; the user row is not re-read here.

    Raises:
        AuthenticationError: If the token is missing, malformed, forged or expired.
    """
    if ctx.settings is None:
        raise RuntimeError("Request context has no settings; cannot verify tokens")

    token = extract_bearer_token(ctx.headers.get("authorization"))
    if token is None:
        raise AuthenticationError("Missing authentication token", headers=WWW_AUTHENTICATE)

    payload = verify_token(token, ctx.settings.jwt_secret)
    if payload is None:
        logger.info("auth_token_rejected", extra={"path": ctx.path})
        raise AuthenticationError("Invalid authentication token", headers=WWW_AUTHENTICATE)

    user_id = payload.get("id")
    email = payload.get("email")
    if isinstance(user_id, bool) or not isinstance(user_id, int) or not isinstance(email, str):
        raise AuthenticationError("Invalid authentication token", headers=WWW_AUTHENTICATE)

    return AuthenticatedUser(id=user_id, email=email, exp=payload.get("exp"))


def with_auth(handler: Handler) -> Handler:
    """Wrap a handler so it only runs for requests with a valid bearer token."""

    @wraps(handler)
    async def wrapped(ctx: RequestContext) -> Response:
        return await handler(ctx.with_user(authenticate(ctx)))

    return wrapped
