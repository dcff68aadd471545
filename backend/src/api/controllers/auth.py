"""Registration and login handlers."""
import asyncio
import logging

from starlette.responses import Response

from core.error_handler import json_response
from core.passwords import hash_password, verify_password
from core.request_context import RequestContext
from core.token_codec import issue_token
from schemas.errors import parse_request
from schemas.user import Credentials, LoginResponse, LoginUser, RegisterResponse, UserPublic
from schemas.validators import (
    is_common_password,
    is_disposable_email,
    is_valid_email,
    validate_password_strength,
)
from services import user_service
from services.exceptions import ValidationError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def _validate_registration(credentials: Credentials) -> None:
    """
    Apply the registration policy, failing on the first violated rule.

    Raises:
        ValidationError: Describing the violated rule.
    """
    if not is_valid_email(credentials.email):
        raise ValidationError("Invalid email format")
    if is_disposable_email(credentials.email):
        raise ValidationError("Temporary email addresses are not supported")
    if is_common_password(credentials.password):
        raise ValidationError("Password is too common, please use a more complex password")
    strength = validate_password_strength(credentials.password)
    if not strength.valid:
        raise ValidationError(", ".join(strength.errors))


async def register(ctx: RequestContext) -> Response:
    """POST /api/auth/register."""
    credentials = parse_request(Credentials, ctx.json())
    _validate_registration(credentials)

    if await user_service.get_user_by_email(ctx.db, credentials.email) is not None:
        raise ValidationError(user_service.DUPLICATE_EMAIL_MESSAGE)

    password_hash = await asyncio.to_thread(hash_password, credentials.password)
    user = await user_service.create_user(ctx.db, credentials.email, password_hash)
    token = issue_token(user.id, user.email, ctx.settings.jwt_secret, ctx.settings.token_ttl_seconds)

    logger.info("user_registered", extra={"user_id": user.id})
    body = RegisterResponse(token=token, user=UserPublic.model_validate(user))
    return json_response(body.model_dump(mode="json"), status_code=201)


async def login(ctx: RequestContext) -> Response:
    """
    POST /api/auth/login.

    Unknown email and wrong password produce the same error so that callers
    cannot probe which accounts exist.
    """
    credentials = parse_request(Credentials, ctx.json())

    user = await user_service.get_user_by_email(ctx.db, credentials.email)
    if user is None:
        raise ValidationError(INVALID_CREDENTIALS_MESSAGE)
    if not await asyncio.to_thread(verify_password, credentials.password, user.password_hash):
        logger.info("login_failed", extra={"user_id": user.id})
        raise ValidationError(INVALID_CREDENTIALS_MESSAGE)

    token = issue_token(user.id, user.email, ctx.settings.jwt_secret, ctx.settings.token_ttl_seconds)
    body = LoginResponse(token=token, user=LoginUser.model_validate(user))
    return json_response(body.model_dump(mode="json"))
