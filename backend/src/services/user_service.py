"""Service layer for user accounts."""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import User
from services.exceptions import ValidationError

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "Email address is already registered"


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def create_user(db: AsyncSession, email: str, password_hash: str) -> User:
    """
    Create a user account.

    The unique index on ``users.email`` is the final arbiter: a concurrent
    registration that slips past the caller's pre-check is reported the same
    way as the pre-check.

    Note:
        Does not commit. Caller handles commit at request end.

    Raises:
        ValidationError: If the email is already registered. The session
            must then be rolled back.
    """
    user = User(email=email, password_hash=password_hash)
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        logger.info("duplicate_registration", extra={"user_email_domain": email.rpartition("@")[2]})
        raise ValidationError(DUPLICATE_EMAIL_MESSAGE) from e
    await db.refresh(user)
    return user
