"""
Service layer for bookmark CRUD operations.

Every query is scoped by ``user_id``; a bookmark owned by another user is
indistinguishable from one that does not exist.
"""
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark


async def list_bookmarks(
    db: AsyncSession,
    user_id: int,
    page: int,
    page_size: int,
) -> tuple[list[Bookmark], int]:
    """
    Get one page of a user's bookmarks, newest first.

    Returns:
        Tuple of (bookmarks on the page, total bookmark count for the user).
    """
    total = await db.scalar(
        select(func.count()).select_from(Bookmark).where(Bookmark.user_id == user_id),
    ) or 0
    result = await db.execute(
        select(Bookmark)
        .where(Bookmark.user_id == user_id)
        .order_by(Bookmark.created_at.desc(), Bookmark.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size),
    )
    return list(result.scalars().all()), total


async def get_bookmark(db: AsyncSession, user_id: int, bookmark_id: int) -> Bookmark | None:
    result = await db.execute(
        select(Bookmark).where(Bookmark.id == bookmark_id, Bookmark.user_id == user_id),
    )
    return result.scalar_one_or_none()


async def create_bookmark(db: AsyncSession, user_id: int, title: str, url: str) -> Bookmark:
    """
    Create a bookmark for a user.

    Title and URL must already be sanitized.

    Note:
        Does not commit. Caller handles commit at request end.
    """
    bookmark = Bookmark(user_id=user_id, title=title, url=url)
    db.add(bookmark)
    await db.flush()
    await db.refresh(bookmark)
    return bookmark


async def update_bookmark(
    db: AsyncSession,
    user_id: int,
    bookmark_id: int,
    title: str,
    url: str,
) -> Bookmark | None:
    """
    Replace a bookmark's title and URL.

    Returns:
        The updated bookmark, or None if it does not exist or is not owned by user_id.
    """
    result = await db.execute(
        update(Bookmark)
        .where(Bookmark.id == bookmark_id, Bookmark.user_id == user_id)
        .values(title=title, url=url, updated_at=func.current_timestamp())
        .execution_options(synchronize_session=False),
    )
    if result.rowcount == 0:
        return None
    bookmark = await get_bookmark(db, user_id, bookmark_id)
    if bookmark is not None:
        await db.refresh(bookmark)
    return bookmark


async def delete_bookmark(db: AsyncSession, user_id: int, bookmark_id: int) -> bool:
    """Delete a bookmark. Returns False if it does not exist or is not owned by user_id."""
    result = await db.execute(
        delete(Bookmark)
        .where(Bookmark.id == bookmark_id, Bookmark.user_id == user_id)
        .execution_options(synchronize_session=False),
    )
    return result.rowcount > 0
