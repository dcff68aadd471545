"""Bookmark CRUD handlers. All operations are scoped to the authenticated user."""
import re

from starlette.responses import Response

from core.error_handler import json_response
from core.request_context import RequestContext
from schemas.bookmark import (
    BookmarkCreated,
    BookmarkListResponse,
    BookmarkResponse,
    BookmarkUpdated,
    BookmarkWrite,
    Pagination,
)
from schemas.errors import parse_request
from schemas.validators import sanitize_text, strip_url_credentials
from services import bookmark_service
from services.exceptions import NotFoundError, ValidationError

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Largest value SQLite can bind as INTEGER.
INT64_MAX = 2**63 - 1
# Keeps the list offset, (page - 1) * page_size, within INT64_MAX.
MAX_PAGE = INT64_MAX // MAX_PAGE_SIZE

BOOKMARK_ID_PATTERN = re.compile(r"[0-9]+")

BOOKMARK_NOT_FOUND = "Bookmark not found"


def _int_query(ctx: RequestContext, name: str, default: int) -> int:
    raw = ctx.query.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer") from None


def _bookmark_id(ctx: RequestContext) -> int:
    """Parse the :id path param; anything that is not a storable id is reported as not found."""
    raw = ctx.params.get("id", "")
    if not BOOKMARK_ID_PATTERN.fullmatch(raw) or int(raw) > INT64_MAX:
        raise NotFoundError(BOOKMARK_NOT_FOUND)
    return int(raw)


def _clean_input(ctx: RequestContext) -> tuple[str, str]:
    """
    Validate and sanitize a create/update body.

    Returns:
        Tuple of (escaped title, url without credentials).
    """
    data = parse_request(BookmarkWrite, ctx.json(), context={"settings": ctx.settings})
    return sanitize_text(data.title), strip_url_credentials(data.url)


async def list_bookmarks(ctx: RequestContext) -> Response:
    """GET /api/bookmarks?page=&pageSize=."""
    page = max(_int_query(ctx, "page", 1), 1)
    if page > MAX_PAGE:
        raise ValidationError(f"page must be at most {MAX_PAGE}")
    page_size = min(max(_int_query(ctx, "pageSize", DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)

    items, total = await bookmark_service.list_bookmarks(ctx.db, ctx.user.id, page, page_size)
    body = BookmarkListResponse(
        data=[BookmarkResponse.model_validate(b) for b in items],
        pagination=Pagination.build(page, page_size, total),
    )
    return json_response(body.model_dump(mode="json", by_alias=True))


async def create_bookmark(ctx: RequestContext) -> Response:
    """POST /api/bookmarks."""
    title, url = _clean_input(ctx)
    bookmark = await bookmark_service.create_bookmark(ctx.db, ctx.user.id, title, url)
    return json_response(
        BookmarkCreated.model_validate(bookmark).model_dump(mode="json"),
        status_code=201,
    )


async def get_bookmark(ctx: RequestContext) -> Response:
    """GET /api/bookmarks/:id."""
    bookmark = await bookmark_service.get_bookmark(ctx.db, ctx.user.id, _bookmark_id(ctx))
    if bookmark is None:
        raise NotFoundError(BOOKMARK_NOT_FOUND)
    return json_response(BookmarkResponse.model_validate(bookmark).model_dump(mode="json"))


async def update_bookmark(ctx: RequestContext) -> Response:
    """PUT /api/bookmarks/:id."""
    bookmark_id = _bookmark_id(ctx)
    title, url = _clean_input(ctx)
    bookmark = await bookmark_service.update_bookmark(ctx.db, ctx.user.id, bookmark_id, title, url)
    if bookmark is None:
        raise NotFoundError(BOOKMARK_NOT_FOUND)
    return json_response(BookmarkUpdated.model_validate(bookmark).model_dump(mode="json"))


async def delete_bookmark(ctx: RequestContext) -> Response:
    """DELETE /api/bookmarks/:id."""
    deleted = await bookmark_service.delete_bookmark(ctx.db, ctx.user.id, _bookmark_id(ctx))
    if not deleted:
        raise NotFoundError(BOOKMARK_NOT_FOUND)
    return json_response({"message": "Bookmark deleted successfully"})
