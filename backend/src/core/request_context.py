"""Request context passed through the router, middlewares and handlers."""
import json
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from starlette.datastructures import Headers, MutableHeaders

from services.exceptions import ValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from core.config import Settings


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity decoded from a verified bearer token."""

    id: int
    email: str
    exp: int | None = None


@dataclass(frozen=True)
class RequestContext:
    """
    Everything a handler needs to serve one request.

    The context is immutable; the router and middlewares derive new contexts
    with ``with_params``/``with_user`` instead of mutating shared state.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    params: dict[str, str] = field(default_factory=dict)
    user: AuthenticatedUser | None = None
    db: "AsyncSession | None" = None
    settings: "Settings | None" = None

    def json(self) -> dict[str, Any]:
        """
        Parse the body as a JSON object.

        An empty body is treated as ``{}`` so that missing fields are reported
        by name rather than as a parse failure.

        Raises:
            ValidationError: If the body is not valid JSON or not an object.
        """
        if not self.body.strip():
            return {}
        try:
            data = json.loads(self.body)
        except (UnicodeDecodeError, ValueError) as e:
            raise ValidationError("Request body must be valid JSON") from e
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    def with_params(self, params: dict[str, str]) -> "RequestContext":
        return replace(self, params=params)

    def with_user(self, user: AuthenticatedUser) -> "RequestContext":
        return replace(self, user=user)

    def with_header(self, name: str, value: str) -> "RequestContext":
        """
        Return a copy with one header added or replaced.

        Lets a middleware pass a value (e.g. a trace id) down the chain to the
        middlewares and handler after it, without touching the original request.
        """
        headers = MutableHeaders(raw=list(self.headers.raw))
        headers[name] = value
        return replace(self, headers=Headers(raw=headers.raw))
