"""
API error parsing for the Python client.

Maps HTTP error responses to a semantic category so callers can branch on
"what went wrong" without inspecting status codes.
"""
from dataclasses import dataclass
from typing import Literal

import httpx

ErrorCategory = Literal[
    "auth",          # 401 - Missing, invalid or expired token
    "forbidden",     # 403 - Access denied
    "not_found",     # 404 - Route or bookmark not found
    "validation",    # 400 - Validation error
    "rate_limited",  # 429 - Too many requests
    "unavailable",   # 503 - Database unavailable
    "internal",      # Other 5xx or unexpected errors
]


@dataclass
class ParsedApiError:
    """Parsed API error with semantic category and message."""

    category: ErrorCategory
    message: str
    status_code: int
    retry_after: int | None = None


class ApiError(Exception):
    """Raised by BookmarkApiClient for any non-2xx response."""

    def __init__(self, parsed: ParsedApiError) -> None:
        self.parsed = parsed
        super().__init__(parsed.message)

    @property
    def category(self) -> ErrorCategory:
        return self.parsed.category

    @property
    def status_code(self) -> int:
        return self.parsed.status_code


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Extract the ``error`` field from the response body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and isinstance(body.get("error"), str) and body["error"]:
        return body["error"]
    return fallback


def _retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def parse_http_error(response: httpx.Response) -> ParsedApiError:  # noqa: PLR0911
    """
    Parse an HTTP error response into a semantic category.

    Returns:
        ParsedApiError carrying the server's ``error`` message when present.
    """
    status = response.status_code

    if status == 401:
        return ParsedApiError("auth", _error_message(response, "Invalid or expired token"), status)
    if status == 403:
        return ParsedApiError("forbidden", _error_message(response, "Access denied"), status)
    if status == 404:
        return ParsedApiError("not_found", _error_message(response, "Not found"), status)
    if status in (400, 422):
        return ParsedApiError("validation", _error_message(response, "Validation error"), status)
    if status == 429:
        return ParsedApiError(
            "rate_limited",
            _error_message(response, "Too many requests"),
            status,
            retry_after=_retry_after(response),
        )
    if status == 503:
        return ParsedApiError("unavailable", _error_message(response, "Service unavailable"), status)
    return ParsedApiError("internal", _error_message(response, f"API error {status}"), status)
