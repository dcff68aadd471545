"""Python client for the bookmark API."""
from client.api_client import BookmarkApiClient
from client.errors import ApiError, ErrorCategory, ParsedApiError, parse_http_error

__all__ = [
    "ApiError",
    "BookmarkApiClient",
    "ErrorCategory",
    "ParsedApiError",
    "parse_http_error",
]
