"""
Application error taxonomy.

Errors are raised close to where the problem is detected and translated to a
JSON response exactly once, by core.error_handler.
"""


class AppError(Exception):
    """Base class for errors that map to a specific HTTP status."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, headers: dict[str, str] | None = None) -> None:
        self.message = message or self.default_message
        self.headers = headers or {}
        super().__init__(self.message)


class ValidationError(AppError):
    """Raised when request input fails validation."""

    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(AppError):
    """Raised when the bearer token is missing, invalid, or expired."""

    status_code = 401
    default_message = "Authentication failed"


class AuthorizationError(AppError):
    """
    Raised when an authenticated user may not perform an operation.

    No current route raises this: ownership failures are reported as
    NotFoundError so that resource existence is not leaked.
    """

    status_code = 403
    default_message = "Permission denied"


class NotFoundError(AppError):
    """Raised when a route or an owned resource does not exist."""

    status_code = 404
    default_message = "Resource not found"


class RateLimitError(AppError):
    """Raised when a client exceeds the request rate limit."""

    status_code = 429
    default_message = "Too many requests, please try again later"


class ServiceUnavailableError(AppError):
    """Raised when a backing service (the database) cannot be reached."""

    status_code = 503
    default_message = "Service unavailable"
