"""Conversion of request bodies into validated schemas."""
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from services.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

# Pydantic error types that mean "the client did not supply a usable value".
_MISSING_ERROR_TYPES = {"missing", "string_too_short"}

INVALID_URL_MESSAGE = "Invalid URL format"


def _error_message(err: dict[str, Any]) -> str:
    loc = err.get("loc") or ("body",)
    field = str(loc[-1])
    error_type = err.get("type", "")

    if error_type in _MISSING_ERROR_TYPES or err.get("input") in (None, ""):
        return f"{field} is required"
    if error_type.startswith("url_"):
        return INVALID_URL_MESSAGE
    if error_type == "value_error":
        # Raised by our own field validators; their message is already complete.
        return str(err["ctx"]["error"])
    return f"{field}: {err.get('msg', 'invalid')}"


def format_validation_errors(exc: PydanticValidationError) -> str:
    """
    Build a single human-readable message from pydantic errors.

    Missing or empty fields read ``"<field> is required"``, unparseable URLs
    read ``"Invalid URL format"``, and messages from our own validators are
    used as-is. Anything else reads ``"<field>: <msg>"``. Multiple problems
    are joined with ``", "``.
    """
    messages = []
    for err in exc.errors():
        message = _error_message(err)
        if message not in messages:
            messages.append(message)
    return ", ".join(messages) if messages else "Invalid request"


def parse_request(
    model: type[ModelT],
    data: dict[str, Any],
    context: dict[str, Any] | None = None,
) -> ModelT:
    """
    Validate a request body against a schema.

    Raises:
        ValidationError: With a message from format_validation_errors.
    """
    try:
        return model.model_validate(data, context=context)
    except PydanticValidationError as e:
        raise ValidationError(format_validation_errors(e)) from e
