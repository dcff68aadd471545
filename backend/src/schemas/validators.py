"""
Shared validation and sanitization functions.

Registration policies (email shape, disposable domains, password strength,
common passwords) and the input sanitizers applied to bookmarks before they
are stored.
"""
import html
import re
from dataclasses import dataclass, field

from pydantic import HttpUrl

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DISPOSABLE_EMAIL_DOMAINS = frozenset({
    "10minutemail.com",
    "guerrillamail.com",
    "mailinator.com",
    "tempmail.org",
    "throwawaymail.com",
    "yopmail.com",
})

COMMON_PASSWORDS = frozenset({
    "password",
    "123456",
    "12345678",
    "123456789",
    "12345",
    "qwerty",
    "abc123",
    "password1",
    "admin",
    "welcome",
})

MIN_PASSWORD_LENGTH = 8


@dataclass
class PasswordStrength:
    """Result of a password strength check."""

    valid: bool = True
    score: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def is_valid_email(email: str) -> bool:
    """Check that email looks like ``local@domain.tld``."""
    return bool(EMAIL_PATTERN.match(email))


def is_disposable_email(email: str) -> bool:
    """Check whether the email's domain is a known disposable-mail provider."""
    _, sep, domain = email.rpartition("@")
    if not sep:
        return False
    return domain.lower() in DISPOSABLE_EMAIL_DOMAINS


def is_common_password(password: str) -> bool:
    """Check a password against the list of known-common passwords (case-insensitive)."""
    return password.lower() in COMMON_PASSWORDS


def validate_password_strength(password: str) -> PasswordStrength:
    """
    Score a password against the registration policy.

    Length, a lowercase letter, an uppercase letter and a digit are required.
    A missing special character only adds a warning.
    """
    result = PasswordStrength()
    checks = [
        (len(password) >= MIN_PASSWORD_LENGTH,
         f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"),
        (re.search(r"[a-z]", password) is not None,
         "Password must contain a lowercase letter"),
        (re.search(r"[A-Z]", password) is not None,
         "Password must contain an uppercase letter"),
        (re.search(r"[0-9]", password) is not None,
         "Password must contain a digit"),
    ]
    for passed, message in checks:
        if passed:
            result.score += 1
        else:
            result.valid = False
            result.errors.append(message)

    if re.search(r"[^a-zA-Z0-9]", password):
        result.score += 1
    else:
        result.warnings.append("Password should contain a special character")

    return result


def validate_title_length(title: str, max_length: int) -> str:
    """Validate that title doesn't exceed maximum length."""
    if len(title) > max_length:
        raise ValueError(f"title must be at most {max_length} characters")
    return title


def validate_url_length(url: str, max_length: int) -> str:
    """Validate that the raw URL doesn't exceed maximum length."""
    if len(url) > max_length:
        raise ValueError(f"url must be at most {max_length} characters")
    return url


def strip_url_credentials(url: HttpUrl) -> str:
    """
    Serialize a parsed URL without any ``user:password@`` part.

    Pydantic serializes userinfo percent-encoded, so the first ``@`` after
    the scheme ends it.
    """
    serialized = str(url)
    if url.username is None and url.password is None:
        return serialized
    authority_start = serialized.index("://") + 3
    at = serialized.index("@", authority_start)
    return serialized[:authority_start] + serialized[at + 1:]


def sanitize_text(text: str) -> str:
    """HTML-escape text for safe display."""
    return html.escape(text, quote=True)
