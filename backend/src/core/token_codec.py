"""
Compact HMAC-signed authentication tokens.

Format: ``<header>.<payload>.<signature>`` where header and payload are compact
JSON encoded with standard base64, and the signature is the lowercase hex
HMAC-SHA256 of ``"<header>.<payload>"`` keyed by the server secret.

Tokens are stateless: validity is determined only by the signature and the
``exp`` claim. There is no server-side revocation.
"""
import base64
import binascii
import hashlib
import hmac
import json
import logging
import time
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 7 * 24 * 60 * 60

TOKEN_HEADER = {"alg": "HS256", "typ": "JWT"}


def _encode_segment(data: dict[str, Any]) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def _decode_segment(segment: str) -> Any:
    return json.loads(base64.b64decode(segment, validate=True).decode("utf-8"))


def sign(message: str, secret: str) -> str:
    """Return the lowercase hex HMAC-SHA256 of message keyed by secret."""
    return hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def issue_token(
    user_id: int,
    email: str,
    secret: str,
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
) -> str:
    """
    Issue a signed token for a user.

    Args:
        user_id: ID of the user the token identifies.
        email: Email of the user, carried in the payload.
        secret: Signing secret.
        ttl_seconds: Lifetime of the token. Zero or negative values produce a
            token that is already expired.

    Returns:
        The encoded token string.
    """
    payload = {
        "id": user_id,
        "email": email,
        "exp": int(time.time()) + ttl_seconds,
    }
    encoded_header = _encode_segment(TOKEN_HEADER)
    encoded_payload = _encode_segment(payload)
    signature = sign(f"{encoded_header}.{encoded_payload}", secret)
    return f"{encoded_header}.{encoded_payload}.{signature}"


def verify_token(token: str | None, secret: str) -> dict[str, Any] | None:
    """
    Verify a token and return its payload.

    Returns None instead of raising for every failure: empty token, wrong
    number of segments, signature mismatch, undecodable payload, or an
    ``exp`` claim at or before the current time.
    """
    if not token:
        return None

    parts = token.split(".")
    if len(parts) != 3:
        return None

    encoded_header, encoded_payload, signature = parts
    expected = sign(f"{encoded_header}.{encoded_payload}", secret)
    if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
        return None

    try:
        payload = _decode_segment(encoded_payload)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        logger.debug("token_payload_undecodable")
        return None

    if not isinstance(payload, dict):
        return None

    exp = payload.get("exp")
    if exp is not None:
        if isinstance(exp, bool) or not isinstance(exp, int | float):
            return None
        if exp <= time.time():
            return None

    return payload


def extract_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):].strip()
    return token or None
