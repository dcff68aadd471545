"""Salted PBKDF2 password hashing."""
import base64
import binascii
import hashlib
import hmac
import secrets

SALT_BYTES = 16
DERIVED_KEY_BYTES = 32
PBKDF2_ITERATIONS = 100_000
PBKDF2_DIGEST = "sha256"


def _derive(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac(
        PBKDF2_DIGEST,
        password.encode("utf-8"),
        salt,
        PBKDF2_ITERATIONS,
        dklen=DERIVED_KEY_BYTES,
    )


def hash_password(password: str) -> str:
    """
    Hash a password with a fresh random salt.

    Returns:
        Standard base64 of ``salt || derived_key``. Two calls with the same
        password return different strings.
    """
    salt = secrets.token_bytes(SALT_BYTES)
    return base64.b64encode(salt + _derive(password, salt)).decode("ascii")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a password against a stored hash.

    Fails closed: a hash that cannot be decoded, or whose derived part has the
    wrong length, returns False rather than raising.
    """
    try:
        combined = base64.b64decode(password_hash, validate=True)
    except (binascii.Error, ValueError, TypeError):
        return False

    salt, stored = combined[:SALT_BYTES], combined[SALT_BYTES:]
    if len(salt) != SALT_BYTES or len(stored) != DERIVED_KEY_BYTES:
        return False

    return hmac.compare_digest(_derive(password, salt), stored)
