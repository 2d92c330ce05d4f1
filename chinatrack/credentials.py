"""
Password protection for stored user records and session tokens.

Passwords are stored as salted PBKDF2-HMAC-SHA256 digests in the form
``pbkdf2_sha256$<iterations>$<salt_hex>$<digest_hex>``.

Usage:
    stored = hash_password("s3cret")
    verify_password("s3cret", stored)   # True
    verify_password("wrong", stored)    # False

    token = new_session_token()
    tokens_match(presented, token)
"""

import hashlib
import hmac
import logging
import secrets
from typing import Optional

logger = logging.getLogger(__name__)

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 260_000
SALT_BYTES = 16
TOKEN_BYTES = 32


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS, salt: Optional[str] = None) -> str:
    """Hash a password with a fresh random salt (or the given one)."""
    salt = salt or secrets.token_hex(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("ascii"), iterations
    )
    return f"{ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, stored: Optional[str]) -> bool:
    """Check a password against a stored hash. Missing or malformed hashes never match."""
    if not stored:
        return False
    try:
        algorithm, iterations, salt, _ = stored.split("$", 3)
        iterations = int(iterations)
    except ValueError:
        logger.warning("Malformed password hash in user store")
        return False
    if algorithm != ALGORITHM:
        logger.warning(f"Unsupported password hash algorithm: {algorithm}")
        return False
    candidate = hash_password(password, iterations=iterations, salt=salt)
    return hmac.compare_digest(candidate, stored)


def new_session_token() -> str:
    """Random bearer token for a freshly started session."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def tokens_match(presented: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time token comparison. A missing token on either side never matches."""
    if not presented or not expected:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))
