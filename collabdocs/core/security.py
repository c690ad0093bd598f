"""
Password hashing and auth-token signing.

Passwords are stored as salted PBKDF2-SHA256 hashes:
    pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>

Auth tokens travel in the `auth-token` cookie:
    user-<user id>.<expiry epoch seconds>.<hmac-sha256 hex>
"""
import hashlib
import hmac
import secrets
import time
from typing import Optional

from collabdocs.core.config import get_settings
from collabdocs.core.logging_config import get_logger

logger = get_logger(__name__)

AUTH_COOKIE_NAME = "auth-token"

PASSWORD_ALGORITHM = "pbkdf2_sha256"
PASSWORD_ITERATIONS = 260_000
SALT_BYTES = 16


def hash_password(password: str, iterations: int = PASSWORD_ITERATIONS) -> str:
    """Hash a password with a fresh random salt."""
    salt = secrets.token_hex(SALT_BYTES)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations
    )
    return f"{PASSWORD_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Check a password against a stored hash in constant time."""
    try:
        algorithm, iterations, salt, expected = stored.split("$")
        iterations = int(iterations)
    except (AttributeError, ValueError):
        logger.warning("Stored password hash has an unexpected format")
        return False

    if algorithm != PASSWORD_ALGORITHM:
        return False

    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations
    )
    return hmac.compare_digest(digest.hex(), expected)


def _sign(payload: str) -> str:
    key = get_settings().secret_key.encode("utf-8")
    return hmac.new(key, payload.encode("utf-8"), hashlib.sha256).hexdigest()


def create_auth_token(user_id: int, ttl_seconds: Optional[int] = None) -> str:
    """
    Create a signed auth token for a user.

    Args:
        user_id: Authenticated user's id
        ttl_seconds: Lifetime; defaults to AUTH_TOKEN_TTL_DAYS

    Returns:
        Token string for the auth-token cookie
    """
    if ttl_seconds is None:
        ttl_seconds = auth_token_max_age()
    expires = int(time.time()) + ttl_seconds
    payload = f"user-{user_id}.{expires}"
    return f"{payload}.{_sign(payload)}"


def parse_auth_token(token: str) -> Optional[int]:
    """
    Validate an auth token.

    Returns:
        The user id, or None when the token is malformed, forged or expired.
    """
    if not token:
        return None

    parts = token.split(".")
    if len(parts) != 3:
        return None

    subject, expires, signature = parts
    if not subject.startswith("user-"):
        return None

    if not hmac.compare_digest(_sign(f"{subject}.{expires}"), signature):
        logger.warning("Auth token with invalid signature rejected")
        return None

    try:
        user_id = int(subject[len("user-"):])
        expires_at = int(expires)
    except ValueError:
        return None

    if expires_at < time.time():
        return None

    return user_id


def auth_token_max_age() -> int:
    """Cookie max-age in seconds."""
    return get_settings().auth_token_ttl_days * 24 * 60 * 60
