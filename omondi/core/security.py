"""
Password hashing and session tokens.

Passwords are always stored as bcrypt hashes. Sessions are HS256 JWTs carried
in a single HTTP-only cookie.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from omondi.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

COOKIE_NAME = "auth_token"
TOKEN_ALGORITHM = "HS256"
BCRYPT_ROUNDS = 12
MIN_PASSWORD_LENGTH = 6
# bcrypt only accepts the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72

# Verified against when the username is unknown so both paths cost the same
_DUMMY_HASH = bcrypt.hashpw(b"omondi-dummy-password", bcrypt.gensalt(rounds=4)).decode("utf-8")


def password_problem(password: Optional[str]) -> Optional[str]:
    """Why `password` cannot be stored, or None if it is acceptable."""
    if not password:
        return "Password is required."
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters."
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return f"Password must be at most {MAX_PASSWORD_BYTES} bytes."
    return None


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a password against a bcrypt hash. Unknown users get a dummy check."""
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    if password_hash is None:
        bcrypt.checkpw(password.encode("utf-8"), _DUMMY_HASH.encode("utf-8"))
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def _require_secret(secret: Optional[str]) -> str:
    if not secret:
        raise ConfigurationError("JWT_SECRET is not configured")
    return secret


def create_token(username: str, secret: Optional[str], max_age: int) -> str:
    """Issue a signed session token for `username` valid for `max_age` seconds."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": username,
        "iat": now,
        "exp": now + timedelta(seconds=max_age),
    }
    return jwt.encode(payload, _require_secret(secret), algorithm=TOKEN_ALGORITHM)


def decode_token(token: str, secret: Optional[str]) -> Optional[str]:
    """Return the username in a valid token, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, _require_secret(secret), algorithms=[TOKEN_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired session token")
        return None
    except jwt.InvalidTokenError:
        logger.info("Rejected invalid session token")
        return None
    return payload.get("sub")
