"""Password hashing and JWT creation/verification for authentication."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from app.core.errors import TokenExpiredError, TokenInvalidError

if TYPE_CHECKING:
    from app.core.config import Settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 30
PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    if rounds is None:
        rounds = BCRYPT_ROUNDS
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _encode(
    sub: str,
    role: str,
    token_type: str,
    secret: str,
    algorithm: str,
    expires_delta: timedelta,
) -> str:
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": sub,
        "id": sub,
        "role": role,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        # Distinguishes tokens minted for the same user within one second.
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def create_access_token(
    sub: str,
    role: str,
    settings: "Settings",
    expires_delta: timedelta | None = None,
) -> str:
    """Create a short-lived access token carrying the user id and role."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES)
    return _encode(
        str(sub),
        role,
        ACCESS_TOKEN_TYPE,
        settings.JWT_SECRET.get_secret_value(),
        settings.JWT_ALGORITHM,
        expires_delta,
    )


def create_refresh_token(
    sub: str,
    role: str,
    settings: "Settings",
    expires_delta: timedelta | None = None,
) -> str:
    """Create a long-lived refresh token, signed with the refresh secret."""
    if expires_delta is None:
        expires_delta = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)
    return _encode(
        str(sub),
        role,
        REFRESH_TOKEN_TYPE,
        settings.refresh_secret,
        settings.JWT_ALGORITHM,
        expires_delta,
    )


def verify_token(token: str, secret: str, algorithm: str) -> dict[str, Any]:
    """
    Decode and validate a JWT; return its payload.

    Raises TokenExpiredError past expiry and TokenInvalidError on a bad
    signature, a malformed token, or missing id/role claims.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError("Token expired") from e
    except jwt.PyJWTError as e:
        raise TokenInvalidError("Invalid token") from e
    if not payload.get("sub") or not payload.get("role"):
        raise TokenInvalidError("Invalid token payload")
    return payload


def decode_access_token(token: str, settings: "Settings") -> dict[str, Any]:
    """Verify an access token; refresh tokens are rejected even if signed with the same secret."""
    payload = verify_token(
        token, settings.JWT_SECRET.get_secret_value(), settings.JWT_ALGORITHM
    )
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise TokenInvalidError("Invalid token")
    return payload


def decode_refresh_token(token: str, settings: "Settings") -> dict[str, Any]:
    """Verify a refresh token signature, expiry and type."""
    payload = verify_token(token, settings.refresh_secret, settings.JWT_ALGORITHM)
    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise TokenInvalidError("Invalid refresh token")
    return payload
