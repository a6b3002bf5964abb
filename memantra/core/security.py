"""Password hashing and JWT issuance/verification for authentication."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from memantra.core.config import settings
from memantra.schemas.auth import TokenPayload

# Bcrypt cost (rounds).
BCRYPT_ROUNDS = 10

# bcrypt only ever reads the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72

# The only signing algorithm accepted for issuing and verifying tokens.
JWT_ALGORITHM = "HS256"


def _password_bytes(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage with a fresh random salt."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(plain_password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash. False on mismatch or unusable hash."""
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(
    user_id: int,
    email: str,
    expires_in: int | None = None,
) -> str:
    """
    Create a signed JWT carrying the user id (sub) and email.

    expires_in is the lifetime in seconds; defaults to JWT_EXPIRES_IN.
    """
    lifetime = settings.jwt_expires_in_seconds if expires_in is None else expires_in
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "iat": now,
        "exp": now + timedelta(seconds=lifetime),
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate JWT; return the raw claims (sub, email, iat, exp).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[JWT_ALGORITHM],
        options={"require": ["sub", "exp"]},
    )


def verify_access_token(token: str) -> TokenPayload | None:
    """
    Verify a bearer token and return its payload, or None when it is expired,
    malformed, tampered with or signed with another algorithm.
    """
    try:
        claims = decode_access_token(token)
        return TokenPayload(user_id=int(claims["sub"]), email=claims.get("email", ""))
    except (jwt.PyJWTError, KeyError, TypeError, ValueError):
        return None
