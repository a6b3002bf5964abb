"""Pydantic request/response schemas."""

from memantra.schemas.auth import (
    AuthResponse,
    AuthResult,
    GoogleAuthRequest,
    GoogleIdentity,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    TokenPayload,
    UserPublic,
)
from memantra.schemas.health import HealthResponse

__all__ = [
    "AuthResponse",
    "AuthResult",
    "GoogleAuthRequest",
    "GoogleIdentity",
    "HealthResponse",
    "LoginRequest",
    "ProfileResponse",
    "RegisterRequest",
    "TokenPayload",
    "UserPublic",
]
