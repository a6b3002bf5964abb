"""Request/response schemas for auth endpoints and token claims."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

AuthProvider = Literal["local", "google"]


class RegisterRequest(BaseModel):
    """New local account."""

    username: str = Field(..., min_length=3, max_length=50, description="Unique username")
    email: EmailStr = Field(..., description="Unique email address")
    password: str = Field(..., min_length=8, max_length=128, description="Password")
    device_token: str | None = Field(
        default=None, max_length=512, description="Push notification device token"
    )

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    """Credentials for password login."""

    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class GoogleAuthRequest(BaseModel):
    """Google ID token obtained by the mobile client."""

    model_config = ConfigDict(populate_by_name=True)

    id_token: str | None = Field(
        default=None, alias="idToken", description="Google-issued ID token (JWT)"
    )


class TokenPayload(BaseModel):
    """Identity claims carried by an access token; attached to requests by get_current_user."""

    user_id: int
    email: str


class GoogleIdentity(BaseModel):
    """Verified claims extracted from a Google ID token."""

    subject: str
    email: str
    name: str | None = None


class UserPublic(BaseModel):
    """User fields safe to return to clients."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    username: str
    email: str


class AuthResult(BaseModel):
    """User plus freshly issued access token."""

    user: UserPublic
    token: str


class ProfileData(BaseModel):
    user: UserPublic


class AuthResponse(BaseModel):
    """Envelope returned by register, login and Google sign-in."""

    status: Literal["success"] = "success"
    message: str
    data: AuthResult


class ProfileResponse(BaseModel):
    """Envelope returned by GET /auth/me."""

    status: Literal["success"] = "success"
    data: ProfileData
