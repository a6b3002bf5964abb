"""Auth endpoints (register, login, me, Google) and the get_current_user dependency."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from memantra.core.config import get_settings
from memantra.core.database import get_db
from memantra.core.ratelimit import me_limiter
from memantra.core.security import verify_access_token
from memantra.schemas.auth import (
    AuthResponse,
    GoogleAuthRequest,
    LoginRequest,
    ProfileData,
    ProfileResponse,
    RegisterRequest,
    TokenPayload,
)
from memantra.services.auth import (
    ConflictError,
    InvalidCredentialsError,
    InvalidGoogleTokenError,
    UserNotFoundError,
    get_profile,
    google_sign_in,
    login_user,
    register_user,
)

logger = logging.getLogger(__name__)
router = APIRouter()
# Scheme match is case-insensitive ("bearer <token>" is accepted), as RFC 7235 requires.
security = HTTPBearer(auto_error=False)

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers=BEARER_CHALLENGE,
    )


def _server_error(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> TokenPayload:
    """
    Dependency: require a valid `Authorization: Bearer <token>` header.

    Attaches the caller to request.state.identity and returns it. Never lets an
    auth failure become a 500: anything unexpected is a 401 "Authentication failed".
    """
    if credentials is None:
        raise _unauthorized("Authentication required")
    try:
        payload = verify_access_token(credentials.credentials)
    except Exception:
        logger.exception("Unexpected error while verifying bearer token")
        raise _unauthorized("Authentication failed")
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    request.state.identity = payload
    return payload


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """Create a local account and return it with an access token."""
    try:
        result = register_user(db, body)
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception:
        logger.exception("Registration error")
        raise _server_error("Error registering user")
    return AuthResponse(message="User registered successfully", data=result)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns the user and a JWT.
    Include the token in the Authorization header as: Bearer <token>
    """
    try:
        result = login_user(db, body)
    except InvalidCredentialsError as e:
        raise _unauthorized(e.message)
    except Exception:
        logger.exception("Login error")
        raise _server_error("Error during login")
    return AuthResponse(message="Login successful", data=result)


@router.get("/me", response_model=ProfileResponse, dependencies=[Depends(me_limiter)])
def me(
    identity: Annotated[TokenPayload, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> ProfileResponse:
    """Profile of the authenticated user."""
    try:
        user = get_profile(db, identity.user_id)
    except UserNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except Exception:
        logger.exception("Get user profile error")
        raise _server_error("Error retrieving user profile")
    return ProfileResponse(data=ProfileData(user=user))


@router.post("/google", response_model=AuthResponse)
def google(
    body: GoogleAuthRequest,
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    """Sign in or sign up with a Google ID token from the mobile client."""
    try:
        result = google_sign_in(db, body.id_token, get_settings())
    except InvalidGoogleTokenError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception:
        logger.exception("Google authentication error")
        raise _server_error("Error during Google authentication")
    return AuthResponse(message="Google authentication successful", data=result)
