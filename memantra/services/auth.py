"""Auth service: registration, password login and Google sign-in, each returning a user and token."""

import logging
import re
import secrets
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from memantra.core.google import verify_google_id_token
from memantra.core.security import create_access_token, hash_password, verify_password
from memantra.models import User
from memantra.schemas.auth import (
    AuthResult,
    GoogleIdentity,
    LoginRequest,
    RegisterRequest,
    UserPublic,
)
from memantra.services.users import (
    create_user,
    get_user_by_email,
    get_user_by_google_id,
    get_user_by_id,
    get_user_by_username,
)

if TYPE_CHECKING:
    from memantra.core.config import Settings

logger = logging.getLogger(__name__)

EMAIL_IN_USE = "Email already in use"
USERNAME_TAKEN = "Username already taken"
INVALID_CREDENTIALS = "Invalid credentials"
INVALID_GOOGLE_TOKEN = "Invalid Google token"
GOOGLE_TOKEN_REQUIRED = "Google ID token is required"
USER_NOT_FOUND = "User not found"

USERNAME_MAX_LEN = 50
# Suffix appended to a derived Google username when the plain one is taken.
USERNAME_SUFFIX_BYTES = 3
GOOGLE_SIGNUP_ATTEMPTS = 3

_WHITESPACE_RE = re.compile(r"\s+")


class AuthServiceError(Exception):
    """Base class for expected auth failures; message is safe to return to clients."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConflictError(AuthServiceError):
    """Raised when a new account's email or username is already registered."""


class InvalidCredentialsError(AuthServiceError):
    """Raised for unknown email, federated-only account or wrong password (indistinguishable)."""

    def __init__(self) -> None:
        super().__init__(INVALID_CREDENTIALS)


class InvalidGoogleTokenError(AuthServiceError):
    """Raised when a Google ID token is missing, malformed, untrusted or has no email."""


class UserNotFoundError(AuthServiceError):
    """Raised when an authenticated user id no longer resolves to a stored user."""

    def __init__(self) -> None:
        super().__init__(USER_NOT_FOUND)


def _auth_result(user: User) -> AuthResult:
    token = create_access_token(user_id=user.user_id, email=user.email)
    return AuthResult(user=UserPublic.model_validate(user), token=token)


def _conflict_for(db: Session, email: str, username: str) -> ConflictError | None:
    if get_user_by_email(db, email) is not None:
        return ConflictError(EMAIL_IN_USE)
    if get_user_by_username(db, username) is not None:
        return ConflictError(USERNAME_TAKEN)
    return None


def register_user(db: Session, body: RegisterRequest) -> AuthResult:
    """
    Create a local account and issue a token for it.

    Email and username uniqueness are pre-checked for a precise message; the
    unique indexes remain authoritative, so a concurrent duplicate that slips
    past the pre-check is reported as the same conflict.
    """
    conflict = _conflict_for(db, body.email, body.username)
    if conflict is not None:
        logger.warning("Registration rejected: %s", conflict.message)
        raise conflict

    try:
        user = create_user(
            db,
            username=body.username,
            email=body.email,
            password_hash=hash_password(body.password),
            auth_provider="local",
            device_token=body.device_token,
        )
    except IntegrityError:
        conflict = _conflict_for(db, body.email, body.username)
        if conflict is None:
            raise
        logger.warning("Registration lost uniqueness race: %s", conflict.message)
        raise conflict from None

    logger.info("Registered user user_id=%s", user.user_id)
    return _auth_result(user)


def login_user(db: Session, body: LoginRequest) -> AuthResult:
    """Check email and password and issue a token; every failure is InvalidCredentialsError."""
    user = get_user_by_email(db, body.email)
    if user is None or not user.password_hash:
        logger.warning("Login failed: unknown email or no local password")
        raise InvalidCredentialsError()
    if not verify_password(body.password, user.password_hash):
        logger.warning("Login failed: wrong password for user_id=%s", user.user_id)
        raise InvalidCredentialsError()
    return _auth_result(user)


def derive_username(name: str | None, email: str) -> str:
    """Username for a Google signup: display name without whitespace, else the email local part."""
    base = _WHITESPACE_RE.sub("", name or "").lower()
    if not base:
        base = email.split("@", 1)[0].lower()
    return base[:USERNAME_MAX_LEN]


def _suffixed_username(base: str) -> str:
    stem = base[: USERNAME_MAX_LEN - 2 * USERNAME_SUFFIX_BYTES - 1]
    return f"{stem}_{secrets.token_hex(USERNAME_SUFFIX_BYTES)}"


def _available_username(db: Session, base: str) -> str:
    if get_user_by_username(db, base) is None:
        return base
    return _suffixed_username(base)


def _existing_google_user(db: Session, identity: GoogleIdentity) -> User | None:
    """Account already bound to this Google identity, by email or by Google subject id."""
    user = get_user_by_email(db, identity.email)
    if user is None:
        user = get_user_by_google_id(db, identity.subject)
    return user


def google_sign_in(db: Session, raw_token: object, settings: "Settings") -> AuthResult:
    """
    Sign in (or sign up) with a Google ID token.

    An existing user with the verified email, or already bound to the Google
    subject id under an older email, is logged in unchanged. Otherwise a new
    'google' account is created with a random password nobody knows, so
    password login stays unreachable for it.
    """
    if not isinstance(raw_token, str) or not raw_token.strip():
        raise InvalidGoogleTokenError(GOOGLE_TOKEN_REQUIRED)

    identity = verify_google_id_token(raw_token.strip(), settings.GOOGLE_CLIENT_ID)
    if identity is None:
        raise InvalidGoogleTokenError(INVALID_GOOGLE_TOKEN)

    user = _existing_google_user(db, identity)
    if user is not None:
        return _auth_result(user)

    base = derive_username(identity.name, identity.email)
    username = _available_username(db, base)
    attempts = 0
    while True:
        attempts += 1
        try:
            user = create_user(
                db,
                username=username,
                email=identity.email,
                password_hash=hash_password(secrets.token_urlsafe(32)),
                auth_provider="google",
                google_id=identity.subject,
            )
        except IntegrityError:
            # A concurrent first sign-in won: log in as that account.
            existing = _existing_google_user(db, identity)
            if existing is not None:
                return _auth_result(existing)
            if attempts >= GOOGLE_SIGNUP_ATTEMPTS:
                raise
            # Otherwise only the username can have collided.
            logger.warning("Google signup username %r taken concurrently; retrying", username)
            username = _suffixed_username(base)
            continue
        break

    logger.info("Created Google user user_id=%s", user.user_id)
    return _auth_result(user)


def get_profile(db: Session, user_id: int) -> UserPublic:
    """Public fields of the authenticated user."""
    user = get_user_by_id(db, user_id)
    if user is None:
        raise UserNotFoundError()
    return UserPublic.model_validate(user)
