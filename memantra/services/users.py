"""User storage: lookups by id, email, username and Google id, and account creation."""

from sqlalchemy.orm import Session

from memantra.models import User
from memantra.schemas.auth import AuthProvider


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.user_id == user_id).first()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.query(User).filter(User.username == username).first()


def get_user_by_google_id(db: Session, google_id: str) -> User | None:
    return db.query(User).filter(User.google_id == google_id).first()


def create_user(
    db: Session,
    *,
    username: str,
    email: str,
    password_hash: str | None,
    auth_provider: AuthProvider = "local",
    device_token: str | None = None,
    google_id: str | None = None,
) -> User:
    """
    Insert and commit a new user, returning the refreshed row.

    Raises sqlalchemy.exc.IntegrityError (after rolling back) when the email,
    username or Google id collides with an existing row.
    """
    user = User(
        username=username,
        email=normalize_email(email),
        password_hash=password_hash,
        auth_provider=auth_provider,
        device_token=device_token,
        google_id=google_id,
    )
    db.add(user)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    return user
