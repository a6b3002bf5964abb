"""Shared builders for tests: in-memory SQLite sessions and an app client bound to them."""

from collections.abc import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from memantra.core.database import get_db
from memantra.core.ratelimit import api_limiter, me_limiter
from memantra.main import app
from memantra.models import Base

GOOGLE_CLIENT_ID = "test-client-id.apps.googleusercontent.com"


def make_engine() -> Engine:
    """Fresh in-memory database with the full schema; one connection shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


def make_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=make_engine())


def make_client(session_factory: sessionmaker, **kwargs: object) -> TestClient:
    """TestClient whose get_db dependency yields sessions from session_factory; rate limits start fresh."""

    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    api_limiter.reset()
    me_limiter.reset()
    return TestClient(app, **kwargs)


def clear_overrides() -> None:
    app.dependency_overrides.clear()


def google_claims(
    email: str = "jane@example.com",
    name: str | None = "Jane Doe",
    sub: str = "google-sub-123",
    iss: str = "https://accounts.google.com",
    email_verified: object = True,
) -> dict[str, object]:
    """Claims as returned by google.oauth2.id_token.verify_oauth2_token; email_verified=None omits the claim."""
    claims: dict[str, object] = {
        "iss": iss,
        "aud": GOOGLE_CLIENT_ID,
        "sub": sub,
        "email": email,
    }
    if email_verified is not None:
        claims["email_verified"] = email_verified
    if name is not None:
        claims["name"] = name
    return claims
