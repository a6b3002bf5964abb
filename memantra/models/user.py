"""ORM model for application users (local and Google accounts)."""

from sqlalchemy import Column, DateTime, Integer, String, func

from memantra.models.base import Base


class User(Base):
    """
    User account for JWT authentication.

    email is stored lower-cased. password_hash is null only for rows created
    outside the auth flow; Google accounts get an unusable random hash.
    auth_provider: 'local' or 'google'
    """

    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)
    device_token = Column(String(512), nullable=True)
    google_id = Column(String(255), nullable=True, unique=True)
    auth_provider = Column(String(16), nullable=False, default="local", server_default="local")
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
