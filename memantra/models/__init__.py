"""SQLAlchemy ORM models."""

from memantra.models.base import Base
from memantra.models.user import User

__all__ = ["Base", "User"]
