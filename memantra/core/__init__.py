"""Core app configuration, database and security primitives."""

from memantra.core.config import get_settings, settings
from memantra.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
