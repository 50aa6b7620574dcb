"""Core infrastructure: settings, database, logging, errors and security."""

from app.core.config import Settings, get_settings
from app.core.database import Base, get_db, get_session_maker
from app.core.logging import configure_logging, get_logger

__all__ = [
    "Base",
    "Settings",
    "configure_logging",
    "get_db",
    "get_logger",
    "get_session_maker",
    "get_settings",
]
