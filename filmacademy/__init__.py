"""Film Academy package init."""

from filmacademy.core.config import Settings, settings
from filmacademy.core.database import Base, SessionLocal, engine, get_db

__all__ = ["settings", "Settings", "Base", "SessionLocal", "engine", "get_db"]
