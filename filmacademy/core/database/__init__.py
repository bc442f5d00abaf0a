"""Database engine and session management utilities.

- Builds per-backend engine kwargs (SQLite vs Postgres) with safe pooling defaults.
- Derives the URL from settings, using the test database automatically when APP_ENV=test.
- Exposes a SessionLocal factory and a `get_db` dependency with guaranteed cleanup.
"""

from __future__ import annotations

from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from filmacademy.core.config import settings
from filmacademy.models.base import Base


def _engine_kwargs(database_url: str) -> dict:
    """Return engine keyword arguments tuned per backend (SQLite vs pooled Postgres)."""
    url = make_url(database_url)
    if url.drivername.startswith("sqlite"):
        return {
            "pool_pre_ping": True,
            "connect_args": {"check_same_thread": False},
            "poolclass": NullPool,
        }
    return {
        "pool_pre_ping": True,
        "pool_size": 20,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 3600,
        "connect_args": {
            "options": "-c timezone=utc",
            "application_name": "filmacademy",
            "connect_timeout": 10,
        },
    }


def build_engine(database_url: str | None = None) -> Engine:
    """Create a SQLAlchemy engine using application settings by default.

    Respects APP_ENV=test by choosing the test DSN to protect production data.
    """
    if database_url is None:
        use_test_url = settings.environment.lower() == "test"
        database_url = settings.get_database_url(use_test=use_test_url)
    new_engine = create_engine(database_url, **_engine_kwargs(database_url))

    if new_engine.dialect.name == "sqlite":

        @event.listens_for(new_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            """Enforce ON DELETE CASCADE on SQLite the same way Postgres does."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine: Engine = build_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator:
    """Yield a database session with guaranteed cleanup."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


__all__ = ["Base", "SessionLocal", "engine", "get_db", "build_engine"]
