"""Database engine, declarative Base, and session helpers."""

from __future__ import annotations

from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # ON DELETE CASCADE / SET NULL are ignored by SQLite unless enabled
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _build_engine() -> Engine:
    settings = get_settings()
    url = settings.database_url_obj
    if url.get_backend_name() == "sqlite":
        # In-memory SQLite must share one connection across threads (TestClient)
        sqlite_engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine
    return create_engine(
        url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
        connect_args={"application_name": settings.app_name},
    )


class DatabaseManager:
    """Owns the engine and the session factory."""

    def __init__(self) -> None:
        self.engine = _build_engine()
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )


db_manager = DatabaseManager()
engine = db_manager.engine
SessionLocal = db_manager.SessionLocal


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
