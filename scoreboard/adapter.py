"""SQLAlchemy-backed database adapter: connectivity, health and sessions."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from scoreboard import models  # noqa: F401 - registers tables on Base.metadata
from scoreboard.config import Settings
from scoreboard.db import Base, build_engine, build_session_factory
from scoreboard.errors import ConfigurationError, ServiceError
from scoreboard.responses import utcnow_iso

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("sqlite", "postgresql")


class DatabaseAdapter:
    def __init__(self, database_url: str, echo: bool = False) -> None:
        self.database_url = database_url
        self.echo = echo
        self.engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def dialect(self) -> str:
        return make_url(self.database_url).get_backend_name()

    def _ensure_sqlite_directory(self) -> None:
        url = make_url(self.database_url)
        if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
            return
        directory = os.path.dirname(url.database)
        if directory:
            os.makedirs(directory, exist_ok=True)

    def connect(self) -> None:
        if self.engine is not None:
            return
        self._ensure_sqlite_directory()
        engine = build_engine(self.database_url, echo=self.echo)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            engine.dispose()
            logger.exception("Failed to connect to database dialect=%s", self.dialect)
            raise

        self.engine = engine
        self._session_factory = build_session_factory(engine)
        self.create_tables()
        logger.info("Database connected dialect=%s", self.dialect)

    def disconnect(self) -> None:
        if self.engine is None:
            return
        self.engine.dispose()
        self.engine = None
        self._session_factory = None
        logger.info("Database disconnected dialect=%s", self.dialect)

    def is_connected(self) -> bool:
        if self.engine is None:
            return False
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.warning("Database ping failed dialect=%s", self.dialect)
            return False

    def get_health_status(self) -> dict:
        if self.engine is None:
            return {
                "status": "unhealthy",
                "database": self.dialect,
                "error": "Database not connected",
                "timestamp": utcnow_iso(),
                "connected": False,
            }

        started = time.perf_counter()
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            return {
                "status": "unhealthy",
                "database": self.dialect,
                "error": str(exc),
                "timestamp": utcnow_iso(),
                "connected": False,
            }

        return {
            "status": "healthy",
            "database": self.dialect,
            "responseTime": round((time.perf_counter() - started) * 1000, 3),
            "timestamp": utcnow_iso(),
            "connected": True,
        }

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        if self._session_factory is None:
            raise ServiceError("Database not connected")
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def create_tables(self) -> None:
        if self.engine is None:
            raise ServiceError("Database not connected")
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self) -> None:
        if self.engine is None:
            raise ServiceError("Database not connected")
        Base.metadata.drop_all(bind=self.engine)
        logger.info("Dropped all tables dialect=%s", self.dialect)


def create_adapter(settings: Settings) -> DatabaseAdapter:
    try:
        backend = make_url(settings.database_url).get_backend_name()
    except ArgumentError as exc:
        raise ConfigurationError(f"Invalid DATABASE_URL: {exc}") from exc

    if backend not in SUPPORTED_BACKENDS:
        raise ConfigurationError(
            f"Unsupported database type: {backend}. "
            f"Supported: {', '.join(SUPPORTED_BACKENDS)}"
        )
    return DatabaseAdapter(settings.database_url, echo=settings.database_echo)
