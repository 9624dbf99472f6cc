"""Database engine and session management.

Engines are cached per database file so several stores (for instance a test store and
the application store) can point at different SQLite files in one process.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from homehub.config import get_settings
from homehub.db.models import Base

_engines: dict[Path, Engine] = {}
_session_factories: dict[Path, sessionmaker[Session]] = {}
logger = logging.getLogger(__name__)


def _resolve_path(database_path: Optional[Path]) -> Path:
    return Path(database_path or get_settings().storage_path).expanduser().resolve()


def _enable_wal(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def get_engine(database_path: Path | None = None) -> Engine:
    """Return the SQLAlchemy engine for ``database_path`` (settings default), creating it once."""

    db_path = _resolve_path(database_path)
    engine = _engines.get(db_path)
    if engine is not None:
        return engine

    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}", future=True, echo=False)
    event.listen(engine, "connect", _enable_wal)
    try:
        Base.metadata.create_all(engine)
    except OperationalError as exc:
        if "already exists" in str(exc).lower():
            logger.debug("Database schema already initialized: %s", exc)
        else:
            raise
    _engines[db_path] = engine
    _session_factories[db_path] = sessionmaker(
        bind=engine, autoflush=False, autocommit=False, future=True
    )
    logger.debug("Opened household database at %s", db_path)
    return engine


def get_session(database_path: Path | None = None) -> Session:
    """Return a new SQLAlchemy session bound to ``database_path``."""

    db_path = _resolve_path(database_path)
    if db_path not in _session_factories:
        get_engine(db_path)
    return _session_factories[db_path]()


@contextmanager
def session_scope(database_path: Path | None = None) -> Generator[Session, None, None]:
    """Context manager yielding a session with automatic commit/rollback."""
    session = get_session(database_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def reset_repository_state() -> None:
    """Dispose every cached engine (intended for testing)."""

    for engine in _engines.values():
        engine.dispose()
    _engines.clear()
    _session_factories.clear()


__all__ = ["get_engine", "get_session", "session_scope", "reset_repository_state"]
