"""Key/value storage backends holding serialized household documents."""
# mypy: ignore-errors

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional, Protocol

from sqlalchemy import LargeBinary, cast, func, select
from sqlalchemy.exc import SQLAlchemyError

from homehub.db.models import DocumentORM
from homehub.db.repository import session_scope
from homehub.errors import StorageError, StorageQuotaExceededError

logger = logging.getLogger(__name__)

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


class StorageBackend(Protocol):
    """Minimal string key/value storage contract used by the document store."""

    def read(self, key: str) -> Optional[str]:
        """Return the stored payload or ``None`` when the key is absent."""

    def write(self, key: str, payload: str) -> None:
        """Store ``payload``; raise ``StorageQuotaExceededError`` when it does not fit."""

    def remove(self, key: str) -> None:
        """Delete ``key`` if present."""


def _payload_size(payload: str) -> int:
    return len(payload.encode("utf-8"))


def _check_quota(quota_bytes: Optional[int], other_bytes: int, payload: str) -> None:
    if quota_bytes is None:
        return
    size = other_bytes + _payload_size(payload)
    if size > quota_bytes:
        raise StorageQuotaExceededError(size, quota_bytes)


class MemoryStorageBackend:
    """Process-local backend for tests and throwaway sessions."""

    def __init__(self, quota_bytes: Optional[int] = DEFAULT_QUOTA_BYTES) -> None:
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()
        self.quota_bytes = quota_bytes

    def read(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def write(self, key: str, payload: str) -> None:
        with self._lock:
            other = sum(_payload_size(value) for name, value in self._values.items() if name != key)
            _check_quota(self.quota_bytes, other, payload)
            self._values[key] = payload

    def remove(self, key: str) -> None:
        with self._lock:
            self._values.pop(key, None)


class SqliteStorageBackend:
    """SQLite-backed key/value table shared by every document key in one file."""

    def __init__(
        self,
        database_path: Optional[Path] = None,
        quota_bytes: Optional[int] = DEFAULT_QUOTA_BYTES,
    ) -> None:
        self._database_path = database_path
        self.quota_bytes = quota_bytes

    def read(self, key: str) -> Optional[str]:
        try:
            with session_scope(self._database_path) as session:
                row = session.get(DocumentORM, key)
                return row.value if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to read '{key}' from storage: {exc}") from exc

    def write(self, key: str, payload: str) -> None:
        try:
            with session_scope(self._database_path) as session:
                stored_bytes = func.length(cast(DocumentORM.value, LargeBinary))
                other = session.execute(
                    select(func.coalesce(func.sum(stored_bytes), 0)).where(DocumentORM.key != key)
                ).scalar_one()
                _check_quota(self.quota_bytes, int(other), payload)
                row = session.get(DocumentORM, key)
                if row is None:
                    session.add(DocumentORM(key=key, value=payload))
                else:
                    row.value = payload
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to write '{key}' to storage: {exc}") from exc

    def remove(self, key: str) -> None:
        try:
            with session_scope(self._database_path) as session:
                row = session.get(DocumentORM, key)
                if row is not None:
                    session.delete(row)
        except SQLAlchemyError as exc:
            raise StorageError(f"Unable to remove '{key}' from storage: {exc}") from exc


__all__ = [
    "DEFAULT_QUOTA_BYTES",
    "MemoryStorageBackend",
    "SqliteStorageBackend",
    "StorageBackend",
]
