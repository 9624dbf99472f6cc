"""Persistence for the single household JSON document."""

from homehub.store.backends import MemoryStorageBackend, SqliteStorageBackend, StorageBackend
from homehub.store.document import (
    DocumentStore,
    ExportedDocument,
    StorageInfo,
    default_document,
    merge_over_defaults,
)
from homehub.store.transfer import FileTransfer, JsonFileTransfer

__all__ = [
    "DocumentStore",
    "ExportedDocument",
    "FileTransfer",
    "JsonFileTransfer",
    "MemoryStorageBackend",
    "SqliteStorageBackend",
    "StorageBackend",
    "StorageInfo",
    "default_document",
    "merge_over_defaults",
]
