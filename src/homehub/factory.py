"""Construct stores and notification objects from application settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from homehub.config import Settings
from homehub.feedback import FeedbackQueue
from homehub.notifications import NotificationCenter, resolve_capability
from homehub.notifications.center import JobScheduler
from homehub.store import DocumentStore, SqliteStorageBackend


@lru_cache
def get_feedback_queue() -> FeedbackQueue:
    """Return the process-wide queue of user feedback messages."""

    return FeedbackQueue()


def build_document_store(
    settings: Settings,
    feedback: Optional[FeedbackQueue] = None,
) -> DocumentStore:
    """Return a store over the configured SQLite document backend."""

    backend = SqliteStorageBackend(settings.storage_path, quota_bytes=settings.storage_quota_bytes)
    return DocumentStore(backend, key=settings.storage_key, feedback=feedback or get_feedback_queue())


def build_notification_center(
    store: DocumentStore,
    settings: Settings,
    scheduler: Optional[JobScheduler] = None,
) -> NotificationCenter:
    capability = resolve_capability(settings.home_assistant_base_url, settings.home_assistant_token)
    return NotificationCenter(
        store,
        capability,
        scheduler=scheduler,
        dismiss_seconds=settings.notification_dismiss_seconds,
    )


__all__ = ["build_document_store", "build_notification_center", "get_feedback_queue"]
