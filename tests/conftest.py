"""Shared pytest fixtures for the Home Management Hub test suite."""

from __future__ import annotations

from datetime import datetime
from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from homehub.config import get_settings
from homehub.db.repository import reset_repository_state
from homehub.factory import get_feedback_queue
from homehub.feedback import FeedbackQueue
from homehub.server.app import create_app
from homehub.store import DocumentStore, MemoryStorageBackend
from tests.fakes import FakeNotifier, FakeScheduler

# Wednesday, mid-morning.
FIXED_NOW = datetime(2024, 5, 15, 10, 30)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Ensure each test uses an isolated SQLite database location."""

    db_path = tmp_path / "test_homehub.db"
    monkeypatch.setenv("HOMEHUB_STORAGE_PATH", str(db_path))
    monkeypatch.delenv("HOMEHUB_API_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_PAT", raising=False)
    monkeypatch.delenv("HOMEHUB_GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("HOMEHUB_HOME_ASSISTANT_BASE_URL", raising=False)
    get_settings.cache_clear()
    get_feedback_queue.cache_clear()
    reset_repository_state()
    yield
    reset_repository_state()
    monkeypatch.delenv("HOMEHUB_STORAGE_PATH", raising=False)
    get_settings.cache_clear()
    get_feedback_queue.cache_clear()


@pytest.fixture()
def app() -> Generator[FastAPI, None, None]:
    """Create a new FastAPI app instance for each test and reset overrides."""

    application = create_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    """Return a test client bound to the FastAPI app."""

    return TestClient(app)


@pytest.fixture()
def clock():
    return lambda: FIXED_NOW


@pytest.fixture()
def feedback() -> FeedbackQueue:
    return FeedbackQueue()


@pytest.fixture()
def store(clock, feedback) -> DocumentStore:
    """In-memory document store with a fixed clock."""

    return DocumentStore(MemoryStorageBackend(), feedback=feedback, clock=clock)


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def scheduler() -> FakeScheduler:
    return FakeScheduler()
