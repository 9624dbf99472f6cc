"""Security-related integration tests."""

from __future__ import annotations

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from homehub.config import get_settings
from homehub.db.repository import reset_repository_state
from homehub.server.app import create_app


@pytest.fixture()
def secure_client(tmp_path, monkeypatch) -> TestClient:
    db_path = tmp_path / "secure.db"
    monkeypatch.setenv("HOMEHUB_STORAGE_PATH", str(db_path))
    monkeypatch.setenv("HOMEHUB_API_TOKEN", "secret-token")
    get_settings.cache_clear()
    reset_repository_state()
    app = create_app()
    client = TestClient(app)
    yield client
    monkeypatch.delenv("HOMEHUB_API_TOKEN", raising=False)
    reset_repository_state()
    get_settings.cache_clear()


def test_mutations_require_api_token(secure_client):
    payload = {"title": "Dal", "type": "dinner"}
    response = secure_client.post("/meals", json=payload)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

    response = secure_client.post(
        "/meals", json=payload, headers={"Authorization": "Bearer secret-token"}
    )
    assert response.status_code == status.HTTP_201_CREATED


@pytest.mark.parametrize(
    "kwargs",
    [
        {"headers": {"X-API-Key": "secret-token"}},
        {"params": {"api_token": "secret-token"}},
    ],
)
def test_alternative_token_locations(secure_client, kwargs):
    response = secure_client.post("/shopping-list", json={"name": "Eggs"}, **kwargs)
    assert response.status_code == status.HTTP_201_CREATED


def test_reads_do_not_require_token(secure_client):
    assert secure_client.get("/meals").status_code == status.HTTP_200_OK


def test_backup_download_requires_token(secure_client):
    assert secure_client.get("/data/export").status_code == status.HTTP_401_UNAUTHORIZED


def test_save_meal_requires_token(secure_client):
    response = secure_client.post("/api/save-meal", json={"title": "Dal", "type": "dinner"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
