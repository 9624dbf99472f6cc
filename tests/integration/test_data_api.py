"""Integration tests for backup, restore, settings and feedback endpoints."""

from __future__ import annotations

import json

from fastapi import status

from homehub.config import get_settings
from homehub.db.repository import reset_repository_state
from tests.integration.utils import auth_headers


def _add_meal(client, title="Risotto"):
    response = client.post("/meals", json={"title": title, "type": "dinner"}, headers=auth_headers())
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def test_export_downloads_backup(client):
    _add_meal(client)

    response = client.get("/data/export", headers=auth_headers())

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["content-type"].startswith("application/json")
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="home-management-backup-')
    backup = response.json()
    assert backup["exportDate"]
    assert [meal["title"] for meal in backup["meals"]] == ["Risotto"]

    settings = client.get("/settings").json()
    assert settings["lastExport"] is not None


def test_import_replaces_document(client):
    _add_meal(client, "Old Meal")
    backup = {
        "meals": [{"id": "m1", "title": "Imported Pie", "type": "dinner"}],
        "weeklyPlan": {"Monday": ["m1"]},
        "exportDate": "2024-05-01T10:00:00",
    }

    response = client.post(
        "/data/import",
        files={"file": ("backup.json", json.dumps(backup), "application/json")},
        headers=auth_headers(),
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["imported"] is True
    assert body["itemCounts"]["meals"] == 1
    assert [meal["title"] for meal in client.get("/meals").json()] == ["Imported Pie"]
    assert client.get("/planner").json()["Monday"] == ["m1"]
    assert client.get("/shopping-list").json() == []


def test_import_rejects_malformed_backup(client):
    _add_meal(client)

    response = client.post(
        "/data/import",
        files={"file": ("backup.json", b"[1, 2, 3]", "application/json")},
        headers=auth_headers(),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Invalid data format"

    response = client.post(
        "/data/import",
        files={"file": ("backup.json", b"{not json", "application/json")},
        headers=auth_headers(),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    assert len(client.get("/meals").json()) == 1


def test_clear_requires_both_confirmations(client):
    _add_meal(client)

    response = client.delete("/data", params={"confirm": True}, headers=auth_headers())
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert len(client.get("/meals").json()) == 1

    response = client.delete(
        "/data", params={"confirm": True, "confirm_again": True}, headers=auth_headers()
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"cleared": True}
    assert client.get("/meals").json() == []


def test_storage_info_reports_counts(client):
    _add_meal(client)
    client.post("/shopping-list", json={"name": "Rice"}, headers=auth_headers())

    info = client.get("/data/info").json()

    assert info["bytes"] > 0
    assert info["percentUsed"] >= 0
    assert info["itemCounts"] == {
        "meals": 1,
        "shoppingItems": 1,
        "householdItems": 0,
        "cleaningTasks": 0,
        "maintenanceTasks": 0,
    }


def test_settings_round_trip(client):
    defaults = client.get("/settings").json()
    assert defaults["notificationsEnabled"] is False
    assert defaults["notifyMeals"] is True

    response = client.put("/settings", json={"notifyShopping": False}, headers=auth_headers())
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["notifyShopping"] is False
    assert response.json()["notifyMeals"] is True

    assert client.put("/settings", json={}, headers=auth_headers()).status_code == 400


def test_feedback_is_drained(client):
    client.get("/feedback")
    _add_meal(client)

    messages = client.get("/feedback").json()

    assert [(entry["level"], entry["message"]) for entry in messages] == [
        ("success", "Meal added successfully!")
    ]
    assert client.get("/feedback").json() == []


def test_quota_exhaustion_returns_507(client, monkeypatch):
    monkeypatch.setenv("HOMEHUB_STORAGE_QUOTA_BYTES", "64")
    get_settings.cache_clear()
    reset_repository_state()

    response = client.post("/meals", json={"title": "Lasagne", "type": "dinner"}, headers=auth_headers())

    assert response.status_code == status.HTTP_507_INSUFFICIENT_STORAGE
    alerts = [entry for entry in client.get("/feedback").json() if entry["level"] == "alert"]
    assert alerts
