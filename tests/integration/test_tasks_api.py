"""Integration tests for the task endpoints."""

from __future__ import annotations

from datetime import date, timedelta

from fastapi import status

from tests.integration.utils import auth_headers


def test_task_lifecycle(client):
    headers = auth_headers()
    response = client.post(
        "/tasks/cleaning",
        json={"name": "Hoover", "frequency": "weekly", "dueDate": "2024-01-01"},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    task = response.json()
    assert task["completed"] is False
    assert task["lastCompleted"] is None
    assert task["createdDate"]

    response = client.post(f"/tasks/cleaning/{task['id']}/toggle", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["dueDate"] == "2024-01-08"
    assert response.json()["completed"] is False
    assert response.json()["lastCompleted"]

    response = client.put(
        f"/tasks/cleaning/{task['id']}", json={"frequency": "monthly"}, headers=headers
    )
    assert response.json()["frequency"] == "monthly"

    assert client.get("/tasks/maintenance").json() == []
    assert len(client.get("/tasks/cleaning").json()) == 1

    assert client.delete(f"/tasks/cleaning/{task['id']}", headers=headers).status_code == 204
    assert client.get("/tasks/cleaning").json() == []


def test_due_tasks_endpoint(client):
    headers = auth_headers()
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    next_week = (date.today() + timedelta(days=7)).isoformat()
    client.post("/tasks/maintenance", json={"name": "Gutters", "dueDate": yesterday}, headers=headers)
    client.post("/tasks/maintenance", json={"name": "Boiler", "dueDate": next_week}, headers=headers)

    due = client.get("/tasks/maintenance/due").json()

    assert [task["name"] for task in due] == ["Gutters"]


def test_unknown_kind_and_task(client):
    assert client.get("/tasks/gardening").status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert client.post("/tasks/cleaning/nope/toggle").status_code == status.HTTP_404_NOT_FOUND


def test_due_date_format_is_validated(client):
    response = client.post(
        "/tasks/cleaning", json={"name": "Dust", "dueDate": "next tuesday"}, headers=auth_headers()
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert response.json()["detail"] == ["Due date must be a YYYY-MM-DD date"]
