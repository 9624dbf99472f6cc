"""Tests for the household document store."""

from __future__ import annotations

import json

import pytest

from homehub.domain import MealCatalog
from homehub.errors import ImportFormatError, StorageError
from homehub.models.plan import WEEKDAYS
from homehub.store import DocumentStore, MemoryStorageBackend, SqliteStorageBackend, default_document
from homehub.store.document import (
    CLEAR_CONFIRM_PROMPT,
    CLEAR_PROMPT,
    QUOTA_EXCEEDED_MESSAGE,
    STORAGE_KEY,
    merge_over_defaults,
)


def test_load_on_empty_store_returns_defaults(store):
    document = store.load()

    assert document == default_document()
    assert list(document["weeklyPlan"]) == [day.value for day in WEEKDAYS]
    assert all(meal_ids == [] for meal_ids in document["weeklyPlan"].values())
    assert document["settings"] == {
        "notificationsEnabled": False,
        "notifyMeals": True,
        "notifyCleaning": True,
        "notifyShopping": True,
        "lastExport": None,
    }


@pytest.mark.parametrize(
    "section, value",
    [
        ("meals", [{"id": "1", "title": "Soup", "type": "lunch"}]),
        ("shoppingList", [{"id": "a", "name": "Milk", "checked": False}]),
        ("householdItems", [{"id": "h1", "name": "Light bulbs"}]),
        ("cleaningTasks", [{"id": "t1", "name": "Hoover", "frequency": "weekly"}]),
        ("maintenanceTasks", []),
        (
            "weeklyPlan",
            {day.value: (["1"] if day.value == "Friday" else []) for day in WEEKDAYS},
        ),
        (
            "settings",
            {
                "notificationsEnabled": True,
                "notifyMeals": False,
                "notifyCleaning": True,
                "notifyShopping": False,
                "lastExport": None,
            },
        ),
    ],
)
def test_set_then_get_round_trips(store, section, value):
    assert store.set(section, value) is True
    assert store.get(section) == value


def test_partial_stored_document_is_merged_over_defaults(store):
    store._backend.write(  # noqa: SLF001 - seed raw storage
        STORAGE_KEY,
        json.dumps({"meals": [{"id": "m"}], "settings": {"notifyMeals": False}}),
    )

    document = store.load()

    assert document["meals"] == [{"id": "m"}]
    assert document["shoppingList"] == []
    assert document["settings"]["notifyMeals"] is False
    assert document["settings"]["notifyShopping"] is True


def test_unknown_weekday_keys_are_dropped():
    merged = merge_over_defaults({"weeklyPlan": {"monday": ["1"], "Funday": ["2"]}})

    assert merged["weeklyPlan"]["Monday"] == ["1"]
    assert "Funday" not in merged["weeklyPlan"]
    assert len(merged["weeklyPlan"]) == 7


def test_corrupt_stored_json_falls_back_to_defaults(store):
    store._backend.write(STORAGE_KEY, "{not json")  # noqa: SLF001

    assert store.load() == default_document()


@pytest.mark.parametrize(
    "section, value",
    [("weeklyPlan", []), ("weeklyPlan", "oops"), ("settings", "oops"), ("meals", 5)],
)
def test_wrongly_typed_section_falls_back_to_default(store, section, value):
    store.set(section, value)

    assert store.get(section) == default_document()[section]
    assert store.storage_info().item_counts["meals"] == 0
    assert json.loads(store.export().content.decode("utf-8"))["settings"]["lastExport"]


def test_wrongly_typed_raw_section_keeps_domain_usable(store):
    store._backend.write(  # noqa: SLF001 - seed raw storage
        STORAGE_KEY,
        json.dumps({"weeklyPlan": "oops", "meals": [{"id": "m"}]}),
    )

    assert [meal.id for meal in MealCatalog(store).get_meals()] == ["m"]
    assert store.get("weeklyPlan") == default_document()["weeklyPlan"]


def test_quota_exceeded_alerts_and_keeps_previous_document(clock, feedback):
    store = DocumentStore(MemoryStorageBackend(quota_bytes=600), feedback=feedback, clock=clock)
    assert store.set("meals", [{"id": "1", "title": "Toast"}])

    saved = store.set("meals", [{"id": str(index), "title": "x" * 50} for index in range(20)])

    assert saved is False
    assert store.get("meals") == [{"id": "1", "title": "Toast"}]
    alerts = [message for message in feedback.pending() if message.level == "alert"]
    assert [message.message for message in alerts] == [QUOTA_EXCEEDED_MESSAGE]
    assert alerts[0].duration == 0


def test_export_includes_export_date_and_records_last_export(store):
    exported = store.export()

    payload = json.loads(exported.content.decode("utf-8"))
    assert exported.filename == "home-management-backup-2024-05-15.json"
    assert payload["exportDate"] == "2024-05-15T10:30:00"
    assert "exportDate" not in store.load()
    assert store.get("settings")["lastExport"] == "2024-05-15T10:30:00"


def test_import_without_settings_uses_default_settings(store):
    backup = {"meals": [{"id": "1", "title": "Curry"}], "exportDate": "2024-01-01T00:00:00"}

    document = store.import_bytes(json.dumps(backup).encode("utf-8"))

    assert document["meals"] == [{"id": "1", "title": "Curry"}]
    assert document["settings"] == default_document()["settings"]
    assert "exportDate" not in store.load()


def test_import_merges_partial_settings(store):
    backup = {"settings": {"notificationsEnabled": True}}

    store.import_bytes(json.dumps(backup).encode("utf-8"))

    settings = store.get("settings")
    assert settings["notificationsEnabled"] is True
    assert settings["notifyMeals"] is True


@pytest.mark.parametrize(
    "payload",
    [b"[1, 2, 3]", b"not json at all", b"\xff\xfe\x00", b'{"meals": {"id": 1}}'],
)
def test_malformed_import_is_rejected_before_writing(store, payload):
    store.set("meals", [{"id": "keep"}])

    with pytest.raises(ImportFormatError):
        store.import_bytes(payload)

    assert store.get("meals") == [{"id": "keep"}]


def test_import_that_cannot_be_saved_raises_storage_error(clock):
    store = DocumentStore(MemoryStorageBackend(quota_bytes=100), clock=clock)

    with pytest.raises(StorageError):
        store.import_bytes(json.dumps({"meals": [{"id": "1", "title": "x" * 200}]}).encode())


def test_clear_requires_both_confirmations(store):
    store.set("meals", [{"id": "1"}])
    prompts: list[str] = []

    def refuse_second(prompt: str) -> bool:
        prompts.append(prompt)
        return prompt == CLEAR_PROMPT

    assert store.clear(refuse_second) is False
    assert prompts == [CLEAR_PROMPT, CLEAR_CONFIRM_PROMPT]
    assert store.get("meals") == [{"id": "1"}]

    assert store.clear(lambda prompt: True) is True
    assert store.load() == default_document()


def test_storage_info_reports_counts(store):
    store.set("meals", [{"id": "1"}, {"id": "2"}])
    store.set("cleaningTasks", [{"id": "t"}])

    info = store.storage_info()

    assert info.item_counts["meals"] == 2
    assert info.item_counts["cleaningTasks"] == 1
    assert info.item_counts["shoppingItems"] == 0
    assert info.bytes > 0
    assert info.model_dump(by_alias=True)["percentUsed"] == info.percent_used


def test_initialize_persists_defaults_on_first_run(store):
    assert store.is_available() is True

    store.initialize()

    assert store._backend.read(STORAGE_KEY) is not None  # noqa: SLF001


def test_sqlite_backend_persists_between_store_instances(tmp_path):
    database_path = tmp_path / "household.db"
    first = DocumentStore(SqliteStorageBackend(database_path))
    first.set("shoppingList", [{"id": "1", "name": "Bread"}])

    second = DocumentStore(SqliteStorageBackend(database_path))

    assert second.get("shoppingList") == [{"id": "1", "name": "Bread"}]


def test_sqlite_backend_enforces_quota(tmp_path):
    backend = SqliteStorageBackend(tmp_path / "small.db", quota_bytes=50)
    store = DocumentStore(backend)

    assert store.set("meals", [{"id": "1", "title": "x" * 100}]) is False
    assert store.get("meals") == []
