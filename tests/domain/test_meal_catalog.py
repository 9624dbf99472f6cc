"""Tests for meal catalog operations."""

from __future__ import annotations

import pytest

from homehub.domain import MealCatalog
from homehub.errors import StorageError
from homehub.models import MealFilters
from homehub.store import DocumentStore, MemoryStorageBackend


@pytest.fixture()
def catalog(store) -> MealCatalog:
    return MealCatalog(store)


@pytest.fixture()
def seeded(catalog):
    catalog.add_meal(
        {
            "title": "Chickpea Curry",
            "type": "dinner",
            "dietary": ["vegan", "gluten-free"],
            "mainIngredients": ["Chickpeas", "Spinach"],
            "ingredients": ["chickpeas", "spinach", "coconut milk"],
        }
    )
    catalog.add_meal(
        {
            "title": "Beef Lasagne",
            "type": "dinner",
            "dietary": [],
            "main_ingredients": ["Beef mince"],
            "ingredients": ["beef mince", "pasta sheets"],
        }
    )
    catalog.add_meal(
        {
            "title": "Vegan Pancakes",
            "type": "breakfast",
            "dietary": ["vegan"],
            "mainIngredients": ["Flour"],
            "ingredients": ["flour", "oat milk"],
        }
    )
    return catalog


def test_add_meal_stamps_and_persists(catalog, store, feedback):
    meal = catalog.add_meal({"title": "Omelette", "type": "breakfast", "id": "ignored"})

    assert meal.id != "ignored"
    assert meal.date_added is not None and meal.date_added.isoformat() == "2024-05-15T10:30:00"
    assert meal.last_made is None
    assert store.get("meals")[0]["title"] == "Omelette"
    assert store.get("meals")[0]["dateAdded"] == "2024-05-15T10:30:00"
    assert feedback.pending()[-1].message == "Meal added successfully!"


def test_filter_by_type_and_dietary(seeded):
    results = seeded.filter_meals({"type": "dinner", "dietary": ["vegan"]})

    assert [meal.title for meal in results] == ["Chickpea Curry"]
    assert all(meal.type == "dinner" and "vegan" in meal.dietary for meal in results)


def test_filter_type_all_disables_type_criterion(seeded):
    results = seeded.filter_meals(MealFilters(type="all", dietary=["vegan"]))

    assert {meal.title for meal in results} == {"Chickpea Curry", "Vegan Pancakes"}


def test_filter_by_ingredient_and_search_is_case_insensitive(seeded):
    assert [meal.title for meal in seeded.filter_meals({"ingredient": "BEEF"})] == ["Beef Lasagne"]
    assert [meal.title for meal in seeded.filter_meals({"search": "OAT MILK"})] == ["Vegan Pancakes"]
    assert len(seeded.filter_meals({})) == 3


def test_update_meal_merges_fields_and_keeps_id(seeded):
    meal = seeded.get_meals()[0]

    updated = seeded.update_meal(meal.id, {"title": "Spinach Curry", "id": "other"})

    assert updated is not None
    assert updated.id == meal.id
    assert updated.title == "Spinach Curry"
    assert updated.dietary == meal.dietary


def test_update_unknown_meal_returns_none(catalog):
    assert catalog.update_meal("missing", {"title": "x"}) is None


def test_toggle_favourite_returns_new_flag(seeded):
    meal_id = seeded.get_meals()[1].id

    assert seeded.toggle_favourite(meal_id) is True
    assert seeded.get_meal(meal_id).favourite is True
    assert seeded.toggle_favourite(meal_id) is False
    assert seeded.toggle_favourite("missing") is False


def test_delete_meal(seeded):
    meal_id = seeded.get_meals()[0].id

    assert seeded.delete_meal(meal_id) is True
    assert seeded.get_meal(meal_id) is None
    assert len(seeded.get_meals()) == 2


def test_invalid_stored_records_are_skipped_but_preserved(catalog, store):
    store.set("meals", [{"id": "bad", "dietary": "not-a-list"}, {"id": "ok", "title": "Salad"}])

    assert [meal.id for meal in catalog.get_meals()] == ["ok"]

    catalog.update_meal("ok", {"favourite": True})
    assert store.get("meals")[0] == {"id": "bad", "dietary": "not-a-list"}


def test_failed_save_raises_storage_error(clock):
    catalog = MealCatalog(DocumentStore(MemoryStorageBackend(quota_bytes=10), clock=clock))

    with pytest.raises(StorageError):
        catalog.add_meal({"title": "Too big", "type": "dinner"})
