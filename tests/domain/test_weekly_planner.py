"""Tests for the weekly meal planner."""

from __future__ import annotations

import pytest

from homehub.domain import MealCatalog, WeeklyPlanner
from homehub.models import Weekday


@pytest.fixture()
def planner(store) -> WeeklyPlanner:
    return WeeklyPlanner(store)


def test_add_meal_to_day_rejects_duplicates(planner):
    assert planner.add_meal_to_day("Monday", "m1") is True
    assert planner.add_meal_to_day(Weekday.MONDAY, "m1") is False
    assert planner.get_meals_for_day("monday") == ["m1"]


def test_remove_and_clear(planner):
    planner.add_meal_to_day("Tuesday", "m1")
    planner.add_meal_to_day("Tuesday", "m2")
    planner.add_meal_to_day("Friday", "m3")

    planner.remove_meal_from_day("Tuesday", "m1")
    assert planner.get_meals_for_day("Tuesday") == ["m2"]

    planner.clear_day("Tuesday")
    assert planner.get_meals_for_day("Tuesday") == []
    assert planner.get_meals_for_day("Friday") == ["m3"]

    planner.clear_week()
    plan = planner.get_weekly_plan()
    assert plan.planned_ids() == []


def test_unknown_day_is_rejected(planner):
    with pytest.raises(ValueError):
        planner.add_meal_to_day("Funday", "m1")


def test_todays_meals_follow_the_clock(planner):
    planner.add_meal_to_day("Wednesday", "m1")

    assert planner.today() is Weekday.WEDNESDAY
    assert planner.get_todays_meals() == ["m1"]


def test_planned_meals_skip_deleted_catalog_entries(planner, store):
    catalog = MealCatalog(store)
    kept = catalog.add_meal({"title": "Risotto", "type": "dinner"})
    gone = catalog.add_meal({"title": "Stew", "type": "dinner"})
    planner.add_meal_to_day("Wednesday", kept.id)
    planner.add_meal_to_day("Wednesday", gone.id)
    catalog.delete_meal(gone.id)

    assert [meal.title for meal in planner.get_planned_meals()] == ["Risotto"]
