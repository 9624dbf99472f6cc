"""Pydantic models describing the household document."""

from homehub.models.meal import Meal, MealFilters
from homehub.models.plan import WEEKDAYS, Weekday, WeeklyPlan
from homehub.models.settings import HouseholdSettings
from homehub.models.shopping import ShoppingItem
from homehub.models.task import Frequency, Task, TaskKind

__all__ = [
    "Meal",
    "MealFilters",
    "WEEKDAYS",
    "Weekday",
    "WeeklyPlan",
    "HouseholdSettings",
    "ShoppingItem",
    "Frequency",
    "Task",
    "TaskKind",
]
