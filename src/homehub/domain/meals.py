"""Meal catalog operations."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from homehub.domain.base import DomainModule, SectionCollection
from homehub.models.meal import Meal, MealFilters

ALL_TYPES = "all"


def matches_filters(meal: Meal, filters: MealFilters) -> bool:
    """Return whether ``meal`` satisfies every populated criterion in ``filters``."""

    if filters.type and filters.type != ALL_TYPES and meal.type != filters.type:
        return False
    if filters.dietary and not all(tag in meal.dietary for tag in filters.dietary):
        return False
    if filters.ingredient:
        needle = filters.ingredient.lower()
        if not any(needle in ingredient.lower() for ingredient in meal.main_ingredients):
            return False
    if filters.search:
        haystack = f"{meal.title} {' '.join(meal.ingredients)}".lower()
        if filters.search.lower() not in haystack:
            return False
    return True


class MealCatalog(DomainModule):
    """Recipes the household cooks, stored in the ``meals`` section."""

    def __init__(self, store, **kwargs) -> None:
        super().__init__(store, **kwargs)
        self._meals = SectionCollection(self, "meals", Meal)

    def get_meals(self) -> list[Meal]:
        return self._meals.all()

    def get_meal(self, meal_id: str) -> Optional[Meal]:
        return self._meals.find(meal_id)

    def add_meal(self, meal_data: Mapping[str, Any]) -> Meal:
        meal = self._meals.append(
            meal_data,
            {"date_added": self.clock(), "last_made": None},
        )
        self.feedback.success("Meal added successfully!")
        return meal

    def update_meal(self, meal_id: str, meal_data: Mapping[str, Any]) -> Optional[Meal]:
        meal = self._meals.update(meal_id, meal_data)
        if meal is not None:
            self.feedback.success("Meal updated!")
        return meal

    def delete_meal(self, meal_id: str) -> bool:
        removed = self._meals.remove(meal_id)
        self.feedback.success("Meal deleted")
        return removed

    def toggle_favourite(self, meal_id: str) -> bool:
        """Flip the favourite flag and return its new value (``False`` if not found)."""

        meal = self._meals.find(meal_id)
        if meal is None:
            return False
        updated = self._meals.update(meal_id, {"favourite": not meal.favourite})
        return bool(updated and updated.favourite)

    def filter_meals(self, filters: MealFilters | Mapping[str, Any]) -> list[Meal]:
        criteria = filters if isinstance(filters, MealFilters) else MealFilters.model_validate(filters)
        return [meal for meal in self.get_meals() if matches_filters(meal, criteria)]


__all__ = ["ALL_TYPES", "MealCatalog", "matches_filters"]
