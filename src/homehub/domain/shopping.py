"""Shopping list operations."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from homehub.domain.base import DomainModule, SectionCollection
from homehub.models.meal import Meal
from homehub.models.plan import WeeklyPlan
from homehub.models.shopping import ShoppingItem
from homehub.utils import generate_id

logger = logging.getLogger(__name__)

GENERATED_ITEM_DEFAULTS: dict[str, Any] = {
    "quantity": "1",
    "category": "food",
    "price": 0,
    "aisle": "",
}


class ShoppingList(DomainModule):
    """Items to buy, stored in the ``shoppingList`` section."""

    def __init__(self, store, **kwargs) -> None:
        super().__init__(store, **kwargs)
        self._items = SectionCollection(self, "shoppingList", ShoppingItem)

    def get_shopping_list(self) -> list[ShoppingItem]:
        return self._items.all()

    def get_item(self, item_id: str) -> Optional[ShoppingItem]:
        return self._items.find(item_id)

    def add_shopping_item(self, item_data: Mapping[str, Any]) -> ShoppingItem:
        item = self._items.append(item_data, {"checked": False, "added_date": self.clock()})
        self.feedback.success("Item added to shopping list!")
        return item

    def update_item(self, item_id: str, changes: Mapping[str, Any]) -> Optional[ShoppingItem]:
        return self._items.update(item_id, changes)

    def toggle_item_checked(self, item_id: str) -> bool:
        """Flip the checked flag and return its new value (``False`` if not found)."""

        item = self._items.find(item_id)
        if item is None:
            return False
        updated = self._items.update(item_id, {"checked": not item.checked})
        return bool(updated and updated.checked)

    def remove_item(self, item_id: str) -> bool:
        removed = self._items.remove(item_id)
        self.feedback.success("Item removed")
        return removed

    def clear_checked_items(self) -> list[ShoppingItem]:
        remaining = [entry for entry in self._items.raw() if not entry.get("checked")]
        self._items.write(remaining)
        self.feedback.success("Checked items cleared!")
        return self._items.all()

    def get_total_cost(self) -> float:
        return sum(item.price for item in self.get_shopping_list() if not item.checked)

    def generate_from_meal_plan(self) -> int:
        """Add every ingredient of the week's planned meals that is not already listed.

        Names are compared case-insensitively, both against the current list and among
        the ingredients themselves; the first spelling seen wins. Returns the number of
        items added.
        """

        document = self.store.load()
        plan = WeeklyPlan.model_validate(document.get("weeklyPlan") or {})
        meals: dict[str, Meal] = {}
        for entry in document.get("meals") or []:
            if not isinstance(entry, dict) or entry.get("id") is None:
                continue
            try:
                meals[str(entry["id"])] = Meal.model_validate(entry)
            except ValidationError:
                logger.warning("Skipping invalid meal id=%s while generating the list", entry["id"])

        listed = {
            str(entry.get("name", "")).lower()
            for entry in document.get("shoppingList") or []
            if isinstance(entry, dict)
        }
        now = self.clock()
        additions: list[dict[str, Any]] = []
        for meal_id in plan.planned_ids():
            meal = meals.get(meal_id)
            if meal is None:
                continue
            for ingredient in meal.ingredients:
                key = ingredient.lower()
                if key in listed:
                    continue
                listed.add(key)
                item = ShoppingItem.model_validate(
                    {
                        "id": generate_id(),
                        "name": ingredient,
                        **GENERATED_ITEM_DEFAULTS,
                        "checked": False,
                        "addedDate": now,
                    }
                )
                additions.append(item.to_document())

        if additions:
            self._items.write(self._items.raw() + additions)
            logger.info("Generated %s shopping item(s) from the weekly plan", len(additions))
        self.feedback.success(f"Added {len(additions)} items from meal plan!")
        return len(additions)


__all__ = ["GENERATED_ITEM_DEFAULTS", "ShoppingList"]
