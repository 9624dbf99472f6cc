"""Meal catalog models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from homehub.models.base import Entity, Record


class Meal(Entity):
    """Recipe entry in the household meal catalog."""

    title: str = Field(default="")
    type: str = Field(default="")
    dietary: list[str] = Field(default_factory=list)
    main_ingredients: list[str] = Field(default_factory=list)
    ingredients: list[str] = Field(default_factory=list)
    favourite: bool = Field(default=False)
    date_added: Optional[datetime] = Field(default=None)
    last_made: Optional[datetime] = Field(default=None)


class MealFilters(Record):
    """Criteria accepted by the meal search; every populated criterion must match."""

    type: Optional[str] = Field(default=None)
    dietary: list[str] = Field(default_factory=list)
    ingredient: Optional[str] = Field(default=None)
    search: Optional[str] = Field(default=None)


__all__ = ["Meal", "MealFilters"]
