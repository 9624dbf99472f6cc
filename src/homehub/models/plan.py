"""Weekly meal plan model."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Weekday(str, Enum):
    """Days of the planning week, Monday first."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def for_date(cls, value: date) -> "Weekday":
        return WEEKDAYS[value.weekday()]

    @classmethod
    def parse(cls, value: "Weekday | str") -> "Weekday":
        """Resolve a day name case-insensitively; raises ``ValueError`` for unknown days."""

        if isinstance(value, Weekday):
            return value
        normalized = str(value).strip().capitalize()
        return cls(normalized)


WEEKDAYS: tuple[Weekday, ...] = tuple(Weekday)


class WeeklyPlan(BaseModel):
    """Seven fixed slots of meal ids, one per weekday.

    Stored as ``{"Monday": [...], ..., "Sunday": [...]}``; keys other than the seven
    day names are ignored.
    """

    monday: list[str] = Field(default_factory=list, alias="Monday")
    tuesday: list[str] = Field(default_factory=list, alias="Tuesday")
    wednesday: list[str] = Field(default_factory=list, alias="Wednesday")
    thursday: list[str] = Field(default_factory=list, alias="Thursday")
    friday: list[str] = Field(default_factory=list, alias="Friday")
    saturday: list[str] = Field(default_factory=list, alias="Saturday")
    sunday: list[str] = Field(default_factory=list, alias="Sunday")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def meals_for(self, day: Weekday) -> list[str]:
        return getattr(self, day.name.lower())

    def set_meals(self, day: Weekday, meal_ids: list[str]) -> None:
        setattr(self, day.name.lower(), list(meal_ids))

    def planned_ids(self) -> list[str]:
        """All planned meal ids in week order (duplicates across days kept)."""

        return [meal_id for day in WEEKDAYS for meal_id in self.meals_for(day)]

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


__all__ = ["WEEKDAYS", "Weekday", "WeeklyPlan"]
