"""Cleaning and maintenance task models."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator

from homehub.models.base import Entity


class TaskKind(str, Enum):
    """Task collections kept in the household document."""

    CLEANING = "cleaning"
    MAINTENANCE = "maintenance"

    @property
    def section(self) -> str:
        return f"{self.value}Tasks"


class Frequency(str, Enum):
    """Known recurrence frequencies."""

    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    FORTNIGHTLY = "fortnightly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Task(Entity):
    """Recurring (or one-off) household task."""

    name: str = Field(default="")
    frequency: str = Field(default=Frequency.WEEKLY.value)
    due_date: Optional[date] = Field(default=None)
    completed: bool = Field(default=False)
    last_completed: Optional[datetime] = Field(default=None)
    created_date: Optional[datetime] = Field(default=None)
    reminder: bool = Field(default=True)

    @field_validator("due_date", mode="before")
    @classmethod
    def blank_due_date(cls, value: Any) -> Any:
        if value == "":
            return None
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value

    @property
    def recurring(self) -> bool:
        return self.frequency != Frequency.ONCE.value


__all__ = ["Frequency", "Task", "TaskKind"]
