"""Household notification and export settings."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from homehub.models.base import Record


class HouseholdSettings(Record):
    """User-facing settings stored in the ``settings`` section."""

    notifications_enabled: bool = Field(default=False)
    notify_meals: bool = Field(default=True)
    notify_cleaning: bool = Field(default=True)
    notify_shopping: bool = Field(default=True)
    last_export: Optional[datetime] = Field(default=None)


__all__ = ["HouseholdSettings"]
