"""Shopping list models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from homehub.models.base import Entity
from homehub.utils import parse_price


class ShoppingItem(Entity):
    """Single entry on the household shopping list."""

    name: str = Field(default="")
    quantity: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None)
    price: float = Field(default=0.0)
    aisle: Optional[str] = Field(default=None)
    checked: bool = Field(default=False)
    added_date: Optional[datetime] = Field(default=None)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return f"{value:g}"
        return value

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, value: Any) -> Any:
        if value is None or value == "":
            return 0.0
        if isinstance(value, str):
            return parse_price(value)
        return value


__all__ = ["ShoppingItem"]
