"""Formatting, validation and timing helpers shared by the page-facing layers."""

from __future__ import annotations

import math
import re
import threading
import time
from dataclasses import dataclass
from datetime import date, datetime
from functools import wraps
from typing import Any, Callable, Iterable, Mapping, Optional, Pattern, TypeVar
from uuid import uuid4


T = TypeVar("T")

_PRICE_STRIP = re.compile(r"[^0-9.]")
_LEADING_FLOAT = re.compile(r"^\d*\.?\d+|^\d+")


def generate_id() -> str:
    """Return a unique record id: millisecond timestamp followed by a random suffix."""

    return f"{int(time.time() * 1000)}{uuid4().hex[:9]}"


def format_date(value: date | datetime | str | None) -> str:
    """Format a date for display in UK order (dd/mm/yyyy)."""

    if not value:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value.strftime("%d/%m/%Y")


def format_price(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}£{abs(amount):,.2f}"


def parse_price(text: str) -> float:
    """Extract a price from free text, ignoring currency symbols; 0 when unparseable."""

    cleaned = _PRICE_STRIP.sub("", text or "")
    match = _LEADING_FLOAT.match(cleaned)
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def relative_time(value: datetime, now: Optional[datetime] = None) -> str:
    """Describe how long ago ``value`` was ("2 days ago"); older than a week shows the date."""

    current = now or datetime.now(tz=value.tzinfo)
    seconds = int((current - value).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if days > 7:
        return format_date(value)
    if days > 0:
        return f"{days} day{'s' if days > 1 else ''} ago"
    if hours > 0:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if minutes > 0:
        return f"{minutes} minute{'s' if minutes > 1 else ''} ago"
    return "Just now"


def format_file_size(size: int) -> str:
    if size == 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    index = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    scaled = round(size / (1024**index), 2)
    return f"{scaled:g} {units[index]}"


@dataclass(frozen=True)
class FieldRule:
    """Validation rule for a single form field."""

    label: str
    required: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[Pattern[str]] = None
    pattern_message: Optional[str] = None


def validate_form(values: Mapping[str, Any], rules: Mapping[str, FieldRule]) -> list[str]:
    """Check submitted form values against ``rules`` and return the error messages.

    An empty list means the form is valid.
    """

    errors: list[str] = []
    for field_name, rule in rules.items():
        raw = values.get(field_name)
        value = "" if raw is None else str(raw)

        if rule.required and not value.strip():
            errors.append(f"{rule.label} is required")

        if rule.min_length and len(value) < rule.min_length:
            errors.append(f"{rule.label} must be at least {rule.min_length} characters")

        if rule.max_length and len(value) > rule.max_length:
            errors.append(f"{rule.label} must be less than {rule.max_length} characters")

        if rule.pattern is not None and not rule.pattern.search(value):
            errors.append(rule.pattern_message or f"{rule.label} is invalid")
    return errors


def search_items(
    items: Iterable[T],
    term: str,
    matcher: Callable[[T, str], bool],
) -> list[T]:
    """Filter ``items`` with ``matcher`` using a lower-cased search term."""

    needle = (term or "").lower()
    return [item for item in items if matcher(item, needle)]


class Debouncer:
    """Delay calls to ``func`` until ``wait`` seconds pass without another call."""

    def __init__(self, func: Callable[..., Any], wait: float) -> None:
        self._func = func
        self._wait = wait
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._wait, self._func, args=args, kwargs=kwargs)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush(self) -> None:
        """Cancel the pending timer and run the pending call immediately."""

        with self._lock:
            timer = self._timer
            self._timer = None
        if timer is not None and timer.is_alive():
            timer.cancel()
            timer.function(*timer.args, **timer.kwargs)


def debounce(wait: float) -> Callable[[Callable[..., Any]], Debouncer]:
    """Decorator form of :class:`Debouncer`."""

    def decorator(func: Callable[..., Any]) -> Debouncer:
        return wraps(func)(Debouncer(func, wait))

    return decorator


__all__ = [
    "Debouncer",
    "FieldRule",
    "debounce",
    "format_date",
    "format_file_size",
    "format_price",
    "generate_id",
    "parse_price",
    "relative_time",
    "search_items",
    "truncate_text",
    "validate_form",
]
