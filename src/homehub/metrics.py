"""Prometheus metrics definitions for Home Management Hub."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "homehub_http_requests_total",
    "Total number of HTTP requests processed by the Home Management Hub API",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "homehub_http_request_duration_seconds",
    "Latency of HTTP requests processed by the Home Management Hub API",
    ["method", "path"],
)

STORAGE_WRITES = Counter(
    "homehub_storage_writes_total",
    "Household document writes by result",
    ["result"],
)

NOTIFICATIONS_SHOWN = Counter(
    "homehub_notifications_shown_total",
    "Notifications handed to the notification platform by tag",
    ["tag"],
)

GITHUB_COMMITS = Counter(
    "homehub_github_meal_commits_total",
    "Meal files committed to GitHub by outcome",
    ["outcome"],
)

__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "STORAGE_WRITES",
    "NOTIFICATIONS_SHOWN",
    "GITHUB_COMMITS",
]
