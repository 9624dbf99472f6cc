"""Dependency definitions for the Home Management Hub API server."""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status

from homehub.config import Settings, get_settings
from homehub.domain import MealCatalog, ShoppingList, TaskTracker, WeeklyPlanner
from homehub.factory import build_document_store, build_notification_center, get_feedback_queue
from homehub.feedback import FeedbackQueue
from homehub.integrations.github import MealPublisher
from homehub.notifications import NotificationCenter, NotificationMonitor
from homehub.notifications.center import JobScheduler
from homehub.store import DocumentStore

MealPublisherFactory = Callable[[], MealPublisher]


def get_document_store(
    settings: Settings = Depends(get_settings),
    feedback: FeedbackQueue = Depends(get_feedback_queue),
) -> DocumentStore:
    return build_document_store(settings, feedback)


def get_meal_catalog(store: DocumentStore = Depends(get_document_store)) -> MealCatalog:
    return MealCatalog(store)


def get_weekly_planner(store: DocumentStore = Depends(get_document_store)) -> WeeklyPlanner:
    return WeeklyPlanner(store)


def get_shopping_list(store: DocumentStore = Depends(get_document_store)) -> ShoppingList:
    return ShoppingList(store)


def get_task_tracker(store: DocumentStore = Depends(get_document_store)) -> TaskTracker:
    return TaskTracker(store)


def get_scheduler(request: Request) -> Optional[JobScheduler]:
    return getattr(request.app.state, "scheduler", None)


def get_notification_center(
    store: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
    scheduler: Optional[JobScheduler] = Depends(get_scheduler),
) -> NotificationCenter:
    return build_notification_center(store, settings, scheduler)


def get_notification_monitor(
    center: NotificationCenter = Depends(get_notification_center),
    settings: Settings = Depends(get_settings),
) -> NotificationMonitor:
    return NotificationMonitor(center, poll_interval=settings.notification_poll_interval)


def get_meal_publisher_factory() -> MealPublisherFactory:
    """Return a factory so a missing credential surfaces per request."""

    return MealPublisher.from_settings


def require_api_token(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    """Ensure requests carry the configured API token when required."""

    token = settings.api_token
    if not token:
        return

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.split("Bearer ")[-1].strip() == token:
        return

    if request.headers.get("X-API-Key") == token:
        return

    if request.query_params.get("api_token") == token:
        return

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
