"""Periodic reminder checks for due tasks, meal planning and shopping."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from homehub.domain.base import SectionCollection
from homehub.models.plan import Weekday, WeeklyPlan
from homehub.models.shopping import ShoppingItem
from homehub.models.task import Task, TaskKind
from homehub.notifications.center import NotificationCenter, ShownNotification
from homehub.utils import format_date

logger = logging.getLogger(__name__)

MEAL_PLANNING_HOUR = 9
SHOPPING_REMINDER_THRESHOLD = 5
DEFAULT_POLL_INTERVAL = 3600.0


class NotificationMonitor:
    """Evaluate every reminder rule against the current document.

    Nothing remembers what was already sent, so each poll may repeat reminders; the
    tags make the platform replace rather than stack them.
    """

    def __init__(
        self,
        center: NotificationCenter,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._center = center
        self._poll_interval = poll_interval

    @property
    def center(self) -> NotificationCenter:
        return self._center

    def _all_tasks(self) -> list[Task]:
        tasks: list[Task] = []
        for kind in TaskKind:
            tasks.extend(SectionCollection(self._center, kind.section, Task).all())
        return tasks

    def _enabled(self, category_flag: str) -> bool:
        settings = self._center.settings()
        return settings.notifications_enabled and bool(getattr(settings, category_flag))

    def check_task_reminders(self) -> list[ShownNotification]:
        """Per-task reminders for incomplete tasks due today or overdue."""

        if not self._enabled("notify_cleaning"):
            return []
        today = self._center.clock().date()
        shown: list[Optional[ShownNotification]] = []
        for task in self._all_tasks():
            if not task.reminder or task.completed or task.due_date is None:
                continue
            tag = f"task-{task.id}"
            if task.due_date == today:
                shown.append(
                    self._center.show_notification("Task Due Today", body=task.name, tag=tag)
                )
            elif task.due_date < today:
                shown.append(
                    self._center.show_notification(
                        "Overdue Task",
                        body=f"{task.name} was due on {format_date(task.due_date)}",
                        tag=tag,
                        require_interaction=True,
                    )
                )
        return [entry for entry in shown if entry is not None]

    def check_due_tasks(self) -> Optional[ShownNotification]:
        """Daily summary of incomplete tasks due today across both collections."""

        if not self._enabled("notify_cleaning"):
            return None
        today = self._center.clock().date()
        due = [task for task in self._all_tasks() if not task.completed and task.due_date == today]
        if not due:
            return None
        plural = "s" if len(due) > 1 else ""
        return self._center.show_notification(
            f"{len(due)} Task{plural} Due Today",
            body=", ".join(task.name for task in due),
            tag="daily-tasks",
        )

    def remind_meal_planning(self) -> Optional[ShownNotification]:
        if not self._enabled("notify_meals"):
            return None
        now = self._center.clock()
        plan = WeeklyPlan.model_validate(self._center.store.get("weeklyPlan") or {})
        if plan.meals_for(Weekday.for_date(now.date())) or now.hour != MEAL_PLANNING_HOUR:
            return None
        return self._center.show_notification(
            "Meal Planning Reminder",
            body="No meals planned for today. Time to plan!",
            tag="meal-planning",
        )

    def remind_shopping(self) -> Optional[ShownNotification]:
        if not self._enabled("notify_shopping"):
            return None
        items = SectionCollection(self._center, "shoppingList", ShoppingItem).all()
        unchecked = [item for item in items if not item.checked]
        if len(unchecked) <= SHOPPING_REMINDER_THRESHOLD:
            return None
        return self._center.show_notification(
            "Shopping Reminder",
            body=f"You have {len(unchecked)} items on your shopping list",
            tag="shopping",
        )

    def poll_once(self) -> int:
        """Run every check once and return how many notifications were shown."""

        shown = list(self.check_task_reminders())
        for check in (self.check_due_tasks, self.remind_meal_planning, self.remind_shopping):
            result = check()
            if result is not None:
                shown.append(result)
        if shown:
            logger.info("Notification poll showed %s notification(s)", len(shown))
        return len(shown)

    def start(self, scheduler: Any) -> None:
        """Register the recurring poll on ``scheduler``, with its first run due now.

        The first check runs on the scheduler's executor, never on the caller's thread.
        """

        logger.info("Starting notification monitor poll_interval=%s", self._poll_interval)
        scheduler.add_job(
            self.poll_once,
            "interval",
            seconds=self._poll_interval,
            next_run_time=datetime.now(),
            id="notification-poll",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )


__all__ = [
    "MEAL_PLANNING_HOUR",
    "NotificationMonitor",
    "SHOPPING_REMINDER_THRESHOLD",
]
