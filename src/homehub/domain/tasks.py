"""Cleaning and maintenance task tracking with recurrence."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Mapping, Optional

from homehub.domain.base import DomainModule, SectionCollection
from homehub.models.task import Frequency, Task, TaskKind

logger = logging.getLogger(__name__)

FREQUENCY_DAYS: dict[str, int] = {
    Frequency.DAILY.value: 1,
    Frequency.WEEKLY.value: 7,
    Frequency.FORTNIGHTLY.value: 14,
    Frequency.MONTHLY.value: 30,
    Frequency.QUARTERLY.value: 90,
    Frequency.YEARLY.value: 365,
}
DEFAULT_INTERVAL_DAYS = 7


def next_due_date(current: date, frequency: str) -> date:
    """Advance ``current`` by the frequency's interval (unknown frequencies: one week)."""

    days = FREQUENCY_DAYS.get(frequency)
    if days is None:
        logger.debug("Unknown task frequency %r; assuming weekly", frequency)
        days = DEFAULT_INTERVAL_DAYS
    return current + timedelta(days=days)


class TaskTracker(DomainModule):
    """Both task collections; every operation names the collection with a ``TaskKind``."""

    def _collection(self, kind: TaskKind | str) -> SectionCollection[Task]:
        return SectionCollection(self, TaskKind(kind).section, Task)

    def get_tasks(self, kind: TaskKind | str = TaskKind.CLEANING) -> list[Task]:
        return self._collection(kind).all()

    def get_cleaning_tasks(self) -> list[Task]:
        return self.get_tasks(TaskKind.CLEANING)

    def get_maintenance_tasks(self) -> list[Task]:
        return self.get_tasks(TaskKind.MAINTENANCE)

    def get_task(self, task_id: str, kind: TaskKind | str = TaskKind.CLEANING) -> Optional[Task]:
        return self._collection(kind).find(task_id)

    def add_task(self, task_data: Mapping[str, Any], kind: TaskKind | str = TaskKind.CLEANING) -> Task:
        task = self._collection(kind).append(
            task_data,
            {"completed": False, "last_completed": None, "created_date": self.clock()},
        )
        self.feedback.success("Task added!")
        return task

    def update_task(
        self,
        task_id: str,
        changes: Mapping[str, Any],
        kind: TaskKind | str = TaskKind.CLEANING,
    ) -> Optional[Task]:
        return self._collection(kind).update(task_id, changes)

    def toggle_task_complete(
        self, task_id: str, kind: TaskKind | str = TaskKind.CLEANING
    ) -> Optional[Task]:
        """Flip completion; completing a recurring task rolls it to its next due date.

        A recurring task comes back incomplete with the due date advanced from its
        previous due date (today when it had none). One-off tasks simply flip.
        """

        collection = self._collection(kind)
        task = collection.find(task_id)
        if task is None:
            return None

        completed = not task.completed
        changes: dict[str, Any] = {"completed": completed}
        if completed:
            changes["last_completed"] = self.clock()
            if task.recurring:
                anchor = task.due_date or self.clock().date()
                changes["due_date"] = next_due_date(anchor, task.frequency).isoformat()
                changes["completed"] = False
        return collection.update(task_id, changes)

    def delete_task(self, task_id: str, kind: TaskKind | str = TaskKind.CLEANING) -> bool:
        removed = self._collection(kind).remove(task_id)
        self.feedback.success("Task deleted")
        return removed

    def get_due_tasks(self, kind: TaskKind | str = TaskKind.CLEANING) -> list[Task]:
        """Incomplete tasks due today or earlier."""

        today = self.clock().date()
        return [
            task
            for task in self.get_tasks(kind)
            if not task.completed and task.due_date is not None and task.due_date <= today
        ]


__all__ = ["DEFAULT_INTERVAL_DAYS", "FREQUENCY_DAYS", "TaskTracker", "next_due_date"]
