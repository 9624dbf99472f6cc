"""Domain operations over the household document."""

from homehub.domain.meals import MealCatalog
from homehub.domain.planner import WeeklyPlanner
from homehub.domain.shopping import ShoppingList
from homehub.domain.tasks import TaskTracker, next_due_date

__all__ = ["MealCatalog", "ShoppingList", "TaskTracker", "WeeklyPlanner", "next_due_date"]
