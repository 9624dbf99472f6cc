"""Weekly meal planner operations."""

from __future__ import annotations

from typing import Optional

from homehub.domain.base import DomainModule, SectionCollection
from homehub.models.meal import Meal
from homehub.models.plan import Weekday, WeeklyPlan

WEEKLY_PLAN_SECTION = "weeklyPlan"


class WeeklyPlanner(DomainModule):
    """Assigns catalog meals to the seven days of the week."""

    def get_weekly_plan(self) -> WeeklyPlan:
        raw = self.store.get(WEEKLY_PLAN_SECTION) or {}
        return WeeklyPlan.model_validate(raw)

    def _save(self, plan: WeeklyPlan) -> None:
        self._persist(WEEKLY_PLAN_SECTION, plan.to_document())

    def add_meal_to_day(self, day: Weekday | str, meal_id: str) -> bool:
        """Plan ``meal_id`` on ``day``; ``False`` when it is already planned there."""

        weekday = Weekday.parse(day)
        plan = self.get_weekly_plan()
        meal_ids = plan.meals_for(weekday)
        if meal_id in meal_ids:
            return False
        plan.set_meals(weekday, [*meal_ids, meal_id])
        self._save(plan)
        self.feedback.success(f"Meal added to {weekday.value}!")
        return True

    def remove_meal_from_day(self, day: Weekday | str, meal_id: str) -> bool:
        weekday = Weekday.parse(day)
        plan = self.get_weekly_plan()
        plan.set_meals(weekday, [planned for planned in plan.meals_for(weekday) if planned != meal_id])
        self._save(plan)
        self.feedback.success("Meal removed")
        return True

    def clear_day(self, day: Weekday | str) -> None:
        weekday = Weekday.parse(day)
        plan = self.get_weekly_plan()
        plan.set_meals(weekday, [])
        self._save(plan)
        self.feedback.success(f"{weekday.value} cleared")

    def clear_week(self) -> None:
        self._save(WeeklyPlan())
        self.feedback.success("Week cleared!")

    def get_meals_for_day(self, day: Weekday | str) -> list[str]:
        return self.get_weekly_plan().meals_for(Weekday.parse(day))

    def today(self) -> Weekday:
        return Weekday.for_date(self.clock().date())

    def get_todays_meals(self) -> list[str]:
        return self.get_meals_for_day(self.today())

    def get_planned_meals(self, day: Optional[Weekday | str] = None) -> list[Meal]:
        """Resolve the meal ids planned for ``day`` (today by default) to catalog records.

        Ids whose meal has since been deleted are skipped.
        """

        meal_ids = self.get_meals_for_day(day if day is not None else self.today())
        catalog = {meal.id: meal for meal in SectionCollection(self, "meals", Meal).all()}
        return [catalog[meal_id] for meal_id in meal_ids if meal_id in catalog]


__all__ = ["WEEKLY_PLAN_SECTION", "WeeklyPlanner"]
