"""Diet and exercise plan models. Plans are built fresh per solve and never patched."""

from collections import Counter
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from wellness_plan_solver.models.requirements import ActivityCategory, NutrientRequirements


class MealAssignment(BaseModel):
    """One slot filled with a catalog meal at a portion scale."""

    model_config = ConfigDict(frozen=True)

    slot: str = Field(..., description="breakfast, lunch, dinner or snack")
    item_id: str
    name: str
    portion: float = Field(default=1.0, gt=0.0)
    nutrients: dict[str, float] = Field(default_factory=dict, description="Scaled contribution")


class DailyDietPlan(BaseModel):
    """Meal assignments for one day, in slot order."""

    model_config = ConfigDict(frozen=True)

    assignments: list[MealAssignment] = Field(default_factory=list)
    variety_window: int = Field(default=0, description="Window actually honoured")
    variety_relaxed: bool = Field(default=False)

    def item_ids(self) -> list[str]:
        return [a.item_id for a in self.assignments]

    def slots(self) -> list[str]:
        return [a.slot for a in self.assignments]

    def totals(self) -> dict[str, float]:
        totals: dict[str, float] = {}
        for a in self.assignments:
            for k, v in a.nutrients.items():
                totals[k] = totals.get(k, 0.0) + v
        return totals

    def deviation(self, requirements: NutrientRequirements) -> dict[str, float]:
        """Achieved minus target for every required nutrient."""
        totals = self.totals()
        return {
            n: totals.get(n, 0.0) - t.target
            for n, t in requirements.targets.items()
        }


class TimeOfDay(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"


class PlannedActivity(BaseModel):
    """(activity, duration, time-of-day) entry in a day."""

    model_config = ConfigDict(frozen=True)

    activity_id: str
    name: str
    category: ActivityCategory
    duration_minutes: int = Field(..., gt=0)
    time_of_day: TimeOfDay


class DayPlan(BaseModel):
    """Activities for one day of the week (0 = first day)."""

    model_config = ConfigDict(frozen=True)

    day_index: int = Field(..., ge=0, le=6)
    activities: list[PlannedActivity] = Field(default_factory=list)

    @property
    def total_minutes(self) -> int:
        return sum(a.duration_minutes for a in self.activities)


class CappedAllocation(BaseModel):
    """Non-fatal report: the week could not hold every target minute."""

    model_config = ConfigDict(frozen=True)

    total_target_minutes: int
    capacity_minutes: int
    unallocated: dict[ActivityCategory, int] = Field(default_factory=dict)

    @property
    def overflow_minutes(self) -> int:
        return sum(self.unallocated.values())


class WeeklyExercisePlan(BaseModel):
    """Seven day plans plus allocation flags."""

    model_config = ConfigDict(frozen=True)

    days: list[DayPlan] = Field(default_factory=list)
    per_day_cap: int = Field(default=90)
    capped: bool = Field(default=False)
    capped_allocation: CappedAllocation | None = Field(default=None)
    relaxed: bool = Field(default=False)

    @property
    def unallocated(self) -> dict[ActivityCategory, int]:
        return dict(self.capped_allocation.unallocated) if self.capped_allocation else {}

    def entries(self) -> list[PlannedActivity]:
        return [a for d in self.days for a in d.activities]

    def activity_ids(self) -> list[str]:
        return [a.activity_id for a in self.entries()]

    def minutes_by_category(self) -> dict[ActivityCategory, int]:
        minutes: dict[ActivityCategory, int] = {}
        for a in self.entries():
            minutes[a.category] = minutes.get(a.category, 0) + a.duration_minutes
        return minutes

    def sessions_by_category(self) -> dict[ActivityCategory, int]:
        return dict(Counter(a.category for a in self.entries()))
