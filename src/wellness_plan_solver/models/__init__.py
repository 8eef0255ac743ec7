"""Data models."""

from wellness_plan_solver.models.catalog_item import (
    Activity,
    CatalogItem,
    CatalogKind,
    Intensity,
    Meal,
)
from wellness_plan_solver.models.plans import (
    CappedAllocation,
    DailyDietPlan,
    DayPlan,
    MealAssignment,
    PlannedActivity,
    TimeOfDay,
    WeeklyExercisePlan,
)
from wellness_plan_solver.models.profile import (
    ActivityLevel,
    HealthProfile,
    Season,
    Sex,
    season_for,
)
from wellness_plan_solver.models.requirements import (
    ActivityCategory,
    ActivityRequirements,
    ActivityTarget,
    NutrientRequirements,
    NutrientTarget,
)
from wellness_plan_solver.models.validation import (
    Adjustment,
    PlanResult,
    ValidationResult,
    ValidationStatus,
)

__all__ = [
    "Activity",
    "ActivityCategory",
    "ActivityLevel",
    "ActivityRequirements",
    "ActivityTarget",
    "Adjustment",
    "CappedAllocation",
    "CatalogItem",
    "CatalogKind",
    "DailyDietPlan",
    "DayPlan",
    "HealthProfile",
    "Intensity",
    "Meal",
    "MealAssignment",
    "NutrientRequirements",
    "NutrientTarget",
    "PlanResult",
    "PlannedActivity",
    "Season",
    "Sex",
    "TimeOfDay",
    "ValidationResult",
    "ValidationStatus",
    "WeeklyExercisePlan",
    "season_for",
]
