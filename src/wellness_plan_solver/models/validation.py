"""Validation result and the solve result handed back to collaborators."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from wellness_plan_solver.models.plans import DailyDietPlan, WeeklyExercisePlan
from wellness_plan_solver.models.requirements import ActivityRequirements, NutrientRequirements


class ValidationStatus(str, Enum):
    OK = "ok"
    RELAXED = "relaxed"
    INFEASIBLE = "infeasible"


class Adjustment(BaseModel):
    """One relaxation step applied during validation."""

    model_config = ConfigDict(frozen=True)

    target: str = Field(..., description="e.g. nutrient:protein, activity:cardio, variety_window")
    kind: str = Field(..., description="tolerance, variety or capacity")
    before: float
    after: float


class ValidationResult(BaseModel):
    """Outcome of checking a plan against its targets."""

    model_config = ConfigDict(frozen=True)

    status: ValidationStatus
    adjustments: list[Adjustment] = Field(default_factory=list)
    deltas: dict[str, float] = Field(
        default_factory=dict,
        description="Achieved minus target, keyed nutrient:<id> / activity:<category>",
    )
    out_of_band: list[str] = Field(default_factory=list)
    reason: str | None = Field(default=None)
    attempts: int = Field(default=1)

    @property
    def ok(self) -> bool:
        return self.status == ValidationStatus.OK


class PlanResult(BaseModel):
    """Everything a collaborator needs from one solve."""

    model_config = ConfigDict(frozen=True)

    diet_plan: DailyDietPlan
    exercise_plan: WeeklyExercisePlan
    validation: ValidationResult
    nutrient_requirements: NutrientRequirements
    activity_requirements: ActivityRequirements
