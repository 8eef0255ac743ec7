"""Catalog item models: meals and activities."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from wellness_plan_solver.models.profile import Season
from wellness_plan_solver.models.requirements import ActivityCategory


class CatalogKind(str, Enum):
    """Which variant of catalog item to list."""

    MEAL = "meal"
    ACTIVITY = "activity"


class Intensity(str, Enum):
    """Exercise intensity."""

    LIGHT = "light"
    MODERATE = "moderate"
    VIGOROUS = "vigorous"
    HIGH = "high"


class CatalogItem(BaseModel):
    """Fields shared by both variants."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable identifier")
    name: str
    tags: frozenset[str] = Field(default_factory=frozenset)
    restriction_tags: frozenset[str] = Field(
        default_factory=frozenset,
        description="Restrictions this item violates, e.g. gluten, peanut, high_impact",
    )
    seasons: frozenset[Season] = Field(
        default_factory=frozenset,
        description="Seasons the item is available in; empty means all year",
    )

    @field_validator("tags", "restriction_tags", mode="before")
    @classmethod
    def _lower(cls, value):
        return frozenset(str(v).strip().lower() for v in (value or []))

    def violates(self, restrictions: frozenset[str] | set[str]) -> frozenset[str]:
        """Restriction tags of this item present in `restrictions`."""
        return self.restriction_tags & {r.lower() for r in restrictions}

    def available_in(self, season: Season | None) -> bool:
        return season is None or not self.seasons or season in self.seasons


class Meal(CatalogItem):
    """A meal with its nutrient vector for one standard portion."""

    kind: Literal["meal"] = "meal"
    slots: frozenset[str] = Field(default_factory=frozenset, description="Slots it suits; empty means any")
    cuisine: str = Field(default="international")
    taste_score: float = Field(default=7.0, ge=0.0, le=10.0)
    digestion_score: float = Field(default=7.0, ge=0.0, le=10.0, description="Higher is easier to digest")
    nutrients: dict[str, float] = Field(default_factory=dict)

    def suits(self, slot: str) -> bool:
        return not self.slots or slot in self.slots

    def scaled(self, portion: float) -> dict[str, float]:
        return {k: v * portion for k, v in self.nutrients.items()}


class Activity(CatalogItem):
    """An exercise activity."""

    kind: Literal["activity"] = "activity"
    category: ActivityCategory
    intensity: Intensity = Intensity.MODERATE
    calories_per_minute_per_kg: float = Field(default=0.05, ge=0.0)

    def calories_burned(self, minutes: float, weight_kg: float) -> float:
        return self.calories_per_minute_per_kg * minutes * weight_kg
