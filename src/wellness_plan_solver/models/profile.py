"""Health profile data model."""

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Sex(str, Enum):
    """Sex used by the predictive energy equation."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ActivityLevel(str, Enum):
    """Habitual activity level."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    EXTRA_ACTIVE = "extra_active"


class Season(str, Enum):
    """Seasonal availability of catalog items."""

    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"


def season_for(day: date) -> Season:
    """Meteorological season (northern hemisphere) for a date."""
    if day.month in (3, 4, 5):
        return Season.SPRING
    if day.month in (6, 7, 8):
        return Season.SUMMER
    if day.month in (9, 10, 11):
        return Season.FALL
    return Season.WINTER


def _normalize_tags(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = [value]
    return frozenset(str(v).strip().lower() for v in value if str(v).strip())


class HealthProfile(BaseModel):
    """
    Read-only snapshot of the user's biometric, medical and preference data.

    Biometric fields are optional here; the requirements engine rejects
    missing or out-of-range values with InvalidProfile.
    """

    model_config = ConfigDict(frozen=True)

    weight_kg: float | None = Field(default=None, description="Body weight in kg")
    height_cm: float | None = Field(default=None, description="Height in cm")
    age: int | None = Field(default=None, description="Age in years")
    sex: Sex | None = Field(default=None)
    activity_level: ActivityLevel | None = Field(default=None)
    restrictions: frozenset[str] = Field(
        default_factory=frozenset,
        description="Hard exclusions: allergens, dietary and medical contraindications",
    )
    conditions: frozenset[str] = Field(
        default_factory=frozenset,
        description="Condition and goal flags driving adjustment rules",
    )
    focus_areas: frozenset[str] = Field(
        default_factory=frozenset,
        description="Activity tags to prioritise, e.g. stress_reduction",
    )
    taste_weight: float = Field(default=0.0, ge=0.0, le=1.0)
    digestion_weight: float = Field(default=0.0, ge=0.0, le=1.0)
    cuisine_preferences: dict[str, float] = Field(default_factory=dict)
    season: Season | None = Field(default=None, description="Current season for availability filtering")
    seasonal_filtering: bool = Field(default=True)

    @field_validator("restrictions", "conditions", "focus_areas", mode="before")
    @classmethod
    def _lower_tags(cls, value: Any) -> frozenset[str]:
        return _normalize_tags(value)

    def has_any(self, flags: list[str] | set[str]) -> bool:
        """True when any of the given condition flags is set."""
        return any(f.lower() in self.conditions for f in flags)

    def active_season(self) -> Season | None:
        """Season to filter the catalog by, or None when filtering is off."""
        if not self.seasonal_filtering:
            return None
        return self.season
