"""Nutrient and activity target models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ActivityCategory(str, Enum):
    """Exercise categories. Declaration order is the allocation order."""

    CARDIO = "cardio"
    STRENGTH = "strength"
    FLEXIBILITY = "flexibility"
    MIND_BODY = "mind_body"
    BREATHING = "breathing"
    FUNCTIONAL = "functional"
    DANCE = "dance"
    MARTIAL_ARTS = "martial_arts"


class NutrientTarget(BaseModel):
    """Daily target with an (optionally asymmetric) tolerance band."""

    model_config = ConfigDict(frozen=True)

    target: float = Field(..., ge=0.0)
    unit: str = Field(default="g")
    lower_tolerance: float = Field(default=0.05, ge=0.0, le=1.0)
    upper_tolerance: float = Field(default=0.05, ge=0.0)

    @property
    def low(self) -> float:
        return self.target * (1.0 - self.lower_tolerance)

    @property
    def high(self) -> float:
        return self.target * (1.0 + self.upper_tolerance)

    @property
    def width(self) -> float:
        """Band width used to normalize deviations. Never zero."""
        width = self.high - self.low
        return width if width > 0 else max(self.target, 1.0)

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high

    def widened(self, step: float) -> "NutrientTarget":
        return self.model_copy(
            update={
                "lower_tolerance": min(1.0, self.lower_tolerance + step),
                "upper_tolerance": self.upper_tolerance + step,
            }
        )


class NutrientRequirements(BaseModel):
    """Nutrient id -> target. Derived once per solve."""

    model_config = ConfigDict(frozen=True)

    targets: dict[str, NutrientTarget] = Field(default_factory=dict)

    def __getitem__(self, nutrient: str) -> NutrientTarget:
        return self.targets[nutrient]

    def __contains__(self, nutrient: str) -> bool:
        return nutrient in self.targets

    def nutrients(self) -> list[str]:
        return list(self.targets)

    def widened(self, nutrients: list[str], step: float) -> "NutrientRequirements":
        """New requirements with the named entries' bands widened by `step`."""
        targets = dict(self.targets)
        for n in nutrients:
            targets[n] = targets[n].widened(step)
        return NutrientRequirements(targets=targets)


class ActivityTarget(BaseModel):
    """Weekly minutes target for one category."""

    model_config = ConfigDict(frozen=True)

    minutes: int = Field(..., ge=0)
    tolerance: float = Field(default=0.10, ge=0.0)

    @property
    def low(self) -> float:
        return self.minutes * (1.0 - min(1.0, self.tolerance))

    @property
    def high(self) -> float:
        return self.minutes * (1.0 + self.tolerance)

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high

    def widened(self, step: float) -> "ActivityTarget":
        return self.model_copy(update={"tolerance": self.tolerance + step})


class ActivityRequirements(BaseModel):
    """Weekly activity targets per category, plus the strength session count."""

    model_config = ConfigDict(frozen=True)

    targets: dict[ActivityCategory, ActivityTarget] = Field(default_factory=dict)
    strength_sessions: int = Field(default=0, ge=0)

    def minutes(self, category: ActivityCategory) -> int:
        target = self.targets.get(category)
        return target.minutes if target else 0

    def total_minutes(self) -> int:
        return sum(t.minutes for t in self.targets.values())

    def widened(self, categories: list[ActivityCategory], step: float) -> "ActivityRequirements":
        targets = dict(self.targets)
        for c in categories:
            targets[c] = targets[c].widened(step)
        return ActivityRequirements(targets=targets, strength_sessions=self.strength_sessions)
