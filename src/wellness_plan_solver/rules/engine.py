"""Requirements engine: profile -> nutrient and activity targets. Rules are config-driven."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace

from wellness_plan_solver.config import RulePolicy, SolverPolicy, get_policy
from wellness_plan_solver.errors import InvalidProfile
from wellness_plan_solver.models import (
    ActivityCategory,
    ActivityRequirements,
    ActivityTarget,
    HealthProfile,
    NutrientRequirements,
    NutrientTarget,
    Sex,
)

logger = logging.getLogger(__name__)

# Valid ranges for the adult predictive equation
WEIGHT_RANGE_KG = (20.0, 400.0)
HEIGHT_RANGE_CM = (100.0, 250.0)
AGE_RANGE_YEARS = (18, 110)

# Mifflin-St Jeor sex constant; "other" uses the midpoint
SEX_CONSTANT = {Sex.MALE: 5.0, Sex.FEMALE: -161.0, Sex.OTHER: -78.0}

KCAL_PER_GRAM = {"protein": 4.0, "fat": 9.0, "carbohydrate": 4.0}
MIN_MACRO_SHARE = 0.05


@dataclass(frozen=True)
class Targets:
    """Intermediate targets the adjustment rules operate on."""

    energy_kcal: float
    macro_shares: dict[str, float]
    nutrient_factors: dict[str, float]
    activity_minutes: dict[str, float]
    strength_sessions: int


@dataclass(frozen=True)
class AdjustmentRule:
    """Named pure function Targets -> Targets, gated by condition flags."""

    name: str
    flags: tuple[str, ...]
    adjust: Callable[[Targets], Targets]

    def applies_to(self, profile: HealthProfile) -> bool:
        return profile.has_any(list(self.flags))


def _normalize_shares(shares: dict[str, float]) -> dict[str, float]:
    clamped = {k: max(MIN_MACRO_SHARE, v) for k, v in shares.items()}
    total = sum(clamped.values())
    return {k: v / total for k, v in clamped.items()}


def compile_rule(rule: RulePolicy) -> AdjustmentRule:
    """Turn a rule's config deltas into a pure adjustment function."""

    def adjust(targets: Targets) -> Targets:
        shares = dict(targets.macro_shares)
        for macro, delta in rule.macro_shift.items():
            shares[macro] = shares.get(macro, 0.0) + delta
        factors = dict(targets.nutrient_factors)
        for nutrient, factor in rule.nutrient_factors.items():
            factors[nutrient] = factors.get(nutrient, 1.0) * factor
        minutes = dict(targets.activity_minutes)
        for category, factor in rule.activity_factors.items():
            minutes[category] = minutes.get(category, 0.0) * factor
        for category, extra in rule.activity_minutes.items():
            minutes[category] = minutes.get(category, 0.0) + extra
        return replace(
            targets,
            energy_kcal=targets.energy_kcal * rule.energy_factor,
            macro_shares=_normalize_shares(shares),
            nutrient_factors=factors,
            activity_minutes=minutes,
            strength_sessions=max(0, targets.strength_sessions + rule.strength_sessions_delta),
        )

    return AdjustmentRule(
        name=rule.name,
        flags=tuple(f.lower() for f in rule.when),
        adjust=adjust,
    )


class RequirementsEngine:
    """Derives targets from a profile. Pure: no side effects, no randomness."""

    def __init__(self, policy: SolverPolicy | None = None) -> None:
        self._policy = policy or get_policy()
        self._rules = [compile_rule(r) for r in self._policy.rules]

    @property
    def rules(self) -> list[AdjustmentRule]:
        return list(self._rules)

    def validate_profile(self, profile: HealthProfile) -> None:
        """Raise InvalidProfile for missing or out-of-range biometrics."""
        checks = (
            ("weight_kg", profile.weight_kg, WEIGHT_RANGE_KG),
            ("height_cm", profile.height_cm, HEIGHT_RANGE_CM),
            ("age", profile.age, AGE_RANGE_YEARS),
        )
        for field, value, (low, high) in checks:
            if value is None:
                raise InvalidProfile(field, "required")
            if not low <= value <= high:
                raise InvalidProfile(field, f"{value} outside [{low}, {high}]")
        if profile.sex is None:
            raise InvalidProfile("sex", "required")
        if profile.activity_level is None:
            raise InvalidProfile("activity_level", "required")
        if profile.activity_level.value not in self._policy.activity_multipliers:
            raise InvalidProfile("activity_level", f"no multiplier for {profile.activity_level.value}")

    def base_metabolic_rate(self, profile: HealthProfile) -> float:
        """Mifflin-St Jeor resting energy in kcal/day."""
        self.validate_profile(profile)
        return (
            10.0 * profile.weight_kg
            + 6.25 * profile.height_cm
            - 5.0 * profile.age
            + SEX_CONSTANT[profile.sex]
        )

    def total_energy_expenditure(self, profile: HealthProfile) -> float:
        multiplier = self._policy.activity_multipliers[profile.activity_level.value]
        return self.base_metabolic_rate(profile) * multiplier

    def base_targets(self, profile: HealthProfile) -> Targets:
        return Targets(
            energy_kcal=self.total_energy_expenditure(profile),
            macro_shares=_normalize_shares(dict(self._policy.macro_shares)),
            nutrient_factors={},
            activity_minutes=dict(self._policy.activity_targets),
            strength_sessions=self._policy.strength_sessions,
        )

    def adjusted_targets(self, profile: HealthProfile) -> tuple[Targets, list[str]]:
        """Apply every matching rule in declared order. Returns targets and applied rule names."""
        targets = self.base_targets(profile)
        applied: list[str] = []
        for rule in self._rules:
            if rule.applies_to(profile):
                targets = rule.adjust(targets)
                applied.append(rule.name)
        if applied:
            logger.info("Applied adjustment rules: %s", ", ".join(applied))
        return targets, applied

    def _reference_intakes(self, sex: Sex) -> dict[str, float]:
        table = self._policy.reference_intakes
        if sex == Sex.OTHER:
            male, female = table.get("male", {}), table.get("female", {})
            return {k: (male[k] + female.get(k, male[k])) / 2 for k in male}
        return dict(table.get(sex.value, {}))

    def nutrient_requirements(self, profile: HealthProfile, targets: Targets) -> NutrientRequirements:
        energy = targets.energy_kcal
        values: dict[str, float] = {"calories": energy}
        for macro, kcal_per_g in KCAL_PER_GRAM.items():
            values[macro] = energy * targets.macro_shares.get(macro, 0.0) / kcal_per_g
        values["fiber"] = energy / 1000.0 * self._policy.fiber_per_1000_kcal
        values.update(self._reference_intakes(profile.sex))
        for nutrient, factor in targets.nutrient_factors.items():
            if nutrient in values:
                values[nutrient] *= factor

        result: dict[str, NutrientTarget] = {}
        for nutrient, nutrient_policy in self._policy.nutrients.items():
            if nutrient not in values:
                continue
            result[nutrient] = NutrientTarget(
                target=round(values[nutrient], 1),
                unit=nutrient_policy.unit,
                lower_tolerance=nutrient_policy.lower_tolerance,
                upper_tolerance=nutrient_policy.upper_tolerance,
            )
        return NutrientRequirements(targets=result)

    def activity_requirements(self, targets: Targets) -> ActivityRequirements:
        result: dict[ActivityCategory, ActivityTarget] = {}
        for category in ActivityCategory:
            minutes = int(round(targets.activity_minutes.get(category.value, 0.0)))
            result[category] = ActivityTarget(
                minutes=max(0, minutes),
                tolerance=self._policy.activity_tolerance,
            )
        strength_minutes = result[ActivityCategory.STRENGTH].minutes
        sessions = max(1, targets.strength_sessions) if strength_minutes > 0 else 0
        return ActivityRequirements(targets=result, strength_sessions=sessions)

    def compute(self, profile: HealthProfile) -> tuple[NutrientRequirements, ActivityRequirements]:
        """Derive (NutrientRequirements, ActivityRequirements) for a profile."""
        targets, _ = self.adjusted_targets(profile)
        nutrients = self.nutrient_requirements(profile, targets)
        activities = self.activity_requirements(targets)
        logger.debug(
            "Targets: %.0f kcal, %d weekly activity minutes",
            nutrients["calories"].target,
            activities.total_minutes(),
        )
        return nutrients, activities


def compute_requirements(
    profile: HealthProfile,
    policy: SolverPolicy | None = None,
) -> tuple[NutrientRequirements, ActivityRequirements]:
    """Pure entry point: profile -> (NutrientRequirements, ActivityRequirements)."""
    return RequirementsEngine(policy).compute(profile)
