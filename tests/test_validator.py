"""Tests for plan validation and relaxation."""

import pytest

from wellness_plan_solver.catalog import Catalog
from wellness_plan_solver.models import (
    Activity,
    ActivityCategory,
    ActivityRequirements,
    ActivityTarget,
    DailyDietPlan,
    DayPlan,
    Meal,
    MealAssignment,
    NutrientRequirements,
    NutrientTarget,
    PlannedActivity,
    TimeOfDay,
    ValidationStatus,
    WeeklyExercisePlan,
)
from wellness_plan_solver.solver import PlanRelaxer, validate

NUTRIENTS = NutrientRequirements(
    targets={"calories": NutrientTarget(target=1000.0, unit="kcal")}
)
NO_ACTIVITY = ActivityRequirements()


def _diet(calories, item_id="m1"):
    return DailyDietPlan(
        assignments=[
            MealAssignment(
                slot="lunch",
                item_id=item_id,
                name=item_id,
                nutrients={"calories": calories},
            )
        ],
        variety_window=2,
    )


def _week(*entries):
    days = [DayPlan(day_index=d) for d in range(7)]
    if entries:
        days[0] = DayPlan(day_index=0, activities=list(entries))
    return WeeklyExercisePlan(days=days)


@pytest.fixture
def small_catalog():
    return Catalog(
        meals=[
            Meal(id="m1", name="Soup", nutrients={"calories": 1000}),
            Meal(id="bread", name="Bread", restriction_tags=["gluten"], nutrients={"calories": 300}),
        ],
        activities=[
            Activity(id="run", name="Run", category=ActivityCategory.CARDIO, restriction_tags=["high_impact"]),
        ],
    )


def test_in_band_plan_is_ok(policy, small_catalog):
    result = validate(_diet(1020), _week(), NUTRIENTS, NO_ACTIVITY, (), small_catalog, policy)
    assert result.status == ValidationStatus.OK
    assert result.deltas["nutrient:calories"] == pytest.approx(20)
    assert result.out_of_band == []


def test_out_of_band_plan_is_relaxed_with_exact_deltas(policy):
    result = validate(_diet(1200), _week(), NUTRIENTS, NO_ACTIVITY, policy=policy)
    assert result.status == ValidationStatus.RELAXED
    assert result.deltas["nutrient:calories"] == pytest.approx(200)
    assert result.out_of_band == ["nutrient:calories"]


def test_restricted_meal_is_infeasible(policy, small_catalog):
    result = validate(_diet(300, "bread"), _week(), NUTRIENTS, NO_ACTIVITY, ["gluten"], small_catalog, policy)
    assert result.status == ValidationStatus.INFEASIBLE
    assert "bread" in result.reason


def test_restricted_activity_is_infeasible(policy, small_catalog):
    run = PlannedActivity(
        activity_id="run",
        name="Run",
        category=ActivityCategory.CARDIO,
        duration_minutes=30,
        time_of_day=TimeOfDay.MORNING,
    )
    result = validate(_diet(1000), _week(run), NUTRIENTS, NO_ACTIVITY, ["high_impact"], small_catalog, policy)
    assert result.status == ValidationStatus.INFEASIBLE


def test_unknown_item_is_infeasible(policy, small_catalog):
    result = validate(_diet(1000, "ghost"), _week(), NUTRIENTS, NO_ACTIVITY, (), small_catalog, policy)
    assert result.status == ValidationStatus.INFEASIBLE


def test_activity_deltas(policy):
    requirements = ActivityRequirements(
        targets={ActivityCategory.CARDIO: ActivityTarget(minutes=60)}
    )
    result = validate(_diet(1000), _week(), NUTRIENTS, requirements, policy=policy)
    assert result.deltas["activity:cardio"] == -60
    assert "activity:cardio" in result.out_of_band


def test_variety_relaxation_is_reported(policy):
    diet = _diet(1000).model_copy(update={"variety_window": 0, "variety_relaxed": True})
    result = validate(diet, _week(), NUTRIENTS, NO_ACTIVITY, policy=policy)
    assert result.status == ValidationStatus.RELAXED
    assert [a.kind for a in result.adjustments] == ["variety"]
    assert result.adjustments[0].after == 0


def test_relaxer_is_bounded(policy, small_catalog):
    calls = []

    def resolve(widened):
        calls.append(widened)
        return _diet(1500)

    relaxer = PlanRelaxer(small_catalog, (), policy)
    diet, _, result = relaxer.run(_diet(1500), _week(), NUTRIENTS, NO_ACTIVITY, resolve)
    assert len(calls) == policy.max_relax_retries
    assert result.attempts == policy.max_relax_retries + 1
    assert result.status == ValidationStatus.RELAXED
    assert result.deltas["nutrient:calories"] == pytest.approx(500)
    tolerances = [a for a in result.adjustments if a.kind == "tolerance"]
    assert len(tolerances) == policy.max_relax_retries
    assert tolerances[-1].after == pytest.approx(0.05 + policy.relax_step * policy.max_relax_retries)


def test_resolve_inside_band_still_reports_widening(policy, small_catalog):
    seen = []

    def resolve(widened):
        seen.append(widened["calories"].upper_tolerance)
        return _diet(1000)

    relaxer = PlanRelaxer(small_catalog, (), policy)
    diet, _, result = relaxer.run(_diet(1500), _week(), NUTRIENTS, NO_ACTIVITY, resolve)
    assert seen == [pytest.approx(0.05 + policy.relax_step)]
    assert result.status == ValidationStatus.RELAXED
    assert result.out_of_band == []
    assert [a.kind for a in result.adjustments] == ["tolerance"]
    assert result.attempts == 2
    assert diet.totals()["calories"] == 1000


def test_relaxer_flags_exercise_without_resolving_it(policy, small_catalog):
    requirements = ActivityRequirements(
        targets={ActivityCategory.CARDIO: ActivityTarget(minutes=60)}
    )

    def resolve(widened):
        raise AssertionError("diet is in band")

    relaxer = PlanRelaxer(small_catalog, (), policy)
    _, exercise, result = relaxer.run(_diet(1000), _week(), NUTRIENTS, requirements, resolve)
    assert exercise.relaxed
    assert result.status == ValidationStatus.RELAXED
    assert result.attempts == 1


def test_relaxer_reports_leak(policy, small_catalog):
    relaxer = PlanRelaxer(small_catalog, ["gluten"], policy)
    _, _, result = relaxer.run(
        _diet(300, "bread"), _week(), NUTRIENTS, NO_ACTIVITY, lambda widened: _diet(300, "bread")
    )
    assert result.status == ValidationStatus.INFEASIBLE


def test_in_band_plan_passes_relaxer_untouched(policy, small_catalog):
    def resolve(widened):
        raise AssertionError("no widening needed")

    relaxer = PlanRelaxer(small_catalog, (), policy)
    _, _, result = relaxer.run(_diet(1000), _week(), NUTRIENTS, NO_ACTIVITY, resolve)
    assert result.status == ValidationStatus.OK
    assert result.adjustments == []
