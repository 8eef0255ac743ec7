"""Tests for the exercise core."""

import pytest

from wellness_plan_solver.errors import NoFeasibleActivity
from wellness_plan_solver.models import (
    Activity,
    ActivityCategory,
    ActivityRequirements,
    ActivityTarget,
    CatalogKind,
)
from wellness_plan_solver.rules import compute_requirements
from wellness_plan_solver.solver import ExerciseAllocator, solve_week


def _requirements(sessions=0, **minutes):
    return ActivityRequirements(
        targets={ActivityCategory(c): ActivityTarget(minutes=m) for c, m in minutes.items()},
        strength_sessions=sessions,
    )


@pytest.fixture
def activities(catalog):
    return catalog.candidates(CatalogKind.ACTIVITY)


def test_default_targets_allocated_exactly(profile, policy, activities):
    _, requirements = compute_requirements(profile, policy)
    plan = solve_week(requirements, activities, policy=policy)
    assert len(plan.days) == 7
    assert not plan.capped
    minutes = plan.minutes_by_category()
    for category, target in requirements.targets.items():
        assert minutes.get(category, 0) == target.minutes
    assert plan.sessions_by_category()[ActivityCategory.STRENGTH] >= requirements.strength_sessions


def test_per_day_cap_respected(policy, activities):
    requirements = _requirements(sessions=2, cardio=600, strength=200, flexibility=100)
    plan = solve_week(requirements, activities, policy=policy)
    assert all(day.total_minutes <= policy.per_day_cap for day in plan.days)
    assert plan.capped
    allocated = sum(plan.minutes_by_category().values())
    assert allocated == 7 * policy.per_day_cap
    assert allocated + plan.capped_allocation.overflow_minutes == 900


def test_strength_sessions_on_distinct_days(policy, activities):
    requirements = _requirements(sessions=3, strength=90)
    plan = solve_week(requirements, activities, policy=policy)
    strength_days = {
        day.day_index
        for day in plan.days
        for a in day.activities
        if a.category == ActivityCategory.STRENGTH
    }
    assert len(strength_days) >= 3
    assert plan.minutes_by_category()[ActivityCategory.STRENGTH] == 90


def test_split_sessions_respects_max_length(policy, activities):
    allocator = ExerciseAllocator(_requirements(cardio=150), activities, policy=policy)
    chunks = allocator.split_sessions(ActivityCategory.CARDIO, 150)
    assert sum(chunks) == 150
    assert max(chunks) <= policy.session_minutes("cardio")


def test_missing_category_raises(policy):
    only_yoga = [Activity(id="yoga", name="Yoga", category=ActivityCategory.MIND_BODY)]
    with pytest.raises(NoFeasibleActivity) as exc_info:
        solve_week(_requirements(cardio=30), only_yoga, policy=policy)
    assert exc_info.value.category == "cardio"


def test_zero_target_category_needs_no_candidates(policy):
    only_yoga = [Activity(id="yoga", name="Yoga", category=ActivityCategory.MIND_BODY)]
    plan = solve_week(_requirements(cardio=0, mind_body=60), only_yoga, policy=policy)
    assert plan.activity_ids() == ["yoga", "yoga"]


def test_activities_rotate_within_category(policy, activities):
    plan = solve_week(_requirements(mind_body=120), activities, policy=policy)
    assert sorted(plan.activity_ids()) == sorted(["a_yoga", "a_tai_chi", "a_pilates", "a_meditation"])


def test_focus_areas_boost_tagged_activities(policy, activities):
    plan = solve_week(
        _requirements(mind_body=120), activities, focus_areas=["stress_reduction"], policy=policy
    )
    assert "a_pilates" not in plan.activity_ids()
    assert len(plan.activity_ids()) == 4


def test_restricted_activities_excluded(profile, policy, catalog):
    _, requirements = compute_requirements(profile, policy)
    candidates = catalog.candidates(CatalogKind.ACTIVITY, ["high_impact", "heavy_lifting"])
    plan = solve_week(requirements, candidates, policy=policy)
    for activity_id in plan.activity_ids():
        assert not catalog.get(activity_id).violates({"high_impact", "heavy_lifting"})


def test_calories_burned(profile, policy, catalog, activities):
    _, requirements = compute_requirements(profile, policy)
    plan = solve_week(requirements, activities, policy=policy)
    expected = sum(
        catalog.get(e.activity_id).calories_per_minute_per_kg * e.duration_minutes * 70
        for e in plan.entries()
    )
    assert catalog.calories_burned(plan, 70) == pytest.approx(expected)
    assert expected > 0


def test_exercise_is_deterministic(profile, policy, activities):
    _, requirements = compute_requirements(profile, policy)
    assert solve_week(requirements, activities, policy=policy) == solve_week(
        requirements, activities, policy=policy
    )
