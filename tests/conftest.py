"""Shared fixtures."""

import pytest

from wellness_plan_solver.catalog import load_catalog
from wellness_plan_solver.config import get_policy
from wellness_plan_solver.models import ActivityLevel, HealthProfile, Sex
from wellness_plan_solver.services import PlanService

MEAL_RESTRICTION_TAGS = ["gluten", "dairy", "egg", "nuts", "peanut", "soy", "fish", "shellfish", "meat"]
ACTIVITY_RESTRICTION_TAGS = ["high_impact", "heavy_lifting", "cardiac_strain", "hypertension_caution"]


@pytest.fixture
def policy():
    return get_policy()


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def service(catalog, policy):
    return PlanService(catalog, policy)


def make_profile(**overrides) -> HealthProfile:
    data = {
        "weight_kg": 70,
        "height_cm": 175,
        "age": 30,
        "sex": Sex.MALE,
        "activity_level": ActivityLevel.MODERATE,
    }
    data.update(overrides)
    return HealthProfile(**data)


@pytest.fixture
def profile() -> HealthProfile:
    """70 kg, 175 cm, 30-year-old moderately active male."""
    return make_profile()
