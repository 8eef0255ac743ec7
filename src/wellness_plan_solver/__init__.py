"""Personalized diet and exercise plan solver."""

from wellness_plan_solver.catalog import Catalog, load_catalog
from wellness_plan_solver.models import HealthProfile, PlanResult
from wellness_plan_solver.services import PlanService, asolve, recompute_requirements, solve

__all__ = [
    "Catalog",
    "HealthProfile",
    "PlanResult",
    "PlanService",
    "asolve",
    "load_catalog",
    "recompute_requirements",
    "solve",
]

__version__ = "0.1.0"
