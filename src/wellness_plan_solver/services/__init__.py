"""Business logic services."""

from wellness_plan_solver.services.plan_service import (
    PlanService,
    asolve,
    recompute_requirements,
    solve,
)

__all__ = ["PlanService", "asolve", "recompute_requirements", "solve"]
