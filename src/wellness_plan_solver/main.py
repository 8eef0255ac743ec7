"""FastAPI application - requirements and plan endpoints, health."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from wellness_plan_solver.config import get_settings
from wellness_plan_solver.errors import (
    InvalidProfile,
    NoFeasibleActivity,
    NoFeasibleMeal,
    PlanSolverError,
    RestrictionViolation,
    SolveTimeout,
)
from wellness_plan_solver.models import (
    ActivityRequirements,
    DailyDietPlan,
    HealthProfile,
    NutrientRequirements,
    PlanResult,
)
from wellness_plan_solver.services import PlanService

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Created at startup
_service: PlanService | None = None

ERROR_STATUS = {
    InvalidProfile: 422,
    NoFeasibleMeal: 409,
    NoFeasibleActivity: 409,
    RestrictionViolation: 409,
    SolveTimeout: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load catalog and policy once."""
    global _service
    _service = PlanService()
    yield
    _service = None


def get_service() -> PlanService:
    global _service
    if _service is None:
        _service = PlanService()
    return _service


app = FastAPI(
    title="Wellness Plan Solver",
    description="Personalized daily diet and weekly exercise plans from a health profile",
    version="0.1.0",
    lifespan=lifespan,
)


class RequirementsResponse(BaseModel):
    nutrients: NutrientRequirements
    activities: ActivityRequirements


class PlanRequest(BaseModel):
    profile: HealthProfile
    prior_days: list[DailyDietPlan] = Field(default_factory=list)


@app.exception_handler(PlanSolverError)
async def solver_error_handler(request: Request, exc: PlanSolverError) -> JSONResponse:
    status = ERROR_STATUS.get(type(exc), 500)
    logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(
        status_code=status,
        content={"error": type(exc).__name__, "message": exc.message, "detail": exc.detail},
    )


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check for load balancers."""
    return {"status": "ok"}


@app.post("/requirements")
async def requirements(profile: HealthProfile) -> RequirementsResponse:
    """Nutrient and activity targets for a profile."""
    nutrients, activities = get_service().recompute_requirements(profile)
    return RequirementsResponse(nutrients=nutrients, activities=activities)


@app.post("/plan")
async def plan(request: PlanRequest) -> PlanResult:
    """Validated daily diet plan and weekly exercise plan."""
    return await get_service().asolve(request.profile, prior_days=request.prior_days)
