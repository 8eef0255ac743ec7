"""Plan service - orchestrates requirements, both solver cores and validation."""

import asyncio
import logging
import time
from collections.abc import Sequence

from wellness_plan_solver.catalog import Catalog, load_catalog
from wellness_plan_solver.config import SolverPolicy, get_policy
from wellness_plan_solver.errors import RestrictionViolation, SolveTimeout
from wellness_plan_solver.models import (
    ActivityRequirements,
    CatalogKind,
    DailyDietPlan,
    HealthProfile,
    NutrientRequirements,
    PlanResult,
    ValidationStatus,
    WeeklyExercisePlan,
)
from wellness_plan_solver.rules import RequirementsEngine
from wellness_plan_solver.solver import (
    DietPreferences,
    DietSolver,
    ExerciseAllocator,
    PlanRelaxer,
    restriction_leaks,
)

logger = logging.getLogger(__name__)


def _check_deadline(deadline: float | None, stage: str) -> None:
    if deadline is not None and time.monotonic() > deadline:
        logger.warning("Deadline passed before %s", stage)
        raise SolveTimeout(stage)


class PlanService:
    """Stateless between calls. The catalog and policy are read-only and may be shared."""

    def __init__(
        self,
        catalog: Catalog | None = None,
        policy: SolverPolicy | None = None,
    ) -> None:
        self._catalog = catalog or load_catalog()
        self._policy = policy or get_policy()
        self._engine = RequirementsEngine(self._policy)

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    def recompute_requirements(
        self,
        profile: HealthProfile,
    ) -> tuple[NutrientRequirements, ActivityRequirements]:
        """Fresh targets for a changed profile. Raises InvalidProfile."""
        return self._engine.compute(profile)

    def _diet_solver(self, profile: HealthProfile, nutrients: NutrientRequirements) -> DietSolver:
        meals = self._catalog.candidates(
            CatalogKind.MEAL, profile.restrictions, profile.active_season()
        )
        return DietSolver(nutrients, meals, self._policy, DietPreferences.from_profile(profile))

    def _exercise_allocator(
        self,
        profile: HealthProfile,
        activities: ActivityRequirements,
    ) -> ExerciseAllocator:
        candidates = self._catalog.candidates(
            CatalogKind.ACTIVITY, profile.restrictions, profile.active_season()
        )
        return ExerciseAllocator(activities, candidates, profile.focus_areas, self._policy)

    def _finish(
        self,
        profile: HealthProfile,
        diet_plan: DailyDietPlan,
        exercise_plan: WeeklyExercisePlan,
        nutrients: NutrientRequirements,
        activities: ActivityRequirements,
        prior_days: Sequence[DailyDietPlan],
        deadline: float | None,
    ) -> PlanResult:
        _check_deadline(deadline, "validation")

        def resolve_diet(widened: NutrientRequirements) -> DailyDietPlan:
            _check_deadline(deadline, "diet re-solve")
            return self._diet_solver(profile, widened).solve(prior_days)

        relaxer = PlanRelaxer(self._catalog, profile.restrictions, self._policy)
        diet_plan, exercise_plan, validation = relaxer.run(
            diet_plan, exercise_plan, nutrients, activities, resolve_diet
        )
        if validation.status == ValidationStatus.INFEASIBLE:
            leaks = restriction_leaks(diet_plan, exercise_plan, profile.restrictions, self._catalog)
            raise RestrictionViolation(leaks, sorted(profile.restrictions))

        logger.info(
            "Plan solved: status=%s, meals=%s, weekly minutes=%d, attempts=%d",
            validation.status.value,
            ", ".join(diet_plan.item_ids()),
            sum(exercise_plan.minutes_by_category().values()),
            validation.attempts,
        )
        return PlanResult(
            diet_plan=diet_plan,
            exercise_plan=exercise_plan,
            validation=validation,
            nutrient_requirements=nutrients,
            activity_requirements=activities,
        )

    def solve(
        self,
        profile: HealthProfile,
        *,
        prior_days: Sequence[DailyDietPlan] = (),
        deadline: float | None = None,
    ) -> PlanResult:
        """
        Produce a validated daily diet plan and weekly exercise plan.

        Args:
            profile: Health profile snapshot.
            prior_days: Earlier daily plans, oldest first, for meal variety.
            deadline: time.monotonic() timestamp checked between stages.

        Raises:
            InvalidProfile, NoFeasibleMeal, NoFeasibleActivity,
            RestrictionViolation, SolveTimeout.
        """
        nutrients, activities = self.recompute_requirements(profile)
        _check_deadline(deadline, "diet solve")
        diet_plan = self._diet_solver(profile, nutrients).solve(prior_days)
        _check_deadline(deadline, "exercise solve")
        exercise_plan = self._exercise_allocator(profile, activities).solve()
        return self._finish(
            profile, diet_plan, exercise_plan, nutrients, activities, prior_days, deadline
        )

    async def asolve(
        self,
        profile: HealthProfile,
        *,
        prior_days: Sequence[DailyDietPlan] = (),
        deadline: float | None = None,
    ) -> PlanResult:
        """Same result as solve(); the two cores run concurrently in worker threads."""
        nutrients, activities = self.recompute_requirements(profile)
        _check_deadline(deadline, "diet and exercise solve")
        diet_plan, exercise_plan = await asyncio.gather(
            asyncio.to_thread(self._diet_solver(profile, nutrients).solve, prior_days),
            asyncio.to_thread(self._exercise_allocator(profile, activities).solve),
        )
        return await asyncio.to_thread(
            self._finish,
            profile, diet_plan, exercise_plan, nutrients, activities, prior_days, deadline,
        )


def recompute_requirements(
    profile: HealthProfile,
    policy: SolverPolicy | None = None,
) -> tuple[NutrientRequirements, ActivityRequirements]:
    """Profile -> (NutrientRequirements, ActivityRequirements). No catalog needed."""
    return RequirementsEngine(policy or get_policy()).compute(profile)


def solve(
    profile: HealthProfile,
    catalog: Catalog | None = None,
    *,
    prior_days: Sequence[DailyDietPlan] = (),
    policy: SolverPolicy | None = None,
    deadline: float | None = None,
) -> PlanResult:
    """Profile -> PlanResult using the packaged catalog unless one is given."""
    return PlanService(catalog, policy).solve(profile, prior_days=prior_days, deadline=deadline)


async def asolve(
    profile: HealthProfile,
    catalog: Catalog | None = None,
    *,
    prior_days: Sequence[DailyDietPlan] = (),
    policy: SolverPolicy | None = None,
    deadline: float | None = None,
) -> PlanResult:
    return await PlanService(catalog, policy).asolve(
        profile, prior_days=prior_days, deadline=deadline
    )
