"""Plan validation and bounded tolerance relaxation."""

import logging
from collections.abc import Callable, Iterable

from wellness_plan_solver.catalog import Catalog
from wellness_plan_solver.config import SolverPolicy, get_policy
from wellness_plan_solver.models import (
    ActivityCategory,
    ActivityRequirements,
    Adjustment,
    DailyDietPlan,
    NutrientRequirements,
    ValidationResult,
    ValidationStatus,
    WeeklyExercisePlan,
)

logger = logging.getLogger(__name__)


def restriction_leaks(
    diet_plan: DailyDietPlan,
    exercise_plan: WeeklyExercisePlan,
    restrictions: Iterable[str],
    catalog: Catalog,
) -> list[str]:
    """Ids of chosen items that violate a restriction or are unknown to the catalog."""
    restrictions = frozenset(r.lower() for r in restrictions)
    leaks: list[str] = []
    for item_id in [*diet_plan.item_ids(), *exercise_plan.activity_ids()]:
        item = catalog.get(item_id)
        if item is None or item.violates(restrictions):
            if item_id not in leaks:
                leaks.append(item_id)
    return leaks


def nutrient_out_of_band(plan: DailyDietPlan, requirements: NutrientRequirements) -> list[str]:
    totals = plan.totals()
    return [
        n for n, t in requirements.targets.items()
        if not t.contains(totals.get(n, 0.0))
    ]


def activity_out_of_band(
    plan: WeeklyExercisePlan,
    requirements: ActivityRequirements,
) -> list[ActivityCategory]:
    minutes = plan.minutes_by_category()
    return [
        c for c, t in requirements.targets.items()
        if not t.contains(minutes.get(c, 0))
    ]


def plan_deltas(
    diet_plan: DailyDietPlan,
    exercise_plan: WeeklyExercisePlan,
    nutrients: NutrientRequirements,
    activities: ActivityRequirements,
) -> dict[str, float]:
    """Achieved minus target for every nutrient and activity category."""
    deltas = {f"nutrient:{n}": d for n, d in diet_plan.deviation(nutrients).items()}
    minutes = exercise_plan.minutes_by_category()
    for category, target in activities.targets.items():
        deltas[f"activity:{category.value}"] = float(minutes.get(category, 0) - target.minutes)
    return deltas


def validate(
    diet_plan: DailyDietPlan,
    exercise_plan: WeeklyExercisePlan,
    nutrients: NutrientRequirements,
    activities: ActivityRequirements,
    restrictions: Iterable[str] = (),
    catalog: Catalog | None = None,
    policy: SolverPolicy | None = None,
) -> ValidationResult:
    """Check a plan against its targets without changing anything."""
    policy = policy or get_policy()
    if catalog is not None:
        leaks = restriction_leaks(diet_plan, exercise_plan, restrictions, catalog)
        if leaks:
            return ValidationResult(
                status=ValidationStatus.INFEASIBLE,
                reason=f"restriction violated by {', '.join(leaks)}",
            )

    out_of_band = [f"nutrient:{n}" for n in nutrient_out_of_band(diet_plan, nutrients)]
    out_of_band += [f"activity:{c.value}" for c in activity_out_of_band(exercise_plan, activities)]
    adjustments: list[Adjustment] = []
    if diet_plan.variety_relaxed:
        adjustments.append(
            Adjustment(
                target="variety_window",
                kind="variety",
                before=policy.variety_window,
                after=diet_plan.variety_window,
            )
        )
    if exercise_plan.capped:
        allocated = sum(exercise_plan.minutes_by_category().values())
        adjustments.append(
            Adjustment(
                target="activity:weekly_minutes",
                kind="capacity",
                before=activities.total_minutes(),
                after=allocated,
            )
        )
    status = ValidationStatus.OK
    if out_of_band or adjustments:
        status = ValidationStatus.RELAXED
    return ValidationResult(
        status=status,
        adjustments=adjustments,
        deltas=plan_deltas(diet_plan, exercise_plan, nutrients, activities),
        out_of_band=out_of_band,
    )


class PlanRelaxer:
    """
    Widens out-of-band tolerances step by step and re-solves the diet core.

    The exercise core does not read tolerances, so out-of-band categories
    are widened and re-checked without a re-solve. Bounded by
    `max_relax_retries`. Deltas and bands in the final verdict use the
    unwidened requirements; any widening makes the result relaxed.
    """

    def __init__(
        self,
        catalog: Catalog,
        restrictions: Iterable[str] = (),
        policy: SolverPolicy | None = None,
    ) -> None:
        self._catalog = catalog
        self._restrictions = frozenset(r.lower() for r in restrictions)
        self._policy = policy or get_policy()

    def run(
        self,
        diet_plan: DailyDietPlan,
        exercise_plan: WeeklyExercisePlan,
        nutrients: NutrientRequirements,
        activities: ActivityRequirements,
        resolve_diet: Callable[[NutrientRequirements], DailyDietPlan],
    ) -> tuple[DailyDietPlan, WeeklyExercisePlan, ValidationResult]:
        step = self._policy.relax_step
        working_nutrients, working_activities = nutrients, activities
        tolerance_adjustments: list[Adjustment] = []
        attempts = 1

        retries = 0
        while True:
            leaks = restriction_leaks(diet_plan, exercise_plan, self._restrictions, self._catalog)
            if leaks:
                logger.error("Restriction leak in plan: %s", leaks)
                result = ValidationResult(
                    status=ValidationStatus.INFEASIBLE,
                    reason=f"restriction violated by {', '.join(leaks)}",
                    attempts=attempts,
                )
                return diet_plan, exercise_plan, result

            bad_nutrients = nutrient_out_of_band(diet_plan, working_nutrients)
            bad_categories = activity_out_of_band(exercise_plan, working_activities)
            if not bad_nutrients and not bad_categories:
                break
            if retries >= self._policy.max_relax_retries:
                break
            retries += 1

            for n in bad_nutrients:
                before = working_nutrients[n]
                after = before.widened(step)
                tolerance_adjustments.append(
                    Adjustment(
                        target=f"nutrient:{n}",
                        kind="tolerance",
                        before=before.upper_tolerance,
                        after=after.upper_tolerance,
                    )
                )
            for c in bad_categories:
                before = working_activities.targets[c]
                tolerance_adjustments.append(
                    Adjustment(
                        target=f"activity:{c.value}",
                        kind="tolerance",
                        before=before.tolerance,
                        after=before.tolerance + step,
                    )
                )
            working_nutrients = working_nutrients.widened(bad_nutrients, step)
            working_activities = working_activities.widened(bad_categories, step)
            logger.info(
                "Relaxation %d/%d: widened %s",
                retries,
                self._policy.max_relax_retries,
                ", ".join([*bad_nutrients, *(c.value for c in bad_categories)]),
            )
            if bad_nutrients:
                diet_plan = resolve_diet(working_nutrients)
                attempts += 1

        if activity_out_of_band(exercise_plan, activities):
            exercise_plan = exercise_plan.model_copy(update={"relaxed": True})

        verdict = validate(diet_plan, exercise_plan, nutrients, activities, policy=self._policy)
        adjustments = tolerance_adjustments + verdict.adjustments
        status = ValidationStatus.RELAXED if adjustments else verdict.status
        result = verdict.model_copy(
            update={"status": status, "adjustments": adjustments, "attempts": attempts}
        )
        if result.status == ValidationStatus.RELAXED:
            logger.warning("Plan relaxed; out of band: %s", ", ".join(result.out_of_band) or "none")
        return diet_plan, exercise_plan, result
