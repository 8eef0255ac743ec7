"""Exercise core: spread weekly category minutes across seven day bins."""

import logging
import math
from collections.abc import Iterable

from wellness_plan_solver.config import SolverPolicy, get_policy
from wellness_plan_solver.errors import NoFeasibleActivity
from wellness_plan_solver.models import (
    Activity,
    ActivityCategory,
    ActivityRequirements,
    CappedAllocation,
    DayPlan,
    PlannedActivity,
    TimeOfDay,
    WeeklyExercisePlan,
)

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
TIMES_OF_DAY = list(TimeOfDay)


class ExerciseAllocator:
    """Greedy load-balancing allocation of category minutes under a per-day cap."""

    def __init__(
        self,
        requirements: ActivityRequirements,
        candidates: Iterable[Activity],
        focus_areas: Iterable[str] = (),
        policy: SolverPolicy | None = None,
    ) -> None:
        self._req = requirements
        self._policy = policy or get_policy()
        self._cap = self._policy.per_day_cap
        self._focus = frozenset(f.lower() for f in focus_areas)
        self._by_category: dict[ActivityCategory, list[Activity]] = {}
        for activity in candidates:
            if isinstance(activity, Activity):
                self._by_category.setdefault(activity.category, []).append(activity)

    def split_sessions(self, category: ActivityCategory, minutes: int) -> list[int]:
        """Session lengths for a category; strength is split further to meet its session count."""
        max_session = self._policy.session_minutes(category.value)
        count = math.ceil(minutes / max_session)
        if category == ActivityCategory.STRENGTH and count < self._req.strength_sessions:
            logger.info(
                "Splitting %d strength minutes into %d sessions to meet the session target",
                minutes, self._req.strength_sessions,
            )
            count = self._req.strength_sessions
        count = max(1, min(count, minutes))
        base, extra = divmod(minutes, count)
        return [base + 1 if i < extra else base for i in range(count)]

    def _pick_day(self, loads: list[int], category_days: set[int], chunk: int) -> tuple[int, int] | None:
        """(day, minutes placed) for the least-loaded day with room, or None when the week is full."""
        fitting = [d for d in range(DAYS_PER_WEEK) if self._cap - loads[d] >= chunk]
        if fitting:
            fresh = [d for d in fitting if d not in category_days] or fitting
            day = min(fresh, key=lambda d: (loads[d], d))
            return day, chunk
        open_days = [d for d in range(DAYS_PER_WEEK) if loads[d] < self._cap]
        if not open_days:
            return None
        day = min(open_days, key=lambda d: (loads[d], d))
        return day, self._cap - loads[day]

    def _pick_activity(self, category: ActivityCategory, uses: dict[str, int]) -> Activity:
        best: Activity | None = None
        best_priority = -1.0
        for activity in self._by_category[category]:
            priority = 1.0 / (1 + uses.get(activity.id, 0))
            if activity.tags & self._focus:
                priority *= self._policy.focus_boost
            if priority > best_priority:
                best, best_priority = activity, priority
        return best

    def solve(self) -> WeeklyExercisePlan:
        entries: list[list[tuple[Activity, int]]] = [[] for _ in range(DAYS_PER_WEEK)]
        loads = [0] * DAYS_PER_WEEK
        uses: dict[str, int] = {}
        unallocated: dict[ActivityCategory, int] = {}

        total_target = self._req.total_minutes()
        capacity = DAYS_PER_WEEK * self._cap
        if total_target > capacity:
            logger.warning(
                "Weekly target %d min exceeds capacity %d min (cap %d/day)",
                total_target, capacity, self._cap,
            )

        for category in ActivityCategory:
            minutes = self._req.minutes(category)
            if minutes <= 0:
                continue
            if not self._by_category.get(category):
                raise NoFeasibleActivity(category.value)
            category_days: set[int] = set()
            for chunk in self.split_sessions(category, minutes):
                placement = self._pick_day(loads, category_days, chunk)
                if placement is None:
                    unallocated[category] = unallocated.get(category, 0) + chunk
                    continue
                day, placed = placement
                activity = self._pick_activity(category, uses)
                uses[activity.id] = uses.get(activity.id, 0) + 1
                entries[day].append((activity, placed))
                loads[day] += placed
                category_days.add(day)
                if placed < chunk:
                    unallocated[category] = unallocated.get(category, 0) + chunk - placed

        days = [
            DayPlan(
                day_index=d,
                activities=[
                    PlannedActivity(
                        activity_id=activity.id,
                        name=activity.name,
                        category=activity.category,
                        duration_minutes=minutes,
                        time_of_day=TIMES_OF_DAY[pos % len(TIMES_OF_DAY)],
                    )
                    for pos, (activity, minutes) in enumerate(entries[d])
                ],
            )
            for d in range(DAYS_PER_WEEK)
        ]

        capped_allocation = None
        if unallocated:
            capped_allocation = CappedAllocation(
                total_target_minutes=total_target,
                capacity_minutes=capacity,
                unallocated=unallocated,
            )
            logger.warning(
                "Capped allocation: %d min unallocated (%s)",
                capped_allocation.overflow_minutes,
                ", ".join(f"{c.value}={m}" for c, m in unallocated.items()),
            )
        return WeeklyExercisePlan(
            days=days,
            per_day_cap=self._cap,
            capped=capped_allocation is not None,
            capped_allocation=capped_allocation,
        )


def solve_week(
    requirements: ActivityRequirements,
    candidates: Iterable[Activity],
    focus_areas: Iterable[str] = (),
    policy: SolverPolicy | None = None,
) -> WeeklyExercisePlan:
    """Allocate weekly activity targets across seven days."""
    return ExerciseAllocator(requirements, candidates, focus_areas, policy).solve()
