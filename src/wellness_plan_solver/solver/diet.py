"""Diet core: greedy slot filling with bounded local improvement."""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from wellness_plan_solver.config import SolverPolicy, get_policy
from wellness_plan_solver.errors import NoFeasibleMeal
from wellness_plan_solver.models import (
    DailyDietPlan,
    HealthProfile,
    Meal,
    MealAssignment,
    NutrientRequirements,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DietPreferences:
    """Soft preferences folded into the score as a small bonus."""

    taste_weight: float = 0.0
    digestion_weight: float = 0.0
    cuisine_preferences: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_profile(cls, profile: HealthProfile) -> "DietPreferences":
        return cls(
            taste_weight=profile.taste_weight,
            digestion_weight=profile.digestion_weight,
            cuisine_preferences=dict(profile.cuisine_preferences),
        )


@dataclass(frozen=True)
class _Choice:
    slot: str
    meal: Meal
    portion: float


def _add(totals: dict[str, float], meal: Meal, portion: float) -> dict[str, float]:
    result = dict(totals)
    for k, v in meal.nutrients.items():
        result[k] = result.get(k, 0.0) + v * portion
    return result


class DietSolver:
    """
    Fills breakfast, lunch, dinner and snack for one day.

    Each slot takes the (meal, portion) pair with the lowest weighted sum of
    squared normalized deviations from the slot's prorated target. Intermediate
    slots aim at their cumulative share of the day; the last slot aims at the
    full target and also pays a penalty for every nutrient left outside its
    band. A bounded improvement pass then revisits each slot and swaps in any
    eligible alternative that lowers the full-day score.
    """

    def __init__(
        self,
        requirements: NutrientRequirements,
        candidates: Iterable[Meal],
        policy: SolverPolicy | None = None,
        preferences: DietPreferences | None = None,
    ) -> None:
        self._req = requirements
        self._policy = policy or get_policy()
        self._prefs = preferences or DietPreferences()
        self._meals = [m for m in candidates if isinstance(m, Meal)]
        self._slots = list(self._policy.slots)
        self._weights = {
            n: (self._policy.nutrients[n].weight if n in self._policy.nutrients else 1.0)
            for n in requirements.nutrients()
        }
        shares = [self._policy.slot_shares.get(s, 1.0) for s in self._slots]
        total_share = sum(shares)
        running = 0.0
        self._fractions: list[float] = []
        for share in shares:
            running += share
            self._fractions.append(running / total_share)
        self._fractions[-1] = 1.0

    def score(self, totals: dict[str, float], fraction: float = 1.0, full_day: bool = True) -> float:
        """Weighted squared deviation of `totals` from the (prorated) targets."""
        score = 0.0
        for nutrient, target in self._req.targets.items():
            weight = self._weights[nutrient]
            value = totals.get(nutrient, 0.0)
            deviation = (value - target.target * fraction) / (target.width * fraction)
            score += weight * deviation * deviation
            if full_day:
                if value < target.low:
                    outside = (target.low - value) / target.width
                elif value > target.high:
                    outside = (value - target.high) / target.width
                else:
                    outside = 0.0
                score += self._policy.band_penalty * weight * outside * outside
        return score

    def _bonus(self, meal: Meal) -> float:
        cuisine = self._prefs.cuisine_preferences.get(meal.cuisine, 0.0)
        taste = self._prefs.taste_weight * meal.taste_score / 10.0
        digestion = self._prefs.digestion_weight * meal.digestion_score / 10.0
        return self._policy.preference_weight * (taste + digestion + cuisine)

    @staticmethod
    def _recent_ids(prior_days: Sequence[DailyDietPlan], window: int) -> set[str]:
        if window <= 0:
            return set()
        return {item_id for day in prior_days[-window:] for item_id in day.item_ids()}

    def _eligible(self, slot: str, used_today: set[str], banned: set[str]) -> list[Meal]:
        return [
            m for m in self._meals
            if m.suits(slot) and m.id not in used_today and m.id not in banned
        ]

    def _best(
        self,
        options: list[Meal],
        base: dict[str, float],
        fraction: float,
        full_day: bool,
    ) -> tuple[Meal, float, float]:
        best: tuple[Meal, float, float] | None = None
        for meal in options:
            bonus = self._bonus(meal)
            for portion in self._policy.portion_scales:
                s = self.score(_add(base, meal, portion), fraction, full_day) - bonus
                if best is None or s < best[2]:
                    best = (meal, portion, s)
        return best

    def _day_score(self, choices: list[_Choice]) -> float:
        totals: dict[str, float] = {}
        bonus = 0.0
        for c in choices:
            totals = _add(totals, c.meal, c.portion)
            bonus += self._bonus(c.meal)
        return self.score(totals) - bonus

    def _improve(self, choices: list[_Choice], banned: dict[str, set[str]]) -> list[_Choice]:
        current = self._day_score(choices)
        for _ in range(self._policy.max_improvement_passes):
            improved = False
            for idx in range(len(choices)):
                choice = choices[idx]
                others = choices[:idx] + choices[idx + 1:]
                used = {c.meal.id for c in others}
                base: dict[str, float] = {}
                others_bonus = 0.0
                for c in others:
                    base = _add(base, c.meal, c.portion)
                    others_bonus += self._bonus(c.meal)
                options = self._eligible(choice.slot, used, banned[choice.slot])
                meal, portion, s = self._best(options, base, 1.0, True)
                s -= others_bonus
                if s < current - 1e-9 and (meal.id, portion) != (choice.meal.id, choice.portion):
                    logger.debug(
                        "Improvement: %s %s x%.2f -> %s x%.2f",
                        choice.slot, choice.meal.id, choice.portion, meal.id, portion,
                    )
                    choices = others[:idx] + [_Choice(choice.slot, meal, portion)] + others[idx:]
                    current = s
                    improved = True
            if not improved:
                break
        return choices

    def solve(self, prior_days: Sequence[DailyDietPlan] = ()) -> DailyDietPlan:
        smallest_window = self._policy.variety_window
        choices: list[_Choice] = []
        banned_by_slot: dict[str, set[str]] = {}
        totals: dict[str, float] = {}
        last = len(self._slots) - 1

        for i, slot in enumerate(self._slots):
            used_today = {c.meal.id for c in choices}
            window = self._policy.variety_window
            while True:
                banned = self._recent_ids(prior_days, window)
                options = self._eligible(slot, used_today, banned)
                if options:
                    break
                if window == 0:
                    raise NoFeasibleMeal(slot)
                window -= 1
                logger.info("No candidate for %s; variety window relaxed to %d", slot, window)
            banned_by_slot[slot] = banned
            smallest_window = min(smallest_window, window)
            meal, portion, s = self._best(options, totals, self._fractions[i], i == last)
            logger.debug("Slot %s -> %s x%.2f (score %.3f)", slot, meal.id, portion, s)
            choices.append(_Choice(slot, meal, portion))
            totals = _add(totals, meal, portion)

        choices = self._improve(choices, banned_by_slot)
        return DailyDietPlan(
            assignments=[
                MealAssignment(
                    slot=c.slot,
                    item_id=c.meal.id,
                    name=c.meal.name,
                    portion=c.portion,
                    nutrients=c.meal.scaled(c.portion),
                )
                for c in choices
            ],
            variety_window=smallest_window,
            variety_relaxed=smallest_window < self._policy.variety_window,
        )


def solve_diet(
    requirements: NutrientRequirements,
    candidates: Iterable[Meal],
    prior_days: Sequence[DailyDietPlan] = (),
    policy: SolverPolicy | None = None,
    preferences: DietPreferences | None = None,
) -> DailyDietPlan:
    """Select one meal per slot for a day that best matches the nutrient targets."""
    return DietSolver(requirements, candidates, policy, preferences).solve(prior_days)


def solve_diet_days(
    requirements: NutrientRequirements,
    candidates: Iterable[Meal],
    days: int,
    prior_days: Sequence[DailyDietPlan] = (),
    policy: SolverPolicy | None = None,
    preferences: DietPreferences | None = None,
) -> list[DailyDietPlan]:
    """Consecutive daily plans; each day sees the earlier ones for variety."""
    solver = DietSolver(requirements, candidates, policy, preferences)
    history = list(prior_days)
    plans: list[DailyDietPlan] = []
    for _ in range(days):
        plan = solver.solve(history)
        plans.append(plan)
        history.append(plan)
    return plans
