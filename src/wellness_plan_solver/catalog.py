"""Catalog of candidate meals and activities. Read-only, safe to share across solves."""

import logging
from collections.abc import Iterable, Iterator
from functools import lru_cache
from pathlib import Path

from pydantic import TypeAdapter

from wellness_plan_solver.config import DATA_DIR, get_settings, load_yaml_config
from wellness_plan_solver.models import (
    Activity,
    CatalogItem,
    CatalogKind,
    Meal,
    Season,
    WeeklyExercisePlan,
)

logger = logging.getLogger(__name__)

_meals_adapter = TypeAdapter(list[Meal])
_activities_adapter = TypeAdapter(list[Activity])


class CandidateSequence:
    """Lazy, restartable filtered view. Each iteration re-filters in declaration order."""

    def __init__(
        self,
        items: tuple[CatalogItem, ...],
        restrictions: frozenset[str],
        season: Season | None,
    ) -> None:
        self._items = items
        self._restrictions = restrictions
        self._season = season

    def __iter__(self) -> Iterator[CatalogItem]:
        for item in self._items:
            if item.violates(self._restrictions):
                continue
            if not item.available_in(self._season):
                continue
            yield item

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return next(iter(self), None) is not None


class Catalog:
    """Static universe of meals and activities, in declaration order."""

    def __init__(self, meals: Iterable[Meal] = (), activities: Iterable[Activity] = ()) -> None:
        self._meals = tuple(meals)
        self._activities = tuple(activities)
        self._index: dict[str, CatalogItem] = {}
        for item in (*self._meals, *self._activities):
            if item.id in self._index:
                raise ValueError(f"Duplicate catalog id: {item.id}")
            self._index[item.id] = item

    @classmethod
    def from_yaml(cls, path: Path) -> "Catalog":
        data = load_yaml_config(path)
        if not data:
            raise FileNotFoundError(f"Catalog not found or empty: {path}")
        meals = _meals_adapter.validate_python(data.get("meals", []))
        activities = _activities_adapter.validate_python(data.get("activities", []))
        logger.info("Loaded catalog %s: %d meals, %d activities", path, len(meals), len(activities))
        return cls(meals, activities)

    @property
    def meals(self) -> tuple[Meal, ...]:
        return self._meals

    @property
    def activities(self) -> tuple[Activity, ...]:
        return self._activities

    def get(self, item_id: str) -> CatalogItem | None:
        return self._index.get(item_id)

    def candidates(
        self,
        kind: CatalogKind | str,
        restrictions: Iterable[str] = (),
        season: Season | None = None,
    ) -> CandidateSequence:
        """Items of `kind` that violate none of `restrictions` and are in season."""
        kind = CatalogKind(kind)
        items = self._meals if kind == CatalogKind.MEAL else self._activities
        normalized = frozenset(r.strip().lower() for r in restrictions)
        return CandidateSequence(items, normalized, season)

    def calories_burned(self, plan: WeeklyExercisePlan, weight_kg: float) -> float:
        """Estimated weekly energy expenditure of an exercise plan."""
        total = 0.0
        for entry in plan.entries():
            activity = self._index.get(entry.activity_id)
            if isinstance(activity, Activity):
                total += activity.calories_burned(entry.duration_minutes, weight_kg)
        return total


@lru_cache
def load_catalog(catalog_path_str: str = "") -> Catalog:
    """Cached catalog. Falls back to settings override, then the packaged default."""
    if not catalog_path_str:
        path = get_settings().catalog_path or DATA_DIR / "catalog.yaml"
    else:
        path = Path(catalog_path_str)
    return Catalog.from_yaml(path)
