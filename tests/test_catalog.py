"""Tests for the catalog and candidate filtering."""

from datetime import date

import pytest

from wellness_plan_solver.catalog import Catalog
from wellness_plan_solver.models import CatalogKind, Meal, Season, season_for


def test_default_catalog_covers_every_slot(catalog, policy):
    for slot in policy.slots:
        assert any(m.suits(slot) for m in catalog.meals)


def test_candidates_exclude_restricted_items(catalog):
    meals = list(catalog.candidates(CatalogKind.MEAL, ["Gluten"]))
    assert meals
    assert all("gluten" not in m.restriction_tags for m in meals)


def test_candidates_keep_declaration_order(catalog):
    ids = [m.id for m in catalog.candidates(CatalogKind.MEAL)]
    assert ids == [m.id for m in catalog.meals]


def test_candidates_are_restartable(catalog):
    candidates = catalog.candidates(CatalogKind.ACTIVITY, ["high_impact"])
    assert list(candidates) == list(candidates)
    assert len(candidates) == len(list(candidates))


def test_season_filter(catalog):
    winter = {a.id for a in catalog.candidates(CatalogKind.ACTIVITY, season=Season.WINTER)}
    summer = {a.id for a in catalog.candidates(CatalogKind.ACTIVITY, season=Season.SUMMER)}
    assert "a_swimming" not in winter
    assert "a_swimming" in summer


def test_season_for():
    assert season_for(date(2024, 1, 15)) == Season.WINTER
    assert season_for(date(2024, 4, 1)) == Season.SPRING
    assert season_for(date(2024, 7, 4)) == Season.SUMMER
    assert season_for(date(2024, 10, 31)) == Season.FALL


def test_duplicate_ids_rejected():
    meal = Meal(id="m1", name="One")
    with pytest.raises(ValueError):
        Catalog([meal, meal])


def test_get_and_unknown_id(catalog):
    assert catalog.get("a_yoga").name == "Yoga"
    assert catalog.get("missing") is None


def test_from_yaml(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(
        "meals:\n"
        "  - id: m1\n"
        "    name: Soup\n"
        "    restriction_tags: [Dairy]\n"
        "    nutrients: {calories: 300}\n"
        "activities:\n"
        "  - id: a1\n"
        "    name: Walk\n"
        "    category: cardio\n"
    )
    catalog = Catalog.from_yaml(path)
    assert [m.id for m in catalog.meals] == ["m1"]
    assert catalog.meals[0].restriction_tags == frozenset({"dairy"})
    assert list(catalog.candidates(CatalogKind.MEAL, ["dairy"])) == []


def test_from_yaml_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Catalog.from_yaml(tmp_path / "nope.yaml")
