"""Tests for the HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from wellness_plan_solver.main import app

PROFILE = {
    "weight_kg": 70,
    "height_cm": 175,
    "age": 30,
    "sex": "male",
    "activity_level": "moderate",
}


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_requirements(client):
    response = client.post("/requirements", json=PROFILE)
    assert response.status_code == 200
    body = response.json()
    assert abs(body["nutrients"]["targets"]["calories"]["target"] - 2500) <= 125
    assert body["activities"]["targets"]["cardio"]["minutes"] == 150


def test_plan(client):
    response = client.post("/plan", json={"profile": PROFILE})
    assert response.status_code == 200
    body = response.json()
    assert [a["slot"] for a in body["diet_plan"]["assignments"]] == ["breakfast", "lunch", "dinner", "snack"]
    assert len(body["exercise_plan"]["days"]) == 7
    assert body["validation"]["status"] in ("ok", "relaxed")


def test_plan_with_prior_day(client):
    first = client.post("/plan", json={"profile": PROFILE}).json()
    response = client.post(
        "/plan", json={"profile": PROFILE, "prior_days": [first["diet_plan"]]}
    )
    assert response.status_code == 200


def test_invalid_profile_is_422(client):
    response = client.post("/requirements", json={**PROFILE, "age": 10})
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "InvalidProfile"
    assert body["detail"] == {"field": "age"}


def test_no_feasible_meal_is_409(client):
    profile = {
        **PROFILE,
        "restrictions": ["dairy", "egg", "gluten", "soy", "fish", "nuts"],
        "season": "winter",
    }
    response = client.post("/plan", json={"profile": profile})
    assert response.status_code == 409
    assert response.json()["error"] == "NoFeasibleMeal"
