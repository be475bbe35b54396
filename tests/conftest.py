"""
Pytest fixtures for the Diet Planner generation service tests.
"""
import json
import os
from datetime import date

import pytest

# Mock environment variables before importing app
os.environ.setdefault("OPENAI_API_KEY", "test-api-key")
os.environ.setdefault("INTERNAL_API_SECRET", "test-internal-secret")

from fastapi.testclient import TestClient

from diet_planner.main import app
from diet_planner.core.config import Settings
from diet_planner.core.dependencies import get_generator
from diet_planner.core.limiter import limiter
from diet_planner.models.plan import DAYS, MEAL_TYPES, Meal, PlanRequest, UserProfile
from diet_planner.services.generator import PlanGenerator

# Rate limits would otherwise leak between tests through the in-memory storage
limiter.enabled = False


class FakeBackend:
    """
    Scripted ModelBackend.

    Each call consumes the next scripted item: a string is returned as the
    model output, an exception instance is raised, a coroutine function is
    awaited with (prompt, params).
    """

    def __init__(self, *script):
        self.script = list(script)
        self.calls = []

    def push(self, *items):
        self.script.extend(items)

    async def complete(self, prompt, params):
        self.calls.append((prompt, params))
        if not self.script:
            raise AssertionError(f"Unexpected model call #{len(self.calls)}")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return await item(prompt, params)
        return item

    @property
    def models(self):
        return [params.model for _, params in self.calls]


def build_meal_payload(day=None, meal_type="BREAKFAST", index=0, **overrides):
    """A valid meal as the model would return it (camelCase keys)."""
    payload = {
        "mealType": meal_type,
        "name": f"Test Meal {index}",
        "description": f"Balanced test dish number {index}",
        "calories": 400 + index,
        "protein": 25.26,
        "carbs": 45.04,
        "fat": 15,
        "fiber": 8.15,
        "ingredients": ["Chicken", "Rice", "Broccoli"],
        "instructions": "Cook the rice, grill the chicken and steam the broccoli.",
        "prepTime": 10,
        "cookTime": 20.4,
        "servings": 1,
    }
    if day is not None:
        payload["day"] = day
    payload.update(overrides)
    return payload


def build_plan_payload(count=28, description="A varied week of balanced meals"):
    meals = []
    for d, day in enumerate(DAYS):
        for t, meal_type in enumerate(MEAL_TYPES):
            index = d * len(MEAL_TYPES) + t
            meals.append(build_meal_payload(day.value, meal_type.value, index))
    return {"description": description, "meals": meals[:count]}


def build_day_payload(day_index=0):
    return [
        build_meal_payload(None, meal_type.value, day_index * 4 + t)
        for t, meal_type in enumerate(MEAL_TYPES)
    ]


@pytest.fixture
def meal_payload():
    return build_meal_payload


@pytest.fixture
def plan_payload():
    return build_plan_payload


@pytest.fixture
def day_payload():
    return build_day_payload


@pytest.fixture
def plan_json():
    """Full valid weekly plan as raw model text."""
    return json.dumps(build_plan_payload())


@pytest.fixture
def test_settings():
    """Settings with tiny time budgets and no politeness delay."""
    s = Settings()
    s.OPENAI_MODEL = "primary-model"
    s.OPENAI_FALLBACK_MODEL = "secondary-model"
    s.STREAM_COMPLETIONS = False
    s.PLAN_CALL_TIMEOUT = 0.5
    s.DAY_CALL_TIMEOUT = 0.5
    s.MEAL_CALL_TIMEOUT = 0.5
    s.PLAN_TIME_BUDGET = 5.0
    s.INTER_CALL_DELAY = 0
    s.GENERATION_STRATEGY = "single_shot"
    s.REGENERATION_CALORIE_DELTA = 50
    s.REGENERATION_ATTEMPTS = 2
    return s


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def generator(backend, test_settings):
    return PlanGenerator(backend, test_settings)


@pytest.fixture
def profile():
    return UserProfile(
        age=30,
        weight=75,
        height=178,
        gender="MALE",
        nationality="Indian",
        goal="MUSCLE_GAIN",
        activityLevel="VERY_ACTIVE",
        preferences=["vegetarian", "high protein"],
    )


@pytest.fixture
def plan_request():
    return PlanRequest(
        name="Bulk week",
        preferences=["spicy"],
        customRequirements="No peanuts",
        weekStart=date(2026, 3, 2),
    )


@pytest.fixture
def existing_meal():
    return Meal(
        day="TUESDAY",
        mealType="LUNCH",
        name="Paneer Tikka Bowl",
        description="Grilled paneer with peppers over brown rice",
        calories=520,
        protein=28.0,
        carbs=55.0,
        fat=18.0,
        fiber=7.0,
        ingredients=["Paneer", "Bell pepper", "Brown rice", "Yogurt"],
        instructions="Marinate the paneer, grill with peppers and serve over rice.",
        prepTime=15,
        cookTime=20,
        servings=1,
    )


@pytest.fixture
def internal_headers():
    return {"X-Internal-Secret": os.environ["INTERNAL_API_SECRET"]}


@pytest.fixture
def client(backend, test_settings):
    """Test client whose routes use the scripted backend."""
    app.dependency_overrides[get_generator] = lambda: PlanGenerator(backend, test_settings)
    yield TestClient(app)
    app.dependency_overrides.clear()
