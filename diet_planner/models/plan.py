"""
Pydantic models for the diet plan domain: profiles, requests, meals and plans.
"""
from collections import Counter
from datetime import date, timedelta
from enum import Enum
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator


class DayOfWeek(str, Enum):
    """Days of the plan week, in week order."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


class MealType(str, Enum):
    """Meal slots of a day, in serving order."""

    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    SNACK = "SNACK"
    DINNER = "DINNER"


class Strategy(str, Enum):
    """How a weekly plan is split into model calls."""

    SINGLE_SHOT = "single_shot"  # one call for all 28 meals
    PER_DAY = "per_day"          # seven calls, four meals each
    PER_MEAL = "per_meal"        # 28 calls, one meal each


class PlanSource(str, Enum):
    """Where the meals of a plan came from."""

    MODEL = "model"
    FALLBACK = "fallback"
    MIXED = "mixed"  # model output with some slots filled from the fallback table


DAYS: list[DayOfWeek] = list(DayOfWeek)
MEAL_TYPES: list[MealType] = list(MealType)
MEALS_PER_DAY = len(MEAL_TYPES)
MEALS_PER_WEEK = len(DAYS) * MEALS_PER_DAY

Ingredient = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class UserProfile(BaseModel):
    """Profile of the user a plan is generated for."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    age: Optional[int] = Field(None, ge=10, le=120)
    weight: Optional[float] = Field(None, ge=20, le=300, description="Weight in kg")
    height: Optional[float] = Field(None, ge=50, le=300, description="Height in cm")
    gender: Optional[str] = None
    nationality: Optional[str] = None
    goal: Optional[str] = Field(None, max_length=200)
    activity_level: Optional[str] = Field(None, alias="activityLevel")
    preferences: list[str] = Field(default=[], description="Dietary preference tags")


class PlanRequest(BaseModel):
    """Parameters of a single weekly plan request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    preferences: list[str] = Field(default=[])
    custom_requirements: Optional[str] = Field(None, alias="customRequirements", max_length=1000)
    week_start: date = Field(..., alias="weekStart")

    @property
    def week_end(self) -> date:
        return self.week_start + timedelta(days=6)


class MealContent(BaseModel):
    """Nutrition and recipe content of one meal, already normalized."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=200)
    calories: int = Field(..., ge=50, le=2000)
    protein: float = Field(..., ge=0, le=200, description="grams")
    carbs: float = Field(..., ge=0, le=300, description="grams")
    fat: float = Field(..., ge=0, le=150, description="grams")
    fiber: float = Field(..., ge=0, le=50, description="grams")
    ingredients: list[Ingredient] = Field(..., min_length=1, max_length=15)
    instructions: str = Field(..., min_length=10, max_length=500)
    prep_time: int = Field(..., alias="prepTime", ge=0, le=120, description="minutes")
    cook_time: int = Field(..., alias="cookTime", ge=0, le=240, description="minutes")
    servings: int = Field(..., ge=1, le=8)


class Meal(MealContent):
    """A meal placed in a (day, meal type) slot of the week."""

    day: DayOfWeek
    meal_type: MealType = Field(..., alias="mealType")

    @property
    def slot(self) -> tuple[DayOfWeek, MealType]:
        return self.day, self.meal_type


class DietPlan(BaseModel):
    """A full week: exactly one meal for every (day, meal type) pair."""

    model_config = ConfigDict(populate_by_name=True)

    description: str = Field(..., min_length=10, max_length=200)
    meals: list[Meal] = Field(..., min_length=MEALS_PER_WEEK, max_length=MEALS_PER_WEEK)
    source: PlanSource = PlanSource.MODEL

    @model_validator(mode="after")
    def _check_week_coverage(self) -> "DietPlan":
        counts = Counter(meal.slot for meal in self.meals)
        duplicated = sorted(f"{d.value}/{t.value}" for (d, t), n in counts.items() if n > 1)
        missing = [
            f"{d.value}/{t.value}" for d in DAYS for t in MEAL_TYPES if (d, t) not in counts
        ]
        if duplicated or missing:
            raise ValueError(
                f"week coverage broken: missing {missing or 'none'}, duplicated {duplicated or 'none'}"
            )
        return self

    def meals_for(self, day: DayOfWeek) -> list[Meal]:
        """Meals of one day in serving order."""
        order = {meal_type: i for i, meal_type in enumerate(MEAL_TYPES)}
        return sorted((m for m in self.meals if m.day == day), key=lambda m: order[m.meal_type])

    def daily_totals(self) -> dict[str, dict[str, float]]:
        return {day.value: sum_nutrition(self.meals_for(day)) for day in DAYS}


def sum_nutrition(meals: list[MealContent]) -> dict[str, float]:
    """Total calories and macros of a list of meals."""
    return {
        "calories": sum(m.calories for m in meals),
        "protein": round(sum(m.protein for m in meals), 1),
        "carbs": round(sum(m.carbs for m in meals), 1),
        "fat": round(sum(m.fat for m in meals), 1),
        "fiber": round(sum(m.fiber for m in meals), 1),
    }


EventType = Literal["start", "progress", "day_complete", "plan_complete", "error"]


class GenerationEvent(BaseModel):
    """One step of progressive plan generation."""

    type: EventType
    data: dict[str, Any] = {}
