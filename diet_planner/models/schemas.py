"""
Pydantic models for API request bodies.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from diet_planner.models.plan import Meal, MealType, PlanRequest, Strategy, UserProfile
from diet_planner.services.evaluation import PlanExpectations


class GeneratePlanRequest(BaseModel):
    """Request model for weekly diet plan generation."""

    profile: UserProfile = Field(default_factory=UserProfile)
    plan: PlanRequest
    strategy: Optional[Strategy] = Field(None, description="Overrides the configured strategy")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "profile": {
                    "age": 28,
                    "weight": 60,
                    "height": 165,
                    "gender": "FEMALE",
                    "nationality": "Italian",
                    "goal": "WEIGHT_LOSS",
                    "activityLevel": "MODERATELY_ACTIVE",
                    "preferences": ["vegetarian"]
                },
                "plan": {
                    "name": "Spring reset",
                    "preferences": ["high protein"],
                    "customRequirements": "No mushrooms",
                    "weekStart": "2026-03-02"
                }
            }
        }
    )


class RegenerateMealRequest(BaseModel):
    """Request model for replacing one meal of a plan."""

    model_config = ConfigDict(populate_by_name=True)

    profile: UserProfile = Field(default_factory=UserProfile)
    meal: Meal
    custom_requirements: Optional[str] = Field(None, alias="customRequirements", max_length=1000)


class AnalyzePlanRequest(BaseModel):
    """Request model for nutritional balance analysis."""

    meals: list[Meal] = Field(..., min_length=1)


class SuggestMealsRequest(BaseModel):
    """Request model for ingredient-based meal suggestions."""

    model_config = ConfigDict(populate_by_name=True)

    ingredients: list[str] = Field(..., min_length=1)
    meal_type: MealType = Field(MealType.DINNER, alias="mealType")


class EvaluatePlanRequest(BaseModel):
    """Request model for plan quality scoring."""

    model_config = ConfigDict(populate_by_name=True)

    meals: list[Meal] = Field(..., min_length=1)
    expectations: PlanExpectations = Field(default_factory=PlanExpectations)
