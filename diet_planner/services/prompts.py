"""
Prompt construction for plan generation.

All builders are pure functions of their inputs.
"""
import json
from typing import Optional

from diet_planner.models.plan import (
    DAYS,
    MEAL_TYPES,
    MEALS_PER_DAY,
    MEALS_PER_WEEK,
    DayOfWeek,
    Meal,
    MealType,
    PlanRequest,
    UserProfile,
)

NOT_SPECIFIED = "Not specified"

SYSTEM_PROMPT = (
    "You are a professional nutritionist and meal planner. "
    "Your response must be ONLY valid JSON with no additional text, explanations "
    "or markdown formatting. Do not wrap the JSON in code blocks."
)

ANALYSIS_SYSTEM_PROMPT = "You are a professional nutritionist. Answer in concise plain text."

JSON_ONLY = "CRITICAL: Respond with ONLY valid JSON. No markdown, no code fences, no explanations."

_MEAL_EXAMPLE = {
    "name": "Meal name",
    "description": "Brief description",
    "calories": 400,
    "protein": 25,
    "carbs": 45,
    "fat": 15,
    "fiber": 8,
    "ingredients": ["ingredient1", "ingredient2"],
    "instructions": "Clear cooking steps",
    "prepTime": 15,
    "cookTime": 30,
    "servings": 1,
}

_DAY_VALUES = ", ".join(d.value for d in DAYS)
_MEAL_TYPE_VALUES = ", ".join(t.value for t in MEAL_TYPES)


def _value(value, default: str = NOT_SPECIFIED) -> str:
    if value is None or value == "":
        return default
    return str(value)


def _tags(tags: list[str], default: str = "None") -> str:
    return ", ".join(tags) if tags else default


def _example(**slot: str) -> str:
    return json.dumps({**slot, **_MEAL_EXAMPLE})


def describe_profile(profile: UserProfile) -> str:
    """Render the user profile block shared by all prompts."""
    return (
        "User Profile:\n"
        f"- Age: {_value(profile.age)}\n"
        f"- Weight: {_value(profile.weight)} kg\n"
        f"- Height: {_value(profile.height)} cm\n"
        f"- Gender: {_value(profile.gender)}\n"
        f"- Nationality: {_value(profile.nationality)}\n"
        f"- Goal: {_value(profile.goal, 'General health and wellness')}\n"
        f"- Activity Level: {_value(profile.activity_level, 'Moderate')}\n"
        f"- Dietary Preferences: {_tags(profile.preferences)}"
    )


def _describe_request(request: PlanRequest) -> str:
    return (
        f"Plan Preferences: {_tags(request.preferences)}\n"
        f"Custom Requirements: {_value(request.custom_requirements, 'None')}"
    )


def build_plan_prompt(profile: UserProfile, request: PlanRequest) -> str:
    """Prompt for a whole week in one response."""
    return f"""
Create a 7-day diet plan with exactly {MEALS_PER_WEEK} meals ({MEALS_PER_DAY} meals per day: {_MEAL_TYPE_VALUES}).

{describe_profile(profile)}
{_describe_request(request)}

Requirements:
1. Exactly {MEALS_PER_WEEK} meals: 7 days x {MEALS_PER_DAY} meals, every day/mealType pair exactly once
2. Each day must have DIFFERENT meals - NO DUPLICATES across days
3. Vary proteins, carbs, vegetables and cooking methods across the week
4. Respect the user's profile, goal and preferences
5. Realistic, culturally appropriate meals with accurate nutritional values
6. Keep descriptions short (max 15 words) and instructions brief (max 40 words)

Allowed "day" values: {_DAY_VALUES}
Allowed "mealType" values: {_MEAL_TYPE_VALUES}

{JSON_ONLY}

{{
  "description": "Brief plan description (10-200 chars)",
  "meals": [
    {_example(day="MONDAY", mealType="BREAKFAST")}
  ]
}}
""".strip()


def build_day_prompt(
    profile: UserProfile,
    request: PlanRequest,
    day: DayOfWeek,
    previous_meals: Optional[list[str]] = None,
) -> str:
    """Prompt for the four meals of one day, returned as a JSON array."""
    day_number = DAYS.index(day) + 1
    avoid = ""
    if previous_meals:
        avoid = f"\nAvoid duplicating: {', '.join(previous_meals)}"

    return f"""
Create exactly {MEALS_PER_DAY} meals for {day.value}: {_MEAL_TYPE_VALUES} (one of each).

{describe_profile(profile)}
{_describe_request(request)}{avoid}

Day {day_number} of 7. Create varied, realistic meals.
Allowed "mealType" values: {_MEAL_TYPE_VALUES}

{JSON_ONLY}
Return a JSON array of {MEALS_PER_DAY} objects:
[
  {_example(mealType="BREAKFAST")}
]
""".strip()


def build_meal_prompt(
    profile: UserProfile,
    request: PlanRequest,
    day: DayOfWeek,
    meal_type: MealType,
) -> str:
    """Prompt for exactly one meal of a known slot."""
    return f"""
Create exactly 1 {meal_type.value} meal for {day.value}.

{describe_profile(profile)}
{_describe_request(request)}

{JSON_ONLY}
Return a single JSON object:
{_example()}
""".strip()


def build_regeneration_prompt(
    profile: UserProfile,
    meal: Meal,
    custom_requirements: Optional[str] = None,
    calorie_delta: int = 50,
) -> str:
    """Prompt for a single replacement meal of similar calories but different content."""
    requirements = custom_requirements or "Generate a similar but different meal with variety"
    return f"""
Generate exactly 1 replacement meal that keeps similar nutritional value but is completely different from the existing meal.

{describe_profile(profile)}

Current Meal to Replace:
- Name: {meal.name}
- Type: {meal.meal_type.value}
- Day: {meal.day.value}
- Calories: {meal.calories}
- Description: {meal.description}

Custom Requirements: {requirements}

Requirements:
1. A completely different meal (new name and description) appropriate for {meal.meal_type.value} on {meal.day.value}
2. Calories between {meal.calories - calorie_delta} and {meal.calories + calorie_delta}
3. Respect the user's dietary preferences and restrictions
4. Detailed ingredients and clear cooking instructions

{JSON_ONLY}
Return a single JSON object:
{_example()}
""".strip()


def build_analysis_prompt(plan_meals: list[Meal], totals: Optional[dict] = None) -> str:
    """Prompt for a short free-text nutritional balance review."""
    # A handful of meals is enough context and keeps the prompt small
    sample = [
        {"day": m.day.value, "mealType": m.meal_type.value, "name": m.name, "calories": m.calories,
         "protein": m.protein, "carbs": m.carbs, "fat": m.fat, "fiber": m.fiber}
        for m in plan_meals[:8]
    ]
    totals_block = f"\nDaily totals: {json.dumps(totals)}" if totals else ""
    return f"""
Analyze the nutritional balance of this meal plan and provide recommendations for improvement.

Meals: {json.dumps(sample)}{totals_block}

Provide a brief analysis of:
1. Overall calorie distribution
2. Macronutrient balance (protein, carbs, fat)
3. Micronutrient coverage
4. Suggestions for improvement

Keep the response concise and actionable.
""".strip()


def build_suggestion_prompt(ingredients: list[str], meal_type: MealType) -> str:
    """Prompt for meal ideas built from available ingredients."""
    return f"""
Suggest 3 creative and nutritious {meal_type.value} meals using these available ingredients:

Available ingredients: {', '.join(ingredients)}

For each meal, provide:
- Name
- Brief description
- Estimated prep time
- Key nutritional benefits

Make the suggestions practical and delicious.
""".strip()


def recent_meal_names(meals: list[Meal], limit: int = MEALS_PER_DAY) -> list[str]:
    """Names of the most recent meals, used as avoidance context for the next day."""
    return [meal.name for meal in meals[-limit:]]
