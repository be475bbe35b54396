"""
Schema validation and normalization of parsed model output.

Raw payloads are checked against strict schemas (numbers must be JSON
numbers, nothing is coerced), then rounded into the domain models.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from diet_planner.models.plan import (
    DAYS,
    MEAL_TYPES,
    MEALS_PER_DAY,
    MEALS_PER_WEEK,
    DayOfWeek,
    DietPlan,
    Ingredient,
    Meal,
    MealContent,
    MealType,
    PlanSource,
)
from diet_planner.services.errors import PlanValidationError


class MealPayload(BaseModel):
    """One meal exactly as the model is asked to return it."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=200)
    calories: float = Field(..., ge=50, le=2000, strict=True)
    protein: float = Field(..., ge=0, le=200, strict=True)
    carbs: float = Field(..., ge=0, le=300, strict=True)
    fat: float = Field(..., ge=0, le=150, strict=True)
    fiber: float = Field(..., ge=0, le=50, strict=True)
    ingredients: list[Ingredient] = Field(..., min_length=1, max_length=15)
    instructions: str = Field(..., min_length=10, max_length=500)
    prep_time: float = Field(..., alias="prepTime", ge=0, le=120, strict=True)
    cook_time: float = Field(..., alias="cookTime", ge=0, le=240, strict=True)
    servings: float = Field(..., ge=1, le=8, strict=True)


class SlotMealPayload(MealPayload):
    day: Optional[DayOfWeek] = None
    meal_type: MealType = Field(..., alias="mealType")


class PlanPayload(BaseModel):
    description: str = Field(..., min_length=10, max_length=200)
    meals: list[SlotMealPayload] = Field(..., min_length=MEALS_PER_WEEK, max_length=MEALS_PER_WEEK)


def _describe(error: ValidationError) -> str:
    problems = []
    for detail in error.errors()[:5]:
        location = ".".join(str(part) for part in detail["loc"]) or "<root>"
        problems.append(f"{location}: {detail['msg']}")
    extra = error.error_count() - len(problems)
    if extra > 0:
        problems.append(f"... and {extra} more")
    return "; ".join(problems)


def _parse(schema: type[BaseModel], payload: Any, what: str) -> Any:
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise PlanValidationError(f"Invalid {what}: {_describe(e)}") from e


def _meals_of(payload: Any) -> Any:
    if isinstance(payload, dict):
        return payload.get("meals")
    return payload


def precheck_meal_count(payload: Any, required: int = MEALS_PER_WEEK) -> None:
    """
    Cheap check that enough meals came back before strict validation.

    Accepts either a plan object ({"meals": [...]}) or a bare meal array.
    """
    meals = _meals_of(payload)
    count = len(meals) if isinstance(meals, list) else 0
    if count < required:
        raise PlanValidationError(f"Incomplete output: {count} of {required} meals present")


def _round_half_up(value: float, step: str) -> Decimal:
    # str() keeps the decimal digits the model wrote, not the binary float
    return Decimal(str(value)).quantize(Decimal(step), rounding=ROUND_HALF_UP)


def _round_int(value: float) -> int:
    return int(_round_half_up(value, "1"))


def _round_macro(value: float) -> float:
    return float(_round_half_up(value, "0.1"))


def _content_fields(source: MealPayload | MealContent) -> dict[str, Any]:
    return {
        "name": source.name,
        "description": source.description,
        "calories": _round_int(source.calories),
        "protein": _round_macro(source.protein),
        "carbs": _round_macro(source.carbs),
        "fat": _round_macro(source.fat),
        "fiber": _round_macro(source.fiber),
        "ingredients": list(source.ingredients),
        "instructions": source.instructions,
        "prep_time": _round_int(source.prep_time),
        "cook_time": _round_int(source.cook_time),
        "servings": _round_int(source.servings),
    }


def _build(model: type[BaseModel], **fields: Any) -> Any:
    try:
        return model.model_validate(fields)
    except ValidationError as e:
        raise PlanValidationError(f"Normalized meal breaks bounds: {_describe(e)}") from e


def normalize_content(source: MealPayload | MealContent) -> MealContent:
    return _build(MealContent, **_content_fields(source))


def normalize_meal(
    source: SlotMealPayload | MealPayload | Meal,
    day: Optional[DayOfWeek] = None,
    meal_type: Optional[MealType] = None,
) -> Meal:
    """
    Round calories, times and servings half up to int and macros to one decimal.

    The slot defaults to the one carried by the source. Idempotent: a
    normalized meal comes back unchanged.
    """
    return _build(
        Meal,
        day=day or source.day,
        meal_type=meal_type or source.meal_type,
        **_content_fields(source),
    )


def _single(payload: Any) -> Any:
    # A lone meal wrapped in an array is still a lone meal
    if isinstance(payload, list) and len(payload) == 1:
        return payload[0]
    return payload


def validate_meal_content(payload: Any) -> MealContent:
    """Validate a single meal without slot information (regeneration output)."""
    return normalize_content(_parse(MealPayload, _single(payload), "meal"))


def validate_meal(payload: Any, day: DayOfWeek, meal_type: MealType) -> Meal:
    """Validate one meal generated for a known slot; the slot wins over whatever the model echoed."""
    return normalize_meal(_parse(MealPayload, _single(payload), "meal"), day, meal_type)


def validate_day(payload: Any, day: DayOfWeek) -> list[Meal]:
    """Validate the four meals of one day, returned in serving order."""
    precheck_meal_count(payload, MEALS_PER_DAY)
    meals = _meals_of(payload)
    if len(meals) != MEALS_PER_DAY:
        raise PlanValidationError(f"Expected {MEALS_PER_DAY} meals for {day.value}, got {len(meals)}")

    parsed = [_parse(SlotMealPayload, item, f"meal {i} of {day.value}") for i, item in enumerate(meals)]
    by_type = {item.meal_type: item for item in parsed}
    missing = [t.value for t in MEAL_TYPES if t not in by_type]
    if missing:
        raise PlanValidationError(f"{day.value} is missing meal types: {', '.join(missing)}")

    return [normalize_meal(by_type[t], day, t) for t in MEAL_TYPES]


def validate_plan(payload: Any) -> DietPlan:
    """
    Validate a full-week payload into a normalized DietPlan.

    Raises:
        PlanValidationError: On a short meal count, any schema violation,
            meals without a day, or a broken day x meal type coverage
    """
    if not isinstance(payload, dict):
        raise PlanValidationError("Plan payload must be a JSON object")
    precheck_meal_count(payload)
    parsed = _parse(PlanPayload, payload, "plan")

    meals = []
    for i, item in enumerate(parsed.meals):
        if item.day is None:
            raise PlanValidationError(f"Invalid plan: meals.{i}.day is missing")
        meals.append(normalize_meal(item))

    try:
        return DietPlan(description=parsed.description, meals=meals, source=PlanSource.MODEL)
    except ValidationError as e:
        raise PlanValidationError(f"Invalid plan: {_describe(e)}") from e


def order_meals(meals: list[Meal]) -> list[Meal]:
    """Sort meals into week order, then serving order."""
    day_index = {d: i for i, d in enumerate(DAYS)}
    type_index = {t: i for i, t in enumerate(MEAL_TYPES)}
    return sorted(meals, key=lambda m: (day_index[m.day], type_index[m.meal_type]))
