"""
Tests for schema validation and normalization.
"""
import pytest
from pydantic import ValidationError

from diet_planner.models.plan import DayOfWeek, Meal, MealType, PlanSource
from diet_planner.services.errors import PlanValidationError
from diet_planner.services.validation import (
    normalize_meal,
    precheck_meal_count,
    validate_day,
    validate_meal,
    validate_meal_content,
    validate_plan,
)


class TestValidatePlan:
    """Tests for full-week validation."""

    def test_valid_payload_becomes_plan(self, plan_payload):
        plan = validate_plan(plan_payload())

        assert len(plan.meals) == 28
        assert plan.source == PlanSource.MODEL
        assert {m.slot for m in plan.meals} == {(d, t) for d in DayOfWeek for t in MealType}

    def test_numbers_are_normalized(self, plan_payload):
        meal = validate_plan(plan_payload()).meals[0]

        assert meal.calories == 400 and isinstance(meal.calories, int)
        assert meal.protein == 25.3
        assert meal.carbs == 45.0
        assert meal.cook_time == 20 and isinstance(meal.cook_time, int)

    def test_missing_meal_is_reported_by_count(self, plan_payload):
        with pytest.raises(PlanValidationError, match="27 of 28 meals present"):
            validate_plan(plan_payload(count=27))

    def test_too_many_meals(self, plan_payload, meal_payload):
        payload = plan_payload()
        payload["meals"].append(meal_payload("MONDAY", "LUNCH", 99))

        with pytest.raises(PlanValidationError):
            validate_plan(payload)

    def test_duplicate_slot_breaks_coverage(self, plan_payload):
        payload = plan_payload()
        payload["meals"][1]["mealType"] = "BREAKFAST"  # MONDAY/BREAKFAST twice, MONDAY/LUNCH gone

        with pytest.raises(PlanValidationError, match="MONDAY/LUNCH"):
            validate_plan(payload)

    def test_unknown_day_is_rejected(self, plan_payload):
        payload = plan_payload()
        payload["meals"][0]["day"] = "FUNDAY"

        with pytest.raises(PlanValidationError, match="meals.0.day"):
            validate_plan(payload)

    def test_missing_day_is_rejected(self, plan_payload):
        payload = plan_payload()
        del payload["meals"][5]["day"]

        with pytest.raises(PlanValidationError, match="meals.5.day"):
            validate_plan(payload)

    def test_string_numbers_are_not_coerced(self, plan_payload):
        payload = plan_payload()
        payload["meals"][3]["calories"] = "400"

        with pytest.raises(PlanValidationError, match="calories"):
            validate_plan(payload)

    @pytest.mark.parametrize("field,value", [
        ("calories", 10),
        ("calories", 2500),
        ("protein", -1),
        ("protein", 250),
        ("fiber", 80),
        ("servings", 0),
        ("prepTime", 500),
    ])
    def test_out_of_bounds_numbers(self, plan_payload, field, value):
        payload = plan_payload()
        payload["meals"][0][field] = value

        with pytest.raises(PlanValidationError, match=field):
            validate_plan(payload)

    def test_empty_ingredients(self, plan_payload):
        payload = plan_payload()
        payload["meals"][0]["ingredients"] = []

        with pytest.raises(PlanValidationError, match="ingredients"):
            validate_plan(payload)

    @pytest.mark.parametrize("ingredients", [[""], ["   "], ["Rice", ""]])
    def test_blank_ingredient_entries(self, plan_payload, ingredients):
        payload = plan_payload()
        payload["meals"][0]["ingredients"] = ingredients

        with pytest.raises(PlanValidationError, match="ingredients"):
            validate_plan(payload)

    def test_near_empty_instructions(self, plan_payload):
        payload = plan_payload()
        payload["meals"][0]["instructions"] = "   Cook.   "

        with pytest.raises(PlanValidationError, match="instructions"):
            validate_plan(payload)

    def test_non_object_payload(self, plan_payload):
        with pytest.raises(PlanValidationError):
            validate_plan(plan_payload()["meals"])


class TestPrecheck:
    """Tests for the cheap meal-count pre-check."""

    def test_accepts_enough_meals(self, plan_payload):
        precheck_meal_count(plan_payload())

    def test_reports_count(self):
        with pytest.raises(PlanValidationError, match="0 of 28"):
            precheck_meal_count({"description": "x"})

    def test_bare_array(self, day_payload):
        precheck_meal_count(day_payload(), 4)
        with pytest.raises(PlanValidationError, match="3 of 4"):
            precheck_meal_count(day_payload()[:3], 4)


class TestDayAndMeal:
    """Tests for per-day and per-meal validation."""

    def test_day_is_returned_in_serving_order(self, day_payload):
        payload = list(reversed(day_payload()))

        meals = validate_day(payload, DayOfWeek.WEDNESDAY)

        assert [m.meal_type for m in meals] == list(MealType)
        assert all(m.day == DayOfWeek.WEDNESDAY for m in meals)

    def test_day_with_repeated_meal_type(self, day_payload):
        payload = day_payload()
        payload[3]["mealType"] = "LUNCH"

        with pytest.raises(PlanValidationError, match="missing meal types: DINNER"):
            validate_day(payload, DayOfWeek.MONDAY)

    def test_day_with_five_meals(self, day_payload, meal_payload):
        payload = day_payload() + [meal_payload(None, "SNACK", 9)]

        with pytest.raises(PlanValidationError, match="Expected 4 meals"):
            validate_day(payload, DayOfWeek.MONDAY)

    def test_meal_gets_the_requested_slot(self, meal_payload):
        meal = validate_meal(meal_payload("SUNDAY", "SNACK"), DayOfWeek.FRIDAY, MealType.DINNER)

        assert meal.slot == (DayOfWeek.FRIDAY, MealType.DINNER)

    def test_single_element_array_is_unwrapped(self, meal_payload):
        content = validate_meal_content([meal_payload()])
        assert content.name == "Test Meal 0"

    def test_missing_field(self, meal_payload):
        payload = meal_payload()
        del payload["fat"]

        with pytest.raises(PlanValidationError, match="fat"):
            validate_meal_content(payload)

    def test_boolean_is_not_a_number(self, meal_payload):
        with pytest.raises(PlanValidationError, match="servings"):
            validate_meal_content(meal_payload(servings=True))

    def test_meal_model_rejects_blank_ingredients(self, existing_meal):
        data = existing_meal.model_dump(by_alias=True)
        data["ingredients"] = ["Paneer", " "]

        with pytest.raises(ValidationError):
            Meal.model_validate(data)


class TestNormalization:
    """Normalization is deterministic and idempotent."""

    def test_normalizing_twice_is_a_no_op(self, meal_payload):
        meal = validate_meal(meal_payload(calories=433.6, protein=21.449, prepTime=7.5), DayOfWeek.MONDAY, MealType.LUNCH)

        once = normalize_meal(meal)
        twice = normalize_meal(once)

        assert once == meal
        assert twice == once

    def test_rounding(self, meal_payload):
        meal = validate_meal(meal_payload(calories=433.6, protein=21.449), DayOfWeek.MONDAY, MealType.LUNCH)

        assert meal.calories == 434
        assert meal.protein == 21.4

    @pytest.mark.parametrize("field,attr,raw,expected", [
        ("calories", "calories", 420.5, 421),
        ("calories", "calories", 419.49, 419),
        ("prepTime", "prep_time", 12.5, 13),
        ("cookTime", "cook_time", 0.5, 1),
        ("servings", "servings", 1.5, 2),
    ])
    def test_halves_round_up(self, meal_payload, field, attr, raw, expected):
        meal = validate_meal(meal_payload(**{field: raw}), DayOfWeek.MONDAY, MealType.LUNCH)
        assert getattr(meal, attr) == expected

    def test_macro_halves_round_up(self, meal_payload):
        content = validate_meal_content(meal_payload(protein=21.45, fat=10.25, fiber=8.15))

        assert (content.protein, content.fat, content.fiber) == (21.5, 10.3, 8.2)

    def test_validated_plan_is_already_normalized(self, plan_payload):
        plan = validate_plan(plan_payload())
        assert [normalize_meal(m) for m in plan.meals] == plan.meals

    def test_day_meals_are_normalized_the_same_way(self, day_payload):
        payload = day_payload()
        payload[0]["calories"] = 420.5

        breakfast = validate_day(payload, DayOfWeek.MONDAY)[0]

        assert breakfast.calories == 421
        assert normalize_meal(breakfast) == breakfast
