"""
Tests for plan and regeneration quality scoring.
"""
import pytest

from diet_planner.models.plan import DAYS, MEAL_TYPES, Meal
from diet_planner.services.evaluation import (
    EvaluationResult,
    PlanExpectations,
    evaluate_calorie_consistency,
    evaluate_daily_calories,
    evaluate_day_coverage,
    evaluate_ingredient_diversity,
    evaluate_instruction_quality,
    evaluate_macro_balance,
    evaluate_meal_count,
    evaluate_meal_difference,
    evaluate_meal_type_coverage,
    evaluate_meal_variety,
    evaluate_plan,
    evaluate_preference_adherence,
    evaluate_protein_adequacy,
    evaluate_regeneration,
    evaluate_vegetarian_compliance,
    overall_score,
)


def make_meal(day, meal_type, index, **overrides):
    fields = {
        "day": day,
        "mealType": meal_type,
        "name": f"Lentil Dish {index}",
        "description": "Hearty lentils with greens",
        "calories": 450,
        "protein": 20.0,
        "carbs": 50.0,
        "fat": 15.0,
        "fiber": 6.0,
        "ingredients": [f"Vegetable {index}", "Lentils"],
        "instructions": "Simmer everything gently for twenty minutes.",
        "prepTime": 10,
        "cookTime": 20,
        "servings": 1,
    }
    fields.update(overrides)
    return Meal(**fields)


def make_week(**overrides):
    return [
        make_meal(day, meal_type, d * len(MEAL_TYPES) + t, **overrides)
        for d, day in enumerate(DAYS)
        for t, meal_type in enumerate(MEAL_TYPES)
    ]


@pytest.fixture
def week():
    return make_week()


class TestStructure:
    """Tests for meal count and slot coverage."""

    def test_full_week(self, week):
        assert evaluate_meal_count(week).score == 1
        assert evaluate_day_coverage(week).comment == "All 7 days covered"
        assert evaluate_meal_type_coverage(week).score == 1

    def test_short_plan(self, week):
        partial = [m for m in week if m.day != DAYS[-1]]

        assert evaluate_meal_count(partial).score == 0
        assert evaluate_meal_count(partial).comment == "Expected 28 meals, got 24"
        coverage = evaluate_day_coverage(partial)
        assert coverage.score == pytest.approx(6 / 7)
        assert "SUNDAY" in coverage.comment

    def test_missing_meal_type(self, week):
        without_dinner = [m for m in week if m.meal_type != MEAL_TYPES[-1]]

        result = evaluate_meal_type_coverage(without_dinner)

        assert result.score == pytest.approx(21 / 28)
        assert "MONDAY: missing" in result.comment
        assert result.comment.endswith("...")


class TestNutrition:
    """Tests for calorie, protein and macro checks."""

    def test_days_in_calorie_range(self, week):
        result = evaluate_daily_calories(week)
        assert result.score == 1
        assert result.comment == "All days within 1200-2500 cal range"

    def test_days_out_of_calorie_range(self, week):
        expectations = PlanExpectations(minCaloriesPerDay=2000, maxCaloriesPerDay=2400)

        result = evaluate_daily_calories(week, expectations)

        assert result.score == 0
        assert "MONDAY: 1800 cal (expected 2000-2400)" in result.comment

    def test_low_protein_days(self):
        meals = make_week(protein=5.0)

        result = evaluate_protein_adequacy(meals)

        assert result.score == 0
        assert "MONDAY: 20.0g" in result.comment

    def test_balanced_macros(self, week):
        assert evaluate_macro_balance(week).score == 1

    def test_fat_heavy_macros(self):
        meals = make_week(protein=10.0, carbs=10.0, fat=40.0)

        result = evaluate_macro_balance(meals)

        # all three out of band
        assert result.score == 0.5
        assert result.comment.startswith("Protein: ")

    def test_no_macro_data(self):
        meals = make_week(protein=0, carbs=0, fat=0)
        assert evaluate_macro_balance(meals).score == 0


class TestVariety:
    """Tests for meal name and ingredient variety."""

    def test_unique_meals(self, week):
        result = evaluate_meal_variety(week)
        assert result.score == 1
        assert result.comment == "All 28 meals are unique"

    def test_duplicate_names_ignore_case(self, week):
        week[1] = week[1].model_copy(update={"name": "lentil dish 0 "})

        result = evaluate_meal_variety(week)

        assert result.score == pytest.approx(27 / 28)
        assert '"lentil dish 0" (2x)' in result.comment

    def test_ingredient_diversity_is_capped(self, week):
        # 28 distinct vegetables plus lentils
        assert evaluate_ingredient_diversity(week).score == pytest.approx(29 / 40)

        rich = [m.model_copy(update={"ingredients": [f"{m.name} {i}" for i in range(3)]}) for m in week]
        assert evaluate_ingredient_diversity(rich).score == 1


class TestPreferences:
    """Tests for avoided words and vegetarian compliance."""

    def test_nothing_to_avoid(self, week):
        result = evaluate_preference_adherence(week, [])
        assert result.score == 1
        assert result.comment == "No specific ingredients to avoid"

    def test_avoided_ingredient(self, week):
        week[0] = week[0].model_copy(update={"ingredients": ["Peanut butter", "Oats"]})

        result = evaluate_preference_adherence(week, ["peanut"])

        assert result.score == pytest.approx(1 - 1 / 28)
        assert 'Lentil Dish 0: contains "peanut"' in result.comment

    def test_non_vegetarian_plan_is_skipped(self, week):
        result = evaluate_vegetarian_compliance(week, ["spicy"])
        assert result.comment == "Not a vegetarian plan - skipped"

    def test_vegetarian_plan(self, week):
        result = evaluate_vegetarian_compliance(week, ["Vegetarian"])
        assert result.score == 1
        assert result.comment == "All meals are vegetarian-compliant"

    def test_meat_in_vegetarian_plan(self, week):
        week[2] = week[2].model_copy(update={"name": "Chicken Curry"})

        result = evaluate_vegetarian_compliance(week, ["vegan"])

        assert result.score == pytest.approx(1 - 1 / 28)
        assert 'Chicken Curry: contains "chicken"' in result.comment


class TestInstructionQuality:
    def test_short_instructions(self, week):
        week[0] = week[0].model_copy(update={"instructions": "Just eat it."})

        result = evaluate_instruction_quality(week)

        assert result.score == pytest.approx(27 / 28)
        assert "Lentil Dish 0: 12 chars" in result.comment

    def test_no_meals(self):
        assert evaluate_instruction_quality([]).score == 0


class TestRegeneration:
    """Tests for scoring a replacement meal against the original."""

    def test_different_meal_within_calories(self, existing_meal):
        replacement = existing_meal.model_copy(update={"name": "Chickpea Salad", "calories": 560})

        results = evaluate_regeneration(existing_meal, replacement)

        assert [r.key for r in results] == ["meal_difference", "calorie_consistency"]
        assert [r.score for r in results] == [1, 1]

    def test_same_name_scores_zero(self, existing_meal):
        replacement = existing_meal.model_copy(update={"name": "paneer tikka bowl"})

        result = evaluate_meal_difference(existing_meal, replacement)

        assert result.score == 0
        assert "Paneer Tikka Bowl" in result.comment

    def test_calorie_drift(self, existing_meal):
        replacement = existing_meal.model_copy(update={"calories": 600})

        result = evaluate_calorie_consistency(existing_meal, replacement)

        assert result.score == 0
        assert result.comment == "New calories: 600 (expected 470-570, original: 520)"


class TestAggregates:
    """Tests for the full plan evaluation and overall score."""

    def test_evaluate_plan_runs_every_check(self, week):
        results = evaluate_plan(week)

        assert [r.key for r in results] == [
            "meal_count",
            "day_coverage",
            "meal_type_coverage",
            "daily_calories_in_range",
            "protein_adequacy",
            "macro_balance",
            "meal_variety",
            "ingredient_diversity",
            "preference_adherence",
            "vegetarian_compliance",
            "instruction_quality",
        ]
        assert all(0 <= r.score <= 1 for r in results)

    def test_expectations_are_applied(self, week):
        expectations = PlanExpectations(avoid=["lentils"], preferences=["vegetarian"])

        by_key = {r.key: r for r in evaluate_plan(week, expectations)}

        assert by_key["preference_adherence"].score == 0
        assert by_key["vegetarian_compliance"].score == 1

    def test_overall_score(self):
        results = [
            EvaluationResult(key="a", score=1, comment=""),
            EvaluationResult(key="b", score=0.5, comment=""),
            EvaluationResult(key="c", score=0, comment=""),
        ]
        assert overall_score(results) == 0.5
        assert overall_score([]) == 0.0

    def test_score_is_bounded(self):
        with pytest.raises(ValueError):
            EvaluationResult(key="a", score=1.5, comment="")
