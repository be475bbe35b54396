"""
Quality scoring of generated plans and regenerated meals.

Each evaluator is a pure function returning a score in [0, 1] with a short
human-readable comment. They work on plain meal lists, so partial or
hand-edited plans can be scored as well as generated ones.
"""
from collections import Counter
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from diet_planner.models.plan import DAYS, MEAL_TYPES, MEALS_PER_WEEK, Meal, MealContent

VEGETARIAN_TAGS = {"vegetarian", "vegan", "plant-based"}
MEAT_KEYWORDS = [
    "chicken", "beef", "pork", "lamb", "fish", "salmon", "tuna",
    "shrimp", "bacon", "turkey", "steak", "meat", "seafood",
]
MIN_DAILY_PROTEIN = 50
MIN_UNIQUE_INGREDIENTS = 40
MIN_INSTRUCTION_LENGTH = 30


class EvaluationResult(BaseModel):
    """Score of one quality check."""

    model_config = ConfigDict(frozen=True)

    key: str
    score: float = Field(..., ge=0, le=1)
    comment: str


class PlanExpectations(BaseModel):
    """What a plan is expected to satisfy beyond its schema."""

    model_config = ConfigDict(populate_by_name=True)

    min_calories_per_day: int = Field(1200, alias="minCaloriesPerDay", ge=0)
    max_calories_per_day: int = Field(2500, alias="maxCaloriesPerDay", ge=0)
    avoid: list[str] = Field(default=[], description="Ingredients or words no meal may mention")
    preferences: list[str] = Field(default=[], description="Profile and plan preference tags")


def _preview(items: list[str], limit: int = 5) -> str:
    text = "; ".join(items[:limit])
    return text + ("..." if len(items) > limit else "")


def _by_day(meals: list[Meal]) -> dict:
    return {day: [m for m in meals if m.day == day] for day in DAYS}


# --- Structure ---

def evaluate_meal_count(meals: list[Meal]) -> EvaluationResult:
    score = 1.0 if len(meals) == MEALS_PER_WEEK else 0.0
    return EvaluationResult(
        key="meal_count",
        score=score,
        comment=f"Expected {MEALS_PER_WEEK} meals, got {len(meals)}",
    )


def evaluate_day_coverage(meals: list[Meal]) -> EvaluationResult:
    covered = {m.day for m in meals}
    missing = [d.value for d in DAYS if d not in covered]
    return EvaluationResult(
        key="day_coverage",
        score=(len(DAYS) - len(missing)) / len(DAYS),
        comment=f"Missing days: {', '.join(missing)}" if missing else "All 7 days covered",
    )


def evaluate_meal_type_coverage(meals: list[Meal]) -> EvaluationResult:
    slots = {m.slot for m in meals}
    issues = [f"{d.value}: missing {t.value}" for d in DAYS for t in MEAL_TYPES if (d, t) not in slots]
    total = len(DAYS) * len(MEAL_TYPES)
    return EvaluationResult(
        key="meal_type_coverage",
        score=(total - len(issues)) / total,
        comment=f"Issues: {_preview(issues)}" if issues else "All meal types covered for all days",
    )


# --- Nutrition ---

def evaluate_daily_calories(meals: list[Meal], expectations: Optional[PlanExpectations] = None) -> EvaluationResult:
    """Share of days whose total calories fall inside the expected range."""
    expectations = expectations or PlanExpectations()
    low, high = expectations.min_calories_per_day, expectations.max_calories_per_day

    out_of_range = []
    for day, day_meals in _by_day(meals).items():
        calories = sum(m.calories for m in day_meals)
        if not low <= calories <= high:
            out_of_range.append(f"{day.value}: {calories} cal (expected {low}-{high})")

    return EvaluationResult(
        key="daily_calories_in_range",
        score=(len(DAYS) - len(out_of_range)) / len(DAYS),
        comment=f"Out of range: {'; '.join(out_of_range)}" if out_of_range else f"All days within {low}-{high} cal range",
    )


def evaluate_protein_adequacy(meals: list[Meal]) -> EvaluationResult:
    low_days = []
    for day, day_meals in _by_day(meals).items():
        protein = sum(m.protein for m in day_meals)
        if protein < MIN_DAILY_PROTEIN:
            low_days.append(f"{day.value}: {protein:.1f}g")

    return EvaluationResult(
        key="protein_adequacy",
        score=(len(DAYS) - len(low_days)) / len(DAYS),
        comment=(
            f"Low protein days: {'; '.join(low_days)}" if low_days
            else f"All days have adequate protein (>={MIN_DAILY_PROTEIN}g)"
        ),
    )


def evaluate_macro_balance(meals: list[Meal]) -> EvaluationResult:
    """
    Energy split between protein, carbs and fat (4, 4 and 9 kcal per gram).

    Each macro inside its healthy band scores 1, outside it 0.5; the result
    is the average of the three.
    """
    protein_kcal = sum(m.protein for m in meals) * 4
    carbs_kcal = sum(m.carbs for m in meals) * 4
    fat_kcal = sum(m.fat for m in meals) * 9
    total = protein_kcal + carbs_kcal + fat_kcal
    if total == 0:
        return EvaluationResult(key="macro_balance", score=0, comment="No macronutrient data available")

    protein_pct = protein_kcal / total * 100
    carbs_pct = carbs_kcal / total * 100
    fat_pct = fat_kcal / total * 100
    bands = [(protein_pct, 10, 35), (carbs_pct, 35, 70), (fat_pct, 15, 40)]
    score = sum(1.0 if low <= pct <= high else 0.5 for pct, low, high in bands) / len(bands)

    return EvaluationResult(
        key="macro_balance",
        score=score,
        comment=f"Protein: {protein_pct:.1f}%, Carbs: {carbs_pct:.1f}%, Fat: {fat_pct:.1f}%",
    )


# --- Variety ---

def evaluate_meal_variety(meals: list[Meal]) -> EvaluationResult:
    names = Counter(m.name.strip().lower() for m in meals)
    duplicates = [f'"{name}" ({count}x)' for name, count in names.items() if count > 1]
    return EvaluationResult(
        key="meal_variety",
        score=len(names) / max(len(meals), 1),
        comment=f"Duplicates found: {', '.join(duplicates[:5])}" if duplicates else f"All {len(names)} meals are unique",
    )


def evaluate_ingredient_diversity(meals: list[Meal]) -> EvaluationResult:
    unique = {i.strip().lower() for m in meals for i in m.ingredients}
    return EvaluationResult(
        key="ingredient_diversity",
        score=min(len(unique) / MIN_UNIQUE_INGREDIENTS, 1.0),
        comment=f"{len(unique)} unique ingredients used (target: {MIN_UNIQUE_INGREDIENTS}+)",
    )


# --- Preferences ---

def _meal_text(meal: MealContent, with_instructions: bool = True) -> str:
    parts = [meal.name, meal.description, *meal.ingredients]
    if with_instructions:
        parts.append(meal.instructions)
    return " ".join(parts).lower()


def evaluate_preference_adherence(meals: list[Meal], avoid: list[str]) -> EvaluationResult:
    """Penalize every meal that mentions something the user wants to avoid."""
    if not avoid:
        return EvaluationResult(key="preference_adherence", score=1, comment="No specific ingredients to avoid")

    violations = [
        f'{meal.name}: contains "{word}"'
        for meal in meals
        for word in avoid
        if word.lower() in _meal_text(meal)
    ]
    score = max(0.0, 1 - len(violations) / len(meals)) if violations else 1.0
    return EvaluationResult(
        key="preference_adherence",
        score=score,
        comment=f"Violations: {_preview(violations)}" if violations else f"No violations found for: {', '.join(avoid)}",
    )


def evaluate_vegetarian_compliance(meals: list[Meal], preferences: list[str]) -> EvaluationResult:
    if not VEGETARIAN_TAGS.intersection(p.strip().lower() for p in preferences):
        return EvaluationResult(key="vegetarian_compliance", score=1, comment="Not a vegetarian plan - skipped")

    violations = []
    for meal in meals:
        text = _meal_text(meal, with_instructions=False)
        meat = next((word for word in MEAT_KEYWORDS if word in text), None)
        if meat:
            violations.append(f'{meal.name}: contains "{meat}"')

    score = max(0.0, 1 - len(violations) / len(meals)) if violations else 1.0
    return EvaluationResult(
        key="vegetarian_compliance",
        score=score,
        comment=f"Non-vegetarian meals: {_preview(violations)}" if violations else "All meals are vegetarian-compliant",
    )


# --- Quality ---

def evaluate_instruction_quality(meals: list[Meal]) -> EvaluationResult:
    short = [f"{m.name}: {len(m.instructions)} chars" for m in meals if len(m.instructions) < MIN_INSTRUCTION_LENGTH]
    score = (len(meals) - len(short)) / len(meals) if meals else 0.0
    return EvaluationResult(
        key="instruction_quality",
        score=score,
        comment=(
            f"Short instructions: {_preview(short)}" if short
            else f"All instructions are detailed (>={MIN_INSTRUCTION_LENGTH} chars)"
        ),
    )


# --- Regeneration ---

def evaluate_meal_difference(original: MealContent, replacement: MealContent) -> EvaluationResult:
    different = original.name.strip().lower() != replacement.name.strip().lower()
    return EvaluationResult(
        key="meal_difference",
        score=1 if different else 0,
        comment=(
            f'Successfully generated different meal: "{replacement.name}"' if different
            else f'Generated same meal as original: "{original.name}"'
        ),
    )


def evaluate_calorie_consistency(original: MealContent, replacement: MealContent, delta: int = 50) -> EvaluationResult:
    low, high = original.calories - delta, original.calories + delta
    in_range = low <= replacement.calories <= high
    return EvaluationResult(
        key="calorie_consistency",
        score=1 if in_range else 0,
        comment=f"New calories: {replacement.calories} (expected {low}-{high}, original: {original.calories})",
    )


# --- Aggregates ---

def evaluate_plan(meals: list[Meal], expectations: Optional[PlanExpectations] = None) -> list[EvaluationResult]:
    """
    Run every plan-level check.

    Args:
        meals: Meals of the plan, in any order
        expectations: Calorie range, words to avoid and preference tags

    Returns:
        One EvaluationResult per check, structure checks first
    """
    expectations = expectations or PlanExpectations()
    return [
        evaluate_meal_count(meals),
        evaluate_day_coverage(meals),
        evaluate_meal_type_coverage(meals),
        evaluate_daily_calories(meals, expectations),
        evaluate_protein_adequacy(meals),
        evaluate_macro_balance(meals),
        evaluate_meal_variety(meals),
        evaluate_ingredient_diversity(meals),
        evaluate_preference_adherence(meals, expectations.avoid),
        evaluate_vegetarian_compliance(meals, expectations.preferences),
        evaluate_instruction_quality(meals),
    ]


def evaluate_regeneration(original: MealContent, replacement: MealContent, delta: int = 50) -> list[EvaluationResult]:
    return [
        evaluate_meal_difference(original, replacement),
        evaluate_calorie_consistency(original, replacement, delta),
    ]


def overall_score(results: list[EvaluationResult]) -> float:
    """Unweighted mean of the individual scores."""
    if not results:
        return 0.0
    return round(sum(r.score for r in results) / len(results), 3)
