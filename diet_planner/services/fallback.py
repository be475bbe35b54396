"""
Static fallback meals used when the model cannot produce a valid result.

Selection is a pure function of the (day, meal type) slot, so the same slot
always gets the same meal.
"""
from diet_planner.models.plan import DAYS, MEAL_TYPES, DayOfWeek, DietPlan, Meal, MealType, PlanSource

FALLBACK_DESCRIPTION = "Balanced diet plan with healthy meal options"

FALLBACK_MEALS: dict[MealType, list[dict]] = {
    MealType.BREAKFAST: [
        {
            "name": "Oatmeal with Berries",
            "description": "Rolled oats cooked in milk, topped with mixed berries and walnuts",
            "calories": 350, "protein": 12.0, "carbs": 55.0, "fat": 8.0, "fiber": 8.0,
            "ingredients": ["Rolled oats", "Milk", "Mixed berries", "Walnuts", "Honey"],
            "instructions": "Simmer the oats in milk for 5 minutes, stirring. Top with berries, walnuts and a drizzle of honey.",
            "prep_time": 5, "cook_time": 5, "servings": 1,
        },
        {
            "name": "Greek Yogurt Parfait",
            "description": "Layers of Greek yogurt, granola and fresh fruit",
            "calories": 300, "protein": 20.0, "carbs": 35.0, "fat": 8.0, "fiber": 5.0,
            "ingredients": ["Greek yogurt", "Granola", "Banana", "Strawberries", "Chia seeds"],
            "instructions": "Layer yogurt, sliced fruit and granola in a glass. Finish with a sprinkle of chia seeds.",
            "prep_time": 5, "cook_time": 0, "servings": 1,
        },
        {
            "name": "Whole Grain Toast with Avocado",
            "description": "Toasted whole grain bread with smashed avocado and a poached egg",
            "calories": 320, "protein": 10.0, "carbs": 40.0, "fat": 15.0, "fiber": 10.0,
            "ingredients": ["Whole grain bread", "Avocado", "Egg", "Lemon juice", "Chili flakes"],
            "instructions": "Toast the bread, spread avocado mashed with lemon juice, top with a poached egg and chili flakes.",
            "prep_time": 5, "cook_time": 5, "servings": 1,
        },
    ],
    MealType.LUNCH: [
        {
            "name": "Grilled Chicken Salad",
            "description": "Mixed greens with grilled chicken breast, cherry tomatoes and olive oil dressing",
            "calories": 450, "protein": 35.0, "carbs": 15.0, "fat": 25.0, "fiber": 6.0,
            "ingredients": ["Chicken breast", "Mixed greens", "Cherry tomatoes", "Cucumber", "Olive oil", "Lemon"],
            "instructions": "Season and grill the chicken for 6 minutes per side, slice, and toss with the vegetables and dressing.",
            "prep_time": 10, "cook_time": 12, "servings": 1,
        },
        {
            "name": "Quinoa Bowl with Vegetables",
            "description": "Quinoa with roasted vegetables, chickpeas and tahini sauce",
            "calories": 400, "protein": 15.0, "carbs": 60.0, "fat": 12.0, "fiber": 8.0,
            "ingredients": ["Quinoa", "Chickpeas", "Zucchini", "Bell pepper", "Tahini", "Lemon"],
            "instructions": "Cook the quinoa, roast the vegetables for 20 minutes, combine with chickpeas and drizzle with tahini.",
            "prep_time": 10, "cook_time": 20, "servings": 1,
        },
        {
            "name": "Turkey and Hummus Wrap",
            "description": "Whole wheat wrap with sliced turkey, hummus and crunchy vegetables",
            "calories": 380, "protein": 25.0, "carbs": 45.0, "fat": 12.0, "fiber": 6.0,
            "ingredients": ["Whole wheat tortilla", "Turkey breast", "Hummus", "Spinach", "Carrot"],
            "instructions": "Spread hummus on the tortilla, layer turkey, spinach and grated carrot, then roll tightly and halve.",
            "prep_time": 10, "cook_time": 0, "servings": 1,
        },
    ],
    MealType.SNACK: [
        {
            "name": "Apple with Almond Butter",
            "description": "Sliced apple served with natural almond butter",
            "calories": 200, "protein": 6.0, "carbs": 25.0, "fat": 12.0, "fiber": 5.0,
            "ingredients": ["Apple", "Almond butter"],
            "instructions": "Core and slice the apple and serve with two tablespoons of almond butter for dipping.",
            "prep_time": 5, "cook_time": 0, "servings": 1,
        },
        {
            "name": "Greek Yogurt with Nuts",
            "description": "Plain Greek yogurt with a handful of mixed nuts",
            "calories": 180, "protein": 15.0, "carbs": 12.0, "fat": 8.0, "fiber": 2.0,
            "ingredients": ["Greek yogurt", "Mixed nuts", "Cinnamon"],
            "instructions": "Spoon the yogurt into a bowl, top with chopped nuts and a pinch of cinnamon.",
            "prep_time": 3, "cook_time": 0, "servings": 1,
        },
        {
            "name": "Hummus with Vegetables",
            "description": "Hummus served with raw vegetable sticks",
            "calories": 150, "protein": 6.0, "carbs": 18.0, "fat": 8.0, "fiber": 4.0,
            "ingredients": ["Hummus", "Carrot", "Celery", "Cucumber"],
            "instructions": "Cut the vegetables into sticks and serve alongside a small bowl of hummus.",
            "prep_time": 5, "cook_time": 0, "servings": 1,
        },
    ],
    MealType.DINNER: [
        {
            "name": "Baked Salmon with Sweet Potato",
            "description": "Oven-baked salmon fillet with roasted sweet potato and broccoli",
            "calories": 500, "protein": 35.0, "carbs": 40.0, "fat": 20.0, "fiber": 6.0,
            "ingredients": ["Salmon fillet", "Sweet potato", "Broccoli", "Olive oil", "Garlic"],
            "instructions": "Roast cubed sweet potato for 15 minutes, add salmon and broccoli, and bake 12 more minutes at 200C.",
            "prep_time": 10, "cook_time": 27, "servings": 1,
        },
        {
            "name": "Lean Beef Stir-fry",
            "description": "Strips of lean beef stir-fried with vegetables in a light soy glaze",
            "calories": 480, "protein": 30.0, "carbs": 35.0, "fat": 22.0, "fiber": 5.0,
            "ingredients": ["Lean beef", "Broccoli", "Snap peas", "Soy sauce", "Ginger", "Brown rice"],
            "instructions": "Sear the beef strips in a hot wok, add vegetables and ginger, glaze with soy sauce and serve over rice.",
            "prep_time": 15, "cook_time": 12, "servings": 1,
        },
        {
            "name": "Grilled Chicken with Brown Rice",
            "description": "Herb-marinated grilled chicken with brown rice and steamed greens",
            "calories": 450, "protein": 40.0, "carbs": 45.0, "fat": 12.0, "fiber": 4.0,
            "ingredients": ["Chicken breast", "Brown rice", "Green beans", "Rosemary", "Olive oil"],
            "instructions": "Marinate the chicken in herbs and oil, grill until cooked through, and serve with rice and steamed beans.",
            "prep_time": 15, "cook_time": 30, "servings": 1,
        },
    ],
}


def fallback_meal(day: DayOfWeek, meal_type: MealType) -> Meal:
    """Fallback meal for one slot. Same slot, same meal."""
    options = FALLBACK_MEALS[meal_type]
    content = options[DAYS.index(day) % len(options)]
    return Meal(day=day, meal_type=meal_type, **content)


def fallback_day(day: DayOfWeek) -> list[Meal]:
    return [fallback_meal(day, meal_type) for meal_type in MEAL_TYPES]


def fallback_plan(description: str = FALLBACK_DESCRIPTION) -> DietPlan:
    """The full static week, 28 meals."""
    meals = [meal for day in DAYS for meal in fallback_day(day)]
    return DietPlan(description=description, meals=meals, source=PlanSource.FALLBACK)
