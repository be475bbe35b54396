"""
Nutrition insight routes: analysis, suggestions and plan scoring.
"""
from fastapi import APIRouter, HTTPException, Depends, Request

from diet_planner.models.schemas import AnalyzePlanRequest, EvaluatePlanRequest, SuggestMealsRequest
from diet_planner.services import evaluation
from diet_planner.services.generator import PlanGenerator
from diet_planner.core.dependencies import get_generator
from diet_planner.core.logger import log_request, log_error
from diet_planner.core.auth import verify_internal_secret
from diet_planner.core.limiter import limiter

router = APIRouter(dependencies=[Depends(verify_internal_secret)])


@router.post("/analyze-plan")
@limiter.limit("10/minute")
async def analyze_plan(
    request: Request,
    req: AnalyzePlanRequest,
    generator: PlanGenerator = Depends(get_generator),
):
    """Review the calorie and macronutrient balance of a set of meals."""
    log_request("/analyze-plan")

    try:
        analysis = await generator.analyze_nutritional_balance(req.meals)
    except Exception as e:
        log_error("Nutritional analysis", e)
        raise HTTPException(status_code=500, detail="Nutritional analysis failed")
    return {"status": "success", "analysis": analysis}


@router.post("/evaluate-plan")
@limiter.limit("30/minute")
async def evaluate_plan(request: Request, req: EvaluatePlanRequest):
    """
    Score a set of meals on structure, nutrition, variety and preferences.

    Pure computation, no model call.
    """
    log_request("/evaluate-plan")

    results = evaluation.evaluate_plan(req.meals, req.expectations)
    return {
        "status": "success",
        "overallScore": evaluation.overall_score(results),
        "results": [r.model_dump() for r in results],
    }


@router.post("/suggest-meals")
@limiter.limit("10/minute")
async def suggest_meals(
    request: Request,
    req: SuggestMealsRequest,
    generator: PlanGenerator = Depends(get_generator),
):
    """Suggest three meals that can be cooked from the given ingredients."""
    log_request("/suggest-meals")

    try:
        suggestions = await generator.suggest_meals(req.ingredients, req.meal_type)
    except Exception as e:
        log_error("Meal suggestions", e)
        raise HTTPException(status_code=500, detail="Meal suggestions failed")
    return {"status": "success", "suggestions": suggestions}
