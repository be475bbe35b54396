"""
Diet plan generation routes.
"""
import json

from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.responses import StreamingResponse

from diet_planner.models.plan import GenerationEvent
from diet_planner.models.schemas import GeneratePlanRequest, RegenerateMealRequest
from diet_planner.services.errors import MealRegenerationError
from diet_planner.services.generator import PlanGenerator
from diet_planner.core.dependencies import get_generator
from diet_planner.core.logger import log_request, log_error
from diet_planner.core.auth import verify_internal_secret
from diet_planner.core.limiter import limiter

router = APIRouter(dependencies=[Depends(verify_internal_secret)])


def format_sse(event: GenerationEvent) -> str:
    """Serialize one event as a Server-Sent Events frame."""
    return f"event: {event.type}\ndata: {json.dumps(event.data)}\n\n"


@router.post("/generate-plan")
@limiter.limit("10/minute")
async def generate_plan(
    request: Request,
    req: GeneratePlanRequest,
    generator: PlanGenerator = Depends(get_generator),
):
    """
    Generate a personalized 7-day plan (28 meals).

    Always answers with a complete plan: when the model fails, the static
    fallback plan is returned and `plan.source` says so.
    """
    log_request("/generate-plan")

    try:
        plan = await generator.generate_plan(req.profile, req.plan, req.strategy)
    except Exception as e:
        log_error("Diet plan generation", e)
        raise HTTPException(status_code=500, detail="Failed to generate diet plan. Please try again.")

    return {
        "status": "success",
        "plan": plan.model_dump(mode="json", by_alias=True),
        "weekStart": req.plan.week_start.isoformat(),
        "weekEnd": req.plan.week_end.isoformat(),
        "dailyTotals": plan.daily_totals(),
    }


@router.post("/generate-plan/stream")
@limiter.limit("10/minute")
async def stream_plan(
    request: Request,
    req: GeneratePlanRequest,
    generator: PlanGenerator = Depends(get_generator),
):
    """
    Generate a plan day by day as a Server-Sent Events stream.

    Events: start, progress, day_complete (one per day, in week order),
    then plan_complete or error.
    """
    log_request("/generate-plan/stream")

    async def events():
        try:
            async for event in generator.stream_plan(req.profile, req.plan):
                yield format_sse(event)
        except Exception as e:
            log_error("Progressive generation", e)
            yield format_sse(GenerationEvent(
                type="error",
                data={"error": "Failed to generate diet plan. Please try again."},
            ))

    return StreamingResponse(
        events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.post("/regenerate-meal")
@limiter.limit("20/minute")
async def regenerate_meal(
    request: Request,
    req: RegenerateMealRequest,
    generator: PlanGenerator = Depends(get_generator),
):
    """
    Replace one meal with a different one of similar calories.

    Unlike plan generation there is no fallback: failures return 502.
    """
    log_request("/regenerate-meal")

    try:
        meal = await generator.regenerate_meal(req.profile, req.meal, req.custom_requirements)
    except MealRegenerationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except Exception as e:
        log_error("Meal regeneration", e)
        raise HTTPException(status_code=500, detail="Meal regeneration failed")

    return {"status": "success", "meal": meal.model_dump(mode="json", by_alias=True)}
