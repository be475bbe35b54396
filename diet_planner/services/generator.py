"""
Plan generation pipeline.

prompt -> model call (timeout race) -> JSON recovery -> validation
-> normalized result, with static fallback content whenever a weekly
plan cannot be produced.
"""
import asyncio
import time
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from pydantic import ValidationError

from diet_planner.core.config import Settings, settings as default_settings
from diet_planner.core.logger import logger, log_error, log_fallback
from diet_planner.models.plan import (
    DAYS,
    MEAL_TYPES,
    MEALS_PER_DAY,
    MEALS_PER_WEEK,
    DayOfWeek,
    DietPlan,
    GenerationEvent,
    Meal,
    MealContent,
    MealType,
    PlanRequest,
    PlanSource,
    Strategy,
    UserProfile,
    sum_nutrition,
)
from diet_planner.services.errors import (
    ConfigurationError,
    GenerationError,
    GenerationTimeout,
    MealRegenerationError,
    PlanValidationError,
    ServiceUnavailable,
)
from diet_planner.services.fallback import fallback_day, fallback_meal, fallback_plan
from diet_planner.services.llm_client import GenerationParams, ModelBackend
from diet_planner.services.prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    SYSTEM_PROMPT,
    build_analysis_prompt,
    build_day_prompt,
    build_meal_prompt,
    build_plan_prompt,
    build_regeneration_prompt,
    build_suggestion_prompt,
    recent_meal_names,
)
from diet_planner.services.recovery import recover_json
from diet_planner.services.validation import (
    order_meals,
    validate_day,
    validate_meal,
    validate_meal_content,
    validate_plan,
)

PLAN_DESCRIPTION = "Personalized 7-day diet plan tailored to your goals and preferences"
ANALYSIS_UNAVAILABLE = "Nutritional analysis temporarily unavailable."
SUGGESTIONS_UNAVAILABLE = "Meal suggestions temporarily unavailable."


@dataclass
class _RunState:
    """Bookkeeping for one chunked generation run."""

    substituted: int = 0
    service_down: bool = False

    def source(self) -> PlanSource:
        if self.substituted == 0:
            return PlanSource.MODEL
        if self.substituted >= MEALS_PER_WEEK:
            return PlanSource.FALLBACK
        return PlanSource.MIXED


class PlanGenerator:
    """
    Generates weekly diet plans and replacement meals with a text model.

    The backend is injected so the pipeline can run against any
    ModelBackend; nothing here holds state between calls.
    """

    def __init__(self, backend: ModelBackend, settings: Optional[Settings] = None):
        self._backend = backend
        self._settings = settings or default_settings

    # --- Model invocation ---

    def _params(self, temperature: float, max_tokens: int, system_prompt: str = SYSTEM_PROMPT) -> GenerationParams:
        return GenerationParams(
            model=self._settings.OPENAI_MODEL,
            temperature=temperature,
            max_tokens=max_tokens,
            stream=self._settings.STREAM_COMPLETIONS,
            system_prompt=system_prompt,
        )

    async def _call(self, prompt: str, params: GenerationParams, timeout: float) -> str:
        try:
            # The losing side of the race is cancelled, a late answer is never seen
            return await asyncio.wait_for(self._backend.complete(prompt, params), timeout)
        except asyncio.TimeoutError as e:
            raise GenerationTimeout(f"No response from {params.model} within {timeout:g}s") from e

    async def _invoke(self, prompt: str, params: GenerationParams, timeout: float) -> str:
        """Call the primary model; on outright service failure try the secondary model once."""
        try:
            return await self._call(prompt, params, timeout)
        except ServiceUnavailable as e:
            secondary = self._settings.OPENAI_FALLBACK_MODEL
            if not secondary or secondary == params.model:
                raise
            log_error(f"AI call ({params.model})", e)
            logger.warning(f"Retrying once with secondary model {secondary}")
            return await self._call(prompt, params.with_model(secondary), timeout)

    async def _pause(self) -> None:
        if self._settings.INTER_CALL_DELAY > 0:
            await asyncio.sleep(self._settings.INTER_CALL_DELAY)

    # --- Weekly plans ---

    async def generate_plan(
        self,
        profile: UserProfile,
        request: PlanRequest,
        strategy: Optional[Strategy] = None,
    ) -> DietPlan:
        """
        Generate a validated 28-meal weekly plan.

        Never raises for expected failures: model errors, timeouts, malformed
        output, invalid output or an exhausted time budget all produce the
        static fallback plan. Unexpected errors are logged and do the same;
        only ConfigurationError propagates.

        Args:
            profile: User the plan is for
            request: Plan name, preferences and custom requirements
            strategy: Overrides GENERATION_STRATEGY

        Returns:
            DietPlan with source MODEL, MIXED or FALLBACK
        """
        strategy = Strategy(strategy or self._settings.GENERATION_STRATEGY)
        logger.info(f"Generating diet plan '{request.name}' ({strategy.value})")
        started = time.monotonic()

        try:
            plan = await asyncio.wait_for(
                self._run_strategy(strategy, profile, request),
                self._settings.PLAN_TIME_BUDGET,
            )
        except asyncio.TimeoutError:
            log_fallback("weekly plan", GenerationTimeout(
                f"plan time budget of {self._settings.PLAN_TIME_BUDGET:g}s exhausted"
            ))
            return fallback_plan()
        except GenerationError as e:
            log_fallback("weekly plan", e)
            return fallback_plan()
        except ConfigurationError:
            raise
        except Exception as e:
            log_error("Weekly plan generation", e)
            return fallback_plan()

        logger.info(
            f"Diet plan ready in {time.monotonic() - started:.1f}s "
            f"({len(plan.meals)} meals, source={plan.source.value})"
        )
        return plan

    async def _run_strategy(self, strategy: Strategy, profile: UserProfile, request: PlanRequest) -> DietPlan:
        if strategy is Strategy.PER_DAY:
            return await self._generate_by_day(profile, request)
        if strategy is Strategy.PER_MEAL:
            return await self._generate_by_meal(profile, request)
        return await self._generate_single_shot(profile, request)

    async def _generate_single_shot(self, profile: UserProfile, request: PlanRequest) -> DietPlan:
        prompt = build_plan_prompt(profile, request)
        params = self._params(self._settings.TEMPERATURE_PLAN, self._settings.MAX_TOKENS_PLAN)
        try:
            raw = await self._invoke(prompt, params, self._settings.PLAN_CALL_TIMEOUT)
        except GenerationTimeout as e:
            log_error("Single-shot generation", e)
            logger.warning("Switching to meal-by-meal generation")
            return await self._generate_by_meal(profile, request)

        return validate_plan(recover_json(raw))

    async def _generate_day(
        self,
        profile: UserProfile,
        request: PlanRequest,
        day: DayOfWeek,
        previous: list[Meal],
    ) -> list[Meal]:
        prompt = build_day_prompt(profile, request, day, recent_meal_names(previous))
        params = self._params(self._settings.TEMPERATURE_PLAN, self._settings.MAX_TOKENS_DAY)
        raw = await self._invoke(prompt, params, self._settings.DAY_CALL_TIMEOUT)
        return validate_day(recover_json(raw), day)

    async def _day_or_fallback(
        self,
        profile: UserProfile,
        request: PlanRequest,
        day: DayOfWeek,
        previous: list[Meal],
        state: _RunState,
    ) -> list[Meal]:
        if not state.service_down:
            try:
                return await self._generate_day(profile, request, day, previous)
            except ServiceUnavailable as e:
                state.service_down = True
                log_fallback(f"{day.value} and remaining days", e)
            except GenerationError as e:
                log_fallback(day.value, e)
        state.substituted += MEALS_PER_DAY
        return fallback_day(day)

    async def _generate_by_day(self, profile: UserProfile, request: PlanRequest) -> DietPlan:
        state = _RunState()
        meals: list[Meal] = []
        for index, day in enumerate(DAYS):
            if index and not state.service_down:
                await self._pause()
            meals.extend(await self._day_or_fallback(profile, request, day, meals, state))
        return self._assemble(meals, state)

    async def _meal_or_fallback(
        self,
        profile: UserProfile,
        request: PlanRequest,
        day: DayOfWeek,
        meal_type: MealType,
        state: _RunState,
    ) -> Meal:
        if not state.service_down:
            prompt = build_meal_prompt(profile, request, day, meal_type)
            params = self._params(self._settings.TEMPERATURE_PLAN, self._settings.MAX_TOKENS_MEAL)
            try:
                raw = await self._invoke(prompt, params, self._settings.MEAL_CALL_TIMEOUT)
                return validate_meal(recover_json(raw), day, meal_type)
            except ServiceUnavailable as e:
                state.service_down = True
                log_fallback(f"{day.value}/{meal_type.value} and remaining meals", e)
            except GenerationError as e:
                log_fallback(f"{day.value}/{meal_type.value}", e)
        state.substituted += 1
        return fallback_meal(day, meal_type)

    async def _generate_by_meal(self, profile: UserProfile, request: PlanRequest) -> DietPlan:
        state = _RunState()
        meals: list[Meal] = []
        for index, day in enumerate(DAYS):
            if index and not state.service_down:
                await self._pause()
            for meal_type in MEAL_TYPES:
                meals.append(await self._meal_or_fallback(profile, request, day, meal_type, state))
        return self._assemble(meals, state)

    def _assemble(self, meals: list[Meal], state: _RunState) -> DietPlan:
        if state.substituted:
            logger.warning(f"{state.substituted} of {MEALS_PER_WEEK} meals came from the fallback table")
        try:
            return DietPlan(description=PLAN_DESCRIPTION, meals=order_meals(meals), source=state.source())
        except ValidationError as e:
            raise PlanValidationError(f"Assembled plan is invalid: {e.error_count()} errors") from e

    # --- Progressive generation ---

    async def stream_plan(self, profile: UserProfile, request: PlanRequest) -> AsyncIterator[GenerationEvent]:
        """
        Generate a plan day by day, yielding progress events.

        Events come in week order: start, then progress and day_complete
        for each day, then plan_complete (or error).
        """
        total_days = len(DAYS)
        yield GenerationEvent(type="start", data={"totalDays": total_days})

        state = _RunState()
        meals: list[Meal] = []
        for index, day in enumerate(DAYS):
            yield GenerationEvent(type="progress", data={
                "day": day.value,
                "dayIndex": index,
                "totalDays": total_days,
                "message": f"Generating meals for {day.value}...",
            })
            if index and not state.service_down:
                await self._pause()

            day_meals = await self._day_or_fallback(profile, request, day, meals, state)
            meals.extend(day_meals)
            yield GenerationEvent(type="day_complete", data={
                "day": day.value,
                "dayIndex": index,
                "totalDays": total_days,
                "meals": [m.model_dump(mode="json", by_alias=True) for m in day_meals],
            })

        try:
            plan = self._assemble(meals, state)
        except GenerationError as e:
            log_error("Progressive generation", e)
            yield GenerationEvent(type="error", data={"error": "Failed to generate diet plan. Please try again."})
            return

        yield GenerationEvent(type="plan_complete", data={
            **plan.model_dump(mode="json", by_alias=True),
            "totalMeals": len(plan.meals),
        })

    # --- Single meals ---

    async def regenerate_meal(
        self,
        profile: UserProfile,
        meal: Meal,
        custom_requirements: Optional[str] = None,
    ) -> Meal:
        """
        Generate a replacement for one meal of a plan.

        The replacement keeps the slot, stays within REGENERATION_CALORIE_DELTA
        of the original calories and differs in name and description.
        There is no static fallback here.

        Raises:
            MealRegenerationError: When no attempt produced an acceptable meal
        """
        delta = self._settings.REGENERATION_CALORIE_DELTA
        prompt = build_regeneration_prompt(profile, meal, custom_requirements, delta)
        params = self._params(self._settings.TEMPERATURE_REGENERATE, self._settings.MAX_TOKENS_MEAL)
        errors: list[GenerationError] = []

        for attempt in range(1, max(1, self._settings.REGENERATION_ATTEMPTS) + 1):
            try:
                raw = await self._invoke(prompt, params, self._settings.MEAL_CALL_TIMEOUT)
                content = validate_meal_content(recover_json(raw))
                check_replacement(meal, content, delta)
            except GenerationError as e:
                log_error(f"Meal regeneration attempt {attempt}", e)
                errors.append(e)
                if isinstance(e, ServiceUnavailable):
                    break
                continue
            logger.info(f"Regenerated {meal.day.value}/{meal.meal_type.value}: {meal.name} -> {content.name}")
            return Meal(day=meal.day, meal_type=meal.meal_type, **content.model_dump())

        failure = MealRegenerationError(errors)
        logger.error(f"Meal regeneration failed: {failure.describe()}")
        raise failure from errors[-1]

    # --- Free-text helpers ---

    async def analyze_nutritional_balance(self, meals: list[Meal]) -> str:
        """Short plain-text review of a plan's balance. Best effort."""
        prompt = build_analysis_prompt(meals, sum_nutrition(meals))
        params = self._params(self._settings.TEMPERATURE_ANALYSIS, self._settings.MAX_TOKENS_MEAL, ANALYSIS_SYSTEM_PROMPT)
        try:
            return (await self._invoke(prompt, params, self._settings.MEAL_CALL_TIMEOUT)).strip()
        except GenerationError as e:
            log_error("Nutritional analysis", e)
            return ANALYSIS_UNAVAILABLE

    async def suggest_meals(self, ingredients: list[str], meal_type: MealType = MealType.DINNER) -> str:
        """Plain-text meal ideas from available ingredients. Best effort."""
        prompt = build_suggestion_prompt(ingredients, meal_type)
        params = self._params(self._settings.TEMPERATURE_PLAN, self._settings.MAX_TOKENS_MEAL, ANALYSIS_SYSTEM_PROMPT)
        try:
            return (await self._invoke(prompt, params, self._settings.MEAL_CALL_TIMEOUT)).strip()
        except GenerationError as e:
            log_error("Meal suggestions", e)
            return SUGGESTIONS_UNAVAILABLE


def _same_text(a: str, b: str) -> bool:
    return " ".join(a.split()).casefold() == " ".join(b.split()).casefold()


def check_replacement(original: Meal, replacement: MealContent, delta: int) -> None:
    """
    Raises:
        PlanValidationError: If calories drift more than delta or the content is not new
    """
    drift = abs(replacement.calories - original.calories)
    if drift > delta:
        raise PlanValidationError(
            f"Replacement has {replacement.calories} kcal, outside {original.calories} +/- {delta}"
        )
    if _same_text(replacement.name, original.name) or _same_text(replacement.description, original.description):
        raise PlanValidationError("Replacement meal repeats the original name or description")
