"""
FastAPI dependencies shared by the routers.
"""
from functools import lru_cache

from diet_planner.core.config import settings
from diet_planner.services.generator import PlanGenerator
from diet_planner.services.llm_client import OpenAIBackend


@lru_cache
def get_generator() -> PlanGenerator:
    """One generator (and OpenAI client) per process."""
    return PlanGenerator(OpenAIBackend.from_settings(settings), settings)
