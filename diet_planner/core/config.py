"""
Configuration and constants for the Diet Planner generation service.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables."""

    # OpenAI Configuration
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o")
    # Cheaper model tried once when the primary one fails outright
    OPENAI_FALLBACK_MODEL: str = os.getenv("OPENAI_FALLBACK_MODEL", "gpt-4o-mini")
    STREAM_COMPLETIONS: bool = _env_bool("STREAM_COMPLETIONS", True)

    # Server Configuration
    PORT: int = int(os.getenv("PORT", 10000))
    HOST: str = "0.0.0.0"

    # AI Temperature Settings
    TEMPERATURE_PLAN: float = 0.7        # Weekly plans: balanced creativity
    TEMPERATURE_REGENERATE: float = 0.8  # Replacement meals: lean towards variety
    TEMPERATURE_ANALYSIS: float = 0.5    # Free-text analysis

    # Output length per request scope
    MAX_TOKENS_PLAN: int = 4000
    MAX_TOKENS_DAY: int = 2500
    MAX_TOKENS_MEAL: int = 1000

    # Time budgets (seconds)
    PLAN_CALL_TIMEOUT: float = float(os.getenv("PLAN_CALL_TIMEOUT", 240))
    DAY_CALL_TIMEOUT: float = float(os.getenv("DAY_CALL_TIMEOUT", 60))
    MEAL_CALL_TIMEOUT: float = float(os.getenv("MEAL_CALL_TIMEOUT", 30))
    PLAN_TIME_BUDGET: float = float(os.getenv("PLAN_TIME_BUDGET", 600))

    # Pipeline behaviour
    GENERATION_STRATEGY: str = os.getenv("GENERATION_STRATEGY", "single_shot")
    INTER_CALL_DELAY: float = float(os.getenv("INTER_CALL_DELAY", 1.0))
    REGENERATION_CALORIE_DELTA: int = int(os.getenv("REGENERATION_CALORIE_DELTA", 50))
    REGENERATION_ATTEMPTS: int = int(os.getenv("REGENERATION_ATTEMPTS", 2))

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration on startup."""
        missing = []

        if not cls.OPENAI_API_KEY:
            missing.append("OPENAI_API_KEY")

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )


settings = Settings()
