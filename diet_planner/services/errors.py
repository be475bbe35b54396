"""
Exceptions raised by the plan generation pipeline.

Everything deriving from GenerationError is an expected failure mode:
full-plan generation recovers from all of them with fallback content.
"""


class GenerationError(Exception):
    """Base class for recoverable generation failures."""


class ServiceUnavailable(GenerationError):
    """The text generation backend failed (network, auth, quota)."""


class EmptyCompletion(ServiceUnavailable):
    """The backend answered but returned no content."""


class GenerationTimeout(GenerationError):
    """A model call exceeded its time budget."""


class MalformedResponse(GenerationError):
    """No recoverable JSON document in the model output."""


class PlanValidationError(GenerationError):
    """Parsed output breaks a schema or plan invariant."""


class MealRegenerationError(Exception):
    """
    Caller-facing failure of single meal regeneration.

    The message is safe to show to end users. Every attempt's
    GenerationError is kept in `errors`, the last one is chained as __cause__.
    """

    def __init__(
        self,
        errors: list[GenerationError] | None = None,
        message: str = "Failed to regenerate meal. Please try again.",
    ):
        super().__init__(message)
        self.errors = list(errors or [])

    def describe(self) -> str:
        """Internal, detailed account of the failed attempts (for logs only)."""
        return "; ".join(f"{type(e).__name__}: {e}" for e in self.errors) or "no attempts made"


class ConfigurationError(ValueError):
    """Required configuration is missing. A programmer error, never recovered."""
