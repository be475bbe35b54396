"""
Text generation backends.

The pipeline only needs "prompt in, raw text out"; ModelBackend is that
seam. OpenAIBackend is the production implementation, tests pass their own.
"""
import logging
from dataclasses import dataclass, replace
from typing import Optional, Protocol

import httpx
import openai
from openai import AsyncOpenAI
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from diet_planner.core.config import Settings
from diet_planner.core.logger import logger, log_ai_call
from diet_planner.services.errors import (
    ConfigurationError,
    EmptyCompletion,
    GenerationTimeout,
    ServiceUnavailable,
)
from diet_planner.services.prompts import SYSTEM_PROMPT


@dataclass(frozen=True)
class GenerationParams:
    """Per-call generation parameters."""

    model: str
    temperature: float = 0.7
    max_tokens: int = 2500
    stream: bool = True
    system_prompt: str = SYSTEM_PROMPT

    def with_model(self, model: str) -> "GenerationParams":
        return replace(self, model=model)


class ModelBackend(Protocol):
    async def complete(self, prompt: str, params: GenerationParams) -> str:
        """
        Return the raw generated text for a prompt.

        Raises:
            ServiceUnavailable: Backend failure or empty content
            GenerationTimeout: Backend-side timeout
        """
        ...


# Tenacity retry policy: 3 total attempts, exponential backoff 2s→10s
# Only retries transient errors: rate limits and connection failures
_openai_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((openai.RateLimitError, openai.APIConnectionError)),
    before_sleep=before_sleep_log(logging.getLogger(__name__), logging.WARNING),
    reraise=True,
)


class OpenAIBackend:
    """ModelBackend on top of the OpenAI chat completions API."""

    def __init__(self, api_key: str, client: Optional[AsyncOpenAI] = None, timeout: float = 240.0):
        if not api_key and client is None:
            raise ConfigurationError("OPENAI_API_KEY is not set")
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            # Hard cap per HTTP request; the pipeline applies its own, usually tighter, budget
            timeout=openai.Timeout(timeout, connect=10.0),
            # Retries are handled by the tenacity policy below
            max_retries=0,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIBackend":
        return cls(api_key=settings.OPENAI_API_KEY, timeout=settings.PLAN_CALL_TIMEOUT)

    async def complete(self, prompt: str, params: GenerationParams) -> str:
        log_ai_call("Chat API", params.model)
        try:
            content = await self._create(prompt, params)
        except openai.APITimeoutError as e:
            raise GenerationTimeout(f"OpenAI request timed out ({params.model})") from e
        except openai.APIError as e:
            raise ServiceUnavailable(f"OpenAI request failed ({params.model}): {type(e).__name__}") from e
        # Raised while reading a stream, outside the SDK's own error mapping
        except httpx.TimeoutException as e:
            raise GenerationTimeout(f"OpenAI stream timed out ({params.model})") from e
        except httpx.HTTPError as e:
            raise ServiceUnavailable(f"OpenAI stream failed ({params.model}): {type(e).__name__}") from e

        if not content or not content.strip():
            raise EmptyCompletion(f"No content received from {params.model}")
        logger.info(f"Chat API call successful ({len(content)} chars)")
        return content

    @_openai_retry
    async def _create(self, prompt: str, params: GenerationParams) -> Optional[str]:
        messages = [
            {"role": "system", "content": params.system_prompt},
            {"role": "user", "content": prompt},
        ]

        if not params.stream:
            response = await self._client.chat.completions.create(
                model=params.model,
                messages=messages,
                temperature=params.temperature,
                max_tokens=params.max_tokens,
            )
            if not response.choices:
                return None
            choice = response.choices[0]
            if choice.finish_reason == "length":
                logger.warning(f"Completion hit max_tokens={params.max_tokens}, output is truncated")
            return choice.message.content

        stream = await self._client.chat.completions.create(
            model=params.model,
            messages=messages,
            temperature=params.temperature,
            max_tokens=params.max_tokens,
            stream=True,
        )
        chunks = []
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                chunks.append(delta)
        return "".join(chunks)
