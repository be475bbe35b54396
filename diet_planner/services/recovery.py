"""
Recovery of JSON documents from free-text model output.

Models wrap JSON in markdown fences, add prose around it, or get cut off at
the output token limit. extract_json() turns such text into a parseable JSON
string or raises MalformedResponse; nothing else escapes from this module.
"""
import json
import re
from typing import Any

import json_repair

from diet_planner.core.logger import logger
from diet_planner.services.errors import MalformedResponse

_FENCED_BLOCK = re.compile(r"```[a-zA-Z]*\s*(.*?)(?:```|\Z)", re.DOTALL)
_CLOSERS = {"{": "}", "[": "]"}


def _strip_fences(text: str) -> str:
    match = _FENCED_BLOCK.search(text)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return text.replace("```", "").strip()


def _parses(candidate: str) -> bool:
    try:
        json.loads(candidate)
    except (ValueError, RecursionError):
        return False
    return True


def _repair(fragment: str) -> Any:
    """Close off a truncated or slightly broken document with json_repair."""
    try:
        repaired = json_repair.repair_json(fragment, return_objects=True)
    except Exception as e:
        raise MalformedResponse(f"JSON repair failed: {type(e).__name__}") from e
    # json_repair answers "" (or a bare scalar) when there is nothing to salvage
    if not isinstance(repaired, (dict, list)):
        raise MalformedResponse("Model output is not valid JSON, even after repair")
    return repaired


def extract_json(text: str) -> str:
    """
    Extract a parseable JSON document from raw model text.

    Handles markdown fences, surrounding prose and truncated output. Object
    and array roots are treated the same way: the root kind is whichever of
    '{' or '[' appears first.

    Args:
        text: Raw model output

    Returns:
        A string that json.loads() accepts

    Raises:
        MalformedResponse: If no JSON document can be recovered
    """
    if not text or not text.strip():
        raise MalformedResponse("Model output is empty")

    cleaned = _strip_fences(text)

    starts = [i for i in (cleaned.find("{"), cleaned.find("[")) if i != -1]
    if not starts:
        raise MalformedResponse("No JSON structure found in model output")
    start = min(starts)
    closer = _CLOSERS[cleaned[start]]

    end = cleaned.rfind(closer)
    if end > start:
        candidate = cleaned[start:end + 1]
        if _parses(candidate):
            return candidate

    fragment = cleaned[start:]
    logger.warning(f"Model output looks truncated ({len(fragment)} chars), attempting repair")
    repaired = _repair(fragment)
    try:
        return json.dumps(repaired)
    except (ValueError, RecursionError) as e:
        raise MalformedResponse(f"Repaired JSON cannot be serialized: {type(e).__name__}") from e


def recover_json(text: str) -> Any:
    """Extract and parse the JSON document in raw model text."""
    candidate = extract_json(text)
    try:
        return json.loads(candidate)
    except (ValueError, RecursionError) as e:
        raise MalformedResponse(f"Recovered JSON failed to parse: {e}") from e
