# backend/esg_ddq/core/llm/json_extraction.py
"""Salvage a JSON object from free-form LLM text.

This is narrow and kept apart from schema validation
(see services.validator):

1. strip ```json / ``` fences
2. trim whitespace
3. keep the greedy first-'{' to last-'}' span if there is one
4. json.loads
5. on failure raise MalformedJSONError with a preview of the raw response

Known limitation: the greedy span assumes exactly one object is embedded. Two
separate objects, or stray braces in trailing prose, produce an unparseable
span and surface as MalformedJSONError.
"""
import json
import re
from typing import Any, Dict

from esg_ddq.exceptions import EmptyResponseError, MalformedJSONError
from esg_ddq.utils.logging import logger

PREVIEW_CHARS = 500

_FENCE_JSON = re.compile(r"```json\n?")
_FENCE = re.compile(r"```\n?")
_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences. Identity on text without fences."""
    if "```" not in text:
        return text
    return _FENCE.sub("", _FENCE_JSON.sub("", text))


def extract_object_span(text: str) -> str:
    """Return the first-'{'-to-last-'}' span, or the text unchanged if there is none."""
    match = _OBJECT_SPAN.search(text)
    return match.group(0) if match else text


def response_preview(raw: str, limit: int = PREVIEW_CHARS) -> str:
    return raw[:limit]


def parse_json_response(raw: str) -> Dict[str, Any]:
    """Parse the single JSON object embedded in an LLM reply.

    Raises:
        EmptyResponseError: raw text is blank
        MalformedJSONError: no parseable object after salvage
    """
    if raw is None or not raw.strip():
        raise EmptyResponseError("LLM returned empty response")

    cleaned = extract_object_span(strip_code_fences(raw).strip())

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(
            f"JSON decode error at position {e.pos}: {e.msg}",
            extra={
                "response_length": len(raw),
                "cleaned_length": len(cleaned),
                "context_around_error": cleaned[max(0, e.pos - 100):e.pos + 100],
            }
        )
        raise MalformedJSONError(
            f"Invalid JSON response from LLM. Response preview: {response_preview(raw, 200)}...",
            response_preview=response_preview(raw),
        ) from e

    if not isinstance(parsed, dict):
        raise MalformedJSONError(
            f"Expected a JSON object from LLM, got {type(parsed).__name__}. "
            f"Response preview: {response_preview(raw, 200)}...",
            response_preview=response_preview(raw),
        )

    if cleaned != raw.strip():
        logger.debug(
            "Salvaged JSON object from wrapped response",
            extra={"response_length": len(raw), "cleaned_length": len(cleaned)}
        )

    return parsed


__all__ = ["strip_code_fences", "extract_object_span", "parse_json_response", "response_preview"]
