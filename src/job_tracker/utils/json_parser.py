"""Utility to extract a JSON object from LLM responses."""

from __future__ import annotations

import json
import logging
import re

logger = logging.getLogger(__name__)

# A closing quote followed by a comma: the end of a complete `"key": "value",` pair.
_FIELD_TERMINATOR = re.compile(r'"\s*,')


class AnalysisParseError(ValueError):
    """Raised when no JSON object can be located or repaired in a completion."""


def extract_json_object(text: str) -> dict:
    """Extract a JSON object from an LLM completion.

    Tries in order:
    1. Strict parse of first '{' to last '}' (tolerates prose around the payload)
    2. Repair a truncated payload: cut after the last complete string field
       and close the object

    Raises AnalysisParseError when neither succeeds.
    """
    candidate = _locate_candidate(text)
    if candidate is None:
        raise AnalysisParseError("No JSON found in response")

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        data = _repair_truncated(candidate)
        if data is None:
            raise AnalysisParseError(f"Could not parse JSON from response: {candidate[:200]}...") from None
        logger.warning("Recovered truncated JSON response (%d chars)", len(candidate))

    return data


def _locate_candidate(text: str) -> str | None:
    """Return the span from the first '{' to the last '}'.

    A completion cut off before its first closing brace has no '}' at all;
    the candidate then runs to the end of the text so repair can close it.
    """
    if not text:
        return None
    start = text.find("{")
    if start == -1:
        return None
    end = text.rfind("}")
    if end > start:
        return text[start : end + 1]
    return text[start:]


def _repair_truncated(candidate: str) -> dict | None:
    """Truncate after the last `",` and append a closing brace."""
    last = None
    for last in _FIELD_TERMINATOR.finditer(candidate):
        pass
    if last is None:
        return None

    repaired = candidate[: last.start() + 1] + "}"
    try:
        return json.loads(repaired)
    except json.JSONDecodeError:
        return None
