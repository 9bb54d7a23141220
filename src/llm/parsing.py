"""
Recovery of JSON objects from completion text.
"""

import json
from typing import Any

from src.core.exceptions import LlmParseError
from src.core.text import strip_code_fences


def parse_completion_json(text: str) -> dict[str, Any]:
    """
    Parse a completion as a JSON object.

    Tolerates code fences and prose around the object.

    Raises:
        LlmParseError: no JSON object could be recovered
    """
    cleaned = strip_code_fences(text or "")
    if not cleaned:
        raise LlmParseError("Completion was empty.", raw_text=text or "")

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        start, end = cleaned.find("{"), cleaned.rfind("}")
        if start == -1 or end <= start:
            raise LlmParseError("Completion is not valid JSON.", raw_text=text)
        try:
            parsed = json.loads(cleaned[start : end + 1])
        except json.JSONDecodeError as e:
            raise LlmParseError(f"Completion is not valid JSON: {e.msg}", raw_text=text) from e

    if not isinstance(parsed, dict):
        raise LlmParseError("Completion JSON is not an object.", raw_text=text)
    return parsed
