"""
Unit tests for recovering JSON objects from completion text.
"""

import pytest

from src.core.exceptions import LlmParseError
from src.llm.parsing import parse_completion_json


def test_plain_object() -> None:
    assert parse_completion_json('{"a": 1}') == {"a": 1}


def test_fenced_object() -> None:
    text = '```json\n{"docs": {"brd": {"title": "BRD"}}}\n```'
    assert parse_completion_json(text) == {"docs": {"brd": {"title": "BRD"}}}


def test_object_surrounded_by_prose() -> None:
    text = 'Here is the result:\n{"ok": true, "items": [1, 2]}\nLet me know if you need more.'
    assert parse_completion_json(text) == {"ok": True, "items": [1, 2]}


@pytest.mark.parametrize("text", ["", "   ", "no json here", "{broken", "[1, 2, 3]", '"string"'])
def test_unrecoverable(text: str) -> None:
    with pytest.raises(LlmParseError) as exc_info:
        parse_completion_json(text)
    assert exc_info.value.code == "LLM_PARSE_ERROR"


def test_error_keeps_raw_text() -> None:
    with pytest.raises(LlmParseError) as exc_info:
        parse_completion_json("Sorry, I cannot help with that.")
    assert exc_info.value.raw_text == "Sorry, I cannot help with that."
