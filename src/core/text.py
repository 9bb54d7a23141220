"""
Small text helpers shared by services.
"""

import html
import re
from typing import Any


def slugify(value: str, fallback: str = "item") -> str:
    """Lower-case, hyphen-separated, file-name safe version of ``value``."""
    s = (value or "").lower()
    s = re.sub(r"[^a-z0-9]+", "-", s)
    s = re.sub(r"(^-|-$)", "", s)
    return s or fallback


def strip_code_fences(text: str) -> str:
    """
    Remove a single leading/trailing fenced block like:
      ```json ... ```
      ``` ... ```
    without destroying inline backticks inside the content.
    """
    if not text:
        return ""
    t = text.strip()
    m = re.match(r"^```(?:[a-zA-Z]+)?\s*\n?", t)
    if m:
        t = t[m.end():]
        t = re.sub(r"\n?```[\s\t]*$", "", t)
    return t.strip()


def html_to_text(markup: str) -> str:
    """Drop tags and collapse whitespace."""
    text = re.sub(r"<(br|/p|/div|/li|/h[1-6])\s*/?>", "\n", markup or "", flags=re.IGNORECASE)
    text = re.sub(r"<[^>]+>", " ", text)
    text = html.unescape(text)
    text = re.sub(r"[ \t\r\f\v]+", " ", text)
    text = re.sub(r"\s*\n\s*", "\n", text)
    return text.strip()


def as_text(value: Any) -> str:
    """Trimmed string for strings, empty string for anything else."""
    return value.strip() if isinstance(value, str) else ""


def ensure_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (tuple, set)):
        return list(value)
    return [value]


def split_csv(value: str) -> list[str]:
    return [part.strip() for part in (value or "").split(",") if part.strip()]
