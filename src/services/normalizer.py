"""
Normalization of model output into valid documents, RAID logs and backlogs.

Model output is untrusted: any key can be missing, of the wrong type or
empty. Every function here is pure and idempotent, so its result can be fed
back in unchanged.
"""

import secrets
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from pydantic import BaseModel

from src.core.constants import (
    ALLOWED_PRIORITIES,
    ALLOWED_STORY_POINTS,
    AUTO_GENERATED_NOTE,
    DEFAULT_PRIORITY,
    DEFAULT_STORY_POINTS,
    EMPTY_SECTION_BODY,
    NO_REQUIREMENTS_TEXT,
    OVERVIEW_EXCERPT_CHARS,
    RAID_CATEGORIES,
    UNTITLED_DOCUMENT,
)
from src.core.text import as_text, ensure_list
from src.domain.automation import AutomationNotes
from src.domain.backlog import Backlog, BacklogEpic, BacklogStory
from src.domain.document import RaidEntry, RaidLog, Section, StructuredDocument


def _as_mapping(value: Any) -> dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    return value if isinstance(value, dict) else {}


def _first_text(data: dict[str, Any], *keys: str) -> str:
    for key in keys:
        text = as_text(data.get(key))
        if text:
            return text
    return ""


def _body_text(value: Any) -> str:
    # Models sometimes return bullet lists instead of prose
    if isinstance(value, list):
        lines = [f"- {as_text(item)}" for item in value if as_text(item)]
        return "\n".join(lines)
    return as_text(value)


def _string_list(value: Any) -> list[str]:
    items = []
    for item in ensure_list(value):
        if isinstance(item, str):
            text = item.strip()
        elif isinstance(item, dict):
            text = _first_text(item, "text", "item", "question", "assumption", "description")
        else:
            text = str(item).strip() if item is not None else ""
        if text:
            items.append(text)
    return items


# =============================================================================
# Structured documents
# =============================================================================


def placeholder_sections(source_text: str) -> list[Section]:
    """The two sections used when a document came back empty."""
    excerpt = (source_text or "").strip()[:OVERVIEW_EXCERPT_CHARS].strip()
    return [
        Section(h="Overview", body=excerpt or NO_REQUIREMENTS_TEXT),
        Section(h="Notes", body=AUTO_GENERATED_NOTE),
    ]


def ensure_doc_has_content(
    doc: Any,
    fallback_title: str,
    source_text: str = "",
) -> StructuredDocument:
    """
    Guarantee a document with a title and at least one non-empty section.

    Sections are type-coerced, never dropped. When none of them carries a
    heading or body, the Overview/Notes placeholders are used instead.
    """
    data = _as_mapping(doc)
    title = as_text(data.get("title")) or as_text(fallback_title) or UNTITLED_DOCUMENT

    raw_sections = data.get("sections")
    if not isinstance(raw_sections, list):
        raw_sections = []

    coerced: list[tuple[str, str]] = []
    for raw in raw_sections:
        if isinstance(raw, str):
            coerced.append(("", raw.strip()))
            continue
        section = _as_mapping(raw)
        heading = _first_text(section, "h", "heading", "title")
        body = _body_text(section.get("body"))
        if not body:
            body = _body_text(section.get("content"))
        coerced.append((heading, body))

    if not any(heading or body for heading, body in coerced):
        return StructuredDocument(title=title, sections=placeholder_sections(source_text))

    sections = [
        Section(h=heading or f"Section {index}", body=body or EMPTY_SECTION_BODY)
        for index, (heading, body) in enumerate(coerced, start=1)
    ]
    return StructuredDocument(title=title, sections=sections)


def unique_title(base: str) -> str:
    """
    Append a URL-safe UTC timestamp and a 4-hex-digit random suffix.

    Confluence titles are unique per space; repeated runs for the same
    project would otherwise collide.
    """
    now = datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    stamp = stamp.replace(":", "-").replace(".", "-")
    return f"{base} – {stamp}-{secrets.token_hex(2)}"


# =============================================================================
# RAID
# =============================================================================


def _raid_entry(value: Any) -> Optional[RaidEntry]:
    if isinstance(value, str):
        return RaidEntry(item=value.strip()) if value.strip() else None
    data = _as_mapping(value)
    item = _first_text(data, "item", "description", "title", "name", "text")
    if not item:
        return None
    return RaidEntry(
        item=item,
        owner=as_text(data.get("owner")),
        status=as_text(data.get("status")),
        mitigation=as_text(data.get("mitigation")) or None,
    )


def normalize_raid(raid: Any, fallback_title: str) -> RaidLog:
    """Coerce a RAID log; the four category lists are always present."""
    data = _as_mapping(raid)
    categories: dict[str, list[RaidEntry]] = {}
    for category in RAID_CATEGORIES:
        entries = (_raid_entry(value) for value in ensure_list(data.get(category)))
        categories[category] = [entry for entry in entries if entry is not None]
    title = as_text(data.get("title")) or as_text(fallback_title) or UNTITLED_DOCUMENT
    return RaidLog(title=title, **categories)


# =============================================================================
# Backlog
# =============================================================================


def snap_story_points(value: Any, allowed: Sequence[int] = ALLOWED_STORY_POINTS) -> int:
    """Nearest allowed story-point value; non-numeric input gets the default."""
    try:
        points = float(value)
    except (TypeError, ValueError):
        return DEFAULT_STORY_POINTS
    if points != points or points <= 0:  # NaN or non-positive
        return DEFAULT_STORY_POINTS
    return min(allowed, key=lambda candidate: (abs(candidate - points), candidate))


def normalize_priority(value: Any, allowed: Sequence[str] = ALLOWED_PRIORITIES) -> str:
    lookup = {p.upper(): p for p in allowed}
    if isinstance(value, int) and not isinstance(value, bool):
        text = f"P{value}"
    else:
        text = as_text(value)
    if text.upper() in lookup:
        return lookup[text.upper()]
    if DEFAULT_PRIORITY in allowed:
        return DEFAULT_PRIORITY
    return list(allowed)[len(allowed) // 2] if allowed else DEFAULT_PRIORITY


def normalize_backlog(backlog: Any, priorities: Sequence[str] = ALLOWED_PRIORITIES) -> Backlog:
    """
    Coerce epics and stories.

    Nameless epics and stories without any text are skipped; stories without
    an epic are attached to the first epic.
    """
    data = _as_mapping(backlog)

    epics: list[BacklogEpic] = []
    for raw in ensure_list(data.get("epics")):
        if isinstance(raw, str):
            if raw.strip():
                epics.append(BacklogEpic(name=raw.strip()))
            continue
        epic = _as_mapping(raw)
        name = _first_text(epic, "name", "title", "epic", "summary")
        if name:
            epics.append(BacklogEpic(name=name, description=_body_text(epic.get("description"))))

    default_epic = epics[0].name if epics else ""
    stories: list[BacklogStory] = []
    for raw in ensure_list(data.get("stories")):
        story_data = {"story": raw} if isinstance(raw, str) else _as_mapping(raw)
        story_text = _first_text(story_data, "story", "description", "userStory")
        summary = _first_text(story_data, "summary", "title", "name") or story_text[:80].strip()
        if not summary:
            continue
        stories.append(
            BacklogStory(
                epic_name=_first_text(story_data, "epicName", "epic_name", "epic") or default_epic,
                summary=summary,
                story=story_text,
                acceptance_criteria=_string_list(
                    story_data.get("acceptanceCriteria", story_data.get("acceptance_criteria"))
                ),
                priority=normalize_priority(story_data.get("priority"), priorities),
                story_points=snap_story_points(
                    story_data.get("storyPoints", story_data.get("story_points"))
                ),
            )
        )

    return Backlog(epics=epics, stories=stories)


def normalize_notes(notes: Any) -> AutomationNotes:
    data = _as_mapping(notes)
    return AutomationNotes(
        assumptions=_string_list(data.get("assumptions")),
        open_questions=_string_list(data.get("openQuestions", data.get("open_questions"))),
    )

