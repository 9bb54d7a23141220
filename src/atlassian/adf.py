"""
Builders for Atlassian Document Format, the rich-text JSON Jira v3 expects
in description fields.

ADF rejects text nodes with empty text, so every builder skips blanks.
"""

from typing import Any, Iterable, Optional

Node = dict[str, Any]


def text(value: str, href: Optional[str] = None, strong: bool = False) -> Optional[Node]:
    if not value:
        return None
    node: Node = {"type": "text", "text": value}
    marks = []
    if strong:
        marks.append({"type": "strong"})
    if href:
        marks.append({"type": "link", "attrs": {"href": href}})
    if marks:
        node["marks"] = marks
    return node


def paragraph(*nodes: Optional[Node]) -> Node:
    return {"type": "paragraph", "content": [n for n in nodes if n]}


def heading(value: str, level: int = 3) -> Node:
    return {"type": "heading", "attrs": {"level": level}, "content": [text(value)]}


def bullet_list(items: Iterable[str]) -> Optional[Node]:
    entries = [
        {"type": "listItem", "content": [paragraph(text(item))]}
        for item in items
        if item and item.strip()
    ]
    if not entries:
        return None
    return {"type": "bulletList", "content": entries}


def document(*blocks: Optional[Node]) -> Node:
    """Top-level ``doc`` node; ``None`` blocks are dropped."""
    return {"type": "doc", "version": 1, "content": [b for b in blocks if b]}


def plain_document(value: str) -> Node:
    """One paragraph per non-empty line."""
    lines = [line.strip() for line in (value or "").splitlines() if line.strip()]
    return document(*(paragraph(text(line)) for line in lines))


def story_description(
    story: str,
    acceptance_criteria: Iterable[str],
    priority: str,
    story_points: int,
    parent_url: Optional[str] = None,
) -> Node:
    """Story body, acceptance criteria, priority/points and a link to the doc pack."""
    blocks: list[Optional[Node]] = [
        paragraph(text(line.strip())) for line in (story or "").splitlines() if line.strip()
    ]
    criteria = bullet_list(acceptance_criteria)
    if criteria:
        blocks.append(heading("Acceptance Criteria"))
        blocks.append(criteria)
    blocks.append(
        paragraph(
            text("Priority: ", strong=True),
            text(priority),
            text("  Story points: ", strong=True),
            text(str(story_points)),
        )
    )
    if parent_url:
        blocks.append(paragraph(text("Documentation: "), text(parent_url, href=parent_url)))
    return document(*blocks)
