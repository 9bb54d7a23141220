"""
Rendering of normalized documents into Confluence storage-format XHTML.
"""

from html import escape
from typing import Iterable

from src.core.constants import DOC_LABELS, RAID_CATEGORIES
from src.domain.automation import AutomationResult
from src.domain.document import RaidEntry, RaidLog, StructuredDocument


def _paragraphs(body: str) -> str:
    """Blank-line separated paragraphs; runs of ``- `` lines become a list."""
    parts: list[str] = []
    bullets: list[str] = []
    lines: list[str] = []

    def flush_lines() -> None:
        if lines:
            parts.append("<p>" + "<br />".join(escape(line) for line in lines) + "</p>")
            lines.clear()

    def flush_bullets() -> None:
        if bullets:
            parts.append(_list(bullets))
            bullets.clear()

    for raw in (body or "").splitlines():
        line = raw.strip()
        if not line:
            flush_lines()
            flush_bullets()
        elif line[:2] in ("- ", "* ", "• "):
            flush_lines()
            bullets.append(line[2:].strip())
        else:
            flush_bullets()
            lines.append(line)
    flush_lines()
    flush_bullets()
    return "".join(parts)


def _list(items: Iterable[str]) -> str:
    return "<ul>" + "".join(f"<li>{escape(item)}</li>" for item in items) + "</ul>"


def render_document(doc: StructuredDocument) -> str:
    return "".join(f"<h2>{escape(s.h)}</h2>{_paragraphs(s.body)}" for s in doc.sections)


def _raid_table(entries: list[RaidEntry]) -> str:
    if not entries:
        return "<p><em>None recorded.</em></p>"
    header = "<tr><th>#</th><th>Item</th><th>Owner</th><th>Status</th><th>Mitigation</th></tr>"
    rows = "".join(
        "<tr>"
        f"<td>{index}</td>"
        f"<td>{escape(entry.item)}</td>"
        f"<td>{escape(entry.owner)}</td>"
        f"<td>{escape(entry.status)}</td>"
        f"<td>{escape(entry.mitigation or '')}</td>"
        "</tr>"
        for index, entry in enumerate(entries, start=1)
    )
    return f"<table><tbody>{header}{rows}</tbody></table>"


def render_raid(raid: RaidLog) -> str:
    return "".join(
        f"<h2>{category.capitalize()}</h2>{_raid_table(getattr(raid, category))}"
        for category in RAID_CATEGORIES
    )


def render_parent_page(result: AutomationResult, run_id: str) -> str:
    """Landing page of a doc pack: project facts, child pages, summary and notes."""
    meta = result.meta
    facts = [
        ("Project", meta.project_name),
        ("Jira project", meta.jira_project_key or "-"),
        ("Confluence space", meta.confluence_space_key or "-"),
        ("Run", run_id),
    ]
    parts = [
        "<table><tbody>"
        + "".join(f"<tr><th>{label}</th><td>{escape(value)}</td></tr>" for label, value in facts)
        + "</tbody></table>",
        "<h2>Contents</h2>",
        _list(DOC_LABELS.values()),
        # Confluence macro listing the child pages
        '<ac:structured-macro ac:name="children" />',
    ]

    summary = result.docs.backlog_summary
    if isinstance(summary, str) and summary.strip():
        parts.append(f"<h2>Backlog Summary</h2>{_paragraphs(summary)}")
    elif summary:
        parts.append(f"<h2>Backlog Summary</h2><p>{escape(str(summary))}</p>")

    backlog = result.backlog
    if backlog.epics:
        parts.append(
            f"<h2>Backlog</h2><p>{len(backlog.epics)} epics, {len(backlog.stories)} stories.</p>"
        )
        parts.append(_list(epic.name for epic in backlog.epics))

    if result.notes.assumptions:
        parts.append("<h2>Assumptions</h2>" + _list(result.notes.assumptions))
    if result.notes.open_questions:
        parts.append("<h2>Open Questions</h2>" + _list(result.notes.open_questions))
    return "".join(parts)
