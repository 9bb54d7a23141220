"""
Sprint calendar and story-to-sprint assignment for the backlog export.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional, Sequence


@dataclass(frozen=True)
class Sprint:
    number: int
    start: date
    end: date

    @property
    def name(self) -> str:
        return f"Sprint {self.number} ({self.start.isoformat()} – {self.end.isoformat()})"


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def _parse_weeks(value: Any) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


def plan_sprints(length_weeks: Any, start: Any, end: Any) -> list[Sprint]:
    """
    Consecutive sprints of ``length_weeks`` covering ``start``..``end``.

    The last sprint is cut at ``end``. Invalid or incomplete input yields no
    sprints.
    """
    weeks = _parse_weeks(length_weeks)
    start_date, end_date = _parse_date(start), _parse_date(end)
    if weeks <= 0 or start_date is None or end_date is None or end_date < start_date:
        return []

    sprint_days = weeks * 7
    total_days = (end_date - start_date).days + 1
    count = max(1, math.ceil(total_days / sprint_days))

    sprints = []
    for index in range(count):
        sprint_start = start_date + timedelta(days=index * sprint_days)
        sprint_end = min(sprint_start + timedelta(days=sprint_days - 1), end_date)
        sprints.append(Sprint(number=index + 1, start=sprint_start, end=sprint_end))
    return sprints


def assign_sprints(points: Sequence[Optional[int]], sprints: Sequence[Sprint]) -> list[str]:
    """
    Sprint name per story, in backlog order.

    With estimates, a sprint is closed once its points reach the ideal load
    (total / sprint count); the last sprint takes the remainder. Without
    any estimates, stories are spread evenly by count.
    """
    if not sprints:
        return ["" for _ in points]
    if not points:
        return []

    values = [p or 0 for p in points]
    total = sum(values)
    names: list[str] = []

    if total > 0:
        ideal = total / len(sprints)
        current, load = 0, 0
        for value in values:
            names.append(sprints[current].name)
            load += value
            if current < len(sprints) - 1 and load >= ideal:
                current += 1
                load = 0
        return names

    per_sprint = math.ceil(len(values) / len(sprints))
    for index in range(len(values)):
        names.append(sprints[min(len(sprints) - 1, index // per_sprint)].name)
    return names
