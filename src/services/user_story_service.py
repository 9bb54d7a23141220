"""
User stories from a BRD and their Excel export with AI story points and a
sprint plan.
"""

import asyncio
import io
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font

from src.core.constants import DEFAULT_EPIC_NAME, ESTIMATE_STORY_POINTS
from src.core.exceptions import DocAutomationError, ValidationError
from src.core.logging import get_logger
from src.core.text import as_text, ensure_list, slugify
from src.domain.backlog import BacklogEpic, UserStory, UserStorySet
from src.llm.client import LLMClient, Message
from src.llm.prompts import ESTIMATE_PROMPTS, USER_STORY_PROMPTS
from src.repositories.file_repo import GeneratedFile, GeneratedFileRepository
from src.services.normalizer import snap_story_points
from src.services.sprint_planner import assign_sprints, plan_sprints

logger = get_logger(__name__)

XLSX_COLUMNS = (
    ("ID", 10),
    ("Sprint", 24),
    ("Epic", 30),
    ("User Story", 80),
    ("Story Points (AI)", 20),
    ("Priority", 12),
    ("Status", 12),
)

_STORY_ID = re.compile(r"^US-(\d+)$", re.IGNORECASE)


def normalize_user_stories(data: Any) -> UserStorySet:
    """
    Coerce ``{epics, userStories}``.

    Nameless epics are dropped; a story without an epic gets the first
    epic's name, or the general epic when there is none.
    """
    data = data if isinstance(data, dict) else {}

    epics = []
    for raw in ensure_list(data.get("epics")):
        if isinstance(raw, dict) and as_text(raw.get("name")):
            epics.append(
                BacklogEpic(name=as_text(raw["name"]), description=as_text(raw.get("description")))
            )

    stories = [coerce_user_story(raw) for raw in ensure_list(data.get("userStories"))]
    default_epic = epics[0].name if epics else DEFAULT_EPIC_NAME
    for story in stories:
        if not story.epic:
            story.epic = default_epic
    return UserStorySet(epics=epics, user_stories=stories)


def coerce_user_story(raw: Any) -> UserStory:
    if isinstance(raw, str):
        return UserStory(epic="", story=raw.strip())
    if isinstance(raw, dict):
        return UserStory(epic=as_text(raw.get("epic")), story=as_text(raw.get("story")))
    return UserStory()


@dataclass(frozen=True)
class BacklogExport:
    stored: GeneratedFile
    content: bytes

    @property
    def filename(self) -> str:
        return self.stored.filename


class UserStoryService:
    """BRD to user stories, and user stories to a planned Excel backlog."""

    def __init__(self, llm: LLMClient, files: GeneratedFileRepository) -> None:
        self.llm = llm
        self.files = files

    async def generate(
        self,
        brd_text: str,
        project_name: Optional[str] = None,
        doc_type: Optional[str] = None,
    ) -> UserStorySet:
        if not brd_text or not brd_text.strip():
            raise ValidationError(
                "No BRD content found. Please upload a valid BRD .docx or provide BRD text.",
                field="brdDocx",
            )

        prompt = USER_STORY_PROMPTS["user"].format(
            project_name=project_name or "[Not Provided]",
            doc_type=(doc_type or "brd").strip().lower(),
            brd_text=brd_text.strip(),
        )
        data = await self.llm.complete_json(
            [Message.system(USER_STORY_PROMPTS["system"].strip()), Message.user(prompt.strip())]
        )
        result = normalize_user_stories(data)
        logger.info(
            "User stories generated",
            epics=len(result.epics),
            stories=len(result.user_stories),
        )
        return result

    async def estimate_points(self, stories: Sequence[UserStory]) -> list[Optional[int]]:
        """
        AI story points per story, best effort.

        Returns ``None`` for every story the model did not estimate, and for
        all of them when AI is unavailable or fails.
        """
        points: list[Optional[int]] = [None] * len(stories)
        if not self.llm.is_configured:
            logger.warning("AI is not configured; story points left blank")
            return points

        scale = ", ".join(str(p) for p in ESTIMATE_STORY_POINTS)
        numbered = "\n".join(f"US-{i}: {story.story}" for i, story in enumerate(stories, start=1))
        messages = [
            Message.system(ESTIMATE_PROMPTS["system"].format(scale=scale).strip()),
            Message.user(ESTIMATE_PROMPTS["user"].format(stories=numbered, scale=scale).strip()),
        ]
        try:
            data = await self.llm.complete_json(messages)
        except DocAutomationError as e:
            logger.warning("Story point estimation failed; continuing without", error=e.message)
            return points

        for estimate in ensure_list(data.get("estimates")):
            if not isinstance(estimate, dict):
                continue
            match = _STORY_ID.match(str(estimate.get("id") or "").strip())
            if not match:
                continue
            index = int(match.group(1)) - 1
            value = estimate.get("points")
            if not 0 <= index < len(points) or isinstance(value, bool):
                continue
            try:
                float(value)
            except (TypeError, ValueError):
                continue
            points[index] = snap_story_points(value, ESTIMATE_STORY_POINTS)
        return points

    @staticmethod
    def build_workbook(
        stories: Sequence[UserStory],
        points: Sequence[Optional[int]],
        sprint_names: Sequence[str],
    ) -> bytes:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "User Stories"

        for column, (header, width) in enumerate(XLSX_COLUMNS, start=1):
            cell = sheet.cell(row=1, column=column, value=header)
            cell.font = Font(bold=True)
            sheet.column_dimensions[cell.column_letter].width = width

        for index, story in enumerate(stories):
            sheet.append(
                [
                    f"US-{index + 1}",
                    sprint_names[index] if index < len(sprint_names) else "",
                    story.epic,
                    story.story,
                    points[index] if points[index] is not None else "",
                    "",
                    "",
                ]
            )

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    async def export_xlsx(
        self,
        raw_stories: Sequence[Any],
        project_name: Optional[str] = None,
        sprint_length_weeks: Any = None,
        sprint_start: Any = None,
        sprint_end: Any = None,
    ) -> BacklogExport:
        """
        Estimate, plan and write the backlog workbook, then store it for e-mailing.

        Raises:
            ValidationError: no stories given
        """
        if not raw_stories:
            raise ValidationError("No user stories provided to generate Excel.", field="userStories")

        stories = [coerce_user_story(raw) for raw in raw_stories]
        points = await self.estimate_points(stories)
        sprints = plan_sprints(sprint_length_weeks, sprint_start, sprint_end)
        sprint_names = assign_sprints(points, sprints)

        content = await asyncio.to_thread(self.build_workbook, stories, points, sprint_names)
        filename = f"{slugify(project_name or '', fallback='user-stories')}-stories.xlsx"
        stored = await self.files.save(filename, content)

        logger.info(
            "Backlog workbook generated",
            file_id=stored.file_id,
            stories=len(stories),
            sprints=len(sprints),
        )
        return BacklogExport(stored=stored, content=content)
