"""
Unit tests for user story generation and the Excel backlog export.
"""

import io
from pathlib import Path

import pytest
from docx import Document
from httpx import AsyncClient
from openpyxl import load_workbook

from src.api.deps import get_user_story_service
from src.core.config import OpenAISettings
from src.core.constants import DEFAULT_EPIC_NAME, GENERATED_FILE_HEADER
from src.core.exceptions import ValidationError
from src.domain.backlog import UserStory
from src.llm.client import LLMClient
from src.main import app
from src.repositories.file_repo import GeneratedFileRepository
from src.services.user_story_service import UserStoryService, normalize_user_stories

STORIES = [
    {"epic": "Login", "story": "As a user I want to sign in"},
    {"epic": "Login", "story": "As a user I want to reset my password"},
    {"epic": "Admin", "story": "As an admin I want to lock accounts"},
]


def docx_bytes(*paragraphs: str) -> bytes:
    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def files(tmp_path: Path) -> GeneratedFileRepository:
    return GeneratedFileRepository(tmp_path / "generated")


@pytest.fixture
def service(llm_client, files) -> UserStoryService:
    return UserStoryService(llm_client, files)


class TestNormalizeUserStories:
    def test_default_epic_is_first_epic(self) -> None:
        result = normalize_user_stories(
            {
                "epics": [{"name": "Login", "description": "Sign-in"}, {"name": ""}],
                "userStories": [{"epic": "", "story": "S1"}, "S2", {"epic": "Other", "story": "S3"}],
            }
        )

        assert [e.name for e in result.epics] == ["Login"]
        assert [(s.epic, s.story) for s in result.user_stories] == [
            ("Login", "S1"),
            ("Login", "S2"),
            ("Other", "S3"),
        ]

    def test_general_epic_without_epics(self) -> None:
        result = normalize_user_stories({"userStories": [{"story": "S1"}]})
        assert result.user_stories[0].epic == DEFAULT_EPIC_NAME

    def test_wire_shape(self) -> None:
        wire = normalize_user_stories({"epics": [{"name": "E"}], "userStories": ["S"]}).to_wire()
        assert wire == {
            "epics": [{"name": "E", "description": ""}],
            "userStories": [{"epic": "E", "story": "S"}],
        }


class TestGenerate:
    @pytest.mark.asyncio
    async def test_generate(self, service, respond_with, openai_stub) -> None:
        respond_with({"epics": [{"name": "Login"}], "userStories": [{"epic": "Login", "story": "S1"}]})

        result = await service.generate("The system shall allow login.", project_name="Portal")

        assert result.user_stories == [UserStory(epic="Login", story="S1")]
        prompt = openai_stub.chat.completions.create.await_args.kwargs["messages"][1]["content"]
        assert "The system shall allow login." in prompt

    @pytest.mark.asyncio
    async def test_empty_brd(self, service, openai_stub) -> None:
        with pytest.raises(ValidationError):
            await service.generate("   ")
        openai_stub.chat.completions.create.assert_not_awaited()


class TestEstimatePoints:
    @pytest.mark.asyncio
    async def test_estimates_are_snapped(self, service, respond_with) -> None:
        respond_with(
            {
                "estimates": [
                    {"id": "US-1", "points": 4},
                    {"id": "US-2", "points": "lots"},
                    {"id": "us-3", "points": 17},
                    {"id": "US-9", "points": 3},
                    "junk",
                ]
            }
        )

        points = await service.estimate_points([UserStory(story=s["story"]) for s in STORIES])

        assert points == [3, None, 20]

    @pytest.mark.asyncio
    async def test_failure_leaves_points_blank(self, service, respond_with) -> None:
        respond_with("cannot estimate")
        assert await service.estimate_points([UserStory(story="S")]) == [None]

    @pytest.mark.asyncio
    async def test_not_configured(self, files) -> None:
        service = UserStoryService(LLMClient(OpenAISettings(api_key="")), files)
        assert await service.estimate_points([UserStory(story="S")] * 2) == [None, None]


class TestExportXlsx:
    @pytest.mark.asyncio
    async def test_workbook(self, service, files, respond_with) -> None:
        respond_with({"estimates": [{"id": "US-1", "points": 5}, {"id": "US-2", "points": 8}]})

        export = await service.export_xlsx(
            STORIES,
            project_name="Login Portal",
            sprint_length_weeks="2",
            sprint_start="2024-01-01",
            sprint_end="2024-01-28",
        )

        assert export.filename == "login-portal-stories.xlsx"
        stored = await files.get(export.stored.file_id)
        assert stored is not None
        assert stored.read_bytes() == export.content

        sheet = load_workbook(io.BytesIO(export.content)).active
        assert sheet.title == "User Stories"
        rows = list(sheet.iter_rows(values_only=True))
        assert rows[0] == ("ID", "Sprint", "Epic", "User Story", "Story Points (AI)", "Priority", "Status")
        assert rows[1][0] == "US-1"
        assert rows[1][1].startswith("Sprint 1 (2024-01-01")
        assert rows[1][2:5] == ("Login", "As a user I want to sign in", 5)
        assert rows[3][4] in (None, "")
        assert sheet["A1"].font.bold

    @pytest.mark.asyncio
    async def test_no_sprint_calendar(self, service, respond_with) -> None:
        respond_with({"estimates": []})

        export = await service.export_xlsx(["Just a story"])

        assert export.filename == "user-stories-stories.xlsx"
        rows = list(load_workbook(io.BytesIO(export.content)).active.iter_rows(values_only=True))
        assert rows[1][1] in (None, "")
        assert rows[1][3] == "Just a story"

    @pytest.mark.asyncio
    async def test_no_stories(self, service) -> None:
        with pytest.raises(ValidationError):
            await service.export_xlsx([])


class TestEndpoints:
    @pytest.fixture(autouse=True)
    def override(self, service: UserStoryService) -> None:
        app.dependency_overrides[get_user_story_service] = lambda: service

    @pytest.mark.asyncio
    async def test_xlsx_download(self, async_client: AsyncClient, respond_with) -> None:
        respond_with({"estimates": [{"id": "US-1", "points": 3}]})

        response = await async_client.post(
            "/user-stories-xlsx",
            json={"projectName": "Portal", "userStories": STORIES[:1]},
        )

        assert response.status_code == 200
        assert response.headers[GENERATED_FILE_HEADER]
        assert 'filename="portal-stories.xlsx"' in response.headers["content-disposition"]
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )

    @pytest.mark.asyncio
    async def test_xlsx_without_stories(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/user-stories-xlsx", json={"userStories": []})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_generate_from_docx(self, async_client: AsyncClient, respond_with, openai_stub) -> None:
        respond_with({"epics": [{"name": "Login"}], "userStories": [{"story": "S1"}]})

        response = await async_client.post(
            "/generate-user-stories",
            data={"projectName": "Portal"},
            files={"brdDocx": ("brd.docx", docx_bytes("Users must log in."), "application/octet-stream")},
        )

        assert response.status_code == 200
        assert response.json()["userStories"] == [{"epic": "Login", "story": "S1"}]
        prompt = openai_stub.chat.completions.create.await_args.kwargs["messages"][1]["content"]
        assert "Users must log in." in prompt

    @pytest.mark.asyncio
    async def test_generate_rejects_other_files(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/generate-user-stories",
            files={"brdDocx": ("brd.pdf", b"%PDF", "application/pdf")},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_generate_rejects_broken_docx(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/generate-user-stories",
            files={"brdDocx": ("brd.docx", b"not a zip", "application/octet-stream")},
        )
        assert response.status_code == 400
        assert response.json()["details"]["field"] == "brdDocx"

    @pytest.mark.asyncio
    async def test_generate_without_text(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/generate-user-stories", data={"brdText": ""})
        assert response.status_code == 400
