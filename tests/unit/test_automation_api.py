"""
Unit tests for the automation and drafting endpoints.
"""

import pytest
from httpx import AsyncClient

from src.api.deps import get_automation_service, get_drafting_service
from src.core.config import OpenAISettings
from src.core.constants import FILE_CONTENT_MARKER
from src.llm.client import LLMClient
from src.main import app
from src.services.automation_service import AutomationService
from src.services.drafting_service import DraftingService


@pytest.fixture
def automation_service(llm_client, client_factory, atlassian_env) -> AutomationService:
    service = AutomationService(llm_client, client_factory, env=atlassian_env)
    app.dependency_overrides[get_automation_service] = lambda: service
    return service


@pytest.fixture
def drafting_service(llm_client) -> DraftingService:
    service = DraftingService(llm_client)
    app.dependency_overrides[get_drafting_service] = lambda: service
    return service


class TestFullyAutomate:
    @pytest.mark.asyncio
    async def test_preview_json(
        self, async_client: AsyncClient, automation_service, respond_with, payload, atlassian_stub
    ) -> None:
        respond_with(payload())

        response = await async_client.post(
            "/fully-automate",
            json={"projectName": "Login Portal", "requirementsText": "Build a login page"},
        )

        assert response.status_code == 200
        data = response.json()
        assert len(data["output"]["docs"]["brd"]["sections"]) >= 4
        assert len(data["output"]["docs"]["raid"]["risks"]) >= 2
        assert data["runId"].startswith("req_")
        assert "published" not in data
        assert data["output"]["docs"]["brd"]["title"] == "BRD – Login Portal"
        assert data["output"]["backlog"]["stories"][0]["storyPoints"] == 5
        assert data["output"]["backlog"]["stories"][0]["epicName"] == "Epic 1"
        assert set(data["output"]["docs"]["raid"]) >= {"risks", "assumptions", "issues", "dependencies"}
        assert atlassian_stub.requests == []

    @pytest.mark.asyncio
    async def test_multipart_with_file(
        self, async_client: AsyncClient, automation_service, respond_with, payload, openai_stub
    ) -> None:
        respond_with(payload())

        response = await async_client.post(
            "/fully-automate",
            data={"projectName": "Login Portal", "requirementsText": "Pasted", "publish": "false"},
            files={"requirementsFile": ("notes.txt", b"Uploaded requirements", "text/plain")},
        )

        assert response.status_code == 200
        prompt = openai_stub.chat.completions.create.await_args.kwargs["messages"][1]["content"]
        assert f"Pasted\n\n{FILE_CONTENT_MARKER}\nUploaded requirements" in prompt

    @pytest.mark.asyncio
    async def test_publish_over_http(
        self, async_client: AsyncClient, automation_service, respond_with, payload, atlassian_stub
    ) -> None:
        respond_with(payload(epics=2, stories=3))

        response = await async_client.post(
            "/fully-automate",
            data={
                "projectName": "Login Portal",
                "requirementsText": "Users sign in.",
                "jiraProjectKey": "PM",
                "confluenceSpaceKey": "TEST",
                "labels": "pm, docs",
                "publish": "true",
            },
        )

        assert response.status_code == 200
        published = response.json()["published"]
        assert published["confluence"]["parent"].endswith("/pages/1001")
        assert published["jira"] == {"epics": ["PM-1", "PM-2"], "stories": ["PM-3", "PM-4", "PM-5"]}
        assert atlassian_stub.events == ["page"] * 5 + ["issue"] * 5

    @pytest.mark.asyncio
    async def test_publish_without_keys(
        self, async_client: AsyncClient, automation_service, openai_stub
    ) -> None:
        response = await async_client.post(
            "/fully-automate",
            data={"requirementsText": "Users sign in.", "publish": "true", "jiraProjectKey": "PM"},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]["missing"] == ["confluenceSpaceKey"]
        openai_stub.chat.completions.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_space_is_400(
        self, async_client: AsyncClient, automation_service, respond_with, payload, atlassian_stub
    ) -> None:
        atlassian_stub.space_exists = False
        respond_with(payload())

        response = await async_client.post(
            "/fully-automate",
            json={
                "requirementsText": "Users sign in.",
                "jiraProjectKey": "PM",
                "confluenceSpaceKey": "MISSING",
                "publish": True,
            },
        )

        assert response.status_code == 400
        assert "MISSING" in response.json()["error"]
        assert atlassian_stub.events == []

    @pytest.mark.asyncio
    async def test_malformed_completion_is_200(
        self, async_client: AsyncClient, automation_service, respond_with
    ) -> None:
        respond_with("This is not JSON")

        response = await async_client.post("/fully-automate", json={"requirementsText": "Users sign in."})

        assert response.status_code == 200
        output = response.json()["output"]
        assert output["error"] == "This is not JSON"
        assert output["docs"]["brd"]["sections"][0]["h"] == "Overview"

    @pytest.mark.asyncio
    async def test_body_must_be_object(self, async_client: AsyncClient, automation_service) -> None:
        response = await async_client.post("/fully-automate", json=["not", "an", "object"])
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_ai_not_configured(self, async_client: AsyncClient, client_factory) -> None:
        service = AutomationService(LLMClient(OpenAISettings(api_key="")), client_factory, env={})
        app.dependency_overrides[get_automation_service] = lambda: service

        response = await async_client.post("/fully-automate", json={"requirementsText": "Users sign in."})

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == "CONFIGURATION_ERROR"
        assert "OPENAI_API_KEY" in body["error"]


class TestAiDraft:
    @pytest.mark.asyncio
    async def test_draft_fields(
        self, async_client: AsyncClient, drafting_service, respond_with, openai_stub
    ) -> None:
        respond_with({"background": "Legacy login is slow.", "objectives": ["Faster", "Safer"], "extra": "x"})

        response = await async_client.post(
            "/ai-draft",
            json={"requirementsText": "make login faster", "projectName": "Portal", "docType": "FRS"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "parsed": {"background": "Legacy login is slow.", "objectives": "- Faster\n- Safer"}
        }
        prompt = openai_stub.chat.completions.create.await_args.kwargs["messages"][1]["content"]
        assert "frs" in prompt

    @pytest.mark.asyncio
    async def test_prompt_alias(self, async_client: AsyncClient, drafting_service, respond_with) -> None:
        respond_with({"cleanedRequirements": "Login must be fast."})

        response = await async_client.post("/ai-draft", json={"prompt": "login fast pls"})

        assert response.json()["parsed"] == {"cleanedRequirements": "Login must be fast."}

    @pytest.mark.asyncio
    async def test_empty_requirements(self, async_client: AsyncClient, drafting_service) -> None:
        response = await async_client.post("/ai-draft", json={"requirementsText": "  "})

        assert response.status_code == 400
        assert response.json()["error"] == "Please provide some requirements text for AI."

    @pytest.mark.asyncio
    async def test_unparseable_answer(self, async_client: AsyncClient, drafting_service, respond_with) -> None:
        respond_with("no json")

        response = await async_client.post("/ai-draft", json={"requirementsText": "login"})

        assert response.status_code == 500
        assert response.json()["code"] == "LLM_PARSE_ERROR"
