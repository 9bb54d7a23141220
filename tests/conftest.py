"""
Pytest configuration and fixtures.
"""

import json
from types import SimpleNamespace
from typing import Any, AsyncGenerator, Callable, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from src.core.config import OpenAISettings
from src.llm.client import LLMClient
from src.main import app
from src.repositories.cache_repo import FieldCatalogCache
from src.services.automation_service import AtlassianClientFactory

ATLASSIAN_ENV = {
    "ATLASSIAN_DOMAIN": "acme",
    "ATLASSIAN_EMAIL": "pm@example.com",
    "ATLASSIAN_API_TOKEN": "secret-token",
}


def make_completion(content: Optional[str]) -> SimpleNamespace:
    """Shape of an OpenAI chat completion as far as LLMClient reads it."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=120, completion_tokens=480),
    )


def automation_payload(epics: int = 2, stories: int = 3) -> dict[str, Any]:
    """A well-formed model answer for /fully-automate."""

    def doc(name: str) -> dict[str, Any]:
        return {
            "title": f"{name} – Login Portal",
            "sections": [
                {"h": "Overview", "body": "Users sign in with e-mail and password."},
                {"h": "Scope", "body": "- Login page\n- Password reset"},
                {"h": "Requirements", "body": "The page validates credentials."},
                {"h": "Constraints", "body": "Must work on mobile browsers."},
            ],
        }

    def entries(prefix: str) -> list[dict[str, Any]]:
        return [
            {"item": f"{prefix} one", "owner": "PM", "status": "Open", "mitigation": "Monitor"},
            {"item": f"{prefix} two", "owner": "Tech Lead", "status": "Open"},
        ]

    epic_names = [f"Epic {i}" for i in range(1, epics + 1)]
    return {
        "meta": {"projectName": "Login Portal"},
        "docs": {
            "brd": doc("BRD"),
            "frs": doc("FRS"),
            "sow": doc("SOW"),
            "raid": {
                "title": "RAID – Login Portal",
                "risks": entries("Risk"),
                "assumptions": entries("Assumption"),
                "issues": entries("Issue"),
                "dependencies": entries("Dependency"),
            },
            "backlogSummary": "Two epics covering sign-in and recovery.",
        },
        "backlog": {
            "epics": [{"name": name, "description": f"{name} description"} for name in epic_names],
            "stories": [
                {
                    "epicName": epic_names[i % len(epic_names)] if epic_names else "",
                    "summary": f"Story {i + 1}",
                    "story": f"As a user, I want feature {i + 1} so that I can sign in.",
                    "acceptanceCriteria": ["Given a user, when they log in, then they see the dashboard"],
                    "priority": "P1",
                    "storyPoints": 5,
                }
                for i in range(stories)
            ],
        },
        "notes": {"assumptions": ["SSO is out of scope"], "openQuestions": ["Is MFA needed?"]},
    }


class AtlassianStub:
    """
    In-process Confluence + Jira double for ``httpx.MockTransport``.

    Records every request; individual behaviours can be switched off to
    exercise error paths.
    """

    EPIC_LINK_FIELD = "customfield_10014"

    def __init__(
        self,
        space_exists: bool = True,
        parent_link_works: bool = True,
        epic_link_works: bool = True,
        epic_link_field_defined: bool = True,
        unlinked_works: bool = True,
        fail_page_number: Optional[int] = None,
    ) -> None:
        self.space_exists = space_exists
        self.parent_link_works = parent_link_works
        self.epic_link_works = epic_link_works
        self.epic_link_field_defined = epic_link_field_defined
        self.unlinked_works = unlinked_works
        self.fail_page_number = fail_page_number
        self.requests: list[httpx.Request] = []
        self.pages: list[dict[str, Any]] = []
        self.issues: list[dict[str, Any]] = []
        # "page" or "issue" per successful creation, in call order
        self.events: list[str] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def field_lookups(self) -> int:
        return sum(1 for r in self.requests if r.url.path.endswith("/rest/api/3/field"))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "GET" and path.startswith("/wiki/rest/api/space/"):
            if not self.space_exists:
                return httpx.Response(404, json={"message": "No space with key"})
            return httpx.Response(200, json={"key": path.rsplit("/", 1)[-1], "name": "Test"})

        if request.method == "POST" and path == "/wiki/rest/api/content":
            payload = json.loads(request.content)
            number = len(self.pages) + 1
            if self.fail_page_number == number:
                return httpx.Response(400, text="A page with this title already exists")
            page_id = str(1000 + number)
            self.pages.append({"id": page_id, **payload})
            self.events.append("page")
            return httpx.Response(
                200,
                json={
                    "id": page_id,
                    "title": payload["title"],
                    "_links": {
                        "base": "https://acme.atlassian.net/wiki",
                        "webui": f"/spaces/TEST/pages/{page_id}",
                    },
                },
            )

        if request.method == "GET" and path == "/rest/api/3/field":
            fields = [{"id": "summary", "name": "Summary"}]
            if self.epic_link_field_defined:
                fields.append({"id": self.EPIC_LINK_FIELD, "name": "Epic Link"})
            return httpx.Response(200, json=fields)

        if request.method == "POST" and path == "/rest/api/3/issue":
            fields = json.loads(request.content)["fields"]
            if "parent" in fields and not self.parent_link_works:
                return httpx.Response(400, json={"errors": {"parent": "Field cannot be set"}})
            if self.EPIC_LINK_FIELD in fields and not self.epic_link_works:
                return httpx.Response(400, json={"errors": {self.EPIC_LINK_FIELD: "Unknown field"}})
            linked = "parent" in fields or self.EPIC_LINK_FIELD in fields
            if not linked and not self.unlinked_works:
                return httpx.Response(500, text="Internal error")
            number = len(self.issues) + 1
            issue = {"id": str(10000 + number), "key": f"PM-{number}", "fields": fields}
            self.issues.append(issue)
            self.events.append("issue")
            return httpx.Response(201, json={"id": issue["id"], "key": issue["key"]})

        return httpx.Response(404, json={"message": f"Unexpected {request.method} {path}"})


@pytest.fixture
def openai_stub() -> MagicMock:
    """Stand-in for AsyncOpenAI; set ``chat.completions.create`` per test."""
    stub = MagicMock()
    stub.chat.completions.create = AsyncMock(return_value=make_completion("{}"))
    return stub


@pytest.fixture
def llm_client(openai_stub: MagicMock) -> LLMClient:
    return LLMClient(config=OpenAISettings(api_key="sk-test"), client=openai_stub)


@pytest.fixture
def respond_with(openai_stub: MagicMock) -> Callable[..., None]:
    """Queue completion texts: one argument per expected call."""

    def _respond(*contents: Any) -> None:
        answers = [c if isinstance(c, str) else json.dumps(c) for c in contents]
        if len(answers) == 1:
            openai_stub.chat.completions.create.return_value = make_completion(answers[0])
        else:
            openai_stub.chat.completions.create.side_effect = [make_completion(a) for a in answers]

    return _respond


@pytest.fixture
def atlassian_stub() -> AtlassianStub:
    return AtlassianStub()


@pytest.fixture
def client_factory(atlassian_stub: AtlassianStub) -> AtlassianClientFactory:
    return AtlassianClientFactory(
        field_cache=FieldCatalogCache(),
        timeout=5,
        transport=atlassian_stub.transport,
    )


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def atlassian_env() -> dict[str, str]:
    return dict(ATLASSIAN_ENV)


@pytest.fixture
def payload() -> Callable[..., dict[str, Any]]:
    """Factory for well-formed /fully-automate model answers."""
    return automation_payload


@pytest.fixture
def make_stub() -> type[AtlassianStub]:
    """The Atlassian double class, for tests that need non-default behaviour."""
    return AtlassianStub
