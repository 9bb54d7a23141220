"""
Unit tests for parsing /fully-automate input.
"""

from src.core.constants import DEFAULT_PRIORITY_SCHEME, DEFAULT_PROJECT_NAME
from src.domain.automation import AutomationRequest


def test_defaults() -> None:
    request = AutomationRequest.from_form({})

    assert request.project_name == DEFAULT_PROJECT_NAME
    assert request.priority_scheme == DEFAULT_PRIORITY_SCHEME
    assert request.priorities == ["P0", "P1", "P2", "P3"]
    assert request.labels == []
    assert request.publish is False


def test_form_strings() -> None:
    request = AutomationRequest.from_form(
        {
            "projectName": "  Portal ",
            "jiraProjectKey": " ",
            "confluenceSpaceKey": "TEST",
            "labels": "phase one, ,docs",
            "priorityScheme": "Must, Should ,Could",
            "publish": "true",
            "unknownField": "ignored",
        }
    )

    assert request.project_name == "Portal"
    assert request.jira_project_key is None
    assert request.confluence_space_key == "TEST"
    assert request.labels == ["phase-one", "docs"]
    assert request.priorities == ["Must", "Should", "Could"]
    assert request.publish is True


def test_json_values() -> None:
    request = AutomationRequest.from_form(
        {"labels": ["a b", "c"], "publish": False, "projectName": None, "requirementsText": None}
    )

    assert request.labels == ["a-b", "c"]
    assert request.project_name == DEFAULT_PROJECT_NAME
    assert request.requirements_text == ""


def test_blank_priority_scheme() -> None:
    assert AutomationRequest.from_form({"priorityScheme": ""}).priorities == ["P0", "P1", "P2", "P3"]
    assert AutomationRequest.from_form({"priorityScheme": " , "}).priorities == ["P0", "P1", "P2", "P3"]


def test_credentials_are_collected() -> None:
    request = AutomationRequest.from_form({"atlassianDomain": "acme", "atlassianApiToken": "t"})

    explicit = request.explicit_credentials()
    assert explicit["atlassianDomain"] == "acme"
    assert explicit["atlassianApiToken"] == "t"
    assert "atlassian_api_token" not in repr(request)
