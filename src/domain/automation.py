"""
Domain models for the full-automation run: request, result and published references.
"""

from typing import Any, Mapping, Optional

from pydantic import Field, field_validator

from src.core.constants import DEFAULT_PRIORITY_SCHEME, DEFAULT_PROJECT_NAME
from src.core.text import split_csv
from src.domain.backlog import Backlog
from src.domain.document import RaidLog, StructuredDocument, WireModel


class AutomationMeta(WireModel):
    project_name: str
    jira_project_key: Optional[str] = None
    confluence_space_key: Optional[str] = None


class AutomationDocs(WireModel):
    brd: StructuredDocument
    frs: StructuredDocument
    sow: StructuredDocument
    raid: RaidLog
    backlog_summary: Any = ""


class AutomationNotes(WireModel):
    assumptions: list[str] = Field(default_factory=list)
    open_questions: list[str] = Field(default_factory=list)


class AutomationResult(WireModel):
    """
    Structured output of one automation run.

    ``error`` holds the raw completion text when the model did not return
    valid JSON; the documents are then the normalizer's fallbacks.
    """

    meta: AutomationMeta
    docs: AutomationDocs
    backlog: Backlog = Field(default_factory=Backlog)
    notes: AutomationNotes = Field(default_factory=AutomationNotes)
    error: Optional[str] = None


class PublishedConfluence(WireModel):
    parent: Optional[str] = None
    brd: Optional[str] = None
    frs: Optional[str] = None
    sow: Optional[str] = None
    raid: Optional[str] = None


class PublishedJira(WireModel):
    epics: list[str] = Field(default_factory=list)
    stories: list[str] = Field(default_factory=list)


class PublishedRefs(WireModel):
    confluence: PublishedConfluence = Field(default_factory=PublishedConfluence)
    jira: PublishedJira = Field(default_factory=PublishedJira)


class AutomationResponse(WireModel):
    run_id: str
    output: AutomationResult
    published: Optional[PublishedRefs] = None


class AutomationRequest(WireModel):
    """
    Typed, defaulted input of ``POST /fully-automate``.

    Built from either a multipart form or a JSON body, so every field also
    accepts its string form ("true", "A, B").
    """

    project_name: str = DEFAULT_PROJECT_NAME
    requirements_text: str = ""
    requirements_html: str = ""
    jira_project_key: Optional[str] = None
    confluence_space_key: Optional[str] = None
    priority_scheme: str = DEFAULT_PRIORITY_SCHEME
    labels: list[str] = Field(default_factory=list)
    publish: bool = False

    # Per-request Atlassian overrides
    confluence_base_url: Optional[str] = None
    jira_base_url: Optional[str] = None
    atlassian_email: Optional[str] = None
    atlassian_api_token: Optional[str] = Field(default=None, repr=False)
    atlassian_domain: Optional[str] = None

    @field_validator("project_name", "priority_scheme", mode="before")
    @classmethod
    def default_when_blank(cls, v: Any, info: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_PROJECT_NAME if info.field_name == "project_name" else DEFAULT_PRIORITY_SCHEME
        return v.strip() if isinstance(v, str) else v

    @field_validator("requirements_text", "requirements_html", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator(
        "jira_project_key",
        "confluence_space_key",
        "confluence_base_url",
        "jira_base_url",
        "atlassian_email",
        "atlassian_api_token",
        "atlassian_domain",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("labels", mode="before")
    @classmethod
    def split_labels(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            v = split_csv(v)
        # Jira labels cannot contain spaces
        return [str(label).strip().replace(" ", "-") for label in v if str(label).strip()]

    @field_validator("publish", mode="before")
    @classmethod
    def empty_publish_is_false(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return False
        return v

    @property
    def priorities(self) -> list[str]:
        return split_csv(self.priority_scheme) or split_csv(DEFAULT_PRIORITY_SCHEME)

    @classmethod
    def from_form(cls, data: Mapping[str, Any]) -> "AutomationRequest":
        """Build from a form/JSON mapping, ignoring unknown and file fields."""
        known = {field.alias or name for name, field in cls.model_fields.items()}
        known |= set(cls.model_fields)
        values = {k: v for k, v in data.items() if k in known and not hasattr(v, "read")}
        return cls.model_validate(values)

    def explicit_credentials(self) -> dict[str, Optional[str]]:
        return {
            "confluenceBaseUrl": self.confluence_base_url,
            "jiraBaseUrl": self.jira_base_url,
            "atlassianEmail": self.atlassian_email,
            "atlassianApiToken": self.atlassian_api_token,
            "atlassianDomain": self.atlassian_domain,
        }
