"""
Jira Cloud client (REST v3).
"""

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from src.atlassian import adf
from src.atlassian.base_client import BaseAtlassianClient
from src.atlassian.epic_linking import Strategy, attempt_in_order
from src.core.constants import EPIC_LINK_FIELD_NAME, JIRA_API_PATH
from src.core.exceptions import DownstreamError
from src.core.logging import get_logger
from src.repositories.cache_repo import FieldCatalogCache

logger = get_logger(__name__)


@dataclass(frozen=True)
class IssueRef:
    """A created issue."""

    id: str
    key: str


class JiraClient(BaseAtlassianClient):
    """
    Creates epics and stories.

    The field catalog is read through a shared ``FieldCatalogCache`` so the
    "Epic Link" lookup costs one request per site per process.
    """

    def __init__(
        self,
        base_url: str,
        email: str,
        token: str,
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        field_cache: Optional[FieldCatalogCache] = None,
    ) -> None:
        super().__init__(base_url, email, token, timeout=timeout, transport=transport)
        self.field_cache = field_cache if field_cache is not None else FieldCatalogCache()

    @property
    def system(self) -> str:
        return "issues"

    @property
    def api_path(self) -> str:
        return JIRA_API_PATH

    async def create_issue(self, fields: dict[str, Any]) -> IssueRef:
        """
        Create an issue from a complete ``fields`` object.

        Raises:
            DownstreamError: the issue could not be created
        """
        data = await self._post("/issue", {"fields": fields})
        if not isinstance(data, dict) or not data.get("key"):
            raise DownstreamError(self.system, "Issue creation returned no issue key")
        issue = IssueRef(id=str(data.get("id") or ""), key=str(data["key"]))
        logger.info("Issue created", key=issue.key, issue_type=fields.get("issuetype"))
        return issue

    async def list_fields(self) -> list[dict[str, Any]]:
        data = await self._get("/field")
        return data if isinstance(data, list) else []

    async def find_epic_link_field_id(self) -> Optional[str]:
        """Id of the field named exactly "Epic Link", or None."""
        try:
            catalog = await self.field_cache.get_or_populate(self.base_url, self.list_fields)
        except DownstreamError as e:
            logger.warning("Field catalog lookup failed", error=e.message)
            return None

        for field in catalog:
            if isinstance(field, dict) and field.get("name") == EPIC_LINK_FIELD_NAME:
                return field.get("id")
        return None

    @staticmethod
    def issue_fields(
        project_key: str,
        issue_type: str,
        summary: str,
        description: Optional[dict[str, Any]] = None,
        labels: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "project": {"key": project_key},
            "issuetype": {"name": issue_type},
            # Jira rejects summaries longer than 255 characters
            "summary": summary[:255],
        }
        if description:
            fields["description"] = description
        if labels:
            fields["labels"] = list(labels)
        return fields

    async def create_epic(
        self,
        project_key: str,
        name: str,
        description: str = "",
        labels: Optional[list[str]] = None,
    ) -> IssueRef:
        fields = self.issue_fields(
            project_key,
            "Epic",
            name,
            adf.plain_document(description) if description else None,
            labels,
        )
        return await self.create_issue(fields)

    async def _create_with_epic_link(self, fields: dict[str, Any], epic_key: str) -> IssueRef:
        field_id = await self.find_epic_link_field_id()
        if not field_id:
            raise DownstreamError(self.system, f'No "{EPIC_LINK_FIELD_NAME}" field on this site')
        return await self.create_issue({**fields, field_id: epic_key})

    def story_link_strategies(
        self,
        fields: dict[str, Any],
        epic_key: Optional[str],
    ) -> list[Strategy[IssueRef]]:
        """parent link, then the Epic Link field, then no link at all."""
        strategies: list[Strategy[IssueRef]] = []
        if epic_key:
            strategies.append(
                Strategy("parent", lambda: self.create_issue({**fields, "parent": {"key": epic_key}}))
            )
            strategies.append(
                Strategy("epic-link-field", lambda: self._create_with_epic_link(fields, epic_key))
            )
        strategies.append(Strategy("unlinked", lambda: self.create_issue(fields)))
        return strategies

    async def create_story_linked_to_epic(
        self,
        project_key: str,
        epic_key: Optional[str],
        summary: str,
        description: Optional[dict[str, Any]] = None,
        labels: Optional[list[str]] = None,
    ) -> IssueRef:
        """
        Create a story and attach it to ``epic_key`` where the site allows.

        Raises:
            DownstreamError: the last strategy's error when every attempt fails
        """
        fields = self.issue_fields(project_key, "Story", summary, description, labels)
        return await attempt_in_order(self.story_link_strategies(fields, epic_key))
