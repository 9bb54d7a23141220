"""
Confluence Cloud client (REST v1 content API).
"""

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

from src.atlassian.base_client import BaseAtlassianClient
from src.core.constants import CONFLUENCE_API_PATH
from src.core.exceptions import DownstreamError
from src.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PageRef:
    """A created page."""

    id: str
    web_url: str


class ConfluenceClient(BaseAtlassianClient):
    """
    Creates pages in a space.

    ``base_url`` is the wiki root, e.g. ``https://acme.atlassian.net/wiki``.
    """

    @property
    def system(self) -> str:
        return "content"

    @property
    def api_path(self) -> str:
        return CONFLUENCE_API_PATH

    async def get_space(self, space_key: str) -> Optional[dict[str, Any]]:
        """
        Look up a space by key.

        Returns:
            The space record, or None when it does not exist or cannot be read
        """
        try:
            data = await self._get(f"/space/{quote(space_key, safe='~')}")
        except DownstreamError as e:
            logger.warning("Space lookup failed", space_key=space_key, status=e.status)
            return None
        return data if isinstance(data, dict) else None

    async def create_page(
        self,
        space_key: str,
        title: str,
        html: str,
        parent_id: Optional[str] = None,
    ) -> PageRef:
        """
        Create a page with a storage-format body.

        Args:
            space_key: Target space
            title: Page title, must be unique within the space
            html: Body in Confluence storage format
            parent_id: Optional id of the parent page

        Raises:
            DownstreamError: the page could not be created
        """
        payload: dict[str, Any] = {
            "type": "page",
            "title": title,
            "space": {"key": space_key},
            "body": {"storage": {"value": html, "representation": "storage"}},
        }
        if parent_id:
            payload["ancestors"] = [{"id": str(parent_id)}]

        data = await self._post("/content", payload)
        page_id = str(data.get("id") or "") if isinstance(data, dict) else ""
        if not page_id:
            raise DownstreamError(self.system, "Page creation returned no page id")

        links = data.get("_links") or {}
        webui = links.get("webui") or ""
        base = (links.get("base") or self.base_url).rstrip("/")
        page = PageRef(id=page_id, web_url=f"{base}{webui}" if webui else "")

        logger.info("Page created", space_key=space_key, page_id=page.id, title=title)
        return page
