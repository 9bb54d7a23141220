"""
Full-automation orchestrator.

Turns requirements into a normalized documentation pack and backlog with one
completion call and, on request, publishes the pack to Confluence and the
backlog to Jira.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from src.atlassian import adf
from src.atlassian.confluence_client import ConfluenceClient
from src.atlassian.credentials import AtlassianCredentials, resolve_credentials
from src.atlassian.jira_client import JiraClient
from src.core.config import settings
from src.core.constants import DOC_LABELS, DOC_PACK_TITLE_PREFIX, FILE_CONTENT_MARKER
from src.core.exceptions import LlmParseError, ValidationError
from src.core.logging import LogContext, get_logger
from src.core.security import generate_request_id
from src.core.text import as_text, html_to_text
from src.domain.automation import (
    AutomationDocs,
    AutomationMeta,
    AutomationRequest,
    AutomationResponse,
    AutomationResult,
    PublishedConfluence,
    PublishedJira,
    PublishedRefs,
)
from src.llm.client import LLMClient, Message
from src.llm.parsing import parse_completion_json
from src.llm.prompts import AUTOMATION_PROMPTS
from src.repositories.cache_repo import FieldCatalogCache
from src.services.html_renderer import render_document, render_parent_page, render_raid
from src.services.normalizer import (
    ensure_doc_has_content,
    normalize_backlog,
    normalize_notes,
    normalize_raid,
    unique_title,
)
from src.services.text_extraction import extract_text

logger = get_logger(__name__)

PERSONAL_SPACE_HINT = (
    'Personal spaces use the "~" prefix followed by the account id, e.g. "~5b10ac8d82e05b22cc7d4ef5".'
)


@dataclass(frozen=True)
class UploadedFile:
    filename: str
    content: bytes
    content_type: Optional[str] = None


class AtlassianClientFactory:
    """
    Builds per-run Confluence/Jira clients.

    All Jira clients share one field-catalog cache.
    """

    def __init__(
        self,
        field_cache: Optional[FieldCatalogCache] = None,
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.field_cache = field_cache if field_cache is not None else FieldCatalogCache()
        self.timeout = timeout
        self.transport = transport

    def confluence(self, credentials: AtlassianCredentials) -> ConfluenceClient:
        return ConfluenceClient(
            credentials.content_base_url,
            credentials.email,
            credentials.token,
            timeout=self.timeout,
            transport=self.transport,
        )

    def jira(self, credentials: AtlassianCredentials) -> JiraClient:
        return JiraClient(
            credentials.issue_base_url,
            credentials.email,
            credentials.token,
            timeout=self.timeout,
            transport=self.transport,
            field_cache=self.field_cache,
        )


class AutomationService:
    """
    Orchestrates one ``/fully-automate`` run.

    Steps run strictly in sequence: validate, gather text, complete,
    normalize, then (publish only) space check, pages, epics, stories.
    """

    def __init__(
        self,
        llm: LLMClient,
        clients: AtlassianClientFactory,
        env: Optional[Mapping[str, Optional[str]]] = None,
    ) -> None:
        self.llm = llm
        self.clients = clients
        self.env = env if env is not None else settings.atlassian.as_env()

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    @staticmethod
    def validate(request: AutomationRequest) -> None:
        if not request.publish:
            return
        missing = [
            name
            for name, value in (
                ("jiraProjectKey", request.jira_project_key),
                ("confluenceSpaceKey", request.confluence_space_key),
            )
            if not value
        ]
        if missing:
            raise ValidationError(
                "Publishing requires both jiraProjectKey and confluenceSpaceKey.",
                details={"missing": missing},
            )

    @staticmethod
    def combined_requirements(
        request: AutomationRequest,
        upload: Optional[UploadedFile] = None,
    ) -> str:
        """Pasted text, then the uploaded file under a marker, then direct HTML."""
        parts = []
        if request.requirements_text.strip():
            parts.append(request.requirements_text.strip())
        if upload is not None:
            file_text = extract_text(upload.filename, upload.content, upload.content_type).strip()
            if file_text:
                parts.append(f"{FILE_CONTENT_MARKER}\n{file_text}")
        if request.requirements_html.strip():
            html_text = html_to_text(request.requirements_html)
            if html_text:
                parts.append(html_text)
        return "\n\n".join(parts)

    @staticmethod
    def build_messages(request: AutomationRequest, requirements: str) -> list[Message]:
        prompt = AUTOMATION_PROMPTS["user"].format(
            project_name=request.project_name,
            jira_project_key=request.jira_project_key or "[Not Provided]",
            confluence_space_key=request.confluence_space_key or "[Not Provided]",
            priorities=", ".join(request.priorities),
            requirements=requirements,
        )
        return [
            Message.system(AUTOMATION_PROMPTS["system"].strip()),
            Message.user(prompt.strip()),
        ]

    # -------------------------------------------------------------------------
    # Generation
    # -------------------------------------------------------------------------

    @staticmethod
    def assemble(
        raw: Mapping[str, Any],
        request: AutomationRequest,
        requirements: str,
        error: Optional[str] = None,
    ) -> AutomationResult:
        """Backfill meta from the request and normalize every part of the output."""
        meta = raw.get("meta") if isinstance(raw.get("meta"), dict) else {}
        docs = raw.get("docs") if isinstance(raw.get("docs"), dict) else {}

        project_name = as_text(meta.get("projectName")) or request.project_name

        def fallback(key: str) -> str:
            return f"{DOC_LABELS[key]} – {project_name}"

        summary = docs.get("backlogSummary")
        return AutomationResult(
            meta=AutomationMeta(
                project_name=project_name,
                jira_project_key=as_text(meta.get("jiraProjectKey")) or request.jira_project_key,
                confluence_space_key=(
                    as_text(meta.get("confluenceSpaceKey")) or request.confluence_space_key
                ),
            ),
            docs=AutomationDocs(
                brd=ensure_doc_has_content(docs.get("brd"), fallback("brd"), requirements),
                frs=ensure_doc_has_content(docs.get("frs"), fallback("frs"), requirements),
                sow=ensure_doc_has_content(docs.get("sow"), fallback("sow"), requirements),
                raid=normalize_raid(docs.get("raid"), fallback("raid")),
                backlog_summary="" if summary is None else summary,
            ),
            backlog=normalize_backlog(raw.get("backlog"), request.priorities),
            notes=normalize_notes(raw.get("notes")),
            error=error,
        )

    async def generate(self, request: AutomationRequest, requirements: str) -> AutomationResult:
        raw_text = await self.llm.complete(self.build_messages(request, requirements), json_mode=True)
        try:
            data = parse_completion_json(raw_text)
            error = None
        except LlmParseError as e:
            # Keep going: the normalizer produces fallback documents
            logger.warning("Completion was not valid JSON", error=e.message, length=len(raw_text))
            data, error = {}, raw_text
        return self.assemble(data, request, requirements, error)

    # -------------------------------------------------------------------------
    # Publication
    # -------------------------------------------------------------------------

    async def publish_pages(
        self,
        confluence: ConfluenceClient,
        result: AutomationResult,
        space_key: str,
        run_id: str,
    ) -> tuple[PublishedConfluence, str]:
        """Parent page then BRD, FRS, SOW and RAID children. Returns refs and the parent URL."""
        space = await confluence.get_space(space_key)
        if space is None:
            raise ValidationError(
                f'Confluence space "{space_key}" was not found or you do not have access to it. '
                + PERSONAL_SPACE_HINT,
                field="confluenceSpaceKey",
            )

        parent = await confluence.create_page(
            space_key,
            unique_title(DOC_PACK_TITLE_PREFIX + result.meta.project_name),
            render_parent_page(result, run_id),
        )
        refs = PublishedConfluence(parent=parent.web_url)

        docs = result.docs
        children = (
            ("brd", docs.brd.title, render_document(docs.brd)),
            ("frs", docs.frs.title, render_document(docs.frs)),
            ("sow", docs.sow.title, render_document(docs.sow)),
            ("raid", docs.raid.title, render_raid(docs.raid)),
        )
        for key, title, html in children:
            page = await confluence.create_page(space_key, unique_title(title), html, parent_id=parent.id)
            setattr(refs, key, page.web_url)
        return refs, parent.web_url

    async def publish_backlog(
        self,
        jira: JiraClient,
        result: AutomationResult,
        project_key: str,
        labels: list[str],
        parent_url: Optional[str] = None,
    ) -> PublishedJira:
        """Epics first, then stories linked to them by epic name."""
        refs = PublishedJira()
        epic_keys: dict[str, str] = {}

        for epic in result.backlog.epics:
            issue = await jira.create_epic(project_key, epic.name, epic.description, labels)
            # Duplicate names: the last created epic wins
            epic_keys[epic.name] = issue.key
            refs.epics.append(issue.key)

        for story in result.backlog.stories:
            description = adf.story_description(
                story.story,
                story.acceptance_criteria,
                story.priority,
                story.story_points,
                parent_url or None,
            )
            issue = await jira.create_story_linked_to_epic(
                project_key,
                epic_keys.get(story.epic_name),
                story.summary,
                description,
                labels,
            )
            refs.stories.append(issue.key)

        return refs

    async def publish(
        self,
        result: AutomationResult,
        request: AutomationRequest,
        credentials: AtlassianCredentials,
        run_id: str,
    ) -> PublishedRefs:
        """
        Publish pages then issues.

        A failure aborts the remaining steps; already created pages and issues
        are left in place.
        """
        space_key = request.confluence_space_key or ""
        project_key = request.jira_project_key or ""
        confluence = self.clients.confluence(credentials)
        jira = self.clients.jira(credentials)
        async with confluence, jira:
            pages, parent_url = await self.publish_pages(confluence, result, space_key, run_id)
            logger.info("Doc pack published", space_key=space_key, parent=parent_url)
            issues = await self.publish_backlog(jira, result, project_key, request.labels, parent_url)
            logger.info(
                "Backlog published",
                project_key=project_key,
                epics=len(issues.epics),
                stories=len(issues.stories),
            )
        return PublishedRefs(confluence=pages, jira=issues)

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    async def run(
        self,
        request: AutomationRequest,
        upload: Optional[UploadedFile] = None,
    ) -> AutomationResponse:
        """
        Execute one automation run.

        Raises:
            ValidationError: bad input or unknown space (400)
            ConfigurationError: missing credentials or AI configuration
            DownstreamError: completion or Atlassian failure (500)
        """
        run_id = generate_request_id()
        with LogContext(run_id=run_id):
            self.validate(request)
            requirements = self.combined_requirements(request, upload)
            if not requirements:
                raise ValidationError(
                    "Please provide requirements text, HTML or a requirements file.",
                    field="requirementsText",
                )

            credentials = None
            if request.publish:
                credentials = resolve_credentials(request.explicit_credentials(), self.env)

            logger.info(
                "Automation run started",
                project_name=request.project_name,
                publish=request.publish,
                requirements_chars=len(requirements),
            )
            result = await self.generate(request, requirements)

            if credentials is None:
                return AutomationResponse(run_id=run_id, output=result)

            published = await self.publish(result, request, credentials, run_id)
            return AutomationResponse(run_id=run_id, output=result, published=published)
