"""
Resolution of Confluence/Jira connection values.

Request value first, then environment, then (base URLs only) a URL derived
from the tenant domain. Pure function: callers pass the environment in.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import urlsplit

from src.core.constants import ATLASSIAN_CLOUD_SUFFIX
from src.core.exceptions import ConfigurationError
from src.core.security import mask_secret


@dataclass(frozen=True)
class AtlassianCredentials:
    """Connection values for one publication run."""

    content_base_url: str
    issue_base_url: str
    email: str
    token: str = field(repr=False)

    def __repr__(self) -> str:
        return (
            f"AtlassianCredentials(content_base_url={self.content_base_url!r}, "
            f"issue_base_url={self.issue_base_url!r}, email={self.email!r}, "
            f"token={mask_secret(self.token)!r})"
        )


def _first(*values: Optional[str]) -> str:
    for value in values:
        if value and value.strip():
            return value.strip()
    return ""


def site_url_from_domain(domain: str) -> str:
    """``acme``, ``acme.atlassian.net`` or ``https://acme.atlassian.net/`` -> site URL."""
    value = domain.strip()
    host = urlsplit(value).netloc if "://" in value else value.split("/")[0]
    if not host:
        return ""
    if "." not in host:
        host += ATLASSIAN_CLOUD_SUFFIX
    return f"https://{host}"


def normalize_content_url(url: str) -> str:
    """Confluence Cloud lives under ``/wiki``; add it when a bare site URL is given."""
    url = url.rstrip("/")
    parts = urlsplit(url)
    if parts.netloc.endswith(ATLASSIAN_CLOUD_SUFFIX) and not parts.path.startswith("/wiki"):
        return f"{parts.scheme}://{parts.netloc}/wiki"
    return url


def resolve_credentials(
    explicit: Mapping[str, Optional[str]],
    env: Mapping[str, Optional[str]],
) -> AtlassianCredentials:
    """
    Resolve connection values for both downstream systems.

    Args:
        explicit: values from the request (confluenceBaseUrl, jiraBaseUrl,
            atlassianEmail, atlassianApiToken, atlassianDomain)
        env: environment-style mapping (CONFLUENCE_BASE_URL, JIRA_BASE_URL,
            ATLASSIAN_EMAIL, ATLASSIAN_API_TOKEN, ATLASSIAN_DOMAIN and the
            JIRA_*/CONFLUENCE_* aliases)

    Raises:
        ConfigurationError: naming every value that could not be resolved
    """
    domain = _first(explicit.get("atlassianDomain"), env.get("ATLASSIAN_DOMAIN"))
    site = site_url_from_domain(domain) if domain else ""

    content_url = _first(explicit.get("confluenceBaseUrl"), env.get("CONFLUENCE_BASE_URL"))
    if not content_url and site:
        content_url = f"{site}/wiki"
    issue_url = _first(explicit.get("jiraBaseUrl"), env.get("JIRA_BASE_URL")) or site

    email = _first(
        explicit.get("atlassianEmail"),
        env.get("ATLASSIAN_EMAIL"),
        env.get("JIRA_EMAIL"),
        env.get("CONFLUENCE_EMAIL"),
    )
    token = _first(
        explicit.get("atlassianApiToken"),
        env.get("ATLASSIAN_API_TOKEN"),
        env.get("JIRA_API_TOKEN"),
        env.get("CONFLUENCE_API_TOKEN"),
    )

    missing = [
        label
        for label, value in (
            ("content base URL", content_url),
            ("issue base URL", issue_url),
            ("email", email),
            ("token", token),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(
            "Confluence/Jira publishing is not configured; missing " + ", ".join(missing) + ".",
            missing=missing,
            status_code=400,
        )

    return AtlassianCredentials(
        content_base_url=normalize_content_url(content_url),
        issue_base_url=issue_url.rstrip("/"),
        email=email,
        token=token,
    )
