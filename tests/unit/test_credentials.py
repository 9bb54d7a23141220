"""
Unit tests for Atlassian credential resolution.
"""

import pytest

from src.atlassian.credentials import (
    normalize_content_url,
    resolve_credentials,
    site_url_from_domain,
)
from src.core.exceptions import ConfigurationError


class TestSiteUrl:
    @pytest.mark.parametrize(
        "domain",
        ["acme", "acme.atlassian.net", "https://acme.atlassian.net/", " acme "],
    )
    def test_domain_forms(self, domain: str) -> None:
        assert site_url_from_domain(domain) == "https://acme.atlassian.net"

    def test_custom_host_is_kept(self) -> None:
        assert site_url_from_domain("jira.example.com") == "https://jira.example.com"


class TestContentUrl:
    def test_adds_wiki_for_cloud_sites(self) -> None:
        assert normalize_content_url("https://acme.atlassian.net/") == "https://acme.atlassian.net/wiki"

    def test_keeps_existing_wiki(self) -> None:
        assert normalize_content_url("https://acme.atlassian.net/wiki/") == "https://acme.atlassian.net/wiki"

    def test_server_urls_untouched(self) -> None:
        assert normalize_content_url("https://confluence.example.com") == "https://confluence.example.com"


class TestResolveCredentials:
    def test_domain_derives_both_urls(self, atlassian_env: dict[str, str]) -> None:
        creds = resolve_credentials({}, atlassian_env)

        assert creds.content_base_url == "https://acme.atlassian.net/wiki"
        assert creds.issue_base_url == "https://acme.atlassian.net"
        assert creds.email == "pm@example.com"
        assert creds.token == "secret-token"

    def test_request_values_win(self, atlassian_env: dict[str, str]) -> None:
        creds = resolve_credentials(
            {
                "confluenceBaseUrl": "https://other.atlassian.net",
                "jiraBaseUrl": "https://other.atlassian.net/",
                "atlassianEmail": "lead@example.com",
                "atlassianApiToken": "request-token",
            },
            atlassian_env,
        )

        assert creds.content_base_url == "https://other.atlassian.net/wiki"
        assert creds.issue_base_url == "https://other.atlassian.net"
        assert creds.email == "lead@example.com"
        assert creds.token == "request-token"

    def test_explicit_urls_beat_domain(self) -> None:
        creds = resolve_credentials(
            {"atlassianDomain": "acme"},
            {
                "JIRA_BASE_URL": "https://jira.example.com",
                "JIRA_EMAIL": "ops@example.com",
                "CONFLUENCE_API_TOKEN": "t",
            },
        )
        assert creds.issue_base_url == "https://jira.example.com"
        assert creds.content_base_url == "https://acme.atlassian.net/wiki"
        assert creds.email == "ops@example.com"

    def test_blank_values_count_as_missing(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_credentials({"atlassianEmail": "  "}, {"ATLASSIAN_API_TOKEN": "t"})

        error = exc_info.value
        assert error.status_code == 400
        assert error.missing == ["content base URL", "issue base URL", "email"]
        assert error.details == {"missing": error.missing}

    def test_token_is_masked_in_repr(self, atlassian_env: dict[str, str]) -> None:
        creds = resolve_credentials({}, atlassian_env)
        assert "secret-token" not in repr(creds)
