"""
Base Atlassian REST client.
Provides the shared HTTP client, authentication, retries and error mapping
for the Confluence and Jira clients.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.core.exceptions import DownstreamError
from src.core.logging import get_logger

logger = get_logger(__name__)


class BaseAtlassianClient(ABC):
    """
    Abstract base class for Atlassian Cloud REST clients.

    Only transport failures (connection errors, timeouts) are retried; an
    HTTP error status is mapped to ``DownstreamError`` immediately.
    """

    def __init__(
        self,
        base_url: str,
        email: str,
        token: str,
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Site URL (Confluence including ``/wiki``)
            email: Account e-mail used for basic auth
            token: API token used for basic auth
            timeout: Request timeout in seconds
            transport: Optional transport, used by tests to stub the remote side
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._auth = httpx.BasicAuth(email, token)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    @abstractmethod
    def system(self) -> str:
        """Name used in errors and logs."""
        ...

    @property
    @abstractmethod
    def api_path(self) -> str:
        """REST API prefix appended to the base URL."""
        ...

    @property
    def api_url(self) -> str:
        return f"{self.base_url}{self.api_path}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                auth=self._auth,
                timeout=httpx.Timeout(self.timeout),
                headers={"Accept": "application/json", "Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _send(
        self,
        method: str,
        endpoint: str,
        data: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        client = await self._get_client()
        return await client.request(method=method, url=endpoint, json=data, params=params)

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Make an HTTP request and decode the JSON answer.

        Raises:
            DownstreamError: transport failure, non-2xx status or non-JSON body
        """
        try:
            response = await self._send(method, endpoint, data=data, params=params)
        except httpx.TransportError as e:
            logger.error("Request error", system=self.system, endpoint=endpoint, error=str(e))
            raise DownstreamError(self.system, f"Request to {endpoint} failed: {e}") from e

        if response.is_error:
            logger.error(
                "Request failed",
                system=self.system,
                endpoint=endpoint,
                status_code=response.status_code,
            )
            raise DownstreamError(
                self.system,
                f"{method} {endpoint} failed",
                status=response.status_code,
                body=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise DownstreamError(
                self.system,
                f"{method} {endpoint} returned a non-JSON body",
                status=response.status_code,
                body=response.text,
            ) from e

    async def _get(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> Any:
        """Make a GET request."""
        return await self._request("GET", endpoint, params=params)

    async def _post(self, endpoint: str, data: Optional[dict[str, Any]] = None) -> Any:
        """Make a POST request."""
        return await self._request("POST", endpoint, data=data)

    async def __aenter__(self) -> "BaseAtlassianClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
