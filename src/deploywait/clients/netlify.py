"""Netlify API client using httpx."""

from typing import Any

import httpx

from deploywait.core.exceptions import AuthenticationError, NetlifyError
from deploywait.core.logging import StructuredLogger

logger = StructuredLogger("clients.netlify")

DEFAULT_API_URL = "https://api.netlify.com/api/v1"


class NetlifyClient:
    """Async client for the read-only parts of the Netlify REST API."""

    def __init__(
        self,
        token: str | None,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._token = token
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            if not self._token:
                raise AuthenticationError("Netlify auth token not configured")

            headers = {
                "Authorization": f"Bearer {self._token}",
                "Accept": "application/json",
            }

            self._client = httpx.AsyncClient(
                base_url=self._base_url.rstrip("/"),
                headers=headers,
                timeout=self._timeout,
                transport=self._transport,
            )

            logger.debug("Created Netlify client", url=self._base_url)

        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Make an API request."""
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()

            if response.content:
                return response.json()
            return None

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            try:
                error_data = e.response.json()
                message = error_data.get("message", str(e))
            except Exception:
                message = e.response.text or str(e)
            raise NetlifyError(message, status_code=status_code)

        except httpx.RequestError as e:
            raise NetlifyError(f"Request failed: {e}")

    async def get(self, path: str, **kwargs: Any) -> Any:
        """Make a GET request."""
        return await self._request("GET", path, **kwargs)

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NetlifyClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # Deploy operations
    async def list_site_deploys(self, site_id: str) -> list[dict[str, Any]]:
        """List the deploys of a site, newest first."""
        response = await self.get(f"/sites/{site_id}/deploys")
        if not isinstance(response, list):
            raise NetlifyError(
                "Unexpected response listing deploys",
                details={"site_id": site_id},
            )
        return response

    async def get_site_deploy(self, site_id: str, deploy_id: str) -> dict[str, Any]:
        """Get a single deploy of a site."""
        response = await self.get(f"/sites/{site_id}/deploys/{deploy_id}")
        if not isinstance(response, dict):
            raise NetlifyError(
                "Unexpected response fetching deploy",
                details={"site_id": site_id, "deploy_id": deploy_id},
            )
        return response
