"""Unauthenticated reachability probe for deploy URLs."""

from typing import Any

import httpx

from deploywait.core.logging import StructuredLogger

logger = StructuredLogger("clients.probe")


class UrlProbe:
    """Issue plain GET requests against public URLs.

    Any HTTP response counts as reachable, whatever its status code.
    Transport errors (DNS, connection, timeout) propagate as
    ``httpx.RequestError``.
    """

    def __init__(
        self,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def probe(self, url: str) -> httpx.Response:
        """Request ``url`` and return whatever response comes back."""
        response = await self.client.get(url)
        logger.debug("Probed url", url=url, status=response.status_code)
        return response

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "UrlProbe":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
