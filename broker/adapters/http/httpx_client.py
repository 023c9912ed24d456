"""httpx transport adapter."""

from __future__ import annotations

import httpx

from broker.adapters.http.base import AbstractHTTPClient, HTTPResponse


class HttpxClient(AbstractHTTPClient):
    """Async GET client backed by a pooled httpx.AsyncClient.

    Status codes are returned as-is; classifying them is the transport
    executor's job.
    """

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize the pooled client.

        Args:
            timeout_seconds: Timeout for connect/read/write/pool in seconds.
            transport: Optional custom transport (e.g., httpx.MockTransport in tests).
            headers: Default headers sent with every request.
        """
        self.client = httpx.AsyncClient(
            timeout=timeout_seconds,
            transport=transport,
            headers={"Accept": "application/json", **(headers or {})},
            follow_redirects=True,
        )

    async def get(self, url: str) -> HTTPResponse:
        try:
            response = await self.client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
            raise RuntimeError(f"HTTP transport error: {type(exc).__name__}: {exc}") from exc

        return HTTPResponse(status_code=response.status_code, body=response.content)

    async def aclose(self) -> None:
        await self.client.aclose()
