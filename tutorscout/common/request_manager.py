"""Request manager for HTTP GETs.

AsyncRequestManager encapsulates the httpx.AsyncClient and turns raw HTTP
outcomes into either a response body or a TransientException. It performs a
single attempt; retries, throttling and caching are the Fetcher's job.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from tutorscout.common.exceptions import (
    HTMLResponseAssumptionException,
    RequestTimeoutException,
)

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-AU,en;q=0.9",
}


class AsyncRequestManager:
    """Manages HTTP requests for the asynchronous pipeline.

    This class encapsulates:

    - httpx.AsyncClient lifecycle
    - Single-attempt GET requests
    - Status code checking

    Example::

        async with AsyncRequestManager(timeout=30.0) as manager:
            html = await manager.get("https://www.tutorfinder.com.au/")
    """

    def __init__(
        self,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Initialize the request manager.

        Args:
            timeout: Request timeout in seconds. None means no timeout (default).
            headers: Headers sent with every request. Defaults to a
                browser-like User-Agent.
        """
        self.timeout = timeout

        client_kwargs: dict[str, Any] = {
            "timeout": timeout,
            "headers": headers or DEFAULT_HEADERS,
            "follow_redirects": True,
        }
        self._client = httpx.AsyncClient(**client_kwargs)

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncRequestManager:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get(self, url: str) -> str:
        """Fetch *url* and return the decoded response body.

        Args:
            url: Absolute URL to fetch.

        Returns:
            The response text.

        Raises:
            HTMLResponseAssumptionException: If the server answers with a
                status code outside the 2xx range.
            RequestTimeoutException: If the request times out.
            httpx.HTTPError: For other transport failures (connection
                refused, DNS errors, protocol errors).
        """
        try:
            http_response = await self._client.get(url)
        except httpx.TimeoutException:
            raise RequestTimeoutException(
                url=url, timeout_seconds=self.timeout
            )

        if not http_response.is_success:
            raise HTMLResponseAssumptionException(
                status_code=http_response.status_code,
                expected_codes=[200],
                url=url,
            )

        logger.debug(
            f"GET {url} -> {http_response.status_code} "
            f"({len(http_response.content)} bytes)"
        )
        return http_response.text
