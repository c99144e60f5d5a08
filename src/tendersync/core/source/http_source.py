"""
External tender source client using httpx.

Provides a single uncached GET per sync with:
- Configurable headers and timeout
- Status, timeout and decode failures mapped to FetchError
- Envelope extraction of the record array
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from tendersync.core.config.models import DEFAULT_SOURCE_URL, SourceConfig
from tendersync.core.errors import FetchError

from .envelope import extract_records


logger = logging.getLogger(__name__)

# Longest slice of a response body carried in error messages
BODY_PREVIEW_CHARS = 500


def _preview(text: str) -> str:
    return text[:BODY_PREVIEW_CHARS]


class TenderSource:
    """Async client for the external tender listing endpoint.

    The client is either injected (and left open) or created lazily and
    closed by ``close``.
    """

    def __init__(
        self,
        url: str = DEFAULT_SOURCE_URL,
        timeout: float = 30.0,
        user_agent: str | None = None,
        default_headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the tender source.

        Args:
            url: Endpoint returning tender records
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
            default_headers: Extra headers for every request
            client: Shared httpx client (caller keeps ownership)
        """
        self.url = url
        self.timeout = timeout

        self.default_headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": user_agent or "Mozilla/5.0 (compatible; TenderSync/0.1)",
            # Every sync must see fresh data
            "Cache-Control": "no-cache",
            "Pragma": "no-cache",
            **(default_headers or {}),
        }

        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(
        cls,
        config: SourceConfig,
        client: httpx.AsyncClient | None = None,
    ) -> "TenderSource":
        """Build a source from application config."""
        return cls(
            url=config.url,
            timeout=config.timeout_seconds,
            user_agent=config.user_agent,
            default_headers=config.headers,
            client=client,
        )

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                headers=self.default_headers,
            )
            self._owns_client = True
        return self._client

    async def fetch(self, params: dict[str, str] | None = None) -> Any:
        """Issue one GET and return the decoded JSON body.

        Args:
            params: Query parameters for the endpoint

        Returns:
            Decoded JSON body

        Raises:
            FetchError: On timeout, transport failure, non-2xx status
                or an undecodable body
        """
        client = await self._ensure_client()

        logger.info("Fetching from: %s", self.url, extra={"endpoint": self.url})
        logger.debug("Query parameters: %s", params)

        start_time = datetime.now(timezone.utc)

        try:
            response = await client.get(
                self.url,
                params=params or None,
                headers=self.default_headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise FetchError(
                f"Request timed out after {self.timeout:g}s",
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise FetchError(
                f"Transport error: {e}",
                cause=e,
            ) from e

        elapsed_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
        logger.info(
            "API Response status: %s %s (%.0f ms)",
            response.status_code,
            response.reason_phrase,
            elapsed_ms,
            extra={"status_code": response.status_code},
        )

        if not response.is_success:
            raise FetchError(
                f"API responded with status {response.status_code}: {_preview(response.text)}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raw = _preview(response.text)
            logger.error("Raw response (first %d chars): %s", BODY_PREVIEW_CHARS, raw)
            raise FetchError(
                f"Failed to parse API response as JSON: {e}. Raw response: {raw}",
                status_code=response.status_code,
                cause=e,
            ) from e

    async def fetch_records(self, params: dict[str, str] | None = None) -> list[Any]:
        """Fetch and return the record array from the response envelope.

        Raises:
            FetchError: As for ``fetch``
            MalformedResponseError: If no record array is present
        """
        body = await self.fetch(params)
        records = extract_records(body)
        logger.info("Retrieved %d tenders from API", len(records))
        return records

    async def close(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "TenderSource":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
