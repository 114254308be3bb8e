"""Fetching transcripts and card templates from URLs or local files."""

import logging
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import unquote, urlparse

import httpx

from .errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT_S = 30.0


class Fetcher(Protocol):
    """Anything that can load a text resource by location."""

    async def fetch_text(self, location: str) -> str: ...


def is_remote(location: str) -> bool:
    return urlparse(location).scheme in ("http", "https")


def local_path(location: str) -> Path:
    """Turn a local location (plain path or file:// URL) into a Path."""
    parsed = urlparse(location)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(location)


class DefaultFetcher:
    """Fetch http(s) resources with httpx and everything else from disk."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT_S,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout, follow_redirects=True
            )
        return self._client

    async def aclose(self) -> None:
        """Shut down the HTTP client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_text(self, location: str) -> str:
        if is_remote(location):
            return await self._fetch_remote(location)
        return self._read_local(location)

    async def _fetch_remote(self, url: str) -> str:
        client = await self._get_client()
        try:
            response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(url, str(e) or type(e).__name__) from e
        if not response.is_success:
            raise FetchError(url, f"HTTP {response.status_code}")
        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return response.text

    def _read_local(self, location: str) -> str:
        path = local_path(location)
        # ValueError covers decode errors and paths with embedded null bytes
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, ValueError) as e:
            raise FetchError(location, str(e)) from e
