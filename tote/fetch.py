"""Outbound fetches for pages and their assets.

All requests go through one shared ``httpx.AsyncClient`` that always sends
the fixed browser user agent. There is no retry: one failed request is one
``FetchError``.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from tote.config import FetchConfig, get_config
from tote.errors import ClientBuildError, FetchError

log = logging.getLogger(__name__)


@dataclass
class FetchedPage:
    """Raw response of a single GET."""

    url: str
    status_code: int
    content_type: Optional[str]
    content: bytes
    encoding: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400

    @property
    def text(self) -> str:
        """Body decoded with the response charset (UTF-8 when none is given).

        Raises:
            FetchError: If the body cannot be decoded
        """
        try:
            return self.content.decode(self.encoding or "utf-8", errors="replace")
        except (LookupError, UnicodeDecodeError) as e:
            raise FetchError(self.url, f"Failed to decode response ({e})", self.status_code) from e


class Fetcher:
    """HTTP client wrapper shared by the preview and cache operations."""

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Build the underlying client.

        Args:
            config: Fetch settings (defaults to the global config)
            transport: Optional transport override, e.g. ``httpx.MockTransport``

        Raises:
            ClientBuildError: If the client cannot be constructed
        """
        self.config = config or get_config().fetch

        try:
            self._client = httpx.AsyncClient(
                timeout=self.config.request_timeout,
                follow_redirects=True,
                headers={"User-Agent": self.config.user_agent},
                transport=transport,
            )
        except (ValueError, TypeError, OSError) as e:
            raise ClientBuildError(f"Failed to create client: {e}") from e

    async def __aenter__(self) -> "Fetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def close(self) -> None:
        """Close the underlying client."""
        await self._client.aclose()

    async def fetch(self, url: str) -> FetchedPage:
        """GET a URL and return its body whatever the status code.

        Args:
            url: URL to fetch

        Returns:
            FetchedPage with the raw body

        Raises:
            FetchError: On network, DNS, TLS or URL errors
        """
        log.debug("Fetching %s", url)
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(url, f"Failed to fetch URL ({e})") from e
        except (httpx.InvalidURL, ValueError, TypeError) as e:
            raise FetchError(url, f"Invalid URL ({e})") from e

        return FetchedPage(
            url=url,
            status_code=response.status_code,
            content_type=response.headers.get("Content-Type"),
            content=response.content,
            encoding=response.encoding,
        )

    async def fetch_bytes(self, url: str) -> bytes:
        """GET an asset and return its bytes.

        Unlike ``fetch``, an HTTP error status counts as a failure so an
        error page is never stored in place of the asset.

        Raises:
            FetchError: On any failure, including 4xx/5xx responses
        """
        page = await self.fetch(url)
        if page.is_error:
            raise FetchError(url, f"HTTP {page.status_code}", page.status_code)
        return page.content


# Global fetcher instance
_fetcher: Optional[Fetcher] = None


def get_fetcher() -> Fetcher:
    """Get or create the process-wide fetcher.

    Returns:
        Fetcher built from the global config
    """
    global _fetcher

    if _fetcher is None or _fetcher.is_closed:
        _fetcher = Fetcher(get_config().fetch)

    return _fetcher
