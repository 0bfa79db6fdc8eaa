"""Link preview: fetch a page and extract its metadata without caching it."""
import logging
from typing import Optional

from tote.errors import FetchError
from tote.extractor import UNKNOWN_TITLE, extract
from tote.fetch import Fetcher, get_fetcher
from tote.models import LinkMetadata
from tote.urls import favicon_service_url, host_of

log = logging.getLogger(__name__)


async def fetch_link_metadata(url: str, fetcher: Optional[Fetcher] = None) -> LinkMetadata:
    """Fetch a page and extract its preview metadata.

    Args:
        url: Page URL
        fetcher: Fetcher to use (defaults to the process-wide one)

    Returns:
        Extracted LinkMetadata

    Raises:
        FetchError: If the page cannot be fetched or decoded
    """
    fetcher = fetcher or get_fetcher()
    page = await fetcher.fetch(url)
    return extract(page.text, url)


def fallback_metadata(url: str) -> LinkMetadata:
    """Minimal preview built from the URL alone."""
    host = host_of(url)
    return LinkMetadata(
        title=host or UNKNOWN_TITLE,
        description=None,
        icon=favicon_service_url(url),
        image=None,
    )


async def preview_link(url: str, fetcher: Optional[Fetcher] = None) -> LinkMetadata:
    """Like ``fetch_link_metadata`` but degrade to a URL-only preview on fetch failure."""
    try:
        return await fetch_link_metadata(url, fetcher)
    except FetchError as e:
        log.warning("Could not load preview for %s, using fallback: %s", url, e)
        return fallback_metadata(url)
