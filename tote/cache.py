"""Offline cache of saved links.

Each saved link gets its own directory under ``<cache_dir>/links/<id>``::

    links/<id>/content.html   raw page markup, byte for byte
    links/<id>/icon.<ext>     site icon, when it could be downloaded
    links/<id>/image.<ext>    preview image, when it could be downloaded

The page fetch and the content write are required; the icon and image are
best effort. A failed asset download is logged and shows up as a missing
path in the result, never as an error.
"""
import asyncio
import logging
import shutil
import uuid
from pathlib import Path
from typing import List, Mapping, Optional

from tote.config import get_config
from tote.errors import (
    DeleteError,
    DirectoryCreateError,
    FetchError,
    InvalidLinkIdError,
    ToteError,
    WriteError,
)
from tote.extractor import extract
from tote.fetch import Fetcher, get_fetcher
from tote.models import CacheResult, RefreshOutcome
from tote.urls import asset_extension

log = logging.getLogger(__name__)

LINKS_DIR = "links"
CONTENT_FILE = "content.html"
ICON_NAME = "icon"
IMAGE_NAME = "image"
DEFAULT_ICON_EXT = "png"
DEFAULT_IMAGE_EXT = "jpg"

_FORBIDDEN_ID_CHARS = ("/", "\\", "\x00")


def validate_link_id(link_id: str) -> str:
    """Check that a caller-supplied id is a single, safe directory name.

    Args:
        link_id: Opaque id of the saved link

    Returns:
        The id, unchanged

    Raises:
        InvalidLinkIdError: If the id is empty, a dot segment, or contains
            a path separator
    """
    if not isinstance(link_id, str) or not link_id:
        raise InvalidLinkIdError("Link id must be a non-empty string")
    if link_id in (".", ".."):
        raise InvalidLinkIdError(f"Link id cannot be {link_id!r}")
    if any(char in link_id for char in _FORBIDDEN_ID_CHARS):
        raise InvalidLinkIdError(f"Link id cannot contain path separators: {link_id!r}")
    return link_id


def write_file_atomic(path: Path, data: bytes) -> None:
    """Write bytes to a file via a temp file and rename.

    Raises:
        OSError: If the write or the rename fails
    """
    # Hidden and unique per write; never matches icon.* or image.*
    temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex[:8]}.tmp")

    try:
        temp_path.write_bytes(data)
        # Atomic rename
        temp_path.replace(path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


class LinkCache:
    """Writes and removes cached copies of saved links."""

    def __init__(self, cache_dir: Optional[Path] = None, fetcher: Optional[Fetcher] = None):
        """Initialize the link cache.

        Args:
            cache_dir: Cache root. Defaults to the configured cache directory
            fetcher: Fetcher for pages and assets. Defaults to the process-wide one
        """
        self.cache_dir = Path(cache_dir) if cache_dir is not None else get_config().cache_dir
        self.fetcher = fetcher or get_fetcher()

    @property
    def links_dir(self) -> Path:
        return self.cache_dir / LINKS_DIR

    def link_dir(self, link_id: str) -> Path:
        """Directory holding the cached files of one link.

        Raises:
            InvalidLinkIdError: If the id is not a safe directory name
        """
        return self.links_dir / validate_link_id(link_id)

    async def cache_link(self, link_id: str, url: str) -> CacheResult:
        """Fetch a page, save it and its assets, and return its metadata.

        Calling this again for the same id overwrites the entry in place.

        Args:
            link_id: Caller-assigned id of the saved link
            url: Page URL

        Returns:
            CacheResult with the extracted metadata and local paths

        Raises:
            InvalidLinkIdError: If the id is not a safe directory name
            DirectoryCreateError: If the link directory cannot be created
            FetchError: If the page cannot be fetched or decoded
            WriteError: If the page cannot be written
        """
        link_dir = self.link_dir(link_id)

        try:
            link_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateError(f"Failed to create link dir {link_dir}: {e}") from e

        page = await self.fetcher.fetch(url)
        html = page.text

        content_path = link_dir / CONTENT_FILE
        try:
            write_file_atomic(content_path, page.content)
        except OSError as e:
            raise WriteError(f"Failed to save HTML to {content_path}: {e}") from e

        metadata = extract(html, url)

        if self.fetcher.config.parallel_assets:
            icon_path, image_path = await asyncio.gather(
                self._cache_asset(link_dir, ICON_NAME, metadata.icon, DEFAULT_ICON_EXT),
                self._cache_asset(link_dir, IMAGE_NAME, metadata.image, DEFAULT_IMAGE_EXT),
            )
        else:
            icon_path = await self._cache_asset(link_dir, ICON_NAME, metadata.icon, DEFAULT_ICON_EXT)
            image_path = await self._cache_asset(link_dir, IMAGE_NAME, metadata.image, DEFAULT_IMAGE_EXT)

        log.info(
            "Cached %s as %s (icon: %s, image: %s)",
            url,
            link_id,
            "yes" if icon_path else "no",
            "yes" if image_path else "no",
        )

        return CacheResult(
            title=metadata.title,
            description=metadata.description,
            icon=metadata.icon,
            image=metadata.image,
            content_path=str(content_path),
            icon_path=icon_path,
            image_path=image_path,
        )

    async def _cache_asset(
        self,
        link_dir: Path,
        name: str,
        url: Optional[str],
        default_ext: str,
    ) -> Optional[str]:
        """Download one optional asset into the link directory.

        Errors stop here: they are logged and reported as a missing path.

        Returns:
            Local path of the written file, or None
        """
        try:
            # Drop assets from an earlier write, whatever their extension
            for stale in link_dir.glob(f"{name}.*"):
                stale.unlink(missing_ok=True)

            if not url:
                return None

            data = await self.fetcher.fetch_bytes(url)
            path = link_dir / f"{name}.{asset_extension(url, default_ext)}"
            write_file_atomic(path, data)
        except (FetchError, OSError) as e:
            log.warning("Could not cache %s %s for %s: %s", name, url, link_dir.name, e)
            return None

        return str(path)

    async def remove_cached_link(self, link_id: str) -> bool:
        """Delete a link's cache directory and everything in it.

        Removing an id that was never cached is not an error.

        Args:
            link_id: Caller-assigned id of the saved link

        Returns:
            True if a directory was removed, False if there was nothing to remove

        Raises:
            InvalidLinkIdError: If the id is not a safe directory name
            DeleteError: If the directory exists but cannot be removed
        """
        link_dir = self.link_dir(link_id)

        if not link_dir.exists():
            return False

        try:
            shutil.rmtree(link_dir)
        except OSError as e:
            raise DeleteError(f"Failed to remove link dir {link_dir}: {e}") from e

        log.info("Removed cached content for %s", link_id)
        return True

    async def refresh_links(self, links: Mapping[str, str]) -> List[RefreshOutcome]:
        """Re-cache many links at once.

        Runs ``cache_link`` concurrently, at most ``max_concurrent_requests``
        at a time. A link that fails is reported in its outcome and does not
        stop the others.

        Args:
            links: Mapping of link id to URL

        Returns:
            One RefreshOutcome per link, in input order
        """
        semaphore = asyncio.Semaphore(max(1, self.fetcher.config.max_concurrent_requests))

        async def refresh(link_id: str, url: str) -> RefreshOutcome:
            async with semaphore:
                try:
                    result = await self.cache_link(link_id, url)
                except ToteError as e:
                    log.warning("Could not refresh %s (%s): %s", link_id, url, e)
                    return RefreshOutcome(id=link_id, url=url, error=str(e))
            return RefreshOutcome(id=link_id, url=url, result=result)

        outcomes = await asyncio.gather(*(refresh(link_id, url) for link_id, url in links.items()))
        return list(outcomes)


# Global cache instance
_link_cache: Optional[LinkCache] = None


def get_link_cache() -> LinkCache:
    """Get or create the global link cache.

    Returns:
        LinkCache rooted at the configured cache directory
    """
    global _link_cache

    if _link_cache is None:
        _link_cache = LinkCache()

    return _link_cache
