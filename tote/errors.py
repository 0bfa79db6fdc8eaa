"""Error types raised by the link cache."""
from typing import Optional


class ToteError(Exception):
    """Base class for all link cache errors."""


class ClientBuildError(ToteError):
    """The HTTP client could not be constructed."""


class FetchError(ToteError):
    """A page or asset could not be fetched or decoded."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{message}: {url}")
        self.url = url
        self.status_code = status_code


class CacheError(ToteError):
    """Base class for local storage failures of a cache entry."""


class InvalidLinkIdError(CacheError, ValueError):
    """A link id is not usable as a single directory name."""


class DirectoryCreateError(CacheError):
    """The per-link cache directory could not be created."""


class WriteError(CacheError):
    """A cache file could not be written."""


class DeleteError(CacheError):
    """A cache entry could not be removed."""
