"""URL helpers for resolving page references and naming cached assets."""
import re
from typing import Optional
from urllib.parse import SplitResult, quote, urljoin, urlsplit

EXTENSION_PATTERN = re.compile(r"^[a-z0-9]{1,8}$")

FAVICON_SERVICE_URL = "https://www.google.com/s2/favicons?domain={domain}&sz=64"


def parse_source_url(url: str) -> Optional[SplitResult]:
    """Parse a page URL, returning None unless it has a scheme and a host.

    Host-less URLs such as ``file:///page.html`` are rejected, so they get
    neither relative resolution nor a ``/favicon.ico`` fallback.

    Args:
        url: URL the page was requested from

    Returns:
        Split URL or None if it cannot serve as a base for resolution
    """
    try:
        parsed = urlsplit(url.strip())
    except (ValueError, AttributeError):
        return None

    if not parsed.scheme or not parsed.netloc:
        return None

    return parsed


def _url_host(parsed: SplitResult) -> Optional[str]:
    hostname = parsed.hostname
    if not hostname:
        return None
    # IPv6 literals keep their brackets
    if ":" in hostname:
        return f"[{hostname}]"
    return hostname


def host_of(url: str) -> Optional[str]:
    """Return the host of a URL without port, or None if it does not parse."""
    parsed = parse_source_url(url)
    if parsed is None:
        return None
    return _url_host(parsed)


def resolve_url(candidate: str, source_url: str) -> Optional[str]:
    """Resolve a possibly relative reference against the page URL.

    Anything starting with ``http`` is taken as absolute and returned as is,
    without further validation (so ``httpfoo:bar`` passes through too).

    Args:
        candidate: href/src/content value found in the markup
        source_url: URL the page was requested from

    Returns:
        Absolute URL, or None if the reference cannot be resolved
    """
    candidate = candidate.strip()
    if not candidate:
        return None

    if candidate.startswith("http"):
        return candidate

    base = parse_source_url(source_url)
    if base is None:
        return None

    try:
        return urljoin(base.geturl(), candidate)
    except ValueError:
        return None


def favicon_url(source_url: str) -> Optional[str]:
    """Build the conventional ``/favicon.ico`` URL for the page's host.

    The resource is not checked for existence.
    """
    parsed = parse_source_url(source_url)
    if parsed is None:
        return None
    return f"{parsed.scheme}://{_url_host(parsed) or ''}/favicon.ico"


def favicon_service_url(source_url: str) -> Optional[str]:
    """URL of a public favicon service for the page's host."""
    host = host_of(source_url)
    if host is None:
        return None
    return FAVICON_SERVICE_URL.format(domain=quote(host, safe=""))


def asset_extension(url: str, default: str) -> str:
    """Derive a file extension for a downloaded asset from its URL path.

    Only the last path segment is considered and the query string is
    ignored, so ``/img/logo.svg?v=2`` gives ``svg``.

    Args:
        url: Remote asset URL
        default: Extension to use when the path has none

    Returns:
        Lowercase extension without the dot
    """
    try:
        path = urlsplit(url).path
    except ValueError:
        return default

    segment = path.rsplit("/", 1)[-1]
    if "." not in segment:
        return default

    extension = segment.rsplit(".", 1)[-1].lower()
    if not EXTENSION_PATTERN.match(extension):
        return default

    return extension
