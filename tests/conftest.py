"""Shared fixtures for tests."""
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from tote.config import FetchConfig
from tote.fetch import Fetcher


ARTICLE_URL = "https://example.com/articles/python"

ARTICLE_HTML = """<!DOCTYPE html>
<html>
<head>
    <title>  Fallback Title  </title>
    <meta property="og:title" content="  Python Tips  ">
    <meta property="og:description" content=" Ten tips for cleaner code. ">
    <meta property="og:image" content="/static/cover.webp">
    <meta name="description" content="Plain description">
    <link rel="apple-touch-icon" href="/img/logo.svg?v=2">
    <link rel="icon" href="/favicon.png">
</head>
<body><p>Hello</p></body>
</html>
"""

BARE_HTML = "<html><head></head><body>No metadata here</body></html>"


def page(body: Any = "", status: int = 200, content_type: str = "text/html; charset=utf-8",
         headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Describe a canned response for the mock transport."""
    content = body.encode("utf-8") if isinstance(body, str) else body
    all_headers = {"Content-Type": content_type}
    all_headers.update(headers or {})
    return {"status": status, "content": content, "headers": all_headers}


class RecordingTransport(httpx.MockTransport):
    """Mock transport serving canned responses by URL and recording requests.

    Route values are either a ``page(...)`` dict or an exception to raise.
    Unknown URLs get a 404.
    """

    def __init__(self, routes: Dict[str, Any]):
        self.routes = routes
        self.requests: List[httpx.Request] = []
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        target = self.routes.get(str(request.url))

        if target is None:
            return httpx.Response(404, text="not found")
        if isinstance(target, Exception):
            raise target

        return httpx.Response(
            target["status"],
            content=target["content"],
            headers=target["headers"],
        )

    @property
    def requested_urls(self) -> List[str]:
        return [str(request.url) for request in self.requests]


@pytest.fixture
def routes():
    """URL -> canned response mapping; tests fill it in."""
    return {}


@pytest.fixture
def transport(routes):
    return RecordingTransport(routes)


@pytest_asyncio.fixture
async def fetcher(transport):
    """Fetcher wired to the mock transport."""
    f = Fetcher(FetchConfig(), transport=transport)
    yield f
    await f.close()


@pytest.fixture
def cache_dir(tmp_path):
    """Return path for a temporary cache root."""
    return tmp_path / "cache"
