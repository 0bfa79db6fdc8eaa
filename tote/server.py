"""MCP server exposing the link preview and cache operations as tools."""
import json
import logging
from typing import Any, Dict, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from tote.cache import get_link_cache
from tote.config import get_config
from tote.errors import CacheError, ToteError
from tote.preview import fetch_link_metadata, preview_link

log = logging.getLogger(__name__)

SERVER_NAME = "tote-link-cache"

PREVIEW_FAILED = "Could not load preview"
CACHE_FAILED = "Could not save link content"
REMOVE_FAILED = "Could not remove cached content"


def _json_result(data: Any) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(data, indent=2))]


def _error_result(message: str, error: Exception) -> list[TextContent]:
    return [TextContent(type="text", text=f"Error: {message}: {error}")]


def invalid_links_message(links: Any) -> Optional[str]:
    """Describe what is wrong with a refresh_links argument, or None if it is usable."""
    if not isinstance(links, dict):
        return "'links' must be an object of id -> url"
    for link_id, url in links.items():
        if not isinstance(link_id, str) or not isinstance(url, str):
            return f"'links' entries must map string ids to string URLs (got {link_id!r}: {url!r})"
    return None


async def health_check_tool() -> list[TextContent]:
    """Tool handler for health_check."""
    config = get_config()
    return _json_result({
        "status": "ok",
        "cache_dir": str(config.cache_dir),
        "request_timeout": config.fetch.request_timeout,
        "parallel_assets": config.fetch.parallel_assets,
    })


async def fetch_link_metadata_tool(url: str, fallback: bool = False) -> list[TextContent]:
    """Tool handler for fetch_link_metadata.

    Args:
        url: Page URL to preview
        fallback: Return a URL-only preview instead of an error when the
            page cannot be fetched

    Returns:
        List of TextContent with the metadata as JSON
    """
    try:
        if fallback:
            metadata = await preview_link(url)
        else:
            metadata = await fetch_link_metadata(url)
    except ToteError as e:
        log.warning("Preview failed for %s: %s", url, e)
        return _error_result(PREVIEW_FAILED, e)

    return _json_result(metadata.to_dict())


async def cache_link_tool(link_id: str, url: str) -> list[TextContent]:
    """Tool handler for cache_link.

    Args:
        link_id: Id of the saved link
        url: Page URL

    Returns:
        List of TextContent with the cache result as JSON
    """
    try:
        result = await get_link_cache().cache_link(link_id, url)
    except ToteError as e:
        log.warning("Caching %s (%s) failed: %s", link_id, url, e)
        return _error_result(CACHE_FAILED, e)

    return _json_result(result.to_dict())


async def remove_cached_link_tool(link_id: str) -> list[TextContent]:
    """Tool handler for remove_cached_link."""
    try:
        removed = await get_link_cache().remove_cached_link(link_id)
    except CacheError as e:
        log.warning("Removing %s failed: %s", link_id, e)
        return _error_result(REMOVE_FAILED, e)

    return _json_result({"id": link_id, "status": "removed" if removed else "not_cached"})


async def refresh_links_tool(links: Dict[str, str]) -> list[TextContent]:
    """Tool handler for refresh_links.

    Args:
        links: Mapping of link id to URL

    Returns:
        List of TextContent with per-link outcomes as JSON
    """
    outcomes = await get_link_cache().refresh_links(links)
    refreshed = sum(1 for outcome in outcomes if outcome.ok)

    return _json_result({
        "refreshed": refreshed,
        "failed": len(outcomes) - refreshed,
        "results": [outcome.to_dict() for outcome in outcomes],
    })


def create_server() -> Server:
    """Create and configure the MCP server.

    Returns:
        Configured Server instance
    """
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return [
            Tool(
                name="health_check",
                description="Report the cache location and fetch settings.",
                inputSchema={"type": "object", "properties": {}},
            ),
            Tool(
                name="fetch_link_metadata",
                description="Fetch a page and return its preview metadata (title, description, icon URL, image URL) without saving anything.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "url": {"type": "string", "description": "Page URL"},
                        "fallback": {
                            "type": "boolean",
                            "description": "Return a preview built from the URL alone (host as title, favicon service icon) if the page cannot be fetched",
                            "default": False
                        }
                    },
                    "required": ["url"]
                }
            ),
            Tool(
                name="cache_link",
                description="Save an offline copy of a page plus its icon and preview image under the given link id, and return the metadata and local file paths.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "id": {"type": "string", "description": "Id of the saved link"},
                        "url": {"type": "string", "description": "Page URL"}
                    },
                    "required": ["id", "url"]
                }
            ),
            Tool(
                name="remove_cached_link",
                description="Delete the cached copy of a saved link. Succeeds if nothing is cached.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "id": {"type": "string", "description": "Id of the saved link"}
                    },
                    "required": ["id"]
                }
            ),
            Tool(
                name="refresh_links",
                description="Re-cache several saved links at once. Takes a mapping of link id to URL.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "links": {
                            "type": "object",
                            "additionalProperties": {"type": "string"},
                            "description": "Mapping of link id to URL"
                        }
                    },
                    "required": ["links"]
                }
            ),
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: Any) -> list[TextContent]:
        """Handle tool calls."""
        arguments = arguments or {}

        if name == "health_check":
            return await health_check_tool()
        elif name == "fetch_link_metadata":
            url = arguments.get("url", "")
            if not url:
                return [TextContent(type="text", text="Error: 'url' parameter is required")]
            return await fetch_link_metadata_tool(url, bool(arguments.get("fallback", False)))
        elif name == "cache_link":
            link_id = arguments.get("id", "")
            url = arguments.get("url", "")
            if not link_id or not url:
                return [TextContent(type="text", text="Error: 'id' and 'url' parameters are required")]
            return await cache_link_tool(link_id, url)
        elif name == "remove_cached_link":
            link_id = arguments.get("id", "")
            if not link_id:
                return [TextContent(type="text", text="Error: 'id' parameter is required")]
            return await remove_cached_link_tool(link_id)
        elif name == "refresh_links":
            links = arguments.get("links") or {}
            problem = invalid_links_message(links)
            if problem:
                return [TextContent(type="text", text=f"Error: {problem}")]
            return await refresh_links_tool(links)
        else:
            raise ValueError(f"Unknown tool: {name}")

    return server


async def main():
    """Main entry point for the MCP server."""
    server = create_server()

    async with stdio_server() as (read_stream, write_stream):
        initialization_options = server.create_initialization_options()
        await server.run(read_stream, write_stream, initialization_options)
