"""Main entry point for the Tote link cache server."""
import asyncio
import logging
import sys

from tote.server import main as run_server


def main() -> None:
    # stdout carries the MCP protocol
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
