"""Process entry point for the GIS format conversion MCP server."""

from __future__ import annotations

import asyncio
import logging
import sys

from .core.context import create_context
from .core.mcp_server import GisFormatMCPServer
from .core.utils.config import get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout carries the MCP stream."""
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> int:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    logger.info("[Setup] Initializing GIS Format Conversion MCP server...")

    context = create_context(settings)
    server = GisFormatMCPServer(context)
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
