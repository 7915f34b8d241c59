"""IFC Flow MCP Server.

Main MCP server setup.
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from mcp.server import Server
from mcp.server.stdio import stdio_server

from ifc_flow.infrastructure.di.container import container
from ifc_flow.presentation.tools import register_all_tools
from ifc_flow.shared.config import settings
from ifc_flow.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_server() -> Server:
    """Create and configure the MCP server.

    Returns:
        Configured MCP Server instance
    """
    server = Server(settings.app_name)

    # Register all tools
    register_all_tools(server)

    return server


@asynccontextmanager
async def lifespan() -> AsyncGenerator[None, None]:
    """Manage server lifecycle.

    Loaded models live in memory and are dropped on shutdown.
    """
    logger.info(
        "Starting IFC Flow Server",
        version=settings.app_version,
        max_concurrency=settings.max_concurrency,
    )
    try:
        yield
    finally:
        logger.info("Releasing models", models=len(container.registry))
        container.reset()
        logger.info("IFC Flow Server stopped")


async def run_server() -> None:
    """Run the MCP server."""
    setup_logging()
    server = create_server()

    async with lifespan():
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )


def main() -> None:
    """Entry point for the MCP server."""
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
