"""MCP Tools registration.

The MCP server keeps one list/call handler pair, so all tools are registered
from a single module.
"""
from __future__ import annotations

from mcp.server import Server

from ifc_flow.presentation.tools.workflow_tools import register_workflow_tools


def register_all_tools(server: Server) -> None:
    """Register every MCP tool with the server."""
    register_workflow_tools(server)


__all__ = [
    "register_all_tools",
    "register_workflow_tools",
]
