"""Presentation layer: MCP server and REST API."""
from __future__ import annotations

from ifc_flow.presentation.server import main

__all__ = ["main"]
