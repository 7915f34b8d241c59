"""Workflow MCP Tools.

Tools for loading IFC models into the registry and running workflow graphs
against them.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.types import TextContent, Tool

from ifc_flow.domain.exceptions import DomainError
from ifc_flow.domain.models.node_kind import NodeKind
from ifc_flow.infrastructure.di.container import container
from ifc_flow.shared.logging import get_logger

logger = get_logger(__name__)


def register_workflow_tools(server: Server) -> None:
    """Register workflow MCP tools.

    Args:
        server: MCP Server instance
    """

    @server.list_tools()
    async def list_workflow_tools() -> list[Tool]:
        """List available workflow tools."""
        return [
            Tool(
                name="ifc_flow_load_model",
                description="Load an IFC file into the model registry. Returns the model id used by source nodes.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "file_path": {
                            "type": "string",
                            "description": "Path to the IFC file to load",
                        },
                        "model_id": {
                            "type": "string",
                            "description": "Optional registry key (defaults to the file name)",
                        },
                    },
                    "required": ["file_path"],
                },
            ),
            Tool(
                name="ifc_flow_list_models",
                description="List the models currently loaded in the registry.",
                inputSchema={"type": "object", "properties": {}},
            ),
            Tool(
                name="ifc_flow_list_node_kinds",
                description="List the node kinds a workflow graph may use, with their input ports.",
                inputSchema={"type": "object", "properties": {}},
            ),
            Tool(
                name="ifc_flow_run_workflow",
                description=(
                    "Run a workflow graph ({nodes, edges}) once and return the result "
                    "of every node. Validation problems are returned without running anything."
                ),
                inputSchema={
                    "type": "object",
                    "properties": {
                        "graph": {
                            "type": "object",
                            "description": "Workflow graph with 'nodes' and 'edges' arrays",
                        },
                        "include_elements": {
                            "type": "boolean",
                            "description": "Include full element data in element results",
                            "default": False,
                        },
                    },
                    "required": ["graph"],
                },
            ),
        ]

    @server.call_tool()
    async def call_workflow_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle workflow tool calls."""
        try:
            if name == "ifc_flow_load_model":
                return await _load_model(arguments)
            elif name == "ifc_flow_list_models":
                return _list_models()
            elif name == "ifc_flow_list_node_kinds":
                return _list_node_kinds()
            elif name == "ifc_flow_run_workflow":
                return await _run_workflow(arguments)
            else:
                return [TextContent(type="text", text=f"Unknown tool: {name}")]
        except DomainError as e:
            logger.warning("Tool rejected", tool=name, error=str(e))
            return [TextContent(type="text", text=f"Error: {e}")]
        except Exception as e:
            logger.error("Tool error", tool=name, error=str(e))
            return [TextContent(type="text", text=f"Error: {str(e)}")]


def _json(data: Any) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(data, indent=2, default=str))]


async def _load_model(args: dict[str, Any]) -> list[TextContent]:
    """Load an IFC file."""
    file_path = Path(args["file_path"])
    if not file_path.exists():
        return [TextContent(type="text", text=f"File not found: {file_path}")]

    result = await container.get_import_service().import_file(file_path, model_id=args.get("model_id"))
    return _json({"status": "success", **result.to_dict()})


def _list_models() -> list[TextContent]:
    registry = container.registry
    return _json({
        "total": len(registry),
        "latest": registry.latest_id,
        "models": registry.list_models(),
    })


def _list_node_kinds() -> list[TextContent]:
    return _json([
        {
            "kind": kind.value,
            "inputs": [{"name": port.name, "multiple": port.multiple} for port in kind.input_ports],
        }
        for kind in NodeKind
    ])


async def _run_workflow(args: dict[str, Any]) -> list[TextContent]:
    """Run a workflow graph."""
    outcome = await container.get_executor().run(args["graph"])
    if outcome.is_failure():
        error = outcome.error
        if hasattr(error, "to_dict"):
            return _json({"status": "invalid", **error.to_dict()})
        return _json({"status": "error", "message": str(error)})

    report = outcome.unwrap()
    data = report.to_dict()
    if not args.get("include_elements", False):
        data["results"] = {
            node_id: _compact(report.results.get(node_id), entry)
            for node_id, entry in data["results"].items()
        }
    return _json({"status": "success" if report.succeeded else "partial", **data})


def _compact(result: Any, entry: dict[str, Any]) -> dict[str, Any]:
    """Element ids instead of full element data."""
    if entry.get("kind") != "elements":
        return entry
    compact = {key: value for key, value in entry.items() if key != "elements"}
    compact["element_ids"] = [element.id for element in result.elements]
    return compact
