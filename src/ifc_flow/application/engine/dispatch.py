"""Node dispatch table.

Maps each node kind to a coroutine that evaluates it. Synchronous semantic
functions run in a worker thread so large collections do not block the event
loop; source and native export await their collaborators directly.
"""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from ifc_flow.application.nodes import (
    NodeInputs,
    pass_through,
    run_analysis,
    run_classification,
    run_filter,
    run_geometry,
    run_native_export,
    run_parameter,
    run_property,
    run_quantity,
    run_relationship,
    run_source,
    run_spatial,
    run_text_export,
    run_transform,
)
from ifc_flow.application.nodes.export import TEXT_FORMATS
from ifc_flow.domain.interfaces import IModelProvider, IModelWriter
from ifc_flow.domain.models.graph import Node
from ifc_flow.domain.models.node_kind import NodeKind
from ifc_flow.domain.models.result import NodeResult


@dataclass(frozen=True)
class DispatchContext:
    """Collaborators available to node handlers during a run."""

    provider: IModelProvider
    writer: IModelWriter | None = None


Handler = Callable[[Node, NodeInputs, DispatchContext], Awaitable[NodeResult]]


def threaded(function: Callable[[NodeInputs, Any], NodeResult]) -> Handler:
    """Wrap a synchronous ``f(inputs, config)`` as a handler."""

    async def handler(node: Node, inputs: NodeInputs, context: DispatchContext) -> NodeResult:
        return await asyncio.to_thread(function, inputs, node.config)

    handler.__name__ = function.__name__
    return handler


async def _source(node: Node, inputs: NodeInputs, context: DispatchContext) -> NodeResult:
    return await run_source(node.config, context.provider)


async def _parameter(node: Node, inputs: NodeInputs, context: DispatchContext) -> NodeResult:
    return run_parameter(node.config)


async def _export(node: Node, inputs: NodeInputs, context: DispatchContext) -> NodeResult:
    if node.config.format in TEXT_FORMATS:
        return await asyncio.to_thread(run_text_export, inputs, node.config)
    return await run_native_export(inputs, node.config, context.writer)


async def _observe(node: Node, inputs: NodeInputs, context: DispatchContext) -> NodeResult:
    return pass_through(inputs)


HANDLERS: dict[NodeKind, Handler] = {
    NodeKind.SOURCE: _source,
    NodeKind.PARAMETER: _parameter,
    NodeKind.GEOMETRY: threaded(run_geometry),
    NodeKind.FILTER: threaded(run_filter),
    NodeKind.TRANSFORM: threaded(run_transform),
    NodeKind.QUANTITY: threaded(run_quantity),
    NodeKind.PROPERTY: threaded(run_property),
    NodeKind.CLASSIFICATION: threaded(run_classification),
    NodeKind.SPATIAL: threaded(run_spatial),
    NodeKind.RELATIONSHIP: threaded(run_relationship),
    NodeKind.ANALYSIS: threaded(run_analysis),
    NodeKind.EXPORT: _export,
    NodeKind.WATCH: _observe,
    NodeKind.VIEWER: _observe,
}


async def dispatch(node: Node, inputs: NodeInputs, context: DispatchContext) -> NodeResult:
    """Evaluate one node."""
    return await HANDLERS[node.kind](node, inputs, context)
