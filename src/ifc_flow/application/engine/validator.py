"""Graph Validator.

Checks a submitted workflow graph before anything runs. Structural problems
are collected and reported together; cycle detection runs once the structure
is sound.
"""
from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass

from pydantic import ValidationError

from ifc_flow.domain.exceptions import (
    CycleDetectedError,
    GraphValidationError,
    UnknownNodeKindError,
    ValidationIssue,
)
from ifc_flow.domain.models.graph import EdgeSpec, Node, WorkflowGraph
from ifc_flow.domain.models.node_config import parse_config
from ifc_flow.domain.models.node_kind import OUTPUT_PORT, NodeKind
from ifc_flow.shared.logging import get_logger

logger = get_logger(__name__)

WHITE, GRAY, BLACK = 0, 1, 2


@dataclass(frozen=True)
class ValidatedGraph:
    """Graph that passed validation: typed nodes plus checked edges."""

    nodes: dict[str, Node]
    edges: tuple[EdgeSpec, ...]


def _config_issues(node_id: str, error: ValidationError) -> list[ValidationIssue]:
    issues = []
    for detail in error.errors():
        option = ".".join(str(part) for part in detail.get("loc", ())) or "config"
        issues.append(ValidationIssue(
            code="invalid_config",
            message=f"Node '{node_id}' option '{option}': {detail.get('msg', 'invalid value')}",
            node_id=node_id,
        ))
    return issues


def _validate_nodes(graph: WorkflowGraph, issues: list[ValidationIssue]) -> dict[str, Node]:
    nodes: dict[str, Node] = {}
    counts = Counter(spec.id for spec in graph.nodes)
    for node_id, count in sorted(counts.items()):
        if count > 1:
            issues.append(ValidationIssue(
                code="duplicate_node",
                message=f"Node id '{node_id}' is used {count} times",
                node_id=node_id,
            ))

    for spec in graph.nodes:
        if counts[spec.id] > 1:
            continue
        try:
            kind = NodeKind.from_string(spec.kind)
        except UnknownNodeKindError as e:
            issues.append(ValidationIssue(code="unknown_kind", message=e.message, node_id=spec.id))
            continue
        try:
            config = parse_config(kind, spec.config)
        except ValidationError as e:
            issues.extend(_config_issues(spec.id, e))
            continue
        nodes[spec.id] = Node(id=spec.id, kind=kind, config=config, label=spec.label)
    return nodes


def _validate_edges(
    graph: WorkflowGraph,
    nodes: dict[str, Node],
    issues: list[ValidationIssue],
) -> None:
    known_ids = {spec.id for spec in graph.nodes}
    fan_in: Counter[tuple[str, str]] = Counter()

    for index, edge in enumerate(graph.edges):
        missing = [end for end in (edge.source, edge.target) if end not in known_ids]
        for end in missing:
            issues.append(ValidationIssue(
                code="missing_node",
                message=f"Edge {index} references unknown node '{end}'",
                node_id=end,
                edge_index=index,
            ))
        if missing:
            continue

        if edge.source == edge.target:
            issues.append(ValidationIssue(
                code="self_loop",
                message=f"Edge {index} connects node '{edge.source}' to itself",
                node_id=edge.source,
                edge_index=index,
            ))
            continue

        if edge.source_port != OUTPUT_PORT:
            issues.append(ValidationIssue(
                code="unknown_port",
                message=f"Edge {index}: node '{edge.source}' has no output port '{edge.source_port}'",
                node_id=edge.source,
                edge_index=index,
            ))

        target = nodes.get(edge.target)
        if target is None:
            # Target already reported (unknown kind, bad config, duplicate)
            continue
        port = target.kind.port(edge.target_port)
        if port is None:
            issues.append(ValidationIssue(
                code="unknown_port",
                message=(
                    f"Edge {index}: {target.kind.value} node '{edge.target}' "
                    f"has no input port '{edge.target_port}'"
                ),
                node_id=edge.target,
                edge_index=index,
            ))
            continue

        fan_in[(edge.target, edge.target_port)] += 1
        if not port.multiple and fan_in[(edge.target, edge.target_port)] == 2:
            issues.append(ValidationIssue(
                code="port_fan_in",
                message=f"Input port '{edge.target_port}' of node '{edge.target}' accepts one edge",
                node_id=edge.target,
                edge_index=index,
            ))


def find_cycle(node_ids: list[str], edges: tuple[EdgeSpec, ...]) -> list[str] | None:
    """Three-color depth-first search in node-id order.

    Returns:
        The first cycle found as a node path (first and last entry equal),
        or None for an acyclic graph
    """
    successors: dict[str, set[str]] = defaultdict(set)
    for edge in edges:
        successors[edge.source].add(edge.target)
    ordered = {node_id: sorted(successors[node_id]) for node_id in node_ids}

    color = dict.fromkeys(node_ids, WHITE)
    for start in sorted(node_ids):
        if color[start] != WHITE:
            continue
        color[start] = GRAY
        path = [start]
        stack = [iter(ordered[start])]
        while stack:
            for child in stack[-1]:
                if color[child] == GRAY:
                    return [*path[path.index(child):], child]
                if color[child] == WHITE:
                    color[child] = GRAY
                    path.append(child)
                    stack.append(iter(ordered[child]))
                    break
            else:
                color[path.pop()] = BLACK
                stack.pop()
    return None


def validate_graph(graph: WorkflowGraph) -> ValidatedGraph:
    """Validate a workflow graph.

    Args:
        graph: Submitted graph document

    Returns:
        ValidatedGraph with typed nodes

    Raises:
        GraphValidationError: With every structural issue found
        CycleDetectedError: If the graph is structurally sound but cyclic
    """
    issues: list[ValidationIssue] = []
    nodes = _validate_nodes(graph, issues)
    _validate_edges(graph, nodes, issues)
    if issues:
        raise GraphValidationError(issues)

    edges = tuple(graph.edges)
    cycle = find_cycle(list(nodes), edges)
    if cycle is not None:
        raise CycleDetectedError(cycle[0], cycle)

    logger.debug("Graph validated", nodes=len(nodes), edges=len(edges))
    return ValidatedGraph(nodes=nodes, edges=edges)
