"""Dependency Resolver / Scheduler.

Builds a networkx graph over a validated workflow and answers the questions
the executor asks: in which order nodes run, which nodes a node waits for, and
which upstream results feed each of its input ports.
"""
from __future__ import annotations

from collections import defaultdict

import networkx as nx

from ifc_flow.application.engine.result_store import ResultStore
from ifc_flow.application.engine.validator import ValidatedGraph
from ifc_flow.application.nodes.base import NodeInputs
from ifc_flow.domain.models.graph import Node
from ifc_flow.domain.models.result import NodeResult


class ExecutionPlan:
    """Execution order and wiring for one validated graph."""

    def __init__(self, graph: ValidatedGraph) -> None:
        self._nodes = graph.nodes
        self._graph: nx.MultiDiGraph = nx.MultiDiGraph()
        for node_id in graph.nodes:
            self._graph.add_node(node_id)
        for index, edge in enumerate(graph.edges):
            self._graph.add_edge(edge.source, edge.target, key=index, target_port=edge.target_port)
        # Ties between ready nodes are broken by node id
        self._order = list(nx.lexicographical_topological_sort(self._graph))

    @property
    def order(self) -> list[str]:
        return list(self._order)

    def node(self, node_id: str) -> Node:
        return self._nodes[node_id]

    def predecessors(self, node_id: str) -> list[str]:
        """Distinct upstream node ids, sorted."""
        return sorted(set(self._graph.predecessors(node_id)))

    def downstream_of(self, node_id: str) -> set[str]:
        """Every node that transitively depends on ``node_id``."""
        return nx.descendants(self._graph, node_id)

    def inputs_for(self, node_id: str, store: ResultStore) -> NodeInputs:
        """Collect upstream results per input port.

        Edges into the same port are ordered by source id, then by their
        position in the submitted edge list.

        Raises:
            KeyError: If an upstream node has no result yet
        """
        incoming = sorted(
            self._graph.in_edges(node_id, keys=True, data="target_port"),
            key=lambda edge: (edge[0], edge[2]),
        )
        ports: dict[str, list[NodeResult]] = defaultdict(list)
        for source, _target, _key, port in incoming:
            result = store.get(source)
            if result is None:
                raise KeyError(f"No result for upstream node '{source}'")
            ports[port].append(result)
        return NodeInputs(ports={port: tuple(results) for port, results in ports.items()})
