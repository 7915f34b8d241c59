"""Result Store.

Write-once map from node id to the node's result for one execution pass.
"""
from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from ifc_flow.domain.exceptions import ResultAlreadyRecordedError
from ifc_flow.domain.models.result import NodeResult, is_error


class ResultStore:
    """Append-only node results."""

    def __init__(self) -> None:
        self._results: dict[str, NodeResult] = {}

    def record(self, node_id: str, result: NodeResult) -> None:
        """Store a node's result.

        Raises:
            ResultAlreadyRecordedError: If the node already has a result
        """
        if node_id in self._results:
            raise ResultAlreadyRecordedError(node_id)
        self._results[node_id] = result

    def get(self, node_id: str) -> NodeResult | None:
        return self._results.get(node_id)

    def items(self) -> list[tuple[str, NodeResult]]:
        return list(self._results.items())

    def failures(self) -> dict[str, NodeResult]:
        """Nodes that ended with an error marker."""
        return {node_id: result for node_id, result in self._results.items() if is_error(result)}

    def ok(self, node_id: str) -> bool:
        """Whether the node produced a usable value."""
        result = self._results.get(node_id)
        return result is not None and not is_error(result)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {node_id: result.to_dict() for node_id, result in self._results.items()}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._results

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[str]:
        return iter(self._results)
