"""Watch and viewer nodes: identity pass-through for inspection."""
from __future__ import annotations

from ifc_flow.application.nodes.base import NodeInputs
from ifc_flow.domain.exceptions import InvalidNodeInputError
from ifc_flow.domain.models.node_kind import INPUT_PORT
from ifc_flow.domain.models.result import ElementsResult, NodeResult


def pass_through(inputs: NodeInputs) -> NodeResult:
    """Return the input unchanged.

    A single upstream result of any kind is returned as is. Several element
    collections are concatenated in edge order.
    """
    results = inputs.results(INPUT_PORT)
    if not results:
        return ElementsResult()
    if len(results) == 1:
        return results[0]
    if not all(isinstance(result, ElementsResult) for result in results):
        kinds = ", ".join(sorted({result.kind for result in results}))
        raise InvalidNodeInputError(INPUT_PORT, "element collections to combine", kinds)
    return inputs.elements(INPUT_PORT)
