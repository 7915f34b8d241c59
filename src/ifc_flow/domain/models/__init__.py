"""Domain Models.

Core domain entities: elements, models, workflow graphs and node results.
"""
from __future__ import annotations

from ifc_flow.domain.models.element import (
    Classification,
    Element,
    PropertyInfo,
    Transform,
    element_id,
)
from ifc_flow.domain.models.graph import (
    EdgeSpec,
    Node,
    NodeSpec,
    WorkflowGraph,
)
from ifc_flow.domain.models.model import (
    IfcSchemaVersion,
    Model,
    ProjectInfo,
)
from ifc_flow.domain.models.node_kind import NodeKind, PortSpec
from ifc_flow.domain.models.result import (
    AggregateResult,
    BinaryResult,
    Cancelled,
    DependencyFailure,
    ElementsResult,
    NodeFailure,
    NodeResult,
    TextResult,
    ValueResult,
)

__all__ = [
    # Element
    "Element",
    "Classification",
    "Transform",
    "PropertyInfo",
    "element_id",
    # Model
    "Model",
    "ProjectInfo",
    "IfcSchemaVersion",
    # Graph
    "NodeKind",
    "PortSpec",
    "NodeSpec",
    "EdgeSpec",
    "WorkflowGraph",
    "Node",
    # Results
    "NodeResult",
    "ElementsResult",
    "AggregateResult",
    "ValueResult",
    "TextResult",
    "BinaryResult",
    "NodeFailure",
    "DependencyFailure",
    "Cancelled",
]
