"""Domain Layer.

Contains the element model, workflow graph types, node results and the
collaborator interfaces. This layer has NO framework dependencies beyond
pydantic for validating submitted documents.
"""
from __future__ import annotations

from ifc_flow.domain.exceptions import (
    CycleDetectedError,
    DomainError,
    ExecutionError,
    ExportError,
    GraphValidationError,
    IfcFileNotFoundError,
    IfcImportError,
    IfcParseError,
    ModelNotFoundError,
    NodeExecutionError,
    NodeTimeoutError,
    UnsupportedIfcSchemaError,
    ValidationIssue,
)
from ifc_flow.domain.interfaces import ExportRequest, IModelProvider, IModelWriter
from ifc_flow.domain.models import (
    Element,
    Model,
    Node,
    NodeKind,
    NodeResult,
    WorkflowGraph,
)

__all__ = [
    # Exceptions
    "DomainError",
    "GraphValidationError",
    "ValidationIssue",
    "CycleDetectedError",
    "NodeExecutionError",
    "NodeTimeoutError",
    "ModelNotFoundError",
    "ExportError",
    "ExecutionError",
    "IfcImportError",
    "IfcFileNotFoundError",
    "IfcParseError",
    "UnsupportedIfcSchemaError",
    # Models
    "Element",
    "Model",
    "Node",
    "NodeKind",
    "NodeResult",
    "WorkflowGraph",
    # Interfaces
    "IModelProvider",
    "IModelWriter",
    "ExportRequest",
]
