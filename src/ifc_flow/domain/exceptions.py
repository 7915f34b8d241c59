"""Domain layer exceptions.

All domain-specific exceptions inherit from DomainError.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class DomainError(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


# =============================================================================
# Graph validation
# =============================================================================


@dataclass(frozen=True)
class ValidationIssue:
    """One structural problem found in a submitted graph."""

    code: str
    message: str
    node_id: str | None = None
    edge_index: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "node_id": self.node_id,
            "edge_index": self.edge_index,
        }


class GraphValidationError(DomainError):
    """Graph or node configuration is malformed; execution never starts."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = list(issues)
        summary = "; ".join(issue.message for issue in self.issues)
        super().__init__(
            f"Invalid workflow graph: {summary}",
            {"issue_count": len(self.issues)},
        )

    @property
    def first(self) -> ValidationIssue:
        return self.issues[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "validation_error",
            "message": self.message,
            "issues": [issue.to_dict() for issue in self.issues],
        }


class CycleDetectedError(GraphValidationError):
    def __init__(self, node_id: str, path: list[str]) -> None:
        issue = ValidationIssue(
            code="cycle",
            message=f"Workflow contains a cycle at node '{node_id}': {' -> '.join(path)}",
            node_id=node_id,
        )
        super().__init__([issue])
        self.node_id = node_id
        self.path = path


class UnknownNodeKindError(DomainError):
    def __init__(self, kind: str) -> None:
        super().__init__(f"Unknown node kind: {kind}")
        self.kind = kind


# =============================================================================
# Execution
# =============================================================================


class NodeExecutionError(DomainError):
    """A node's semantic function failed.

    Recorded against the node and propagated to dependents as a dependency
    failure; sibling branches keep running.
    """


class InvalidNodeInputError(NodeExecutionError):
    def __init__(self, port: str, expected: str, actual: str) -> None:
        super().__init__(
            f"Port '{port}' expects {expected}, got {actual}",
            {"port": port},
        )
        self.port = port


class UnsupportedOperatorError(NodeExecutionError):
    def __init__(self, filter_type: str, operator: str, supported: list[str]) -> None:
        super().__init__(
            f"Operator '{operator}' is not supported for filter type '{filter_type}'",
            {"supported_operators": supported},
        )
        self.filter_type = filter_type
        self.operator = operator


class NodeTimeoutError(NodeExecutionError):
    def __init__(self, node_id: str, timeout: float) -> None:
        super().__init__(
            f"Node '{node_id}' timed out after {timeout} seconds",
            {"node_id": node_id, "timeout_seconds": timeout},
        )
        self.node_id = node_id
        self.timeout = timeout


class ModelNotFoundError(NodeExecutionError):
    def __init__(self, model_id: str | None) -> None:
        if model_id:
            message = f"Model not found: {model_id}"
        else:
            message = "No IFC model loaded. Load an IFC file first."
        super().__init__(message)
        self.model_id = model_id


class ExportError(NodeExecutionError):
    def __init__(self, export_format: str, reason: str) -> None:
        super().__init__(f"Export to {export_format} failed: {reason}", {"format": export_format})
        self.export_format = export_format
        self.reason = reason


class ResultAlreadyRecordedError(DomainError):
    def __init__(self, node_id: str) -> None:
        super().__init__(f"Result already recorded for node: {node_id}")
        self.node_id = node_id


class ExecutionError(DomainError):
    """The engine itself failed outside any single node."""


# =============================================================================
# IFC boundary
# =============================================================================


class IfcImportError(DomainError):
    pass


class IfcFileNotFoundError(IfcImportError):
    def __init__(self, file_path: str) -> None:
        super().__init__(f"IFC file not found: {file_path}")
        self.file_path = file_path


class IfcParseError(IfcImportError):
    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(f"Failed to parse IFC file: {file_path}", {"reason": reason})
        self.file_path = file_path
        self.reason = reason


class UnsupportedIfcSchemaError(IfcImportError):
    def __init__(self, schema: str, supported: list[str]) -> None:
        super().__init__(f"Unsupported IFC schema: {schema}", {"supported_schemas": supported})
        self.schema = schema
        self.supported = supported
