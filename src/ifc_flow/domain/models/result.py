"""Node Result Variants.

Every node writes exactly one of these into the result store. The first five
are values that downstream nodes consume; the last three are markers for nodes
that did not produce a value.
"""
from __future__ import annotations

import base64
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar

from ifc_flow.domain.models.element import Element, thaw
from ifc_flow.domain.models.model import Model


@dataclass(frozen=True)
class ElementsResult:
    """Element collection, optionally tied to the model it came from."""

    kind: ClassVar[str] = "elements"

    elements: tuple[Element, ...] = ()
    model: Model | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "elements", tuple(self.elements))

    def __len__(self) -> int:
        return len(self.elements)

    def with_elements(self, elements: tuple[Element, ...] | list[Element]) -> ElementsResult:
        """Same model, new collection."""
        return ElementsResult(elements=tuple(elements), model=self.model)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind,
            "count": len(self.elements),
            "elements": [element.to_dict() for element in self.elements],
        }
        if self.model is not None:
            data["model"] = self.model.summary()
        return data


@dataclass(frozen=True)
class AggregateResult:
    """Named values (quantity totals, analysis reports)."""

    kind: ClassVar[str] = "aggregate"

    values: Mapping[str, Any] = field(default_factory=dict)
    unit: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "values": thaw(self.values), "unit": self.unit}


@dataclass(frozen=True)
class ValueResult:
    """Single scalar or list emitted by a parameter node."""

    kind: ClassVar[str] = "value"

    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "value": thaw(self.value)}


@dataclass(frozen=True)
class TextResult:
    """Textual export payload (csv, json)."""

    kind: ClassVar[str] = "text"

    text: str
    format: str
    file_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "format": self.format,
            "file_name": self.file_name,
            "text": self.text,
        }


@dataclass(frozen=True)
class BinaryResult:
    """Binary export payload produced by the native writer."""

    kind: ClassVar[str] = "binary"

    payload: bytes
    format: str
    file_name: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "format": self.format,
            "file_name": self.file_name,
            "size": len(self.payload),
            "payload_base64": base64.b64encode(self.payload).decode("ascii"),
        }


# =============================================================================
# Markers
# =============================================================================


@dataclass(frozen=True)
class NodeFailure:
    """The node's own semantic function failed."""

    kind: ClassVar[str] = "node_failure"

    error: str
    error_type: str = "NodeExecutionError"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "error": self.error, "error_type": self.error_type}


@dataclass(frozen=True)
class DependencyFailure:
    """A node this one depends on failed, so it was never invoked."""

    kind: ClassVar[str] = "dependency_failure"

    upstream: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "upstream": self.upstream}


@dataclass(frozen=True)
class Cancelled:
    """The run was cancelled before this node produced a result."""

    kind: ClassVar[str] = "cancelled"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind}


NodeResult = (
    ElementsResult
    | AggregateResult
    | ValueResult
    | TextResult
    | BinaryResult
    | NodeFailure
    | DependencyFailure
    | Cancelled
)

ValueResults = (ElementsResult, AggregateResult, ValueResult, TextResult, BinaryResult)
ErrorMarkers = (NodeFailure, DependencyFailure, Cancelled)


def is_error(result: NodeResult) -> bool:
    """Whether a result is one of the error markers."""
    return isinstance(result, ErrorMarkers)
