"""IFC Model Domain Entity.

Represents a parsed model handed to a workflow's source node by the
model-loading collaborator. Read-only for the engine.
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from ifc_flow.domain.models.element import Element


class IfcSchemaVersion(str, Enum):
    """Supported IFC Schema Versions."""

    IFC2X3 = "IFC2X3"
    IFC4 = "IFC4"
    IFC4X1 = "IFC4X1"
    IFC4X2 = "IFC4X2"
    IFC4X3 = "IFC4X3"

    @classmethod
    def from_string(cls, value: str) -> IfcSchemaVersion:
        """Parse schema version from string.

        Args:
            value: Schema version string (e.g., "IFC4", "IFC2X3 TC1")

        Returns:
            Matching IfcSchemaVersion enum
        """
        normalized = value.upper().replace(" ", "").replace("_", "")

        if "IFC4X3" in normalized:
            return cls.IFC4X3
        if "IFC4X2" in normalized:
            return cls.IFC4X2
        if "IFC4X1" in normalized:
            return cls.IFC4X1
        if "IFC4" in normalized:
            return cls.IFC4
        if "IFC2X3" in normalized or "IFC2" in normalized:
            return cls.IFC2X3

        # Default to IFC4 for unknown
        return cls.IFC4


@dataclass(frozen=True)
class ProjectInfo:
    """Project header of the model."""

    global_id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class Model:
    """Parsed IFC model.

    Attributes:
        id: Model identifier (registry key)
        name: Display name, usually the file name
        schema: IFC schema version
        elements: Element collection
        element_counts: Number of elements per type tag
        source_path: File the native writer re-opens for IFC export
        project: Optional project header
    """

    id: str
    name: str
    schema: IfcSchemaVersion = IfcSchemaVersion.IFC4
    elements: tuple[Element, ...] = ()
    element_counts: Mapping[str, int] = field(default_factory=dict)
    source_path: str | None = None
    project: ProjectInfo | None = None

    def __post_init__(self) -> None:
        elements = tuple(self.elements)
        object.__setattr__(self, "elements", elements)
        counts = dict(self.element_counts) or dict(Counter(e.type for e in elements))
        object.__setattr__(self, "element_counts", MappingProxyType(counts))

    @property
    def total_elements(self) -> int:
        return len(self.elements)

    def summary(self) -> dict[str, Any]:
        """Model header without the element payload."""
        return {
            "id": self.id,
            "name": self.name,
            "schema": self.schema.value,
            "total_elements": self.total_elements,
            "element_counts": dict(self.element_counts),
        }
