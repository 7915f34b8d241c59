"""Workflow graph documents.

``WorkflowGraph`` is the document a caller submits (nodes with raw option bags,
edges between ports). ``Node`` is the validated form the scheduler works with.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from ifc_flow.domain.models.node_config import NodeConfig
from ifc_flow.domain.models.node_kind import INPUT_PORT, OUTPUT_PORT, VALUE_PORT, NodeKind

# Handle names used by the canvas for ports that have a different name here
CANVAS_PORT_NAMES = {"valueInput": VALUE_PORT}


class NodeSpec(BaseModel):
    """Node as submitted by the caller.

    Accepts the canvas shape ``{"id", "type", "data": {"label", "properties"}}``
    as well as the flat ``{"id", "kind", "config"}`` shape.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    kind: str = Field(validation_alias=AliasChoices("kind", "type"))
    config: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("config", "properties"),
    )
    label: str | None = None

    @model_validator(mode="before")
    @classmethod
    def lift_canvas_data(cls, data: Any) -> Any:
        """Flatten ``data.properties`` / ``data.label`` from canvas nodes."""
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            inner = data["data"]
            data = {key: value for key, value in data.items() if key != "data"}
            data.setdefault("config", inner.get("properties") or {})
            if inner.get("label") is not None:
                data.setdefault("label", inner["label"])
        return data


class EdgeSpec(BaseModel):
    """Edge from one node's output port to another node's input port."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    source: str
    target: str
    source_port: str = Field(
        default=OUTPUT_PORT,
        validation_alias=AliasChoices("source_port", "sourcePort", "sourceHandle"),
    )
    target_port: str = Field(
        default=INPUT_PORT,
        validation_alias=AliasChoices("target_port", "targetPort", "targetHandle"),
    )

    @model_validator(mode="before")
    @classmethod
    def drop_empty_handles(cls, data: Any) -> Any:
        """Canvas edges carry ``null`` handles for the default ports."""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @field_validator("target_port")
    @classmethod
    def map_canvas_port(cls, v: str) -> str:
        return CANVAS_PORT_NAMES.get(v, v)


class WorkflowGraph(BaseModel):
    """Nodes plus edges submitted for one execution."""

    nodes: list[NodeSpec] = Field(default_factory=list)
    edges: list[EdgeSpec] = Field(default_factory=list)


@dataclass(frozen=True)
class Node:
    """Validated node.

    Attributes:
        id: Identifier, unique within the graph
        kind: Node kind
        config: Typed configuration for the kind
        label: Optional display label
    """

    id: str
    kind: NodeKind
    config: NodeConfig
    label: str | None = None

    @property
    def display_name(self) -> str:
        return self.label or f"{self.kind.value}:{self.id}"
