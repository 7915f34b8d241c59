"""Per-kind node configuration records.

Each node kind has its own pydantic model; unknown options are rejected.
Canvas documents use camelCase keys, so both ``elementType`` and
``element_type`` are accepted.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ifc_flow.domain.models.node_kind import NodeKind


class NodeConfig(BaseModel):
    """Base class for node configurations."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


def _lower(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


# =============================================================================
# Source / Parameter
# =============================================================================


class SourceConfig(NodeConfig):
    """Model to feed into the graph; None selects the latest loaded model."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str | None = None


class ParameterRange(NodeConfig):
    """Slider bounds of a number parameter."""

    min: float = 0.0
    max: float = 100.0


class ParameterConfig(NodeConfig):
    """Literal value; list parameters keep their items in ``list_items``."""

    value: Any = ""
    param_type: Literal["number", "text", "boolean", "list"] = "text"
    list_items: str | None = None
    range: ParameterRange | None = None

    @field_validator("param_type", mode="before")
    @classmethod
    def normalize_param_type(cls, v: Any) -> Any:
        return _lower(v)


# =============================================================================
# Element selection
# =============================================================================


class GeometryConfig(NodeConfig):
    element_type: str = "all"
    include_openings: bool = True
    # Display only; selection never loads geometry
    use_actual_geometry: bool = False


class FilterType(str, Enum):
    """What a filter predicate looks at."""

    ELEMENT_TYPE = "elementType"
    PSET_EXISTS = "psetExists"
    PROPERTY = "property"
    ID = "id"
    NAME = "name"
    DESCRIPTION = "description"
    LEVEL = "level"


class FilterOperator(str, Enum):
    """Filter comparison operators."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"
    EXISTS = "exists"
    NOT_EXISTS = "notExists"


class FilterConfig(NodeConfig):
    filter_type: FilterType = FilterType.PROPERTY
    property: str = ""
    operator: FilterOperator = FilterOperator.EQUALS
    value: str = ""
    pset_name: str | None = None

    @field_validator("value", mode="before")
    @classmethod
    def stringify_value(cls, v: Any) -> str:
        """Numbers and booleans arrive unquoted from parameter widgets."""
        if v is None:
            return ""
        if isinstance(v, bool):
            return str(v).lower()
        return str(v)


class TransformConfig(NodeConfig):
    translate_x: float = 0.0
    translate_y: float = 0.0
    translate_z: float = 0.0
    rotate_x: float = 0.0
    rotate_y: float = 0.0
    rotate_z: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    scale_z: float = 1.0

    @property
    def translation(self) -> tuple[float, float, float]:
        return (self.translate_x, self.translate_y, self.translate_z)

    @property
    def rotation(self) -> tuple[float, float, float]:
        return (self.rotate_x, self.rotate_y, self.rotate_z)

    @property
    def scale(self) -> tuple[float, float, float]:
        return (self.scale_x, self.scale_y, self.scale_z)


# =============================================================================
# Data extraction / editing
# =============================================================================

QuantityType = Literal["length", "area", "volume", "count", "weight"]
GroupBy = Literal["none", "type", "material", "level"]


class QuantityConfig(NodeConfig):
    quantity_type: QuantityType = "area"
    group_by: GroupBy = "none"
    unit: str = ""

    @field_validator("quantity_type", "group_by", mode="before")
    @classmethod
    def normalize_choices(cls, v: Any) -> Any:
        return _lower(v)


class PropertyConfig(NodeConfig):
    property_name: str = ""
    action: Literal["get", "set", "add", "remove"] = "get"
    property_value: Any = ""
    target_pset: str = "any"
    use_value_input: bool = False

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, v: Any) -> Any:
        return _lower(v)


class ClassificationConfig(NodeConfig):
    system: str = "uniclass"
    action: Literal["get", "set"] = "get"
    code: str = ""

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, v: Any) -> Any:
        return _lower(v)


# =============================================================================
# Queries / analysis
# =============================================================================

SpatialQueryType = Literal["contained", "containing", "intersecting", "touching", "within-distance"]
RelationType = Literal["containment", "aggregation", "voiding", "material", "space-boundary"]


class SpatialConfig(NodeConfig):
    query_type: SpatialQueryType = "contained"
    distance: float = Field(default=1.0, ge=0)


class RelationshipConfig(NodeConfig):
    relation_type: RelationType = "containment"
    direction: Literal["outgoing", "incoming", "both"] = "outgoing"


class AnalysisConfig(NodeConfig):
    analysis_type: Literal["clash", "adjacency", "space", "path", "visibility"] = "clash"
    tolerance: float = Field(default=10.0, gt=0, description="Clash tolerance in mm")
    metric: Literal["area", "volume", "occupancy", "circulation"] = "area"
    seed: int | None = None

    @field_validator("analysis_type", mode="before")
    @classmethod
    def accept_spatial_alias(cls, v: Any) -> Any:
        """Older canvases call space analysis "spatial"."""
        v = _lower(v)
        return "space" if v == "spatial" else v


ExportFormat = Literal["csv", "json", "excel", "glb", "ifc"]


class ExportConfig(NodeConfig):
    format: ExportFormat = "csv"
    file_name: str = Field(
        default="export",
        validation_alias=AliasChoices("fileName", "filename", "file_name"),
    )
    properties: str = "Name,Type,Material"

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v: Any) -> Any:
        return _lower(v)

    @property
    def columns(self) -> list[str]:
        return [column.strip() for column in self.properties.split(",") if column.strip()]


# =============================================================================
# Observation
# =============================================================================


class WatchConfig(NodeConfig):
    display_mode: Literal["table", "raw", "summary"] = "table"
    auto_update: bool = False


class ViewerConfig(NodeConfig):
    view_mode: Literal["shaded", "wireframe", "hidden"] = "shaded"
    auto_update: bool = False


CONFIG_TYPES: dict[NodeKind, type[NodeConfig]] = {
    NodeKind.SOURCE: SourceConfig,
    NodeKind.PARAMETER: ParameterConfig,
    NodeKind.GEOMETRY: GeometryConfig,
    NodeKind.FILTER: FilterConfig,
    NodeKind.TRANSFORM: TransformConfig,
    NodeKind.QUANTITY: QuantityConfig,
    NodeKind.PROPERTY: PropertyConfig,
    NodeKind.CLASSIFICATION: ClassificationConfig,
    NodeKind.SPATIAL: SpatialConfig,
    NodeKind.RELATIONSHIP: RelationshipConfig,
    NodeKind.ANALYSIS: AnalysisConfig,
    NodeKind.EXPORT: ExportConfig,
    NodeKind.WATCH: WatchConfig,
    NodeKind.VIEWER: ViewerConfig,
}


def parse_config(kind: NodeKind, raw: dict[str, Any] | None) -> NodeConfig:
    """Validate a raw option bag against the kind's configuration model.

    Raises:
        pydantic.ValidationError: If the options do not fit the schema
    """
    return CONFIG_TYPES[kind].model_validate(raw or {})
