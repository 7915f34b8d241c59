"""Building Element Domain Entity.

Represents a building element (wall, slab, column, ...) as it flows through a
workflow graph. Elements are immutable values: every node that changes an
element builds a new one.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

# Spatial structure classes, upper-cased for case-insensitive comparison
SPATIAL_STRUCTURE_TYPES = frozenset({
    "IFCPROJECT",
    "IFCSITE",
    "IFCBUILDING",
    "IFCBUILDINGSTOREY",
    "IFCSPACE",
})

OPENING_PREFIX = "IFCOPENING"


def element_id(express_id: int, ifc_type: str) -> str:
    """Build the stable element identifier from export id and type tag.

    Args:
        express_id: STEP id of the entity in the exported model
        ifc_type: IFC class name (e.g., "IfcWall")

    Returns:
        Identifier such as "1234-IFCWALL"
    """
    return f"{express_id}-{ifc_type.upper()}"


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


def _freeze_sets(sets: Mapping[str, Mapping[str, Any]] | None) -> Mapping[str, Mapping[str, Any]]:
    return MappingProxyType({name: _freeze(values) for name, values in (sets or {}).items()})


def thaw(value: Any) -> Any:
    """Convert frozen mappings (recursively) back into plain dicts."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value


@dataclass(frozen=True, slots=True)
class Classification:
    """Classification reference (system, code, description)."""

    system: str
    code: str
    description: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"system": self.system, "code": self.code, "description": self.description}


@dataclass(frozen=True, slots=True)
class Transform:
    """Placement transform attached by a transform node.

    Rotation is in degrees around the X, Y and Z axes.
    """

    translation: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: tuple[float, float, float] = (0.0, 0.0, 0.0)
    scale: tuple[float, float, float] = (1.0, 1.0, 1.0)

    def to_dict(self) -> dict[str, list[float]]:
        return {
            "translation": list(self.translation),
            "rotation": list(self.rotation),
            "scale": list(self.scale),
        }


@dataclass(frozen=True, slots=True)
class PropertyInfo:
    """Outcome of a property lookup, attached for downstream nodes and the UI."""

    name: str
    exists: bool
    value: Any = None
    pset_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "exists": self.exists,
            "value": self.value,
            "pset_name": self.pset_name,
        }


@dataclass(frozen=True)
class Element:
    """Building Element value.

    Attributes:
        id: Stable identifier derived from express id and type
        express_id: STEP id in the source model
        type: IFC class name (e.g., "IfcWall")
        properties: Flat attribute map (GlobalId, Name, Material, ...)
        psets: Property sets by name
        qtos: Quantity sets by name
        classifications: Attached classification references
        transform: Last transform applied by a transform node
        property_info: Result of the last property node lookup
    """

    id: str
    express_id: int
    type: str
    properties: Mapping[str, Any] = field(default_factory=dict)
    psets: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    qtos: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    classifications: tuple[Classification, ...] = ()
    transform: Transform | None = None
    property_info: PropertyInfo | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", _freeze(self.properties))
        object.__setattr__(self, "psets", _freeze_sets(self.psets))
        object.__setattr__(self, "qtos", _freeze_sets(self.qtos))
        object.__setattr__(self, "classifications", tuple(self.classifications))

    @classmethod
    def create(
        cls,
        express_id: int,
        ifc_type: str,
        *,
        properties: Mapping[str, Any] | None = None,
        psets: Mapping[str, Mapping[str, Any]] | None = None,
        qtos: Mapping[str, Mapping[str, Any]] | None = None,
        classifications: tuple[Classification, ...] = (),
    ) -> Element:
        """Factory method to create an Element with a derived id.

        Args:
            express_id: STEP id in the source model
            ifc_type: IFC class name
            properties: Flat attribute map
            psets: Property sets
            qtos: Quantity sets
            classifications: Classification references

        Returns:
            New Element instance
        """
        return cls(
            id=element_id(express_id, ifc_type),
            express_id=express_id,
            type=ifc_type,
            properties=properties or {},
            psets=psets or {},
            qtos=qtos or {},
            classifications=classifications,
        )

    # =========================================================================
    # Read helpers
    # =========================================================================

    @property
    def type_key(self) -> str:
        """Upper-cased type tag used for comparisons."""
        return self.type.upper()

    @property
    def type_label(self) -> str:
        """Type tag without the IFC prefix (e.g., "Wall")."""
        if self.type_key.startswith("IFC"):
            return self.type[3:]
        return self.type

    @property
    def name(self) -> str | None:
        value = self.properties.get("Name")
        return None if value is None else str(value)

    @property
    def global_id(self) -> str | None:
        return self.properties.get("GlobalId")

    def is_type(self, *ifc_types: str) -> bool:
        """Check the type tag against one or more class names, ignoring case."""
        return self.type_key in {t.upper() for t in ifc_types}

    @property
    def is_spatial_structure(self) -> bool:
        return self.type_key in SPATIAL_STRUCTURE_TYPES

    @property
    def is_opening(self) -> bool:
        return self.type_key.startswith(OPENING_PREFIX)

    # =========================================================================
    # Copy-on-write helpers
    # =========================================================================

    def evolve(self, **changes: Any) -> Element:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def with_properties(self, properties: Mapping[str, Any]) -> Element:
        return self.evolve(properties=properties)

    def with_psets(self, psets: Mapping[str, Mapping[str, Any]]) -> Element:
        return self.evolve(psets=psets)

    def mutable_psets(self) -> dict[str, dict[str, Any]]:
        """Plain, detached copy of the property sets for building a new element."""
        return {name: dict(values) for name, values in self.psets.items()}

    def mutable_qtos(self) -> dict[str, dict[str, Any]]:
        """Plain, detached copy of the quantity sets for building a new element."""
        return {name: dict(values) for name, values in self.qtos.items()}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible structures."""
        data: dict[str, Any] = {
            "id": self.id,
            "express_id": self.express_id,
            "type": self.type,
            "properties": thaw(self.properties),
            "psets": thaw(self.psets),
            "qtos": thaw(self.qtos),
            "classifications": [c.to_dict() for c in self.classifications],
        }
        if self.transform is not None:
            data["transform"] = self.transform.to_dict()
        if self.property_info is not None:
            data["property_info"] = self.property_info.to_dict()
        return data

    def __hash__(self) -> int:
        """Hash based on ID."""
        return hash(self.id)
