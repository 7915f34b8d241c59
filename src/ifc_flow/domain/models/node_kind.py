"""Node kinds and their port layout."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ifc_flow.domain.exceptions import UnknownNodeKindError

OUTPUT_PORT = "output"
INPUT_PORT = "input"
REFERENCE_PORT = "reference"
VALUE_PORT = "value"


@dataclass(frozen=True, slots=True)
class PortSpec:
    """Declared input port of a node kind.

    Attributes:
        name: Port name used by edges
        multiple: Whether several edges may feed the port (collections are
            concatenated); single ports accept at most one edge
    """

    name: str
    multiple: bool = False


class NodeKind(str, Enum):
    """Closed set of workflow node kinds."""

    SOURCE = "source"
    PARAMETER = "parameter"
    GEOMETRY = "geometry"
    FILTER = "filter"
    TRANSFORM = "transform"
    QUANTITY = "quantity"
    PROPERTY = "property"
    CLASSIFICATION = "classification"
    SPATIAL = "spatial"
    RELATIONSHIP = "relationship"
    ANALYSIS = "analysis"
    EXPORT = "export"
    WATCH = "watch"
    VIEWER = "viewer"

    @classmethod
    def from_string(cls, value: str) -> NodeKind:
        """Parse a node kind, accepting the canvas type names.

        Args:
            value: Kind name (e.g., "filter", "filterNode", "ifcNode")

        Returns:
            Matching NodeKind

        Raises:
            UnknownNodeKindError: If the name matches no kind
        """
        normalized = value.strip()
        if normalized.endswith("Node"):
            normalized = normalized[: -len("Node")]
        normalized = normalized.lower()

        aliases = {
            "ifc": cls.SOURCE,
            "model": cls.SOURCE,
            "param": cls.PARAMETER,
        }
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError:
            raise UnknownNodeKindError(value) from None

    @property
    def input_ports(self) -> tuple[PortSpec, ...]:
        """Ordered input ports declared by this kind."""
        return _INPUT_PORTS[self]

    def port(self, name: str) -> PortSpec | None:
        for spec in self.input_ports:
            if spec.name == name:
                return spec
        return None


_SINGLE_INPUT = (PortSpec(INPUT_PORT),)

_INPUT_PORTS: dict[NodeKind, tuple[PortSpec, ...]] = {
    NodeKind.SOURCE: (),
    NodeKind.PARAMETER: (),
    NodeKind.GEOMETRY: _SINGLE_INPUT,
    NodeKind.FILTER: _SINGLE_INPUT,
    NodeKind.TRANSFORM: _SINGLE_INPUT,
    NodeKind.QUANTITY: _SINGLE_INPUT,
    NodeKind.PROPERTY: (PortSpec(INPUT_PORT), PortSpec(VALUE_PORT)),
    NodeKind.CLASSIFICATION: _SINGLE_INPUT,
    NodeKind.SPATIAL: (PortSpec(INPUT_PORT), PortSpec(REFERENCE_PORT)),
    NodeKind.RELATIONSHIP: _SINGLE_INPUT,
    NodeKind.ANALYSIS: (PortSpec(INPUT_PORT), PortSpec(REFERENCE_PORT)),
    NodeKind.EXPORT: _SINGLE_INPUT,
    NodeKind.WATCH: (PortSpec(INPUT_PORT, multiple=True),),
    NodeKind.VIEWER: (PortSpec(INPUT_PORT, multiple=True),),
}
