"""Resolved node inputs.

The scheduler gathers every incoming edge's upstream result per input port and
hands the semantic functions a ``NodeInputs``. Unconnected ports read as an
empty collection.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ifc_flow.domain.exceptions import InvalidNodeInputError
from ifc_flow.domain.models.element import Element
from ifc_flow.domain.models.node_kind import INPUT_PORT
from ifc_flow.domain.models.result import ElementsResult, NodeResult


@dataclass(frozen=True)
class NodeInputs:
    """Upstream results keyed by input port, in edge order."""

    ports: Mapping[str, tuple[NodeResult, ...]] = field(default_factory=dict)

    @classmethod
    def of(cls, **ports: NodeResult | list[NodeResult] | tuple[NodeResult, ...]) -> NodeInputs:
        """Convenience constructor: ``NodeInputs.of(input=result)``."""
        normalized: dict[str, tuple[NodeResult, ...]] = {}
        for name, value in ports.items():
            normalized[name] = tuple(value) if isinstance(value, (list, tuple)) else (value,)
        return cls(ports=normalized)

    def results(self, port: str = INPUT_PORT) -> tuple[NodeResult, ...]:
        return tuple(self.ports.get(port, ()))

    def single(self, port: str = INPUT_PORT) -> NodeResult | None:
        """First result on a port, or None when unconnected."""
        results = self.results(port)
        return results[0] if results else None

    def elements(self, port: str = INPUT_PORT) -> ElementsResult:
        """Element collection on a port.

        Several feeding edges are concatenated; the model of the first
        collection that carries one is kept.

        Raises:
            InvalidNodeInputError: If a connected result is not a collection
        """
        collected: list[Element] = []
        model = None
        for result in self.results(port):
            if not isinstance(result, ElementsResult):
                raise InvalidNodeInputError(port, "an element collection", result.kind)
            collected.extend(result.elements)
            if model is None:
                model = result.model
        return ElementsResult(elements=tuple(collected), model=model)

    def element_list(self, port: str = INPUT_PORT) -> tuple[Element, ...]:
        return self.elements(port).elements


def to_number(value: Any) -> float | None:
    """Parse a numeric value; None for anything non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return float(text)
        except ValueError:
            return None
    return None
