"""Spatial and relationship query nodes.

Geometry is not evaluated. Against spatial-structure references the spatial
query matches elements by storey name; every other case keeps a fixed leading
share of the primary collection so results stay deterministic.
"""
from __future__ import annotations

import math

from ifc_flow.application.nodes.base import NodeInputs
from ifc_flow.application.nodes.lookup import containing_storey
from ifc_flow.domain.models.element import Element
from ifc_flow.domain.models.node_config import RelationshipConfig, SpatialConfig
from ifc_flow.domain.models.node_kind import REFERENCE_PORT
from ifc_flow.domain.models.result import ElementsResult
from ifc_flow.shared.logging import get_logger

logger = get_logger(__name__)

SPATIAL_FRACTIONS: dict[str, float] = {
    "contained": 0.7,
    "containing": 0.3,
    "intersecting": 0.5,
    "touching": 0.2,
}

# Distance at which a within-distance query keeps the whole collection
FULL_DISTANCE = 5.0

RELATION_FRACTIONS: dict[str, float] = {
    "containment": 0.6,
    "aggregation": 0.4,
    "voiding": 0.2,
    "material": 0.8,
    "space-boundary": 0.3,
}


def leading_share(elements: tuple[Element, ...], fraction: float) -> tuple[Element, ...]:
    """First ``floor(len * fraction)`` elements."""
    return elements[: math.floor(len(elements) * fraction)]


def _storey_names(references: tuple[Element, ...]) -> set[str]:
    return {
        str(ref.name)
        for ref in references
        if ref.is_type("IfcBuildingStorey") and ref.name is not None
    }


def _by_storey(
    elements: tuple[Element, ...],
    references: tuple[Element, ...],
    *,
    building_contains_all: bool,
) -> list[Element]:
    storeys = _storey_names(references)
    has_building = building_contains_all and any(ref.is_type("IfcBuilding") for ref in references)
    kept = []
    for element in elements:
        storey = containing_storey(element)
        if storey is None:
            continue
        if has_building or storey in storeys:
            kept.append(element)
    return kept


def run_spatial(inputs: NodeInputs, config: SpatialConfig) -> ElementsResult:
    """Relate the primary collection to the reference collection.

    Args:
        inputs: ``input`` (primary) and ``reference`` collections
        config: Query type and distance

    Returns:
        The primary elements satisfying the query
    """
    primary = inputs.elements()
    references = inputs.element_list(REFERENCE_PORT)
    if not primary.elements or not references:
        return primary.with_elements(())

    query = config.query_type
    spatial_refs = any(ref.is_spatial_structure for ref in references)

    if query in ("contained", "containing") and spatial_refs:
        kept = _by_storey(
            primary.elements,
            references,
            building_contains_all=query == "contained",
        )
        return primary.with_elements(kept)

    if query == "within-distance":
        fraction = min(1.0, config.distance / FULL_DISTANCE)
    else:
        fraction = SPATIAL_FRACTIONS[query]
    return primary.with_elements(leading_share(primary.elements, fraction))


def run_relationship(inputs: NodeInputs, config: RelationshipConfig) -> ElementsResult:
    """Select the elements taking part in a relationship type.

    The direction is accepted for compatibility; it does not change the share.
    """
    source = inputs.elements()
    fraction = RELATION_FRACTIONS[config.relation_type]
    logger.debug(
        "Relationship query",
        relation_type=config.relation_type,
        direction=config.direction,
        total=len(source.elements),
    )
    return source.with_elements(leading_share(source.elements, fraction))
