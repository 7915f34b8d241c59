"""Geometry selection and transform nodes."""
from __future__ import annotations

from ifc_flow.application.nodes.base import NodeInputs
from ifc_flow.domain.models.element import Transform
from ifc_flow.domain.models.node_config import GeometryConfig, TransformConfig
from ifc_flow.domain.models.result import ElementsResult
from ifc_flow.shared.logging import get_logger

logger = get_logger(__name__)

# Category -> IFC classes it selects
CATEGORY_TYPES: dict[str, tuple[str, ...]] = {
    "walls": ("IfcWall", "IfcWallStandardCase"),
    "slabs": ("IfcSlab", "IfcRoof"),
    "columns": ("IfcColumn",),
    "beams": ("IfcBeam",),
    "doors": ("IfcDoor",),
    "windows": ("IfcWindow",),
    "stairs": ("IfcStair", "IfcStairFlight"),
    "furniture": ("IfcFurnishingElement", "IfcFurniture"),
    "spaces": ("IfcSpace",),
    "openings": ("IfcOpeningElement",),
}

ALL_CATEGORIES = "all"


def run_geometry(inputs: NodeInputs, config: GeometryConfig) -> ElementsResult:
    """Select elements of one category.

    Args:
        inputs: Resolved inputs; reads the ``input`` collection
        config: Category and opening switch

    Returns:
        Matching elements; an unknown category selects nothing
    """
    source = inputs.elements()
    category = config.element_type.strip().lower()

    if category == ALL_CATEGORIES:
        selected = list(source.elements)
    else:
        types = CATEGORY_TYPES.get(category)
        if types is None:
            logger.warning("Unknown geometry category", category=config.element_type)
            return source.with_elements(())
        selected = [element for element in source.elements if element.is_type(*types)]

    if not config.include_openings:
        selected = [element for element in selected if not element.is_opening]

    return source.with_elements(selected)


def run_transform(inputs: NodeInputs, config: TransformConfig) -> ElementsResult:
    """Attach the configured transform to every element.

    The new transform replaces whatever an earlier transform node attached.
    """
    source = inputs.elements()
    transform = Transform(
        translation=config.translation,
        rotation=config.rotation,
        scale=config.scale,
    )
    return source.with_elements([element.evolve(transform=transform) for element in source.elements])
