"""Shared element lookups.

Property, storey, material and quantity resolution used by several node kinds,
so filter, quantity, property and export all agree on where a value lives.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ifc_flow.application.nodes.base import to_number
from ifc_flow.domain.models.element import Element

ANY_PSET = "any"

STOREY_PROPERTIES = ("BuildingStorey", "Level")
STOREY_PSET_FIELDS = ("Level", "StoreyName", "BuildingStorey")

MEASURE_FIELDS: dict[str, tuple[str, ...]] = {
    "length": ("Length", "Height", "Width", "Depth"),
    "area": ("Area", "NetArea", "GrossArea", "NetFloorArea", "GrossFloorArea"),
    "volume": ("Volume", "NetVolume", "GrossVolume"),
    "weight": ("Weight", "NetWeight", "GrossWeight"),
}


@dataclass(frozen=True, slots=True)
class PropertyLookup:
    """Where (and whether) a property was found."""

    exists: bool
    value: Any = None
    pset_name: str = ""


MISSING = PropertyLookup(exists=False)


def find_property(element: Element, name: str, pset: str | None = ANY_PSET) -> PropertyLookup:
    """Locate a property on an element.

    With an explicit set name, that set (property or quantity set) is searched
    first, then the flat property map. With "any", the flat map is searched,
    then every property set and every quantity set in insertion order.

    Args:
        element: Element to inspect
        name: Property name
        pset: Set name, or "any"

    Returns:
        PropertyLookup describing the first match
    """
    if pset and pset != ANY_PSET:
        for sets in (element.psets, element.qtos):
            values = sets.get(pset)
            if values is not None and name in values:
                return PropertyLookup(True, values[name], pset)
        if name in element.properties:
            return PropertyLookup(True, element.properties[name], "")
        return MISSING

    if name in element.properties:
        return PropertyLookup(True, element.properties[name], "")
    for sets in (element.psets, element.qtos):
        for set_name, values in sets.items():
            if name in values:
                return PropertyLookup(True, values[name], set_name)
    return MISSING


def resolve_path(element: Element, path: str) -> PropertyLookup:
    """Resolve "Pset.Prop" or "Prop" against an element.

    A dotted path reads the named property set, then the quantity set of that
    name. A bare name uses the "any" search; "Type" and "Id" fall back to the
    element's type tag and identifier.
    """
    path = path.strip()
    if "." in path:
        set_name, name = path.split(".", 1)
        for sets in (element.psets, element.qtos):
            values = sets.get(set_name)
            if values is not None and name in values:
                return PropertyLookup(True, values[name], set_name)
        return MISSING

    found = find_property(element, path)
    if found.exists:
        return found
    if path.lower() == "type":
        return PropertyLookup(True, element.type)
    if path.lower() == "id":
        return PropertyLookup(True, element.id)
    return MISSING


def _present(value: Any) -> bool:
    return value is not None and value != ""


def containing_storey(element: Element) -> str | None:
    """Name of the storey an element sits on, if recorded anywhere."""
    for key in STOREY_PROPERTIES:
        value = element.properties.get(key)
        if _present(value):
            return str(value)

    level_info = element.psets.get("Pset_SpaceLevelInfo")
    if level_info and _present(level_info.get("Reference")):
        return str(level_info["Reference"])

    for values in element.psets.values():
        for key in STOREY_PSET_FIELDS:
            if _present(values.get(key)):
                return str(values[key])
    return None


def material_of(element: Element) -> str | None:
    value = element.properties.get("Material")
    if _present(value):
        return str(value)
    common = element.psets.get("Pset_MaterialCommon")
    if common and _present(common.get("Name")):
        return str(common["Name"])
    return None


def measure_from_qtos(element: Element, measure: str) -> float | None:
    """First non-zero recognized quantity for a measure.

    Quantity sets are scanned in insertion order. Count is always 1.

    Returns:
        The value, or None when no quantity set records the measure
    """
    if measure == "count":
        return 1.0
    fields = MEASURE_FIELDS.get(measure, ())
    for values in element.qtos.values():
        for name in fields:
            number = to_number(values.get(name))
            if number:
                return number
    return None
