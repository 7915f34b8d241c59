"""Property and classification nodes.

Both nodes edit element data copy-on-write: every touched element is rebuilt
with new property maps, the upstream collection is never changed.
"""
from __future__ import annotations

from typing import Any

from ifc_flow.application.nodes.base import NodeInputs
from ifc_flow.application.nodes.lookup import ANY_PSET, find_property
from ifc_flow.domain.exceptions import InvalidNodeInputError
from ifc_flow.domain.models.element import Classification, Element, PropertyInfo
from ifc_flow.domain.models.node_config import ClassificationConfig, PropertyConfig
from ifc_flow.domain.models.node_kind import VALUE_PORT
from ifc_flow.domain.models.result import (
    AggregateResult,
    ElementsResult,
    NodeResult,
    ValueResult,
)
from ifc_flow.shared.logging import get_logger

logger = get_logger(__name__)

FALLBACK_PSET = "CustomProperties"


# =============================================================================
# Property
# =============================================================================


def split_property_name(name: str, target_pset: str) -> tuple[str, str]:
    """Apply the "Pset:Prop" syntax.

    Returns:
        (property name, effective target set)
    """
    if ":" in name:
        pset, prop = name.split(":", 1)
        return prop.strip(), pset.strip() or target_pset
    return name.strip(), target_pset


def _unique(values: list[Any]) -> list[Any]:
    seen: list[Any] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def value_from_result(result: NodeResult) -> Any:
    """Extract a property value from whatever feeds the value port.

    Raises:
        InvalidNodeInputError: If the result cannot supply one value
    """
    if isinstance(result, ValueResult):
        return result.value
    if isinstance(result, AggregateResult) and len(result.values) == 1:
        return next(iter(result.values.values()))
    if isinstance(result, ElementsResult):
        infos = [e.property_info for e in result.elements if e.property_info is not None]
        found = [info.value for info in infos if info.exists]
        unique = _unique(found)
        if len(unique) == 1:
            return unique[0]
        if infos and infos[0].exists:
            return infos[0].value
        raise InvalidNodeInputError(VALUE_PORT, "elements carrying a looked-up property", "no property value")
    raise InvalidNodeInputError(VALUE_PORT, "a single value", result.kind)


def _get(element: Element, name: str, pset: str) -> Element:
    found = find_property(element, name, pset)
    pset_name = found.pset_name or ("" if pset == ANY_PSET else pset)
    return element.evolve(
        property_info=PropertyInfo(name=name, exists=found.exists, value=found.value, pset_name=pset_name),
    )


def _set(element: Element, name: str, pset: str, value: Any) -> Element:
    target = FALLBACK_PSET if pset == ANY_PSET else pset
    psets = element.mutable_psets()
    psets.setdefault(target, {})[name] = value
    properties = dict(element.properties)
    properties[name] = value
    return element.evolve(
        properties=properties,
        psets=psets,
        property_info=PropertyInfo(name=name, exists=True, value=value, pset_name=target),
    )


def _remove(element: Element, name: str, pset: str) -> Element:
    found = find_property(element, name, pset)
    properties = {key: value for key, value in element.properties.items() if key != name}
    psets = element.mutable_psets()
    qtos = element.mutable_qtos()
    if pset == ANY_PSET:
        for values in (*psets.values(), *qtos.values()):
            values.pop(name, None)
    else:
        psets.get(pset, {}).pop(name, None)
        qtos.get(pset, {}).pop(name, None)
    return element.evolve(
        properties=properties,
        psets=psets,
        qtos=qtos,
        property_info=PropertyInfo(name=name, exists=False, value=None, pset_name=found.pset_name),
    )


def run_property(inputs: NodeInputs, config: PropertyConfig) -> ElementsResult:
    """Get, set, add or remove one property on every input element.

    Args:
        inputs: Resolved inputs; ``input`` collection plus optional ``value``
        config: Action, property name, target set and value

    Returns:
        Elements with the edit applied (and ``property_info`` attached)
    """
    source = inputs.elements()
    name, pset = split_property_name(config.property_name, config.target_pset or ANY_PSET)
    if not name:
        logger.warning("Property node without property name; passing input through")
        return source

    value = config.property_value
    if config.use_value_input:
        upstream = inputs.single(VALUE_PORT)
        if upstream is not None:
            value = value_from_result(upstream)

    if config.action == "get":
        updated = [_get(element, name, pset) for element in source.elements]
    elif config.action in ("set", "add"):
        updated = [_set(element, name, pset, value) for element in source.elements]
    else:
        updated = [_remove(element, name, pset) for element in source.elements]

    logger.debug("Property action applied", action=config.action, property=name, pset=pset)
    return source.with_elements(updated)


# =============================================================================
# Classification
# =============================================================================

CLASSIFICATION_PSET = "Pset_ClassificationReference"
WELL_KNOWN_PSETS = (CLASSIFICATION_PSET, "IfcClassificationReference", "Classification")
SYSTEM_FIELDS = ("System", "Source")
CODE_FIELDS = ("Code", "ItemReference", "Identification")

SYSTEM_NAMES: dict[str, str] = {
    "uniclass": "Uniclass 2015",
    "uniformat": "Uniformat II",
    "masterformat": "MasterFormat 2016",
    "omniclass": "OmniClass",
    "cobie": "COBie",
    "custom": "Custom Classification",
}


def system_name(system: str) -> str:
    return SYSTEM_NAMES.get(system.strip().lower(), system)


def _first(values: Any, fields: tuple[str, ...]) -> Any:
    for field_name in fields:
        if values.get(field_name) not in (None, ""):
            return values[field_name]
    return None


def read_classification(element: Element) -> Classification | None:
    """Find a classification reference among the element's property sets.

    Well-known classification sets are checked first, then any set that has
    both a system-like and a code-like field.
    """
    for pset in WELL_KNOWN_PSETS:
        values = element.psets.get(pset)
        if values:
            return Classification(
                system=str(_first(values, (*SYSTEM_FIELDS, "Name")) or "Unknown"),
                code=str(_first(values, CODE_FIELDS) or ""),
                description=str(values.get("Description") or ""),
            )

    for values in element.psets.values():
        system = _first(values, SYSTEM_FIELDS)
        code = _first(values, CODE_FIELDS)
        if system is not None and code is not None:
            return Classification(
                system=str(system),
                code=str(code),
                description=str(values.get("Description") or ""),
            )
    return None


def run_classification(inputs: NodeInputs, config: ClassificationConfig) -> ElementsResult:
    """Read or assign classification references."""
    source = inputs.elements()

    if config.action == "get":
        updated = []
        for element in source.elements:
            found = read_classification(element)
            updated.append(element.evolve(classifications=(found,) if found else ()))
        return source.with_elements(updated)

    name = system_name(config.system)
    classification = Classification(
        system=name,
        code=config.code,
        description=f"{name} classification {config.code}",
    )
    updated = []
    for element in source.elements:
        psets = element.mutable_psets()
        psets[CLASSIFICATION_PSET] = {
            **psets.get(CLASSIFICATION_PSET, {}),
            "System": name,
            "Code": config.code,
            "Name": name,
            "ItemReference": config.code,
            "Description": classification.description,
        }
        updated.append(element.evolve(psets=psets, classifications=(classification,)))
    return source.with_elements(updated)
