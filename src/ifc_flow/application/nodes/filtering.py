"""Filter node.

Evaluates one predicate per element. Text comparisons ignore case; numeric
operators parse both sides and fail on anything non-numeric. A missing or null
value only satisfies the negative operators.
"""
from __future__ import annotations

from typing import Any

from ifc_flow.application.nodes.base import NodeInputs, to_number
from ifc_flow.application.nodes.lookup import (
    ANY_PSET,
    MISSING,
    PropertyLookup,
    containing_storey,
    find_property,
    resolve_path,
)
from ifc_flow.domain.exceptions import NodeExecutionError, UnsupportedOperatorError
from ifc_flow.domain.models.element import Element
from ifc_flow.domain.models.node_config import FilterConfig, FilterOperator, FilterType
from ifc_flow.domain.models.result import ElementsResult
from ifc_flow.shared.logging import get_logger

logger = get_logger(__name__)

Op = FilterOperator

TEXT_OPERATORS = frozenset({Op.EQUALS, Op.NOT_EQUALS, Op.CONTAINS, Op.STARTS_WITH, Op.ENDS_WITH})
EMPTINESS_OPERATORS = frozenset({Op.IS_EMPTY, Op.IS_NOT_EMPTY})
EXISTENCE_OPERATORS = frozenset({Op.EXISTS, Op.NOT_EXISTS})
NUMERIC_OPERATORS = frozenset({Op.GREATER_THAN, Op.LESS_THAN})

SUPPORTED_OPERATORS: dict[FilterType, frozenset[FilterOperator]] = {
    FilterType.ELEMENT_TYPE: TEXT_OPERATORS,
    FilterType.PSET_EXISTS: EXISTENCE_OPERATORS,
    FilterType.PROPERTY: frozenset(FilterOperator),
    FilterType.ID: TEXT_OPERATORS | EMPTINESS_OPERATORS,
    FilterType.NAME: TEXT_OPERATORS | EMPTINESS_OPERATORS,
    FilterType.DESCRIPTION: TEXT_OPERATORS | EMPTINESS_OPERATORS,
    FilterType.LEVEL: TEXT_OPERATORS | EMPTINESS_OPERATORS,
}

# Satisfied by a missing or null value
NEGATIVE_OPERATORS = frozenset({Op.NOT_EQUALS, Op.IS_EMPTY, Op.NOT_EXISTS})


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value).strip().lower()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compare(value: PropertyLookup, operator: FilterOperator, expected: str) -> bool:
    """Apply one operator to a resolved value.

    Args:
        value: Resolved value (may be missing)
        operator: Comparison operator
        expected: Configured comparison value

    Returns:
        Whether the element passes
    """
    if not value.exists or value.value is None:
        return operator in NEGATIVE_OPERATORS

    if operator is Op.EXISTS:
        return True
    if operator is Op.NOT_EXISTS:
        return False

    actual = _as_text(value.value)
    if operator is Op.IS_EMPTY:
        return actual == ""
    if operator is Op.IS_NOT_EMPTY:
        return actual != ""

    if operator in NUMERIC_OPERATORS:
        left, right = to_number(value.value), to_number(expected)
        if left is None or right is None:
            return False
        return left > right if operator is Op.GREATER_THAN else left < right

    target = _as_text(expected)
    if operator in (Op.EQUALS, Op.NOT_EQUALS):
        equal = actual == target
        if not equal and _is_number(value.value):
            left, right = to_number(value.value), to_number(expected)
            equal = left is not None and right is not None and left == right
        return equal if operator is Op.EQUALS else not equal
    if operator is Op.CONTAINS:
        return target in actual
    if operator is Op.STARTS_WITH:
        return actual.startswith(target)
    if operator is Op.ENDS_WITH:
        return actual.endswith(target)
    return False


def _attribute(element: Element, name: str) -> PropertyLookup:
    value = element.properties.get(name)
    return MISSING if value is None else PropertyLookup(True, value)


def _resolve(element: Element, config: FilterConfig) -> PropertyLookup:
    filter_type = config.filter_type
    if filter_type is FilterType.ELEMENT_TYPE:
        return PropertyLookup(True, element.type)
    if filter_type is FilterType.ID:
        return PropertyLookup(True, element.id)
    if filter_type is FilterType.NAME:
        return _attribute(element, "Name")
    if filter_type is FilterType.DESCRIPTION:
        return _attribute(element, "Description")
    if filter_type is FilterType.LEVEL:
        storey = containing_storey(element)
        return MISSING if storey is None else PropertyLookup(True, storey)

    if config.pset_name and config.pset_name != ANY_PSET:
        return find_property(element, config.property, config.pset_name)
    return resolve_path(element, config.property)


def _pset_exists(element: Element, name: str) -> bool:
    return name in element.psets or name in element.qtos


def run_filter(inputs: NodeInputs, config: FilterConfig) -> ElementsResult:
    """Keep the elements that satisfy the configured predicate.

    Raises:
        UnsupportedOperatorError: If the operator does not fit the filter type
        NodeExecutionError: If a required property or set name is empty
    """
    supported = SUPPORTED_OPERATORS[config.filter_type]
    if config.operator not in supported:
        raise UnsupportedOperatorError(
            config.filter_type.value,
            config.operator.value,
            sorted(op.value for op in supported),
        )

    source = inputs.elements()

    if config.filter_type is FilterType.PSET_EXISTS:
        pset_name = config.pset_name or config.value or config.property
        if not pset_name:
            raise NodeExecutionError("Filter on property set existence needs a set name")
        wanted = config.operator is Op.EXISTS
        kept = [e for e in source.elements if _pset_exists(e, pset_name) == wanted]
    else:
        if config.filter_type is FilterType.PROPERTY and not config.property.strip():
            raise NodeExecutionError("Filter on property value needs a property name")
        kept = [
            e for e in source.elements
            if compare(_resolve(e, config), config.operator, config.value)
        ]

    logger.debug(
        "Filter applied",
        filter_type=config.filter_type.value,
        operator=config.operator.value,
        kept=len(kept),
        total=len(source.elements),
    )
    return source.with_elements(kept)
