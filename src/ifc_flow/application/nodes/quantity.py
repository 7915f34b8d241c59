"""Quantity takeoff node."""
from __future__ import annotations

from collections.abc import Callable

from ifc_flow.application.nodes.base import NodeInputs
from ifc_flow.application.nodes.lookup import containing_storey, material_of, measure_from_qtos
from ifc_flow.domain.models.element import Element
from ifc_flow.domain.models.node_config import QuantityConfig
from ifc_flow.domain.models.result import AggregateResult

TOTAL_KEY = "Total"
UNKNOWN_KEY = "Unknown"

# Contribution of an element whose quantity sets carry no value
DEFAULT_CONTRIBUTION: dict[str, float] = {
    "length": 3.0,
    "area": 10.0,
    "volume": 8.0,
    "weight": 500.0,
    "count": 1.0,
}

DEFAULT_UNITS: dict[str, str] = {
    "length": "m",
    "area": "m²",
    "volume": "m³",
    "count": "",
    "weight": "kg",
}

GROUP_KEYS: dict[str, Callable[[Element], str | None]] = {
    "type": lambda element: element.type_label,
    "material": material_of,
    "level": containing_storey,
}


def contribution(element: Element, measure: str) -> float:
    value = measure_from_qtos(element, measure)
    return value if value is not None else DEFAULT_CONTRIBUTION[measure]


def _rounded(value: float) -> int | float:
    value = round(value, 2)
    return int(value) if value.is_integer() else value


def run_quantity(inputs: NodeInputs, config: QuantityConfig) -> AggregateResult:
    """Sum one measure over the input, optionally grouped.

    Args:
        inputs: Resolved inputs; reads the ``input`` collection
        config: Measure, grouping key and optional unit override

    Returns:
        Totals per group ("Total" when ungrouped), rounded to two decimals
    """
    unit = config.unit or DEFAULT_UNITS[config.quantity_type]
    elements = inputs.element_list()
    if not elements:
        return AggregateResult(values={TOTAL_KEY: 0}, unit=unit)

    key_of = GROUP_KEYS.get(config.group_by)
    totals: dict[str, float] = {}
    for element in elements:
        key = TOTAL_KEY if key_of is None else (key_of(element) or UNKNOWN_KEY)
        totals[key] = totals.get(key, 0.0) + contribution(element, config.quantity_type)

    return AggregateResult(
        values={key: _rounded(total) for key, total in totals.items()},
        unit=unit,
    )
