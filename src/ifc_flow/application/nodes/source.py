"""Source and parameter nodes.

Graph roots: the source node pulls a parsed model from the model provider,
the parameter node emits a typed constant for downstream value ports.
"""
from __future__ import annotations

from typing import Any

from ifc_flow.application.nodes.base import to_number
from ifc_flow.domain.exceptions import NodeExecutionError
from ifc_flow.domain.interfaces import IModelProvider
from ifc_flow.domain.models.node_config import ParameterConfig, SourceConfig
from ifc_flow.domain.models.result import ElementsResult, ValueResult
from ifc_flow.shared.logging import get_logger

logger = get_logger(__name__)

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})


async def run_source(config: SourceConfig, provider: IModelProvider) -> ElementsResult:
    """Fetch the configured model and expose its elements.

    Raises:
        ModelNotFoundError: If the provider has no such model
    """
    model = await provider.get_model(config.model_id)
    logger.debug("Source model resolved", model_id=model.id, elements=model.total_elements)
    return ElementsResult(elements=model.elements, model=model)


def coerce_parameter(value: Any, param_type: str) -> Any:
    """Coerce a raw parameter value to its declared type.

    Raises:
        NodeExecutionError: If a number parameter does not parse
    """
    if param_type == "number":
        number = to_number(value)
        if number is None:
            raise NodeExecutionError(
                f"Parameter value {value!r} is not a number",
                {"param_type": param_type},
            )
        return int(number) if number.is_integer() else number

    if param_type == "boolean":
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_WORDS
        return bool(value)

    if param_type == "list":
        if isinstance(value, (list, tuple)):
            return list(value)
        if value is None:
            return []
        return [part.strip() for part in str(value).split(",") if part.strip()]

    return "" if value is None else str(value)


def run_parameter(config: ParameterConfig) -> ValueResult:
    value = config.value
    # Canvas list widgets keep the items apart and only the first one in value
    if config.param_type == "list" and config.list_items is not None:
        value = config.list_items
    return ValueResult(value=coerce_parameter(value, config.param_type))
