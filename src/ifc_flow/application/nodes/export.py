"""Export node.

CSV and JSON are serialized in-process. Native formats (IFC, Excel, GLB) are
handed to the model writer as an ``ExportRequest``.
"""
from __future__ import annotations

import csv
import io
import json
from typing import Any

from ifc_flow.application.nodes.base import NodeInputs
from ifc_flow.application.nodes.lookup import resolve_path
from ifc_flow.domain.exceptions import ExportError
from ifc_flow.domain.interfaces import ExportRequest, IModelWriter
from ifc_flow.domain.models.element import Element
from ifc_flow.domain.models.node_config import ExportConfig
from ifc_flow.domain.models.result import BinaryResult, TextResult
from ifc_flow.shared.logging import get_logger

logger = get_logger(__name__)

TEXT_FORMATS = frozenset({"csv", "json"})

FILE_EXTENSIONS: dict[str, str] = {
    "csv": "csv",
    "json": "json",
    "excel": "xlsx",
    "ifc": "ifc",
    "glb": "glb",
}


def file_name_for(config: ExportConfig) -> str:
    return f"{config.file_name}.{FILE_EXTENSIONS[config.format]}"


def export_columns(config: ExportConfig, elements: tuple[Element, ...]) -> list[str]:
    """Configured columns, or the first element's property names."""
    columns = config.columns
    if not columns and elements:
        columns = list(elements[0].properties.keys())
    return columns


def export_rows(elements: tuple[Element, ...], columns: list[str]) -> list[dict[str, Any]]:
    """One row per element, one value per column (None when missing)."""
    rows = []
    for element in elements:
        row = {}
        for column in columns:
            found = resolve_path(element, column)
            row[column] = found.value if found.exists else None
        rows.append(row)
    return rows


def to_csv(rows: list[dict[str, Any]], columns: list[str]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow(["" if row[column] is None else row[column] for column in columns])
    return buffer.getvalue()


def to_json(rows: list[dict[str, Any]]) -> str:
    return json.dumps(rows, indent=2, ensure_ascii=False, default=str)


def run_text_export(inputs: NodeInputs, config: ExportConfig) -> TextResult:
    """Serialize the input collection to CSV or JSON.

    An empty collection gives "" (CSV) or "[]" (JSON).
    """
    elements = inputs.element_list()
    file_name = file_name_for(config)
    if not elements:
        return TextResult(text="[]" if config.format == "json" else "", format=config.format, file_name=file_name)

    columns = export_columns(config, elements)
    rows = export_rows(elements, columns)
    text = to_json(rows) if config.format == "json" else to_csv(rows, columns)
    return TextResult(text=text, format=config.format, file_name=file_name)


async def run_native_export(
    inputs: NodeInputs,
    config: ExportConfig,
    writer: IModelWriter | None,
) -> BinaryResult:
    """Send the collection to the model writer.

    Raises:
        ExportError: If no writer is configured or the writer fails
    """
    if writer is None:
        raise ExportError(config.format, "no model writer configured")

    source = inputs.elements()
    request = ExportRequest(
        elements=source.elements,
        file_name=config.file_name,
        format=config.format,
        model=source.model,
    )
    try:
        payload = await writer.write(request)
    except ExportError:
        raise
    except Exception as e:
        raise ExportError(config.format, str(e)) from e

    logger.info(
        "Native export written",
        format=config.format,
        file_name=file_name_for(config),
        size=len(payload),
    )
    return BinaryResult(payload=payload, format=config.format, file_name=file_name_for(config))
