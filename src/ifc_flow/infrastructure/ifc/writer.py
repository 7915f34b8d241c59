"""Native model writer.

Serializes edited element collections for export nodes: IFC by re-opening the
source file with IfcOpenShell and writing changed property sets back, Excel
with openpyxl. GLB needs tessellated geometry and is not produced here.
"""
from __future__ import annotations

import asyncio
from io import BytesIO
from pathlib import Path
from typing import Any

import ifcopenshell
import ifcopenshell.api.pset
import ifcopenshell.util.element

from ifc_flow.domain.exceptions import ExportError
from ifc_flow.domain.interfaces import ExportRequest
from ifc_flow.domain.models.element import Element
from ifc_flow.shared.logging import get_logger

logger = get_logger(__name__)

FILE_EXTENSIONS = {"ifc": "ifc", "excel": "xlsx"}


def _ifc_value(value: Any) -> Any:
    """Reduce a value to something IfcOpenShell can type."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    return str(value)


class NativeModelWriter:
    """Model writer for IFC and Excel exports."""

    def __init__(self, export_dir: str | Path | None = None) -> None:
        """Initialize writer.

        Args:
            export_dir: When set, every payload is also saved there
        """
        self._export_dir = Path(export_dir) if export_dir else None

    async def write(self, request: ExportRequest) -> bytes:
        """Produce the export payload.

        Raises:
            ExportError: If the format is unsupported or writing fails
        """
        if request.format == "ifc":
            payload = await asyncio.to_thread(self.write_ifc, request)
        elif request.format == "excel":
            payload = await asyncio.to_thread(self.write_excel, request)
        else:
            raise ExportError(request.format, "format not supported by the native writer")

        if self._export_dir is not None:
            await asyncio.to_thread(self._save, request, payload)
        return payload

    def _save(self, request: ExportRequest, payload: bytes) -> None:
        self._export_dir.mkdir(parents=True, exist_ok=True)  # type: ignore[union-attr]
        target = self._export_dir / f"{request.file_name}.{FILE_EXTENSIONS[request.format]}"  # type: ignore[operator]
        target.write_bytes(payload)
        logger.info("Export saved", path=str(target), size=len(payload))

    # =========================================================================
    # IFC
    # =========================================================================

    def write_ifc(self, request: ExportRequest) -> bytes:
        """Write property set edits back into a copy of the source model.

        Raises:
            ExportError: If the source file is unknown or cannot be opened
        """
        model = request.model
        if model is None or not model.source_path:
            raise ExportError("ifc", "source model file is not available")

        try:
            ifc = ifcopenshell.open(model.source_path)
        except Exception as e:
            raise ExportError("ifc", f"cannot open source model: {e}") from e

        changed = 0
        for element in request.elements:
            entity = self._find_entity(ifc, element)
            if entity is None:
                logger.warning("Element not found in source model", element_id=element.id)
                continue
            changed += self._apply_psets(ifc, entity, element)

        logger.info("IFC export prepared", elements=len(request.elements), changed_properties=changed)
        return ifc.to_string().encode("utf-8")

    @staticmethod
    def _find_entity(ifc: ifcopenshell.file, element: Element) -> Any:
        global_id = element.global_id
        try:
            entity = ifc.by_id(element.express_id)
        except RuntimeError:
            entity = None
        if entity is not None and (global_id is None or getattr(entity, "GlobalId", None) == global_id):
            return entity
        if global_id:
            try:
                return ifc.by_guid(global_id)
            except RuntimeError:
                return None
        return None

    @staticmethod
    def _apply_psets(ifc: ifcopenshell.file, entity: Any, element: Element) -> int:
        current = ifcopenshell.util.element.get_psets(entity, psets_only=True)
        changed = 0
        for pset_name, values in element.psets.items():
            existing = current.get(pset_name)
            updates = {
                name: _ifc_value(value)
                for name, value in values.items()
                if name != "id" and (existing is None or existing.get(name) != value)
            }
            if not updates:
                continue
            if existing is None:
                pset = ifcopenshell.api.pset.add_pset(ifc, product=entity, name=pset_name)
            else:
                pset = ifc.by_id(existing["id"])
            ifcopenshell.api.pset.edit_pset(ifc, pset=pset, properties=updates)
            changed += len(updates)
        return changed

    # =========================================================================
    # Excel
    # =========================================================================

    def write_excel(self, request: ExportRequest) -> bytes:
        """Element table plus a long-format sheet of every set value."""
        from openpyxl import Workbook
        from openpyxl.styles import Font, PatternFill

        wb = Workbook()
        ws = wb.active
        ws.title = "Elements"

        header_font = Font(bold=True, color="FFFFFF", size=11)
        header_fill = PatternFill(start_color="003366", end_color="003366", fill_type="solid")

        property_names: list[str] = []
        for element in request.elements:
            for name in element.properties:
                if name not in property_names:
                    property_names.append(name)

        headers = ["Id", "Type", *property_names]
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill

        for row, element in enumerate(request.elements, 2):
            ws.cell(row=row, column=1, value=element.id)
            ws.cell(row=row, column=2, value=element.type)
            for col, name in enumerate(property_names, 3):
                ws.cell(row=row, column=col, value=_ifc_value(element.properties.get(name)))

        sets = wb.create_sheet("Properties")
        for col, header in enumerate(["Id", "Set", "Property", "Value"], 1):
            cell = sets.cell(row=1, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill

        row = 2
        for element in request.elements:
            for group in (element.psets, element.qtos):
                for set_name, values in group.items():
                    for name, value in values.items():
                        sets.cell(row=row, column=1, value=element.id)
                        sets.cell(row=row, column=2, value=set_name)
                        sets.cell(row=row, column=3, value=name)
                        sets.cell(row=row, column=4, value=_ifc_value(value))
                        row += 1

        ws.column_dimensions["A"].width = 24
        ws.column_dimensions["B"].width = 24

        output = BytesIO()
        wb.save(output)
        return output.getvalue()
