"""IFC Import Service.

Orchestrates IFC file import: size checks, upload storage, parsing and
registration with the model registry.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ifc_flow.domain.exceptions import IfcImportError
from ifc_flow.infrastructure.ifc.loader import load_model
from ifc_flow.infrastructure.ifc.registry import ModelRegistry
from ifc_flow.shared.config import Settings, get_settings
from ifc_flow.shared.logging import get_logger

logger = get_logger(__name__)

IFC_SUFFIXES = {".ifc"}


@dataclass
class ImportResult:
    """Result of IFC import operation."""

    model_id: str
    model_name: str
    schema: str
    element_count: int
    element_counts: dict[str, int] = field(default_factory=dict)
    file_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "model_id": self.model_id,
            "model_name": self.model_name,
            "schema": self.schema,
            "element_count": self.element_count,
            "element_counts": self.element_counts,
            "file_path": self.file_path,
        }


class IfcImportService:
    """Service for loading IFC files into the model registry."""

    def __init__(self, registry: ModelRegistry, settings: Settings | None = None) -> None:
        """Initialize import service."""
        self._registry = registry
        self._settings = settings or get_settings()

    def _check_size(self, size: int, name: str) -> None:
        limit = self._settings.max_file_size_bytes
        if size > limit:
            raise IfcImportError(
                f"IFC file too large: {name}",
                {"size_bytes": size, "limit_bytes": limit},
            )

    async def import_file(self, file_path: str | Path, *, model_id: str | None = None) -> ImportResult:
        """Parse an IFC file and register it.

        Args:
            file_path: Path to the IFC file
            model_id: Registry key; defaults to the file name

        Returns:
            ImportResult describing the registered model

        Raises:
            IfcImportError: If the file is too large or cannot be parsed
        """
        path = Path(file_path)
        logger.info("Starting IFC import", file_path=str(path))
        if path.exists():
            self._check_size(path.stat().st_size, path.name)

        model = await asyncio.to_thread(load_model, path, model_id)
        self._registry.register(model)

        logger.info("IFC import complete", model_id=model.id, elements=model.total_elements)
        return ImportResult(
            model_id=model.id,
            model_name=model.name,
            schema=model.schema.value,
            element_count=model.total_elements,
            element_counts=dict(model.element_counts),
            file_path=model.source_path,
        )

    async def import_upload(
        self,
        filename: str,
        content: bytes,
        *,
        model_id: str | None = None,
    ) -> ImportResult:
        """Store uploaded bytes in the upload directory and import them.

        Raises:
            IfcImportError: If the upload is not an IFC file or too large
        """
        name = Path(filename).name
        if Path(name).suffix.lower() not in IFC_SUFFIXES:
            raise IfcImportError(f"Not an IFC file: {filename}")
        self._check_size(len(content), name)

        upload_dir = Path(self._settings.upload_dir)
        upload_dir.mkdir(parents=True, exist_ok=True)
        target = upload_dir / name
        await asyncio.to_thread(target.write_bytes, content)
        logger.info("Upload stored", path=str(target), size=len(content))

        return await self.import_file(target, model_id=model_id)


async def import_ifc_file(
    file_path: str | Path,
    registry: ModelRegistry,
    *,
    model_id: str | None = None,
) -> ImportResult:
    """Convenience function to import IFC file."""
    service = IfcImportService(registry)
    return await service.import_file(file_path, model_id=model_id)
