"""IFC Infrastructure.

IfcOpenShell-based loading, the in-memory model registry, import services and
the native export writer.
"""
from __future__ import annotations

from ifc_flow.infrastructure.ifc.import_service import (
    IfcImportService,
    ImportResult,
    import_ifc_file,
)
from ifc_flow.infrastructure.ifc.loader import IfcModelLoader, load_model
from ifc_flow.infrastructure.ifc.registry import ModelRegistry
from ifc_flow.infrastructure.ifc.writer import NativeModelWriter

__all__ = [
    # Loader
    "IfcModelLoader",
    "load_model",
    # Registry
    "ModelRegistry",
    # Import Service
    "IfcImportService",
    "ImportResult",
    "import_ifc_file",
    # Writer
    "NativeModelWriter",
]
