"""Dependency Injection Container.

Holds the process-wide model registry and export writer, and builds the
services the MCP tools and the REST API share.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ifc_flow.application.engine.executor import WorkflowExecutor
    from ifc_flow.infrastructure.ifc.import_service import IfcImportService
    from ifc_flow.infrastructure.ifc.registry import ModelRegistry
    from ifc_flow.infrastructure.ifc.writer import NativeModelWriter
    from ifc_flow.shared.config import Settings


class Container:
    """Dependency Injection Container.

    Singleton container; the registry and writer are created lazily on first
    use and live as long as the process.
    """

    _instance: Container | None = None
    _initialized: bool = False

    def __new__(cls) -> Container:
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Initialize container (only once)."""
        if self._initialized:
            return

        self._initialized = True
        self._registry: ModelRegistry | None = None
        self._writer: NativeModelWriter | None = None

    @property
    def settings(self) -> Settings:
        from ifc_flow.shared.config import get_settings

        return get_settings()

    @property
    def registry(self) -> ModelRegistry:
        """Shared model registry."""
        if self._registry is None:
            from ifc_flow.infrastructure.ifc.registry import ModelRegistry

            self._registry = ModelRegistry()
        return self._registry

    @property
    def writer(self) -> NativeModelWriter:
        """Shared native export writer."""
        if self._writer is None:
            from ifc_flow.infrastructure.ifc.writer import NativeModelWriter

            self._writer = NativeModelWriter(export_dir=self.settings.export_dir)
        return self._writer

    def get_import_service(self) -> IfcImportService:
        """Get an import service bound to the shared registry.

        Returns:
            IfcImportService instance
        """
        from ifc_flow.infrastructure.ifc.import_service import IfcImportService

        return IfcImportService(self.registry, self.settings)

    def get_executor(self) -> WorkflowExecutor:
        """Get a workflow executor reading from the shared registry.

        Returns:
            WorkflowExecutor instance
        """
        from ifc_flow.application.engine.executor import WorkflowExecutor

        return WorkflowExecutor(self.registry, self.writer, self.settings)

    def reset(self) -> None:
        """Drop every loaded model and the writer."""
        self._registry = None
        self._writer = None


# Global container instance
container = Container()
