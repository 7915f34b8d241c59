"""IFC Model Loader using IfcOpenShell.

Opens an IFC file and flattens its products into the element collection a
workflow's source node hands to the graph.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

import ifcopenshell
import ifcopenshell.util.element
import ifcopenshell.util.unit

from ifc_flow.domain.exceptions import (
    IfcFileNotFoundError,
    IfcParseError,
    UnsupportedIfcSchemaError,
)
from ifc_flow.domain.models.element import Element
from ifc_flow.domain.models.model import IfcSchemaVersion, Model, ProjectInfo
from ifc_flow.shared.logging import get_logger

logger = get_logger(__name__)


class IfcModelLoader:
    """Loads an IFC file into a ``Model``."""

    # Supported IFC schemas
    SUPPORTED_SCHEMAS = {"IFC2X3", "IFC4", "IFC4X1", "IFC4X2", "IFC4X3"}

    # Products that never carry building data
    SKIPPED_CLASSES = ("IfcAnnotation", "IfcGrid", "IfcPort", "IfcVirtualElement")

    # Pset values copied to the flat property map
    PROMOTED_PROPERTIES = {"IsExternal", "FireRating", "LoadBearing"}
    PROMOTED_PSETS = {"Pset_WallCommon"}

    # Qto values copied to the flat property map
    PROMOTED_QUANTITIES = {"Length", "Width", "Height", "Area", "Volume"}

    def __init__(self, file_path: str | Path) -> None:
        """Initialize loader with IFC file path.

        Args:
            file_path: Path to IFC file

        Raises:
            IfcFileNotFoundError: If file doesn't exist
        """
        self.file_path = Path(file_path)

        if not self.file_path.exists():
            raise IfcFileNotFoundError(str(self.file_path))

        self._ifc: ifcopenshell.file | None = None
        self._unit_scale: float = 1.0

    @property
    def ifc(self) -> ifcopenshell.file:
        """Get loaded IFC file."""
        if self._ifc is None:
            self._load_file()
        return self._ifc  # type: ignore

    def _load_file(self) -> None:
        """Load and validate IFC file."""
        try:
            self._ifc = ifcopenshell.open(str(self.file_path))
        except Exception as e:
            raise IfcParseError(str(self.file_path), str(e)) from e

        schema = self._ifc.schema
        if schema not in self.SUPPORTED_SCHEMAS:
            raise UnsupportedIfcSchemaError(schema, sorted(self.SUPPORTED_SCHEMAS))

        self._unit_scale = ifcopenshell.util.unit.calculate_unit_scale(self._ifc)

        logger.info(
            "IFC file loaded",
            schema=schema,
            path=str(self.file_path),
            unit_scale=self._unit_scale,
        )

    def load(self, model_id: str | None = None) -> Model:
        """Parse the file into a model.

        Args:
            model_id: Registry key; defaults to the file name

        Returns:
            Model with one element per IFC product
        """
        logger.info("Starting IFC load", path=str(self.file_path))

        elements = tuple(self._iter_elements())
        model = Model(
            id=model_id or self.file_path.name,
            name=self.file_path.name,
            schema=IfcSchemaVersion.from_string(self.ifc.schema),
            elements=elements,
            source_path=str(self.file_path),
            project=self._project_info(),
        )

        logger.info(
            "IFC load complete",
            model_id=model.id,
            elements=model.total_elements,
            types=len(model.element_counts),
        )
        return model

    def _project_info(self) -> ProjectInfo | None:
        projects = self.ifc.by_type("IfcProject")
        if not projects:
            return None
        project = projects[0]
        return ProjectInfo(
            global_id=project.GlobalId,
            name=project.Name or "Unnamed Project",
            description=getattr(project, "Description", None) or "",
        )

    def _iter_elements(self) -> Iterator[Element]:
        for product in self.ifc.by_type("IfcProduct"):
            if any(product.is_a(skipped) for skipped in self.SKIPPED_CLASSES):
                continue
            try:
                yield self.to_element(product)
            except Exception as e:
                logger.warning(
                    "Failed to read product",
                    express_id=product.id(),
                    ifc_class=product.is_a(),
                    error=str(e),
                )

    def to_element(self, product: Any) -> Element:
        """Flatten one IFC product into an Element."""
        ifc_class = product.is_a()
        properties: dict[str, Any] = {
            "GlobalId": product.GlobalId,
            "Name": product.Name or f"Unnamed {ifc_class}",
        }
        for attribute in ("Description", "ObjectType", "Tag"):
            value = getattr(product, attribute, None)
            if value is not None:
                properties[attribute] = value

        container = ifcopenshell.util.element.get_container(product)
        if container is not None and container.is_a("IfcBuildingStorey"):
            properties["BuildingStorey"] = container.Name

        material = self._material_name(product)
        if material:
            properties["Material"] = material

        psets = self._sets(product, psets_only=True)
        qtos = self._sets(product, qtos_only=True)

        for pset_name, values in psets.items():
            for name, value in values.items():
                if pset_name in self.PROMOTED_PSETS or name in self.PROMOTED_PROPERTIES:
                    properties[name] = value
        for values in qtos.values():
            for name, value in values.items():
                if name in self.PROMOTED_QUANTITIES:
                    properties.setdefault(name, value)

        return Element.create(
            product.id(),
            ifc_class,
            properties=properties,
            psets=psets,
            qtos=qtos,
        )

    def _sets(self, product: Any, **kwargs: bool) -> dict[str, dict[str, Any]]:
        """Property or quantity sets without IfcOpenShell's internal ids."""
        sets = ifcopenshell.util.element.get_psets(product, **kwargs)
        return {
            name: {key: self._plain(value) for key, value in values.items() if key != "id"}
            for name, values in sets.items()
            if isinstance(values, dict)
        }

    @staticmethod
    def _material_name(product: Any) -> str | None:
        material = ifcopenshell.util.element.get_material(product)
        if material is None:
            return None
        if material.is_a("IfcMaterialLayerSetUsage"):
            material = material.ForLayerSet
        if material.is_a("IfcMaterialLayerSet"):
            if getattr(material, "LayerSetName", None):
                return material.LayerSetName
            layers = [layer.Material for layer in material.MaterialLayers if layer.Material]
            return layers[0].Name if layers else None
        return getattr(material, "Name", None)

    @classmethod
    def _plain(cls, value: Any) -> Any:
        if value is None or isinstance(value, (str, int, float, bool)):
            return value
        if isinstance(value, dict):
            return {key: cls._plain(item) for key, item in value.items() if key != "id"}
        if isinstance(value, (list, tuple)):
            return [cls._plain(item) for item in value]
        return str(value)


def load_model(file_path: str | Path, model_id: str | None = None) -> Model:
    """Convenience function to load an IFC file.

    Args:
        file_path: Path to IFC file
        model_id: Optional registry key

    Returns:
        Parsed model
    """
    return IfcModelLoader(file_path).load(model_id)
