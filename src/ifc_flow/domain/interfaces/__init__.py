"""Collaborator Interfaces (Protocols).

Defines the contracts the engine uses to reach the model parser and the native
model writer, without implementation details.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ifc_flow.domain.models.element import Element
from ifc_flow.domain.models.model import Model


@dataclass(frozen=True)
class ExportRequest:
    """Native export job handed to the model writer.

    Attributes:
        elements: Elements to write (already edited by upstream nodes)
        file_name: Requested file name without extension
        format: Target format ("ifc", "excel", "glb")
        model: Model the elements came from, if known
    """

    elements: tuple[Element, ...]
    file_name: str
    format: str
    model: Model | None = None


@runtime_checkable
class IModelProvider(Protocol):
    """Supplies parsed models to source nodes."""

    async def get_model(self, model_id: str | None = None) -> Model:
        """Return the model with the given id, or the latest one for None.

        Raises:
            ModelNotFoundError: If no such model is available
        """
        ...


@runtime_checkable
class IModelWriter(Protocol):
    """Serializes element collections into native file formats."""

    async def write(self, request: ExportRequest) -> bytes:
        """Produce the file payload.

        Raises:
            ExportError: If the format is unsupported or writing fails
        """
        ...


__all__ = ["ExportRequest", "IModelProvider", "IModelWriter"]
