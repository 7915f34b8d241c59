"""In-memory model registry.

Holds the models loaded in this process and serves them to source nodes.
The most recently registered model is the default for source nodes that do
not name one.
"""
from __future__ import annotations

from ifc_flow.domain.exceptions import ModelNotFoundError
from ifc_flow.domain.models.model import Model
from ifc_flow.shared.logging import get_logger

logger = get_logger(__name__)


class ModelRegistry:
    """Model provider backed by a dict."""

    def __init__(self, models: list[Model] | None = None) -> None:
        self._models: dict[str, Model] = {}
        self._latest: str | None = None
        for model in models or []:
            self.register(model)

    def register(self, model: Model) -> Model:
        """Add or replace a model and make it the default."""
        replaced = model.id in self._models
        self._models[model.id] = model
        self._latest = model.id
        logger.info(
            "Model registered",
            model_id=model.id,
            elements=model.total_elements,
            replaced=replaced,
        )
        return model

    async def get_model(self, model_id: str | None = None) -> Model:
        """Return a model by id, or the latest one.

        Raises:
            ModelNotFoundError: If the id is unknown or nothing is loaded
        """
        key = model_id or self._latest
        if key is None or key not in self._models:
            raise ModelNotFoundError(model_id)
        return self._models[key]

    def remove(self, model_id: str) -> bool:
        removed = self._models.pop(model_id, None) is not None
        if self._latest == model_id:
            self._latest = next(reversed(self._models), None)
        return removed

    def list_models(self) -> list[dict]:
        return [model.summary() for model in self._models.values()]

    @property
    def latest_id(self) -> str | None:
        return self._latest

    def __len__(self) -> int:
        return len(self._models)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models
