"""API Routes."""
from ifc_flow.presentation.api.routes import models, workflows

__all__ = ["models", "workflows"]
