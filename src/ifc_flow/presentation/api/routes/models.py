"""Model API Routes."""
from fastapi import APIRouter, HTTPException, UploadFile

from ifc_flow.domain.exceptions import IfcImportError
from ifc_flow.infrastructure.di.container import container

router = APIRouter()


@router.post("/models/import")
async def import_model(file: UploadFile, model_id: str | None = None) -> dict:
    """Import an uploaded IFC file into the model registry.

    Args:
        file: Uploaded IFC file
        model_id: Optional registry key (defaults to the file name)

    Returns:
        Import result with the model id
    """
    if not file.filename or not file.filename.lower().endswith(".ifc"):
        raise HTTPException(status_code=400, detail="File must be IFC format")

    content = await file.read()
    try:
        result = await container.get_import_service().import_upload(
            file.filename,
            content,
            model_id=model_id,
        )
    except IfcImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return result.to_dict()


@router.get("/models")
async def list_models() -> dict:
    """List loaded models."""
    registry = container.registry
    return {
        "total": len(registry),
        "latest": registry.latest_id,
        "models": registry.list_models(),
    }


@router.delete("/models/{model_id}")
async def remove_model(model_id: str) -> dict:
    """Drop a model from the registry."""
    if not container.registry.remove(model_id):
        raise HTTPException(status_code=404, detail="Model not found")
    return {"removed": model_id}
