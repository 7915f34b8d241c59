"""Workflow API Routes."""
from typing import Any

from fastapi import APIRouter, Body, HTTPException
from fastapi.responses import JSONResponse

from ifc_flow.application.engine import ExecutionPlan, parse_graph, validate_graph
from ifc_flow.domain.exceptions import GraphValidationError
from ifc_flow.domain.models.node_kind import NodeKind
from ifc_flow.infrastructure.di.container import container

router = APIRouter()


@router.post("/workflows/run")
async def run_workflow(graph: dict[str, Any] = Body(...)) -> Any:
    """Run a workflow graph once.

    Args:
        graph: Graph document with ``nodes`` and ``edges``

    Returns:
        Execution report with one result per node, or 422 with the
        validation issues when the graph is rejected
    """
    outcome = await container.get_executor().run(graph)
    if outcome.is_failure():
        error = outcome.error
        if isinstance(error, GraphValidationError):
            return JSONResponse(status_code=422, content=error.to_dict())
        raise HTTPException(status_code=500, detail=str(error))
    return outcome.unwrap().to_dict()


@router.post("/workflows/validate")
async def validate_workflow(graph: dict[str, Any] = Body(...)) -> Any:
    """Check a workflow graph without running it.

    Returns:
        The execution order, or 422 with the validation issues
    """
    try:
        validated = validate_graph(parse_graph(graph))
    except GraphValidationError as e:
        return JSONResponse(status_code=422, content=e.to_dict())
    return {"valid": True, "order": ExecutionPlan(validated).order}


@router.get("/node-kinds")
async def list_node_kinds() -> list[dict]:
    """List node kinds and their input ports."""
    return [
        {
            "kind": kind.value,
            "inputs": [{"name": port.name, "multiple": port.multiple} for port in kind.input_ports],
        }
        for kind in NodeKind
    ]
