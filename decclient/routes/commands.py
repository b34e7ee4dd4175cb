from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from decclient.application import get_procedure_service
from decclient.domain import WorkflowKind

router = APIRouter(tags=["commands"])


@router.post("/commands/{kind}", status_code=status.HTTP_202_ACCEPTED)
async def run_command(kind: str, payload: dict) -> dict:
    """Start a procedure on a local model and return immediately."""
    try:
        workflow = WorkflowKind(kind)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"unknown command: {kind}") from None

    path = payload.get("path")
    if not path or not isinstance(path, str):
        raise HTTPException(status_code=400, detail="path is required")

    service = get_procedure_service()
    task = service.start(workflow, path)
    return {"kind": workflow.value, "path": path, "accepted": task is not None}


@router.get("/commands/active")
async def list_active() -> dict:
    service = get_procedure_service()
    return {"items": [str(path) for path in service.registry.active()]}


@router.get("/output")
async def read_output() -> dict:
    service = get_procedure_service()
    items = [{"level": line.level, "message": line.message} for line in service.output.lines()]
    return {"items": items}
