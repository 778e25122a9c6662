"""Thought ingestion endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from thoughtgraph.api.dependencies import get_thinking_service
from thoughtgraph.api.v1.schemas.thoughts import BranchesResponse, HistoryResponse
from thoughtgraph.models.schemas import ThoughtFailed
from thoughtgraph.services.thinking_service import ThinkingService

router = APIRouter(prefix="/thoughts", tags=["thoughts"])


@router.post("")
async def add_thought(
    payload: Any = Body(...),
    service: ThinkingService = Depends(get_thinking_service),
) -> JSONResponse:
    """Ingest one thought record.

    The body is passed to the record validator untouched so that rejections
    carry the same messages as the MCP tool. A rejected record returns 422
    with ``{"error": ..., "status": "failed"}`` and leaves the graph unchanged.
    """
    result = service.process_thought(payload)
    status_code = 422 if isinstance(result, ThoughtFailed) else 200
    return JSONResponse(status_code=status_code, content=result.to_wire())


@router.get("", response_model=HistoryResponse)
async def list_thoughts(service: ThinkingService = Depends(get_thinking_service)) -> HistoryResponse:
    history = service.history
    return HistoryResponse(thoughts=[r.to_wire() for r in history], count=len(history))


@router.get("/branches", response_model=BranchesResponse)
async def list_branches(service: ThinkingService = Depends(get_thinking_service)) -> BranchesResponse:
    return BranchesResponse(
        branches={branch_id: len(records) for branch_id, records in service.branches.items()}
    )
