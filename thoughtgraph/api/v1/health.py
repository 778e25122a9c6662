"""Health and readiness probe endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from thoughtgraph.api.dependencies import get_thinking_service
from thoughtgraph.services.thinking_service import ThinkingService

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(service: ThinkingService = Depends(get_thinking_service)) -> dict:
    return {
        "status": "ready",
        "thoughts": len(service.history),
        "nodes": service.store.node_count,
        "edges": service.store.edge_count,
        "observers": service.broadcaster.observer_count,
    }
