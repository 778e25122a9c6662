"""FastAPI application factory with lifespan events."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from thoughtgraph.api.dependencies import set_settings, set_thinking_service
from thoughtgraph.api.router import api_router
from thoughtgraph.config import Settings, get_settings
from thoughtgraph.services.thinking_service import ThinkingService
from thoughtgraph.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown resources."""
    settings: Settings = app.state.settings

    # The MCP server hands in its own service so both surfaces share one graph.
    service = app.state.shared_service or ThinkingService(queue_size=settings.OBSERVER_QUEUE_SIZE)
    set_settings(settings)
    set_thinking_service(service)

    logger.info("app_started", host=settings.HOST, port=settings.PORT)
    yield

    # Shutdown
    service.broadcaster.close_all()
    set_thinking_service(None)
    logger.info("app_stopped")


def create_app(settings: Settings | None = None, service: ThinkingService | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT, settings.LOG_STREAM)

    application = FastAPI(
        title="thoughtgraph",
        description="Thought-lineage graph engine with live snapshot/delta sync",
        version="0.1.0",
        lifespan=lifespan,
    )
    application.state.settings = settings
    application.state.shared_service = service

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router)

    @application.middleware("http")
    async def request_id_middleware(request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "type": type(exc).__name__},
        )

    return application


app = create_app()
