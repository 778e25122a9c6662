"""Shared FastAPI dependency injection."""

from __future__ import annotations

from thoughtgraph.config import Settings, get_settings
from thoughtgraph.services.broadcaster import SyncBroadcaster
from thoughtgraph.services.thinking_service import ThinkingService
from thoughtgraph.utils.exceptions import ServiceNotInitializedError

_thinking_service: ThinkingService | None = None
_settings: Settings | None = None


def set_thinking_service(service: ThinkingService | None) -> None:
    global _thinking_service
    _thinking_service = service


def set_settings(settings: Settings | None) -> None:
    global _settings
    _settings = settings


def get_thinking_service() -> ThinkingService:
    if _thinking_service is None:
        raise ServiceNotInitializedError("Thinking service not initialized")
    return _thinking_service


def get_broadcaster() -> SyncBroadcaster:
    return get_thinking_service().broadcaster


def get_app_settings() -> Settings:
    return _settings if _settings is not None else get_settings()
