"""Shared test fixtures."""

from __future__ import annotations

import pytest

from tests.helpers import SCENARIO_A, SCENARIO_B, SCENARIO_C


@pytest.fixture(autouse=True)
def _env_setup(monkeypatch):
    """Keep tests independent of any local .env."""
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LOG_FORMAT", "console")
    monkeypatch.setenv("LOG_STREAM", "stderr")
    monkeypatch.setenv("OBSERVER_QUEUE_SIZE", "1000")
    monkeypatch.setenv("WEB_UI_ENABLED", "false")


@pytest.fixture
def service():
    from thoughtgraph.services.thinking_service import ThinkingService

    return ThinkingService(queue_size=1000)


@pytest.fixture
def scenario_c_service(service):
    """Service after Scenarios A, B and C."""
    for raw in SCENARIO_A + SCENARIO_B + SCENARIO_C:
        service.ingest(raw)
    return service
