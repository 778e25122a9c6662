"""Tests for the sequentialthinking MCP tool and its CLI."""

from __future__ import annotations

import json

import pytest

from tests.helpers import thought
from thoughtgraph import mcp_server
from thoughtgraph.config import Settings
from thoughtgraph.services.thinking_service import ThinkingService


@pytest.fixture
def tool_service():
    service = ThinkingService(queue_size=100)
    mcp_server.set_thinking_service(service)
    yield service
    mcp_server.set_thinking_service(None)


async def _call(arguments: dict) -> tuple[bool, dict]:
    result = await mcp_server.mcp.call_tool(mcp_server.TOOL_NAME, arguments)
    [content] = result.content
    return result.isError, json.loads(content.text)


@pytest.mark.asyncio
async def test_tool_returns_processed_payload(tool_service):
    await _call(thought(1, total=2, text="first"))
    is_error, payload = await _call(
        thought(3, total=2, text="branch off", nextThoughtNeeded=False, branchFromThought=1, branchId="alt")
    )

    assert is_error is False
    assert payload == {
        "thoughtNumber": 3,
        "totalThoughts": 3,
        "nextThoughtNeeded": False,
        "branches": ["alt"],
        "thoughtHistoryLength": 2,
    }
    assert "main-1 B> alt-3" in {e.id for e in tool_service.store.snapshot()[1]}


@pytest.mark.asyncio
async def test_tool_rejection_returns_failure_payload(tool_service):
    is_error, payload = await _call(thought(2, isRevision=True))

    assert is_error is True
    assert payload["status"] == "failed"
    assert payload["error"].startswith("Invalid input: `isRevision` is true")
    assert tool_service.history == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"thoughtNumber": True}, "thoughtNumber"),
        ({"totalThoughts": "3"}, "totalThoughts"),
        ({"thoughtNumber": "abc"}, "thoughtNumber"),
        ({"nextThoughtNeeded": "true"}, "nextThoughtNeeded"),
        ({"revisesThought": 1.5, "isRevision": True}, "revisesThought"),
    ],
)
async def test_tool_does_not_coerce_argument_types(tool_service, overrides, field):
    is_error, payload = await _call({**thought(1), **overrides})

    assert is_error is True
    assert payload == {"error": payload["error"], "status": "failed"}
    assert payload["error"].startswith(f"Invalid {field}: ")
    assert tool_service.history == []


@pytest.mark.asyncio
async def test_tool_without_service_fails():
    mcp_server.set_thinking_service(None)
    is_error, payload = await _call(thought(1))

    assert is_error is True
    assert payload["status"] == "failed"


def test_parse_args_defaults_leave_settings_alone():
    args = mcp_server.parse_args([])
    assert args.web_ui is None
    assert args.port is None

    settings = mcp_server.build_settings(args, Settings(WEB_UI_ENABLED=True, PORT=4000))
    assert settings.WEB_UI_ENABLED is True
    assert settings.PORT == 4000
    assert settings.LOG_STREAM == "stderr"


def test_cli_flags_override_settings():
    args = mcp_server.parse_args(["-u", "-p", "8123", "--host", "0.0.0.0"])
    settings = mcp_server.build_settings(args, Settings())

    assert settings.WEB_UI_ENABLED is True
    assert settings.PORT == 8123
    assert settings.HOST == "0.0.0.0"
    assert settings.LOG_STREAM == "stderr"
