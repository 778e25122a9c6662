#!/usr/bin/env python3
"""
Sequential thinking MCP server - feeds tool calls into the thought graph and
optionally serves the live graph over HTTP from the same event loop.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Annotated, Any

import uvicorn
from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent
from pydantic import WithJsonSchema

from thoughtgraph.config import Settings, get_settings
from thoughtgraph.main import create_app
from thoughtgraph.models.schemas import ThoughtFailed
from thoughtgraph.services.thinking_service import ThinkingService
from thoughtgraph.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

TOOL_NAME = "sequentialthinking"

TOOL_DESCRIPTION = """A detailed tool for dynamic and reflective problem-solving through thoughts.
This tool helps analyze problems through a flexible thinking process that can adapt and evolve.
Each thought can build on, question, or revise previous insights as understanding deepens.

When to use this tool:
- Breaking down complex problems into steps
- Planning and design with room for revision
- Analysis that might need course correction
- Problems where the full scope might not be clear initially
- Problems that require a multi-step solution
- Tasks that need to maintain context over multiple steps
- Situations where irrelevant information needs to be filtered out

Key features:
- You can adjust totalThoughts up or down as you progress
- You can question or revise previous thoughts
- You can add more thoughts even after reaching what seemed like the end
- You can express uncertainty and explore alternative approaches
- Not every thought needs to build linearly - you can branch or backtrack
- Generates a solution hypothesis
- Verifies the hypothesis based on the Chain of Thought steps
- Repeats the process until satisfied
- Provides a correct answer

Parameters explained:
- thought: Your current thinking step, which can include:
* Regular analytical steps
* Revisions of previous thoughts
* Questions about previous decisions
* Realizations about needing more analysis
* Changes in approach
* Hypothesis generation
* Hypothesis verification
- nextThoughtNeeded: True if you need more thinking, even if at what seemed like the end
- thoughtNumber: Current number in sequence (can go beyond initial total if needed)
- totalThoughts: Current estimate of thoughts needed (can be adjusted up/down)
- isRevision: A boolean indicating if this thought revises previous thinking
- revisesThought: If isRevision is true, which thought number is being reconsidered
- branchFromThought: If branching, which thought number is the branching point
- branchId: Identifier for the current branch (if any)
- needsMoreThoughts: If reaching end but realizing more thoughts needed

You should:
1. Start with an initial estimate of needed thoughts, but be ready to adjust
2. Feel free to question or revise previous thoughts
3. Don't hesitate to add more thoughts if needed, even at the "end"
4. Express uncertainty when present
5. Mark thoughts that revise previous thinking or branch into new paths
6. Ignore information that is irrelevant to the current step
7. Generate a solution hypothesis when appropriate
8. Verify the hypothesis based on the Chain of Thought steps
9. Repeat the process until satisfied with the solution
10. Provide a single, ideally correct answer as the final output
11. Only set nextThoughtNeeded to false when truly done and a satisfactory answer is reached"""

# MCP server instance
mcp = FastMCP("sequential-thinking-server")

# Installed by run_server().
thinking_service: ThinkingService | None = None


def set_thinking_service(service: ThinkingService | None) -> None:
    global thinking_service
    thinking_service = service


# Numeric and boolean arguments reach validate_record uncoerced, so the tool
# rejects what POST /thoughts rejects. Text stays `str`: FastMCP JSON-decodes
# string values for any other annotation.
_Boolean = Annotated[Any, WithJsonSchema({"type": "boolean"})]
_Positive = Annotated[Any, WithJsonSchema({"type": "integer", "minimum": 1})]


def _tool_result(payload: dict[str, Any], is_error: bool = False) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(payload, indent=2))],
        isError=is_error,
    )


@mcp.tool(name=TOOL_NAME, description=TOOL_DESCRIPTION)
async def sequentialthinking(
    thought: str,
    nextThoughtNeeded: _Boolean,
    thoughtNumber: _Positive,
    totalThoughts: _Positive,
    isRevision: _Boolean = None,
    revisesThought: _Positive = None,
    branchFromThought: _Positive = None,
    branchId: str | None = None,
    needsMoreThoughts: _Boolean = None,
) -> CallToolResult:
    if thinking_service is None:
        return _tool_result({"error": "Thinking service not initialized", "status": "failed"}, is_error=True)

    arguments = {
        "thought": thought,
        "nextThoughtNeeded": nextThoughtNeeded,
        "thoughtNumber": thoughtNumber,
        "totalThoughts": totalThoughts,
        "isRevision": isRevision,
        "revisesThought": revisesThought,
        "branchFromThought": branchFromThought,
        "branchId": branchId,
        "needsMoreThoughts": needsMoreThoughts,
    }
    result = thinking_service.process_thought({k: v for k, v in arguments.items() if v is not None})
    return _tool_result(result.to_wire(), is_error=isinstance(result, ThoughtFailed))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the sequential thinking MCP server on stdio")
    parser.add_argument(
        "--web-ui",
        "-u",
        action="store_true",
        default=None,
        help="Serve the live thought graph over HTTP alongside the MCP server",
    )
    parser.add_argument("--port", "-p", type=int, help="Port for the web UI server (default: 3000)")
    parser.add_argument("--host", help="Host for the web UI server (default: 127.0.0.1)")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace, base: Settings | None = None) -> Settings:
    """Overlay CLI flags on env settings; logs always go to stderr because stdout carries MCP."""
    base = base or get_settings()
    update: dict[str, object] = {"LOG_STREAM": "stderr"}
    if args.web_ui is not None:
        update["WEB_UI_ENABLED"] = args.web_ui
    if args.port is not None:
        update["PORT"] = args.port
    if args.host is not None:
        update["HOST"] = args.host
    return base.model_copy(update=update)


async def run_server(settings: Settings) -> None:
    """Run the MCP server (and optional web UI) in the current event loop."""
    service = ThinkingService(queue_size=settings.OBSERVER_QUEUE_SIZE)
    set_thinking_service(service)

    web_server: uvicorn.Server | None = None
    web_task: asyncio.Task | None = None
    if settings.WEB_UI_ENABLED:
        app = create_app(settings, service)
        web_server = uvicorn.Server(
            uvicorn.Config(app, host=settings.HOST, port=settings.PORT, log_config=None)
        )
        web_task = asyncio.create_task(web_server.serve())
        logger.info("web_ui_started", url=f"http://{settings.HOST}:{settings.PORT}/api/v1/graph/stream")

    logger.info("mcp_server_running", transport="stdio", web_ui=settings.WEB_UI_ENABLED)
    try:
        await mcp.run_stdio_async()
    finally:
        if web_server is not None and web_task is not None:
            web_server.should_exit = True
            await web_task
            logger.info("web_ui_stopped")


def main(argv: list[str] | None = None) -> None:
    settings = build_settings(parse_args(argv))
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT, settings.LOG_STREAM)
    try:
        asyncio.run(run_server(settings))
    except KeyboardInterrupt:
        logger.info("mcp_server_shutting_down")
    except Exception as exc:
        logger.error("mcp_server_failed", error=str(exc), exc_type=type(exc).__name__)
        raise


if __name__ == "__main__":
    main()
