"""Graph API endpoints: current graph, export, and the live sync stream."""

from __future__ import annotations

import asyncio
import json
from typing import Literal

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sse_starlette.sse import EventSourceResponse

from thoughtgraph.api.dependencies import get_app_settings, get_broadcaster, get_thinking_service
from thoughtgraph.api.v1.schemas.graph import GraphResponse
from thoughtgraph.config import Settings
from thoughtgraph.services.broadcaster import Observer, SyncBroadcaster
from thoughtgraph.services.thinking_service import ThinkingService
from thoughtgraph.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/graph", tags=["graph"])


@router.get("", response_model=GraphResponse)
async def get_graph(service: ThinkingService = Depends(get_thinking_service)) -> GraphResponse:
    """Current snapshot of the thought graph as JSON (D3-compatible)."""
    nodes, edges = service.store.snapshot()
    return GraphResponse(
        nodes=nodes,
        edges=edges,
        node_count=len(nodes),
        edge_count=len(edges),
    )


@router.get("/export")
async def export_graph(
    format: Literal["json", "graphml"] = "json",
    service: ThinkingService = Depends(get_thinking_service),
) -> Response:
    """Export the thought graph in JSON or GraphML format."""
    graph_data = await get_graph(service)

    if format == "json":
        content = json.dumps(graph_data.model_dump(by_alias=True), indent=2)
        return Response(
            content=content,
            media_type="application/json",
            headers={"Content-Disposition": "attachment; filename=thought_graph.json"},
        )

    return Response(
        content=to_graphml(graph_data),
        media_type="application/xml",
        headers={"Content-Disposition": "attachment; filename=thought_graph.graphml"},
    )


@router.get("/stream")
async def stream_graph(
    broadcaster: SyncBroadcaster = Depends(get_broadcaster),
    settings: Settings = Depends(get_app_settings),
) -> EventSourceResponse:
    """SSE endpoint: one `event: init` with the full graph, then one `event: delta` per thought.

    An `event: overflow` is sent before the stream is closed for an observer
    that fell too far behind; the client should reconnect for a fresh init.
    """
    # Subscribing here, not inside the generator, pins the init snapshot to
    # the moment the request was accepted.
    observer = broadcaster.subscribe()
    return EventSourceResponse(observer_events(broadcaster, observer, settings.SSE_PING_SECONDS))


async def observer_events(broadcaster: SyncBroadcaster, observer: Observer, ping_seconds: float = 15.0):
    """Drain an observer's queue as SSE event dicts until its stream is closed."""
    try:
        while True:
            try:
                item = await asyncio.wait_for(observer.queue.get(), timeout=ping_seconds)
            except asyncio.TimeoutError:
                yield {"event": "ping", "data": ""}
                continue

            if item is None:
                return

            event_type, data = item
            yield {"event": event_type, "data": json.dumps(data)}
    finally:
        broadcaster.unsubscribe(observer)
        logger.info("graph_stream_closed", observer_id=observer.id, overflowed=observer.overflowed)


def to_graphml(graph: GraphResponse) -> str:
    """Convert graph response to GraphML XML format."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<graphml xmlns="http://graphml.graphdrawing.org/xmlns">',
        '  <key id="label" for="node" attr.name="label" attr.type="string"/>',
        '  <key id="kind" for="node" attr.name="kind" attr.type="string"/>',
        '  <key id="thought_number" for="node" attr.name="thoughtNumber" attr.type="int"/>',
        '  <key id="tooltip" for="node" attr.name="tooltip" attr.type="string"/>',
        '  <key id="type" for="edge" attr.name="kind" attr.type="string"/>',
        '  <graph id="G" edgedefault="directed">',
    ]

    for node in graph.nodes:
        lines.append(f'    <node id="{_xml_escape(node.id)}">')
        lines.append(f'      <data key="label">{_xml_escape(node.label)}</data>')
        lines.append(f'      <data key="kind">{node.kind}</data>')
        lines.append(f'      <data key="thought_number">{node.thought_number}</data>')
        lines.append(f'      <data key="tooltip">{_xml_escape(node.tooltip)}</data>')
        lines.append("    </node>")

    for edge in graph.edges:
        lines.append(
            f'    <edge id="{_xml_escape(edge.id)}" source="{_xml_escape(edge.source)}" '
            f'target="{_xml_escape(edge.target)}">'
        )
        lines.append(f'      <data key="type">{edge.kind}</data>')
        lines.append("    </edge>")

    lines.append("  </graph>")
    lines.append("</graphml>")
    return "\n".join(lines)


def _xml_escape(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")
