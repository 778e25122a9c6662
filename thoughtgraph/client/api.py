"""API client for the thought graph service."""

from __future__ import annotations

import os
import time
from typing import Any, Callable

import requests

from thoughtgraph.client.reconciler import ClientReconciler
from thoughtgraph.client.sse import decode_events, parse_sse_stream
from thoughtgraph.utils.logging import get_logger

logger = get_logger(__name__)


def get_base_url() -> str:
    """Backend API base URL (no trailing slash)."""
    return (os.environ.get("THOUGHTGRAPH_API_URL") or "http://localhost:3000").rstrip("/")


def send_thought(record: dict[str, Any]) -> dict[str, Any]:
    """POST /api/v1/thoughts: returns the success or failure payload.

    A rejected record comes back as ``{"error": ..., "status": "failed"}`` with
    HTTP 422; that is returned, not raised.
    """
    url = f"{get_base_url()}/api/v1/thoughts"
    r = requests.post(url, json=record, timeout=30)
    if r.status_code != 422:
        r.raise_for_status()
    return r.json()


def get_graph() -> dict[str, Any]:
    """GET /api/v1/graph: graph as JSON (nodes, edges, counts)."""
    url = f"{get_base_url()}/api/v1/graph"
    r = requests.get(url, timeout=30)
    r.raise_for_status()
    return r.json()


def export_graph(format: str = "json") -> bytes:
    """GET /api/v1/graph/export?format=json|graphml: raw export bytes."""
    url = f"{get_base_url()}/api/v1/graph/export"
    r = requests.get(url, params={"format": format}, timeout=30)
    r.raise_for_status()
    return r.content


def get_branches() -> dict[str, Any]:
    """GET /api/v1/thoughts/branches."""
    url = f"{get_base_url()}/api/v1/thoughts/branches"
    r = requests.get(url, timeout=30)
    r.raise_for_status()
    return r.json()


def stream_graph(timeout: int = 3600):
    """GET /api/v1/graph/stream: SSE stream. Returns response with stream=True."""
    url = f"{get_base_url()}/api/v1/graph/stream"
    return requests.get(url, stream=True, timeout=timeout)


def health() -> dict[str, Any]:
    """GET /api/v1/health."""
    url = f"{get_base_url()}/api/v1/health"
    r = requests.get(url, timeout=5)
    r.raise_for_status()
    return r.json()


def ready() -> dict[str, Any]:
    """GET /api/v1/ready."""
    url = f"{get_base_url()}/api/v1/ready"
    r = requests.get(url, timeout=5)
    r.raise_for_status()
    return r.json()


def follow_graph(
    reconciler: ClientReconciler,
    on_event: Callable[[str, ClientReconciler], None] | None = None,
    max_reconnects: int | None = None,
    retry_delay: float = 1.0,
    stream_factory: Callable[[], Any] = stream_graph,
) -> None:
    """Keep ``reconciler`` in sync with the server, reconnecting when the stream ends.

    Every (re)connection starts from an empty mirror and a fresh init.
    ``on_event`` is called after each applied event. Returns once
    ``max_reconnects`` reconnections have been used up.
    """
    reconnects = 0
    while True:
        try:
            with stream_factory() as response:
                response.raise_for_status()
                for event_type, payload in decode_events(parse_sse_stream(response)):
                    reconciler.handle_event(event_type, payload)
                    if on_event is not None:
                        on_event(event_type, reconciler)
        except requests.RequestException as exc:
            logger.warning("graph_stream_failed", error=str(exc))

        reconciler.disconnect()
        if max_reconnects is not None and reconnects >= max_reconnects:
            return
        reconnects += 1
        time.sleep(retry_delay)
        reconciler.reconnect()
        logger.info("graph_stream_reconnecting", attempt=reconnects)
