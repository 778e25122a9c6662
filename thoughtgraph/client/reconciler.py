"""Observer-side mirror of the thought graph, rebuilt from init and kept current by deltas."""

from __future__ import annotations

import enum
from typing import Any, Iterable

from thoughtgraph.models.schemas import GraphEdge, GraphNode
from thoughtgraph.utils.logging import get_logger

logger = get_logger(__name__)


class SyncState(str, enum.Enum):
    CONNECTED = "connected"
    SYNCED = "synced"
    LIVE = "live"
    DISCONNECTED = "disconnected"


def _as_node(value: GraphNode | dict[str, Any]) -> GraphNode:
    return value if isinstance(value, GraphNode) else GraphNode.model_validate(value)


def _as_edge(value: GraphEdge | dict[str, Any]) -> GraphEdge:
    return value if isinstance(value, GraphEdge) else GraphEdge.model_validate(value)


class ClientReconciler:
    """Local mirror for one observer connection.

    State machine: CONNECTED -> SYNCED (init applied) -> LIVE (deltas applied)
    -> DISCONNECTED -> CONNECTED (reconnect discards the mirror).

    Deltas are insert-if-absent, so duplicate or replayed deliveries are
    harmless. Deltas that arrive before the first init are held and replayed
    on top of it.

    ``updatedNode`` is last-writer-wins. Node and edge id sets converge under
    any delivery order, but if refreshes of the same node arrive out of order
    an older label/tooltip can overwrite a newer one until the next init.
    """

    def __init__(self) -> None:
        self.state = SyncState.CONNECTED
        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, GraphEdge] = {}
        self._pending: list[dict[str, Any]] = []

    @property
    def nodes(self) -> list[GraphNode]:
        return list(self._nodes.values())

    @property
    def edges(self) -> list[GraphEdge]:
        return list(self._edges.values())

    def node_ids(self) -> set[str]:
        return set(self._nodes)

    def edge_ids(self) -> set[str]:
        return set(self._edges)

    def apply_init(
        self,
        nodes: Iterable[GraphNode | dict[str, Any]],
        edges: Iterable[GraphEdge | dict[str, Any]],
    ) -> None:
        if self.state is SyncState.DISCONNECTED:
            logger.warning("init_ignored_while_disconnected")
            return

        self._nodes = {n.id: n for n in map(_as_node, nodes)}
        self._edges = {e.id: e for e in map(_as_edge, edges)}
        self.state = SyncState.SYNCED
        logger.debug("mirror_initialized", nodes=len(self._nodes), edges=len(self._edges))

        pending, self._pending = self._pending, []
        for delta in pending:
            self.apply_delta(**delta)

    def apply_delta(
        self,
        new_node: GraphNode | dict[str, Any] | None = None,
        new_edges: Iterable[GraphEdge | dict[str, Any]] = (),
        updated_node: GraphNode | dict[str, Any] | None = None,
    ) -> None:
        if self.state is SyncState.DISCONNECTED:
            return
        if self.state is SyncState.CONNECTED:
            self._pending.append(
                {"new_node": new_node, "new_edges": list(new_edges), "updated_node": updated_node}
            )
            return

        if new_node is not None:
            node = _as_node(new_node)
            self._nodes.setdefault(node.id, node)
        if updated_node is not None:
            node = _as_node(updated_node)
            current = self._nodes.get(node.id)
            if current is None:
                self._nodes[node.id] = node
            else:
                current.label = node.label
                current.tooltip = node.tooltip
        for edge in map(_as_edge, new_edges):
            self._edges.setdefault(edge.id, edge)

        self.state = SyncState.LIVE

    def handle_event(self, event_type: str, payload: dict[str, Any]) -> None:
        """Dispatch one decoded stream event (``init`` / ``delta``)."""
        if event_type == "init":
            self.apply_init(payload.get("nodes", []), payload.get("edges", []))
        elif event_type == "delta":
            self.apply_delta(
                new_node=payload.get("newNode"),
                new_edges=payload.get("newEdges", []),
                updated_node=payload.get("updatedNode"),
            )
        elif event_type == "overflow":
            # Server dropped us; the stream is about to end.
            self.disconnect()

    def disconnect(self) -> None:
        self.state = SyncState.DISCONNECTED

    def reconnect(self) -> None:
        """Discard the mirror and wait for a fresh init."""
        self._nodes.clear()
        self._edges.clear()
        self._pending.clear()
        self.state = SyncState.CONNECTED
