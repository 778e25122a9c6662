"""Append-only canonical store of graph nodes and edges."""

from __future__ import annotations

from dataclasses import dataclass, field

from thoughtgraph.models.schemas import GraphEdge, GraphNode


@dataclass
class ApplyResult:
    """What one ``apply`` call actually changed."""

    new_node: GraphNode | None = None
    refreshed_node: GraphNode | None = None
    new_edges: list[GraphEdge] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.new_node or self.refreshed_node or self.new_edges)


class GraphStore:
    """Insertion-ordered nodes and edges keyed by id.

    Nothing is ever removed. The only in-place mutation is the label/tooltip
    refresh of a node whose id is seen again.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, GraphEdge] = {}

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def get_node(self, node_id: str) -> GraphNode | None:
        return self._nodes.get(node_id)

    def add_node(self, node: GraphNode) -> bool:
        """Insert ``node``; returns False and refreshes display metadata if the id exists."""
        existing = self.get_node(node.id)
        if existing is None:
            self._nodes[node.id] = node.model_copy()
            return True
        existing.label = node.label
        existing.tooltip = node.tooltip
        return False

    def add_edge(self, edge: GraphEdge) -> bool:
        if edge.id in self._edges:
            return False
        self._edges[edge.id] = edge.model_copy()
        return True

    def apply(self, node: GraphNode, edges: list[GraphEdge]) -> ApplyResult:
        """Insert a node and its edges; report only what was new or refreshed."""
        result = ApplyResult()
        existing = self.get_node(node.id)
        if existing is None:
            self.add_node(node)
            result.new_node = node.model_copy()
        elif (existing.label, existing.tooltip) != (node.label, node.tooltip):
            self.add_node(node)
            result.refreshed_node = existing.model_copy()
        for edge in edges:
            if self.add_edge(edge):
                result.new_edges.append(edge.model_copy())
        return result

    def snapshot(self) -> tuple[list[GraphNode], list[GraphEdge]]:
        """Copies of all nodes and edges in insertion order."""
        return (
            [n.model_copy() for n in self._nodes.values()],
            [e.model_copy() for e in self._edges.values()],
        )
