"""Graph Builder: derives one node and up to three edges per accepted thought record."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from thoughtgraph.graph.identity import IdentityResolver
from thoughtgraph.graph.store import GraphStore
from thoughtgraph.models.schemas import EdgeKind, GraphEdge, GraphNode, NodeKind, ThoughtRecord
from thoughtgraph.utils.logging import get_logger

logger = get_logger(__name__)

_EDGE_MARKERS: dict[str, str] = {"linear": "L", "branch": "B", "revision": "R"}


def make_edge_id(source: str, target: str, kind: EdgeKind) -> str:
    return f"{source} {_EDGE_MARKERS[kind]}> {target}"


def make_edge(source: str, target: str, kind: EdgeKind) -> GraphEdge:
    return GraphEdge(id=make_edge_id(source, target, kind), source=source, target=target, kind=kind)


def node_kind(record: ThoughtRecord) -> NodeKind:
    if record.is_revision:
        return "revision"
    if record.branch_from_thought is not None:
        return "branch"
    return "main"


def _label(record: ThoughtRecord) -> str:
    label = f"T{record.thought_number}"
    if record.branch_id:
        label += f" ({record.branch_id[:3]})"
    return label


def _tooltip(record: ThoughtRecord, kind: NodeKind) -> str:
    def _or_na(value: int | None) -> str:
        return "N/A" if value is None else str(value)

    return (
        f"Thought {record.thought_number}/{record.total_thoughts}\n"
        f"Branch: {record.branch_id or 'main'}\n"
        f"Type: {kind}\n"
        f"Revises: {_or_na(record.revises_thought)}\n"
        f"From: {_or_na(record.branch_from_thought)}\n"
        f"\n{record.thought}"
    )


@dataclass
class BuildResult:
    node: GraphNode
    edges: list[GraphEdge] = field(default_factory=list)


class GraphBuilder:
    """Derives graph elements for a record from the records observed before it.

    ``build`` does not mutate anything; the caller applies the result to the
    store and then calls ``observe`` so later records can reference this one.
    """

    def __init__(self, resolver: IdentityResolver | None = None) -> None:
        self.resolver = resolver or IdentityResolver()

    def build_node(self, record: ThoughtRecord) -> GraphNode:
        kind = node_kind(record)
        return GraphNode(
            id=self.resolver.node_id(record),
            thought_number=record.thought_number,
            kind=kind,
            label=_label(record),
            tooltip=_tooltip(record, kind),
        )

    def build(self, record: ThoughtRecord) -> BuildResult:
        node = self.build_node(record)
        result = BuildResult(node=node)

        # Continuation of the previous step on the same line. Branch origins
        # replace the linear link.
        if record.branch_from_thought is None:
            source = self.resolver.predecessor(record)
            if source is not None:
                self._add_edge(result, source, node.id, "linear")

        if record.branch_from_thought is not None:
            source = self.resolver.resolve(record.branch_from_thought)
            if source is None:
                logger.warning(
                    "reference_unresolved",
                    kind="branch",
                    node_id=node.id,
                    thought_number=record.branch_from_thought,
                )
            else:
                self._add_edge(result, source, node.id, "branch")

        # Revision edges point from the revision toward the thought it revises.
        if record.is_revision and record.revises_thought is not None:
            target = self.resolver.resolve(record.revises_thought)
            if target is None:
                logger.warning(
                    "reference_unresolved",
                    kind="revision",
                    node_id=node.id,
                    thought_number=record.revises_thought,
                )
            else:
                self._add_edge(result, node.id, target, "revision")

        return result

    def observe(self, record: ThoughtRecord) -> str:
        return self.resolver.observe(record)

    @staticmethod
    def _add_edge(result: BuildResult, source: str, target: str, kind: EdgeKind) -> None:
        if source == target:
            logger.debug("self_reference_skipped", node_id=source, kind=kind)
            return
        result.edges.append(make_edge(source, target, kind))


def build_graph(records: Iterable[ThoughtRecord], store: GraphStore | None = None) -> GraphStore:
    """Replay validated records into a store from scratch."""
    store = store if store is not None else GraphStore()
    builder = GraphBuilder()
    for record in records:
        result = builder.build(record)
        store.apply(result.node, result.edges)
        builder.observe(record)
    return store
