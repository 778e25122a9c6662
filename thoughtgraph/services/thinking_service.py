"""Thought ingestion pipeline: validate, build, apply, broadcast."""

from __future__ import annotations

from typing import Any

from thoughtgraph.graph.builder import GraphBuilder
from thoughtgraph.graph.store import ApplyResult, GraphStore
from thoughtgraph.models.schemas import ThoughtFailed, ThoughtProcessed, ThoughtRecord, validate_record
from thoughtgraph.services.broadcaster import SyncBroadcaster
from thoughtgraph.utils.exceptions import RecordValidationError
from thoughtgraph.utils.logging import get_logger

logger = get_logger(__name__)


class ThinkingService:
    """Owns the thought history and the graph derived from it.

    ``ingest`` contains no awaits: on a single event loop every ingestion is
    validated, applied and broadcast before the next one starts.
    """

    def __init__(self, queue_size: int = 1000) -> None:
        self.store = GraphStore()
        self.builder = GraphBuilder()
        self.broadcaster = SyncBroadcaster(self.store, queue_size=queue_size)
        self._history: list[ThoughtRecord] = []
        self._branches: dict[str, list[ThoughtRecord]] = {}

    @property
    def history(self) -> list[ThoughtRecord]:
        return list(self._history)

    @property
    def branches(self) -> dict[str, list[ThoughtRecord]]:
        return {branch_id: list(records) for branch_id, records in self._branches.items()}

    def ingest(self, data: Any) -> ThoughtProcessed:
        """Accept one raw record. Raises RecordValidationError without side effects."""
        record = validate_record(data)
        applied = self._apply(record)
        self.broadcaster.publish(applied)

        logger.info(
            "thought_ingested",
            thought_number=record.thought_number,
            total_thoughts=record.total_thoughts,
            branch_id=record.branch_id,
            is_revision=bool(record.is_revision),
            new_node=applied.new_node.id if applied.new_node else None,
            new_edges=len(applied.new_edges),
            graph_changed=applied.changed,
        )

        return ThoughtProcessed(
            thought_number=record.thought_number,
            total_thoughts=record.total_thoughts,
            next_thought_needed=record.next_thought_needed,
            branches=list(self._branches),
            thought_history_length=len(self._history),
        )

    def process_thought(self, data: Any) -> ThoughtProcessed | ThoughtFailed:
        """Like ``ingest`` but reports rejection as a failure payload."""
        try:
            return self.ingest(data)
        except RecordValidationError as exc:
            logger.warning("thought_rejected", error=exc.message, field=exc.field)
            return ThoughtFailed(error=exc.message)

    def _apply(self, record: ThoughtRecord) -> ApplyResult:
        self._history.append(record)
        if record.branch_from_thought is not None and record.branch_id:
            self._branches.setdefault(record.branch_id, []).append(record)

        result = self.builder.build(record)
        applied = self.store.apply(result.node, result.edges)
        self.builder.observe(record)
        return applied
