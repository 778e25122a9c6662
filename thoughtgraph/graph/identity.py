"""Stable node identity for thought records and resolution of thought references."""

from __future__ import annotations

from thoughtgraph.models.schemas import ThoughtRecord


def make_node_id(context: str, thought_number: int) -> str:
    return f"{context}-{thought_number}"


def node_id_for(record: ThoughtRecord) -> str:
    """Composite id ``<branchId|main>-<thoughtNumber>``.

    Scoping the number by branch context keeps ids unique when branches reuse
    thought numbers.
    """
    return make_node_id(record.context, record.thought_number)


class IdentityResolver:
    """Maps records to node ids and resolves numeric thought references.

    Two indexes are maintained as records are observed:

    * ``thought_number -> node id`` of the most recent record carrying that
      number. Looking a number up here gives the same answer as scanning the
      history backward from the newest record, in O(1).
    * ``(context, thought_number) -> node id`` for same-line predecessor lookup.
    """

    def __init__(self) -> None:
        self._latest_by_number: dict[int, str] = {}
        self._by_context: dict[tuple[str, int], str] = {}

    def node_id(self, record: ThoughtRecord) -> str:
        return node_id_for(record)

    def resolve(self, thought_number: int) -> str | None:
        """Node id of the newest observed record numbered ``thought_number``."""
        return self._latest_by_number.get(thought_number)

    def predecessor(self, record: ThoughtRecord) -> str | None:
        """Node id of ``thought_number - 1`` on the record's own line, if it exists."""
        if record.thought_number <= 1:
            return None
        return self._by_context.get((record.context, record.thought_number - 1))

    def observe(self, record: ThoughtRecord) -> str:
        """Index an accepted record; returns its node id."""
        node_id = node_id_for(record)
        self._latest_by_number[record.thought_number] = node_id
        self._by_context[(record.context, record.thought_number)] = node_id
        return node_id
