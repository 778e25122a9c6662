"""Record builders and queue helpers shared by the test suite."""

from __future__ import annotations

from typing import Any


def thought(number: int, total: int = 5, text: str | None = None, **extra: Any) -> dict[str, Any]:
    """Raw thought record as a tool caller would send it."""
    record = {
        "thought": text or f"step {number}",
        "thoughtNumber": number,
        "totalThoughts": total,
        "nextThoughtNeeded": True,
    }
    record.update(extra)
    return record


SCENARIO_A = [thought(1), thought(2), thought(3)]
SCENARIO_B = [thought(4, branchFromThought=2, branchId="B1")]
SCENARIO_C = [thought(5, isRevision=True, revisesThought=3)]


def drain(observer) -> list[tuple[str, dict[str, Any]]]:
    """Everything currently queued for an observer, excluding the end sentinel."""
    items = []
    while not observer.queue.empty():
        item = observer.queue.get_nowait()
        if item is not None:
            items.append(item)
    return items
