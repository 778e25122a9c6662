"""SSE stream parser for graph sync events."""

from __future__ import annotations

import json
from typing import Any, Iterable, Iterator


def parse_sse_lines(lines: Iterable[str | None]) -> Iterator[tuple[str, str]]:
    """Yield (event_type, data) pairs from decoded SSE lines.

    SSE format: lines like "event: xxx" and "data: yyy", separated by blank line.
    Comment lines (starting with ":") are skipped.
    """
    event_type = "message"
    data_buf: list[str] = []

    for line in lines:
        if line is None:
            continue
        line = line.rstrip("\r")
        if line == "":
            if data_buf:
                yield (event_type, "\n".join(data_buf))
            event_type = "message"
            data_buf = []
            continue
        if line.startswith(":"):
            continue
        if line.startswith("event:"):
            event_type = line[6:].strip()
        elif line.startswith("data:"):
            data_buf.append(line[5:].strip())

    if data_buf:
        yield (event_type, "\n".join(data_buf))


def parse_sse_stream(response) -> Iterator[tuple[str, str]]:
    """Consume a requests Response with stream=True and yield (event_type, data) pairs."""
    return parse_sse_lines(response.iter_lines(decode_unicode=True))


def decode_events(pairs: Iterable[tuple[str, str]]) -> Iterator[tuple[str, dict[str, Any]]]:
    """JSON-decode event payloads; events with empty data (pings) decode to {}."""
    for event_type, data in pairs:
        yield event_type, (json.loads(data) if data else {})
