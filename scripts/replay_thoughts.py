"""Replay a recorded list of thought records, against the server or offline.

Usage:
  # Post each record to a running server (THOUGHTGRAPH_API_URL, default http://localhost:3000)
  python scripts/replay_thoughts.py path/to/thoughts.json

  # Build the graph locally and print it, no server needed
  cat thoughts.json | python scripts/replay_thoughts.py - --offline
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from thoughtgraph.client.api import send_thought
from thoughtgraph.graph.builder import build_graph
from thoughtgraph.models.schemas import validate_record
from thoughtgraph.utils.exceptions import RecordValidationError
from thoughtgraph.utils.logging import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay thought records into the thought graph")
    parser.add_argument("records_file", help="Path to a JSON array of thought records, or '-' for stdin")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Build the graph in-process and print it instead of posting to the server",
    )
    args = parser.parse_args()
    setup_logging(log_level="WARNING", log_format="console", stream="stderr")

    if args.records_file == "-":
        records = json.load(sys.stdin)
    else:
        path = Path(args.records_file)
        if not path.exists():
            print(f"Error: file not found: {path}", file=sys.stderr)
            sys.exit(1)
        records = json.loads(path.read_text())

    if not isinstance(records, list):
        print("Error: expected a JSON array of thought records", file=sys.stderr)
        sys.exit(1)

    if args.offline:
        validated = []
        for i, raw in enumerate(records):
            try:
                validated.append(validate_record(raw))
            except RecordValidationError as exc:
                print(f"[SKIP] record {i}: {exc.message}", file=sys.stderr)
        store = build_graph(validated)
        nodes, edges = store.snapshot()
        print(json.dumps(
            {"nodes": [n.to_wire() for n in nodes], "edges": [e.to_wire() for e in edges]},
            indent=2,
        ))
        return

    failed = 0
    for i, raw in enumerate(records):
        result = send_thought(raw)
        if result.get("status") == "failed":
            failed += 1
            print(f"[FAIL] record {i}: {result.get('error')}")
        else:
            print(f"[OK] thought {result['thoughtNumber']}/{result['totalThoughts']} "
                  f"(history: {result['thoughtHistoryLength']})")

    print(f"Replayed {len(records)} records, {failed} rejected")
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
