"""Follow the live thought graph stream and print a line per sync event.

Usage:
  python scripts/watch_graph.py
  THOUGHTGRAPH_API_URL=http://localhost:3000 python scripts/watch_graph.py --max-reconnects 3
"""

from __future__ import annotations

import argparse

from thoughtgraph.client.api import follow_graph, get_base_url
from thoughtgraph.client.reconciler import ClientReconciler
from thoughtgraph.utils.logging import setup_logging


def _print_event(event_type: str, reconciler: ClientReconciler) -> None:
    if event_type == "ping":
        return
    print(
        f"[{event_type}] state={reconciler.state.value} "
        f"nodes={len(reconciler.node_ids())} edges={len(reconciler.edge_ids())}",
        flush=True,
    )


def main() -> None:
    parser = argparse.ArgumentParser(description="Watch the live thought graph")
    parser.add_argument("--max-reconnects", type=int, default=None, help="Give up after N reconnects")
    parser.add_argument("--retry-delay", type=float, default=1.0, help="Seconds between reconnects")
    args = parser.parse_args()
    setup_logging(log_level="INFO", log_format="console", stream="stderr")

    print(f"Watching {get_base_url()}/api/v1/graph/stream")
    reconciler = ClientReconciler()
    try:
        follow_graph(
            reconciler,
            on_event=_print_event,
            max_reconnects=args.max_reconnects,
            retry_delay=args.retry_delay,
        )
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
