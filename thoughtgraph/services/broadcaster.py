"""Snapshot-plus-delta fan-out of graph changes to connected observers."""

from __future__ import annotations

import asyncio
import uuid
from typing import Any

from thoughtgraph.graph.store import ApplyResult, GraphStore
from thoughtgraph.models.schemas import DeltaMessage, InitMessage
from thoughtgraph.utils.exceptions import ObserverOverflowError
from thoughtgraph.utils.logging import get_logger

logger = get_logger(__name__)

# (event_type, payload) pairs; None is the end-of-stream sentinel.
StreamItem = tuple[str, dict[str, Any]] | None


class Observer:
    """One connected observer and its outbound queue."""

    def __init__(self, maxsize: int = 0) -> None:
        self.id = uuid.uuid4().hex
        self.queue: asyncio.Queue[StreamItem] = asyncio.Queue(maxsize=maxsize)
        self.overflowed = False
        self.closed = False

    def offer(self, event_type: str, payload: dict[str, Any]) -> None:
        """Enqueue without waiting.

        Raises:
            ObserverOverflowError: the queue is full.
        """
        try:
            self.queue.put_nowait((event_type, payload))
        except asyncio.QueueFull:
            raise ObserverOverflowError(f"Observer {self.id} queue full ({self.queue.maxsize})") from None

    def close(self, final: tuple[str, dict[str, Any]] | None = None) -> None:
        """End the stream with the sentinel.

        A plain close keeps pending events so they are still delivered. With a
        ``final`` event, pending events are discarded and only ``final`` is
        delivered before the sentinel.
        """
        if self.closed:
            return
        self.closed = True
        if final is not None:
            while not self.queue.empty():
                self.queue.get_nowait()
            # The final event only fits when the queue holds two or more items.
            if self.queue.maxsize == 0 or self.queue.maxsize > 1:
                self.queue.put_nowait(final)
        elif self.queue.full():
            # No room for the sentinel; the newest pending event is dropped.
            pending = [self.queue.get_nowait() for _ in range(self.queue.qsize())]
            for item in pending[:-1]:
                self.queue.put_nowait(item)
        self.queue.put_nowait(None)


class SyncBroadcaster:
    """Registry of observers fed from a single GraphStore.

    Each observer gets exactly one ``init`` (the snapshot at subscription time)
    followed by one ``delta`` per ingestion. ``subscribe`` and ``publish`` never
    await, so on a single event loop no delta can fall between an observer's
    snapshot and its registration.
    """

    def __init__(self, store: GraphStore, queue_size: int = 1000) -> None:
        self._store = store
        self._queue_size = queue_size
        self._observers: dict[str, Observer] = {}

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def init_message(self) -> InitMessage:
        nodes, edges = self._store.snapshot()
        return InitMessage(nodes=nodes, edges=edges)

    def subscribe(self) -> Observer:
        observer = Observer(maxsize=self._queue_size)
        init = self.init_message()
        observer.offer("init", init.to_wire())
        self._observers[observer.id] = observer
        logger.info(
            "observer_subscribed",
            observer_id=observer.id,
            nodes=len(init.nodes),
            edges=len(init.edges),
            observers=len(self._observers),
        )
        return observer

    def unsubscribe(self, observer: Observer) -> None:
        if self._observers.pop(observer.id, None) is not None:
            logger.info("observer_unsubscribed", observer_id=observer.id, observers=len(self._observers))

    def publish(self, applied: ApplyResult) -> DeltaMessage:
        delta = DeltaMessage(
            new_node=applied.new_node,
            new_edges=applied.new_edges,
            updated_node=applied.refreshed_node,
        )
        payload = delta.to_wire()

        for observer in list(self._observers.values()):
            try:
                observer.offer("delta", payload)
            except ObserverOverflowError as exc:
                self._drop_overflowed(observer, str(exc))

        logger.debug(
            "delta_published",
            new_node=applied.new_node.id if applied.new_node else None,
            updated_node=applied.refreshed_node.id if applied.refreshed_node else None,
            new_edges=len(applied.new_edges),
            observers=len(self._observers),
        )
        return delta

    def close_all(self) -> None:
        for observer in list(self._observers.values()):
            observer.close()
        self._observers.clear()
        logger.info("observers_closed")

    def _drop_overflowed(self, observer: Observer, error: str) -> None:
        # A partial delta stream can't be resumed, so the observer has to
        # reconnect and start over from a fresh init.
        observer.overflowed = True
        self._observers.pop(observer.id, None)
        observer.close(("overflow", {"reason": "observer queue full", "observer_id": observer.id}))
        logger.warning("observer_overflowed", observer_id=observer.id, error=error)
