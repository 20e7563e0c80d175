"""Live-reload broadcaster — fans ``reload`` out to every open tab.

Each browser tab holds one SSE connection. The broadcaster keeps a queue
per connection; ``push_reload`` puts a single ``reload`` message on every
queue and the chirp ``EventStream`` behind each connection delivers it.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from chirp import SSEEvent

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from pawprint._types import ClientID
    from pawprint.observability.collector import StackCollector

logger = logging.getLogger("pawprint.reload")

RELOAD_MESSAGE = "reload"


@dataclass(frozen=True, slots=True)
class ReloadConnection:
    """A connected browser tab.

    Attributes:
        client_id: Unique identifier for this connection.
        queue: Messages waiting to be sent to the tab.

    """

    client_id: ClientID = field(default_factory=lambda: uuid.uuid4().hex)
    queue: asyncio.Queue[Any] = field(
        default_factory=lambda: asyncio.Queue(maxsize=16), compare=False, hash=False
    )


class LiveReloadBroadcaster:
    """Tracks connected tabs and notifies them when the build output changes.

    Thread-safe: the connection set is protected by a lock.

    Args:
        collector: Optional observability collector; each push is recorded.

    """

    def __init__(self, collector: StackCollector | None = None) -> None:
        self._connections: set[ReloadConnection] = set()
        self._lock = threading.Lock()
        self._collector = collector

    @property
    def subscriber_count(self) -> int:
        """Number of connected tabs."""
        with self._lock:
            return len(self._connections)

    def subscribe(self) -> ReloadConnection:
        """Register a new tab and return its connection."""
        conn = ReloadConnection()
        with self._lock:
            self._connections.add(conn)
        logger.debug("Reload client %s connected", conn.client_id)
        return conn

    def unsubscribe(self, conn: ReloadConnection) -> None:
        """Forget a tab. Unknown connections are ignored."""
        with self._lock:
            self._connections.discard(conn)
        logger.debug("Reload client %s disconnected", conn.client_id)

    def push_reload(self, trigger_path: str = "") -> int:
        """Send ``reload`` to every connected tab.

        Tabs whose queue is full already have a reload pending and are
        skipped.

        Returns:
            Number of tabs notified.

        """
        with self._lock:
            connections = tuple(self._connections)

        event = SSEEvent(data=RELOAD_MESSAGE)
        count = 0
        for conn in connections:
            try:
                conn.queue.put_nowait(event)
                count += 1
            except asyncio.QueueFull:
                continue

        if self._collector is not None:
            self._collector.record_reload(trigger_path, clients_notified=count)
        if count:
            logger.info("reload -> %d client%s (%s)", count, "" if count == 1 else "s", trigger_path)
        return count

    async def client_generator(self, conn: ReloadConnection) -> AsyncIterator[Any]:
        """Yield the messages queued for *conn*, unsubscribing on exit.

        Used as the generator of chirp's ``EventStream``. Client disconnects
        surface as ``CancelledError`` or ``GeneratorExit`` and end the stream
        quietly.
        """
        try:
            while True:
                yield await conn.queue.get()
        except (asyncio.CancelledError, GeneratorExit):
            return
        finally:
            self.unsubscribe(conn)
