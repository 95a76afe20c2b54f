"""SSE Manager — relays data-change events to connected browser tabs."""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, Iterable
from typing import Any

from datakeeper.application.services.event_bus import EventBus, Subscription

logger = logging.getLogger(__name__)

_QUEUE_SIZE = 100


class SSEManager:
    """Manages SSE client connections and broadcasts bus events to them.

    Each connected client gets its own bounded asyncio.Queue. Publishing
    pushes the formatted event to every queue; a client whose queue is full
    is disconnected. Clients consume events via an async generator.
    """

    def __init__(self) -> None:
        self._queues: list[asyncio.Queue[str | None]] = []
        self._subscriptions: list[Subscription] = []

    async def subscribe(self) -> AsyncGenerator[str, None]:
        """Subscribe to SSE events. Yields formatted SSE strings.

        The generator automatically unsubscribes when the client disconnects.
        """
        queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=_QUEUE_SIZE)
        self._queues.append(queue)
        try:
            while True:
                event = await queue.get()
                if event is None:
                    break
                yield event
        finally:
            if queue in self._queues:
                self._queues.remove(queue)

    def publish_nowait(self, event_type: str, data: dict[str, Any]) -> None:
        """Push an SSE event to all connected clients without awaiting."""
        sse_message = f"event: {event_type}\ndata: {json.dumps(data, default=str)}\n\n"
        dead_queues: list[asyncio.Queue[str | None]] = []

        for queue in self._queues:
            try:
                queue.put_nowait(sse_message)
            except asyncio.QueueFull:
                dead_queues.append(queue)
                logger.warning("SSE client queue full — disconnecting")

        for q in dead_queues:
            self._queues.remove(q)
            # Make room for the sentinel so the consumer loop terminates
            q.get_nowait()
            q.put_nowait(None)

    async def broadcast(self, event_type: str, data: dict[str, Any]) -> None:
        """Broadcast an SSE event to all connected clients."""
        self.publish_nowait(event_type, data)

    def attach(self, bus: EventBus, event_names: Iterable[str]) -> None:
        """Forward the named bus events to SSE clients."""
        for name in event_names:
            self._subscriptions.append(bus.subscribe(name, self.publish_nowait))
        logger.info("SSE relay attached to %d event types", len(self._subscriptions))

    def detach(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()

    async def shutdown(self) -> None:
        """Detach from the bus and disconnect all connected clients."""
        self.detach()
        for queue in self._queues:
            try:
                queue.put_nowait(None)
            except asyncio.QueueFull:
                queue.get_nowait()
                queue.put_nowait(None)
        self._queues.clear()

    @property
    def client_count(self) -> int:
        return len(self._queues)
