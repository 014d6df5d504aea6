"""Change notification stream for downstream consumers."""

import asyncio
from typing import List

from loguru import logger

from fsdb.schemas import FileEvent


class ChangeNotifier:
    """Fan out :class:`FileEvent` objects to every subscribed queue.

    Queues are unbounded so publishing never blocks the sync path; a slow
    consumer only grows its own queue.
    """

    def __init__(self):
        self._subscribers: List[asyncio.Queue[FileEvent]] = []

    def subscribe(self) -> asyncio.Queue[FileEvent]:
        """Register a new subscriber and return its queue."""
        queue: asyncio.Queue[FileEvent] = asyncio.Queue()
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[FileEvent]) -> None:
        """Stop delivering events to ``queue``. Unknown queues are ignored."""
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: FileEvent) -> None:
        """Deliver an event to all current subscribers."""
        logger.trace(f"Publishing {event.action.value} for {event.path}")
        for queue in self._subscribers:
            queue.put_nowait(event)
