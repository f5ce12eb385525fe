import asyncio
import logging
import time
from typing import Any, Dict, Iterable

from .messages import Outbound

logger = logging.getLogger(__name__)


class ConnectionHub:
    """Per-connection outbound queues for WebSocket consumers."""

    def __init__(self, *, queue_size: int = 200) -> None:
        self._queues: Dict[str, asyncio.Queue] = {}
        self._queue_size = queue_size
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._queues)

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._queues

    async def register(self, connection_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        async with self._lock:
            self._queues[connection_id] = queue
        return queue

    async def unregister(self, connection_id: str) -> None:
        async with self._lock:
            self._queues.pop(connection_id, None)

    async def emit(self, connection_id: str, event: str, payload: Any = None) -> bool:
        async with self._lock:
            queue = self._queues.get(connection_id)

        if queue is None:
            logger.debug("Dropping %s for %s: connection gone", event, connection_id)
            return False

        message = {"event": event, "payload": payload, "ts": time.time()}
        try:
            queue.put_nowait(message)
        except asyncio.QueueFull:
            # drop oldest to make room
            try:
                queue.get_nowait()
            except asyncio.QueueEmpty:
                pass
            try:
                queue.put_nowait(message)
            except asyncio.QueueFull:
                logger.debug("Dropping %s for %s: queue full", event, connection_id)
                return False
        return True

    async def deliver(self, outbound: Iterable[Outbound]) -> None:
        for message in outbound:
            await self.emit(message.connection_id, message.event, message.payload)
