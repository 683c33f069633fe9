"""WebSocket-backed chat channel with a bounded, non-blocking send buffer."""

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WebSocketChannel:
    """Outbound side of one chat connection.

    ``send`` never awaits: events go onto a bounded queue drained by a writer
    task, so a slow client cannot stall whoever is relaying to it. When the
    queue is full the event is dropped; the client recovers it on its next
    fetch since every relayed message is already persisted.

    Must be used from the event loop that owns the websocket.
    """

    def __init__(self, websocket: WebSocket, label: str, max_queue: int = 100) -> None:
        self.websocket = websocket
        self.label = label
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=max_queue)
        self._writer: asyncio.Task | None = None

    def start(self) -> None:
        if self._writer is None:
            self._writer = asyncio.create_task(self._drain())

    def send(self, event: dict[str, Any]) -> bool:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("Send buffer full for %s, dropping %s event", self.label, event.get("type"))
            return False
        return True

    async def _drain(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.websocket.send_json(event)
            except Exception as e:
                logger.warning("Write to %s failed, stopping writer: %s", self.label, e)
                return

    async def close(self) -> None:
        if self._writer is None:
            return
        self._writer.cancel()
        try:
            await self._writer
        except asyncio.CancelledError:
            pass
        self._writer = None
