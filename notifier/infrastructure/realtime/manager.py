"""Connection management helpers for dashboard websockets."""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 101

_viewer_ids = itertools.count(1)


class ViewerConnection:
    """One connected dashboard viewer and its bounded, ordered outbound queue."""

    def __init__(self, websocket: WebSocket, *, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self.id = next(_viewer_ids)
        self.websocket = websocket
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=queue_size)

    def enqueue(self, message: dict[str, Any]) -> bool:
        """Queue ``message``; return ``False`` if the viewer has stopped draining."""

        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            return False
        return True

    async def pump(self) -> None:
        """Write queued messages to the socket in order until the socket fails."""

        while True:
            message = await self.queue.get()
            await self.websocket.send_json(message)

    def __repr__(self) -> str:
        return f"ViewerConnection(id={self.id})"


class DashboardConnectionManager:
    """Track the set of active dashboard viewers."""

    def __init__(self, *, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        if queue_size <= 0:
            raise ValueError("queue_size must be positive")
        self.queue_size = queue_size
        self._connections: set[ViewerConnection] = set()

    async def accept(self, websocket: WebSocket) -> ViewerConnection:
        """Accept the websocket handshake and wrap it; the viewer is not registered yet."""

        await websocket.accept()
        return ViewerConnection(websocket, queue_size=self.queue_size)

    def register(self, viewer: ViewerConnection) -> None:
        self._connections.add(viewer)
        logger.info("Dashboard viewer %s connected (%d active)", viewer.id, len(self))

    def disconnect(self, viewer: ViewerConnection) -> None:
        if viewer in self._connections:
            self._connections.discard(viewer)
            logger.info("Dashboard viewer %s disconnected (%d active)", viewer.id, len(self))

    def broadcast(self, message: dict[str, Any]) -> None:
        """Queue ``message`` for every registered viewer without waiting on any of them.

        A viewer whose queue is full is dropped; it can reconnect for a fresh replay.
        """

        for viewer in list(self._connections):
            if not viewer.enqueue(message):
                logger.warning("Dashboard viewer %s is not draining; dropping it", viewer.id)
                self.disconnect(viewer)

    def __contains__(self, viewer: object) -> bool:
        return viewer in self._connections

    def __len__(self) -> int:
        return len(self._connections)


__all__ = ["DEFAULT_QUEUE_SIZE", "DashboardConnectionManager", "ViewerConnection"]
