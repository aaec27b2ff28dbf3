"""Live dashboard hub: recent-history buffer plus websocket fan-out."""

from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from collections.abc import Callable
from contextlib import suppress
from datetime import datetime
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from notifier.domain.entities import (
    NOTIFICATION_EVENT,
    RECENT_EVENT,
    DashboardBufferEntry,
    NotificationRecord,
)
from notifier.utils.datetime import now_in_app_timezone

from .manager import DashboardConnectionManager, ViewerConnection

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


class DashboardHub:
    """Keep the most recent dispatched notifications and push new ones to viewers.

    The buffer is newest-first and bounded: inserting past ``capacity`` evicts
    the oldest entry. It is only touched from the event loop, so no lock is
    needed. Pushes are fire-and-forget; a viewer that is not connected when a
    broadcast happens never receives it as a live event, and a viewer that
    falls more than ``capacity`` messages behind is dropped.
    """

    def __init__(
        self,
        manager: DashboardConnectionManager | None = None,
        *,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], datetime] = now_in_app_timezone,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if manager is None:
            manager = DashboardConnectionManager(queue_size=capacity + 1)
        self._manager = manager
        self._buffer: deque[DashboardBufferEntry] = deque(maxlen=capacity)
        self._clock = clock
        self.capacity = capacity

    @property
    def viewer_count(self) -> int:
        return len(self._manager)

    def recent(self) -> list[DashboardBufferEntry]:
        """Return the buffer contents, newest first."""

        return list(self._buffer)

    def recent_payload(self) -> list[dict[str, Any]]:
        return [entry.to_payload() for entry in self._buffer]

    def broadcast(self, record: NotificationRecord) -> DashboardBufferEntry:
        """Insert ``record`` at the head of the buffer and push it to connected viewers."""

        entry = DashboardBufferEntry(record=record, received_at=self._clock())
        self._buffer.appendleft(entry)
        self._manager.broadcast({"type": NOTIFICATION_EVENT, "data": entry.to_payload()})
        logger.debug(
            "Broadcast record %s to %d viewer(s); buffer size %d",
            record.id,
            self.viewer_count,
            len(self._buffer),
        )
        return entry

    async def connect(self, websocket: WebSocket) -> ViewerConnection:
        """Accept a viewer, queue the buffer replay and start live delivery.

        The snapshot and the registration happen without yielding to the event
        loop, so every later broadcast is queued after the replay and nothing in
        the replay is repeated as a live event.
        """

        viewer = await self._manager.accept(websocket)
        viewer.enqueue({"type": RECENT_EVENT, "data": self.recent_payload()})
        self._manager.register(viewer)
        return viewer

    def disconnect(self, viewer: ViewerConnection) -> None:
        self._manager.disconnect(viewer)

    async def serve(self, websocket: WebSocket) -> None:
        """Run a viewer session until the client goes away."""

        viewer = await self.connect(websocket)
        writer = asyncio.create_task(self._write(viewer), name=f"dashboard-viewer-{viewer.id}")
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError:
                    continue
                if isinstance(message, dict) and message.get("type") == "ping":
                    viewer.enqueue({"type": "pong"})
        except WebSocketDisconnect:
            pass
        finally:
            self.disconnect(viewer)
            writer.cancel()
            with suppress(asyncio.CancelledError):
                await writer

    async def _write(self, viewer: ViewerConnection) -> None:
        try:
            await viewer.pump()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.info("Dropping dashboard viewer %s: %s", viewer.id, exc)
            self.disconnect(viewer)


__all__ = ["DashboardHub", "DEFAULT_CAPACITY", "RECENT_EVENT", "NOTIFICATION_EVENT"]
