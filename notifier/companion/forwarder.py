"""Websocket client that forwards live notifications to desktop alerts."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from contextlib import suppress
from enum import Enum
from typing import Any

import websockets
from anyio import to_thread
from websockets.exceptions import WebSocketException

from notifier.domain.entities import NOTIFICATION_EVENT, RECENT_EVENT

from .alerts import DesktopAlertRenderer, build_desktop_alert

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


def backoff_delay(attempt: int, *, initial: float, maximum: float, multiplier: float) -> float:
    """Delay before reconnect ``attempt`` (1-based), capped at ``maximum``."""

    if attempt < 1:
        return 0.0
    return min(initial * multiplier ** (attempt - 1), maximum)


class CompanionForwarder:
    """Keep a connection to the dashboard push endpoint and alert on live events.

    The ``recent`` batch sent on every (re)connect is only logged, so a
    reconnect never produces a burst of alerts for old notifications.
    """

    def __init__(
        self,
        url: str,
        renderer: DesktopAlertRenderer,
        *,
        initial_delay: float = 1.0,
        max_delay: float = 5.0,
        multiplier: float = 2.0,
        connect: Callable[[str], Any] = websockets.connect,
    ) -> None:
        self.url = url
        self._renderer = renderer
        self._initial_delay = initial_delay
        self._max_delay = max_delay
        self._multiplier = multiplier
        self._connect = connect
        self._stop_event = asyncio.Event()
        self._connection: Any = None
        self.state = ConnectionState.DISCONNECTED
        self.failed_attempts = 0
        self.alerts_shown = 0

    def _set_state(self, state: ConnectionState) -> None:
        if state is not self.state:
            logger.info("Companion %s -> %s", self.state.value, state.value)
            self.state = state

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    def next_delay(self) -> float:
        return backoff_delay(
            self.failed_attempts,
            initial=self._initial_delay,
            maximum=self._max_delay,
            multiplier=self._multiplier,
        )

    async def run(self) -> None:
        """Connect, consume and reconnect until :meth:`stop` is called."""

        logger.info("Connecting to %s", self.url)
        while not self.stopping:
            self._set_state(ConnectionState.CONNECTING)
            try:
                async with self._connect(self.url) as connection:
                    self._connection = connection
                    # stop() may have run while the handshake was in progress.
                    if self.stopping:
                        break
                    self._set_state(ConnectionState.CONNECTED)
                    if self.failed_attempts:
                        logger.info("Reconnected after %d attempt(s)", self.failed_attempts)
                    self.failed_attempts = 0
                    logger.info("Connected to notification service; waiting for notifications")
                    async for raw in connection:
                        await self.handle_message(raw)
                    logger.info("Disconnected: server closed the connection")
            except (OSError, WebSocketException, asyncio.TimeoutError) as exc:
                if self.state is ConnectionState.CONNECTED:
                    logger.warning("Disconnected: %s", exc)
                else:
                    logger.warning("Failed to connect to %s: %s", self.url, exc)
            finally:
                self._connection = None
                self._set_state(ConnectionState.DISCONNECTED)

            if self.stopping:
                break
            self.failed_attempts += 1
            delay = self.next_delay()
            if self.failed_attempts % 5 == 0:
                logger.info("Reconnection attempt #%d", self.failed_attempts)
            logger.debug("Retrying in %.1fs", delay)
            with suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=delay)

        logger.info("Total notifications received: %d", self.alerts_shown)

    async def stop(self) -> None:
        """Stop reconnecting and close the current connection, if any."""

        self._stop_event.set()
        connection = self._connection
        if connection is not None:
            await connection.close()

    async def handle_message(self, raw: str | bytes) -> None:
        try:
            message = json.loads(raw)
        except (TypeError, ValueError):
            logger.debug("Ignoring non-JSON frame")
            return
        if not isinstance(message, dict):
            return

        event = message.get("type")
        if event == RECENT_EVENT:
            batch = message.get("data") or []
            if batch:
                logger.info(
                    "Loaded %d recent notification(s); not showing old notifications as alerts",
                    len(batch),
                )
            return

        if event == NOTIFICATION_EVENT:
            data = message.get("data")
            if not isinstance(data, dict):
                logger.warning("Notification event without a payload")
                return
            logger.debug("Received notification: %s", data)
            await self.show(data)
            return

        logger.debug("Ignoring %r event", event)

    async def show(self, payload: dict[str, Any]) -> bool:
        alert = build_desktop_alert(payload)
        if alert is None:
            return False
        self.alerts_shown += 1
        logger.info("Showing notification #%d: %s", self.alerts_shown, alert.title)
        return await to_thread.run_sync(self._renderer.show, alert)


__all__ = ["CompanionForwarder", "ConnectionState", "backoff_delay"]
