"""Polling change source over a SQL ``notifications`` table."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Any

from anyio import to_thread
from sqlalchemy.orm import sessionmaker

from notifier.domain.entities import ChangeEvent, ChangeKind
from notifier.domain.errors import ChangeSourceError
from notifier.infrastructure.repositories import NotificationRepository

from .base import ChangeHandler, ChangeSource

logger = logging.getLogger(__name__)


class SqlPollingChangeSource(ChangeSource):
    """Emulate a change feed by diffing successive reads of the unprocessed rows.

    A row is reported as added the first time it appears in the result set,
    as modified when its content changes while still unprocessed, and as
    removed when it leaves the result set. Forgetting removed rows means a row
    that re-enters the set is delivered again.
    """

    name = "sql"

    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        poll_interval: float = 2.0,
        batch_limit: int | None = 500,
    ) -> None:
        self._session_factory = session_factory
        self._poll_interval = poll_interval
        self._batch_limit = batch_limit
        self._handler: ChangeHandler | None = None
        self._snapshot: dict[str, dict[str, Any]] = {}
        self._task: asyncio.Task[None] | None = None

    def _fetch_unprocessed(self) -> list[tuple[str, dict[str, Any]]]:
        session = self._session_factory()
        try:
            return NotificationRepository(session).list_unprocessed(limit=self._batch_limit)
        finally:
            session.close()

    def _mark_processed_sync(self, record_id: str) -> bool:
        session = self._session_factory()
        try:
            return NotificationRepository(session).mark_processed(record_id)
        finally:
            session.close()

    def diff(self, rows: list[tuple[str, dict[str, Any]]]) -> list[ChangeEvent]:
        """Compare ``rows`` with the previous read and return the resulting events."""

        current = {record_id: document for record_id, document in rows}
        events: list[ChangeEvent] = []
        for record_id, document in rows:
            previous = self._snapshot.get(record_id)
            if previous is None:
                events.append(ChangeEvent(ChangeKind.ADDED, record_id, document))
            elif previous != document:
                events.append(ChangeEvent(ChangeKind.MODIFIED, record_id, document))
        for record_id, document in self._snapshot.items():
            if record_id not in current:
                events.append(ChangeEvent(ChangeKind.REMOVED, record_id, document))
        self._snapshot = current
        return events

    async def poll_once(self) -> None:
        rows = await to_thread.run_sync(self._fetch_unprocessed)
        events = self.diff(rows)
        if events and self._handler is not None:
            self._handler(events)

    async def start(self, handler: ChangeHandler) -> None:
        self._handler = handler
        self._snapshot = {}
        try:
            await self.poll_once()
        except Exception as exc:
            raise ChangeSourceError(f"Unable to read unprocessed notifications: {exc}") from exc
        self._task = asyncio.create_task(self._run(), name="sql-change-poller")
        logger.info("Polling SQL notifications every %.1fs", self._poll_interval)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                await self.poll_once()
            except Exception:
                logger.exception("Error polling notifications; retrying in %.1fs", self._poll_interval)

    async def stop(self) -> None:
        self._handler = None
        if self._task is not None:
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
            self._task = None
            logger.info("SQL change poller stopped")

    async def mark_processed(self, record_id: str) -> None:
        found = await to_thread.run_sync(self._mark_processed_sync, record_id)
        if not found:
            raise LookupError(f"Notification {record_id} not found")


__all__ = ["SqlPollingChangeSource"]
