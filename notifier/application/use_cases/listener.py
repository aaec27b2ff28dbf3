"""Turn change-feed additions into dispatch runs."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from notifier.domain.entities import ChangeEvent, ChangeKind, NotificationRecord
from notifier.domain.errors import InvalidNotificationRecord

from .dispatch import DispatchCoordinator

if TYPE_CHECKING:
    from notifier.infrastructure.change_sources import ChangeSource

logger = logging.getLogger(__name__)


class ChangeFeedListener:
    """Subscribe to unprocessed records and dispatch each added one.

    Each added record gets its own task, so a record whose channels are slow
    never holds back the next one. De-duplication within a subscription is the
    change source's job: only ``added`` events trigger dispatch.
    """

    def __init__(self, source: ChangeSource, coordinator: DispatchCoordinator) -> None:
        self._source = source
        self._coordinator = coordinator
        self._tasks: set[asyncio.Task[object]] = set()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def start(self) -> None:
        """Subscribe to the change source; a failure here is fatal for the caller."""

        logger.info("Starting change-feed listener on %s source", self._source.name)
        await self._source.start(self.handle_changes)
        self._running = True
        logger.info("Listener started; waiting for notifications")

    async def stop(self, *, drain_timeout: float | None = 5.0) -> None:
        """Cancel the subscription, then give in-flight dispatches a moment to settle."""

        if self._running:
            self._running = False
            await self._source.stop()
            logger.info("Change-feed subscription cancelled")

        if self._tasks and drain_timeout:
            _, pending = await asyncio.wait(set(self._tasks), timeout=drain_timeout)
            for task in pending:
                task.cancel()
            if pending:
                logger.warning("Cancelled %d dispatch(es) still running at shutdown", len(pending))

    def handle_changes(self, events: list[ChangeEvent]) -> None:
        for event in events:
            if event.kind is not ChangeKind.ADDED:
                logger.debug("Ignoring %s change for %s", event.kind.value, event.record_id)
                continue
            try:
                record = NotificationRecord.from_mapping(event.record_id, event.data)
            except InvalidNotificationRecord as exc:
                logger.error("Skipping malformed notification: %s", exc)
                continue
            self._schedule(record)

    def _schedule(self, record: NotificationRecord) -> None:
        task = asyncio.get_running_loop().create_task(
            self._dispatch(record), name=f"dispatch-{record.id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _dispatch(self, record: NotificationRecord) -> None:
        try:
            await self._coordinator.dispatch(record)
        except Exception:
            logger.exception("Unhandled error dispatching notification %s", record.id)

    async def wait_idle(self) -> None:
        """Wait until every dispatch scheduled so far has finished."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


__all__ = ["ChangeFeedListener"]
