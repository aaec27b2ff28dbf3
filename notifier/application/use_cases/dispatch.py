"""Fan a notification record out to every enabled channel."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from notifier.domain.entities import DispatchOutcome, DispatchReport, NotificationRecord

if TYPE_CHECKING:
    from notifier.infrastructure.change_sources import ChangeSource
    from notifier.infrastructure.channels import ChannelSender
    from notifier.infrastructure.realtime import DashboardHub

logger = logging.getLogger(__name__)


class DispatchCoordinator:
    """Deliver one record to all channels and finalize its processed state.

    The dashboard broadcast happens first, in arrival order, so the buffer
    order never depends on channel latency. Channel sends then run concurrently
    and are joined with a settle-all barrier before the processed-flag write.
    A failed write leaves the record unprocessed; it will be delivered again
    later (at-least-once).
    """

    def __init__(
        self,
        senders: Sequence[ChannelSender],
        hub: DashboardHub,
        source: ChangeSource,
    ) -> None:
        self._senders = list(senders)
        self._hub = hub
        self._source = source
        self.dispatched = 0
        self.channel_failures = 0
        self.mark_failures = 0

    @property
    def senders(self) -> list[ChannelSender]:
        return list(self._senders)

    async def dispatch(self, record: NotificationRecord) -> DispatchReport:
        logger.info("Processing notification %s (%s)", record.id, record.type)

        try:
            self._hub.broadcast(record)
        except Exception:
            logger.exception("Error broadcasting notification %s to the dashboard", record.id)

        results = await asyncio.gather(
            *(sender.send(record) for sender in self._senders),
            return_exceptions=True,
        )
        outcomes = [
            self._to_outcome(sender, result) for sender, result in zip(self._senders, results)
        ]
        report = DispatchReport(record_id=record.id, outcomes=outcomes)
        self.dispatched += 1
        self.channel_failures += len(report.failed_channels)

        try:
            await self._source.mark_processed(record.id)
        except Exception as exc:
            self.mark_failures += 1
            logger.error(
                "Failed to mark notification %s as processed; it stays eligible for redelivery: %s",
                record.id,
                exc,
            )
        else:
            report.marked_processed = True
            logger.info("Marked notification %s as processed", record.id)

        if report.failed_channels:
            logger.warning(
                "Notification %s failed on: %s", record.id, ", ".join(report.failed_channels)
            )
        return report

    @staticmethod
    def _to_outcome(sender: ChannelSender, result: object) -> DispatchOutcome:
        if isinstance(result, DispatchOutcome):
            return result
        if isinstance(result, BaseException):
            logger.error("Channel %s raised instead of reporting: %r", sender.channel, result)
            return DispatchOutcome.failed(sender.channel, f"{type(result).__name__}: {result}")
        return DispatchOutcome.failed(sender.channel, f"unexpected result {result!r}")


__all__ = ["DispatchCoordinator"]
