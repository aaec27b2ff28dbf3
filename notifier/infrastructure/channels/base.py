"""Base classes shared by every delivery channel."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import httpx

from notifier.application.use_cases.messages import BetMessage, build_bet_message
from notifier.domain.entities import DispatchOutcome, NotificationRecord
from notifier.domain.errors import ChannelDeliveryError

logger = logging.getLogger(__name__)


class ChannelSender(ABC):
    """Deliver a :class:`NotificationRecord` to one external notification surface.

    :meth:`send` never raises: transport problems become a failed
    :class:`DispatchOutcome` so the coordinator can treat every channel
    uniformly. Subclasses implement :meth:`_deliver` and signal failures by
    raising :class:`ChannelDeliveryError`.
    """

    channel: str = "channel"

    async def send(self, record: NotificationRecord) -> DispatchOutcome:
        message = build_bet_message(record)
        if message is None:
            logger.warning(
                "Unknown notification type %r for record %s; %s skipped",
                record.type,
                record.id,
                self.channel,
            )
            return DispatchOutcome.skipped_outcome(
                self.channel, f"unknown notification type {record.type!r}"
            )

        try:
            await self._deliver(record, message)
        except ChannelDeliveryError as exc:
            logger.error("Failed to send %s for record %s: %s", self.channel, record.id, exc.reason)
            return DispatchOutcome.failed(self.channel, exc.reason)
        except Exception as exc:
            logger.exception("Unexpected error sending %s for record %s", self.channel, record.id)
            return DispatchOutcome.failed(self.channel, f"{type(exc).__name__}: {exc}")

        logger.info("Sent %s notification for record %s", self.channel, record.id)
        return DispatchOutcome.succeeded(self.channel)

    @abstractmethod
    async def _deliver(self, record: NotificationRecord, message: BetMessage) -> None:
        """Perform the delivery, raising :class:`ChannelDeliveryError` on failure."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(channel={self.channel!r})"


class HttpChannelSender(ChannelSender):
    """Channel that delivers by POSTing JSON over a shared ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient, *, timeout: float = 10.0) -> None:
        self._client = client
        self._timeout = timeout

    async def _post_json(
        self,
        url: str,
        payload: Any,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.post(
                url, json=payload, headers=dict(headers or {}), timeout=self._timeout
            )
        except httpx.HTTPError as exc:
            raise ChannelDeliveryError(self.channel, f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise ChannelDeliveryError(
                self.channel,
                f"HTTP {response.status_code}: {_truncate(response.text)}",
                status_code=response.status_code,
            )
        return response


def _truncate(text: str, limit: int = 200) -> str:
    text = text.strip()
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


__all__ = ["ChannelSender", "HttpChannelSender"]
