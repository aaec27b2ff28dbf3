"""Generic HTTP callback channel posting the raw record."""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from notifier.application.use_cases.messages import BetMessage
from notifier.domain.entities import NotificationRecord

from .base import HttpChannelSender


class CustomWebhookSender(HttpChannelSender):
    """POST the record's JSON payload to a user supplied endpoint."""

    channel = "customWebhook"

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        url: str,
        headers: Mapping[str, str] | None = None,
        timeout: float = 10.0,
    ) -> None:
        super().__init__(client, timeout=timeout)
        self.url = url
        self.headers = dict(headers or {})

    async def _deliver(self, record: NotificationRecord, message: BetMessage) -> None:
        await self._post_json(self.url, record.to_payload(), headers=self.headers)


__all__ = ["CustomWebhookSender"]
