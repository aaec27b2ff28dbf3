"""Chat webhook channel (Slack, Discord, Microsoft Teams or raw JSON)."""

from __future__ import annotations

from typing import Any

import httpx

from notifier.application.use_cases.messages import BetMessage
from notifier.domain.entities import NotificationRecord

from .base import HttpChannelSender


def _slack_text(message: BetMessage) -> str:
    return (
        f"{message.emoji} *{message.title}*\n"
        f"{_bold_participants(message, '*')} • {message.amount}\n"
        f"{message.description}"
    )


def _discord_text(message: BetMessage) -> str:
    return (
        f"{message.emoji} **{message.title}**\n"
        f"{_bold_participants(message, '**')} • {message.amount}\n"
        f"{message.description}"
    )


def _teams_text(message: BetMessage) -> str:
    return (
        f"{message.headline}\n"
        f"{message.participants} • {message.amount}\n"
        f"{message.description}"
    )


def _bold_participants(message: BetMessage, marker: str) -> str:
    if message.is_taken:
        return f"{marker}{message.creator}{marker} vs {marker}{message.taker}{marker}"
    return f"{marker}{message.creator}{marker}"


def build_webhook_payload(
    webhook_type: str, record: NotificationRecord, message: BetMessage
) -> dict[str, Any]:
    """Return the request body understood by the ``webhook_type`` endpoint."""

    if webhook_type == "slack":
        return {"text": _slack_text(message)}
    if webhook_type == "discord":
        return {"content": _discord_text(message)}
    if webhook_type == "teams":
        return {"text": _teams_text(message)}
    return record.to_payload()


class WebhookSender(HttpChannelSender):
    """Post bet notifications to an incoming chat webhook."""

    channel = "webhook"

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        url: str,
        webhook_type: str = "slack",
        timeout: float = 10.0,
    ) -> None:
        super().__init__(client, timeout=timeout)
        self.url = url
        self.webhook_type = webhook_type

    async def _deliver(self, record: NotificationRecord, message: BetMessage) -> None:
        payload = build_webhook_payload(self.webhook_type, record, message)
        await self._post_json(self.url, payload)


__all__ = ["WebhookSender", "build_webhook_payload"]
