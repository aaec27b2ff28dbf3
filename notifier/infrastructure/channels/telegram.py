"""Telegram bot channel."""

from __future__ import annotations

import httpx

from notifier.application.use_cases.messages import BetMessage
from notifier.domain.entities import NotificationRecord

from .base import HttpChannelSender


def render_telegram_markdown(message: BetMessage) -> str:
    lines = [
        f"{message.emoji} *{message.title}*",
        "",
        f"*Creator:* {message.creator}",
    ]
    if message.is_taken:
        lines.append(f"*Taker:* {message.taker}")
    lines.extend([f"*Amount:* {message.amount}", "", message.description])
    return "\n".join(lines)


class TelegramSender(HttpChannelSender):
    """Send bet notifications through the Telegram Bot API ``sendMessage`` call."""

    channel = "telegram"

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        bot_token: str,
        chat_id: str,
        api_base: str = "https://api.telegram.org",
        timeout: float = 10.0,
    ) -> None:
        super().__init__(client, timeout=timeout)
        self._bot_token = bot_token
        self.chat_id = chat_id
        self.api_base = api_base.rstrip("/")

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/bot{self._bot_token}/sendMessage"

    async def _deliver(self, record: NotificationRecord, message: BetMessage) -> None:
        await self._post_json(
            self.endpoint,
            {
                "chat_id": self.chat_id,
                "text": render_telegram_markdown(message),
                "parse_mode": "Markdown",
            },
        )


__all__ = ["TelegramSender", "render_telegram_markdown"]
