"""Build the configured set of channel senders."""

from __future__ import annotations

import logging

import httpx

from notifier.config import Settings

from .base import ChannelSender
from .custom_webhook import CustomWebhookSender
from .email import EmailSender, EmailTransport, SendGridEmailTransport, SmtpEmailTransport
from .telegram import TelegramSender
from .webhook import WebhookSender

logger = logging.getLogger(__name__)


def build_email_transport(settings: Settings) -> EmailTransport:
    """Return the transport matching ``settings.email_provider``."""

    if settings.email_provider == "sendgrid":
        return SendGridEmailTransport(
            api_key=settings.sendgrid_api_key or "",
            sender=settings.email_from or "",
            recipient=settings.email_to or "",
        )
    return SmtpEmailTransport(
        host=settings.smtp_host or "",
        port=settings.smtp_port,
        sender=settings.email_from or "",
        recipient=settings.email_to or "",
        username=settings.smtp_user,
        password=settings.smtp_password,
        use_tls=settings.smtp_use_tls,
        timeout=settings.http_timeout_seconds,
    )


def build_channel_senders(settings: Settings, client: httpx.AsyncClient) -> list[ChannelSender]:
    """Instantiate one sender per enabled channel, in a stable order."""

    timeout = settings.http_timeout_seconds
    senders: list[ChannelSender] = []

    if settings.enable_webhook and settings.webhook_url:
        senders.append(
            WebhookSender(
                client,
                url=settings.webhook_url,
                webhook_type=settings.webhook_type,
                timeout=timeout,
            )
        )

    if settings.enable_email:
        senders.append(EmailSender(build_email_transport(settings)))

    if settings.enable_telegram and settings.telegram_bot_token and settings.telegram_chat_id:
        senders.append(
            TelegramSender(
                client,
                bot_token=settings.telegram_bot_token,
                chat_id=settings.telegram_chat_id,
                api_base=settings.telegram_api_base,
                timeout=timeout,
            )
        )

    if settings.enable_custom_webhook and settings.custom_webhook_url:
        senders.append(
            CustomWebhookSender(
                client,
                url=settings.custom_webhook_url,
                headers=settings.custom_webhook_headers,
                timeout=timeout,
            )
        )

    logger.info(
        "Enabled channels: %s",
        ", ".join(sender.channel for sender in senders) or "none (dashboard only)",
    )
    return senders


__all__ = ["build_channel_senders", "build_email_transport"]
