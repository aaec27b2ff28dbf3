"""Delivery adapters for the external notification surfaces."""

from .base import ChannelSender, HttpChannelSender
from .custom_webhook import CustomWebhookSender
from .email import EmailSender, EmailTransport, SendGridEmailTransport, SmtpEmailTransport
from .factory import build_channel_senders, build_email_transport
from .telegram import TelegramSender
from .webhook import WebhookSender

__all__ = [
    "ChannelSender",
    "HttpChannelSender",
    "CustomWebhookSender",
    "EmailSender",
    "EmailTransport",
    "SendGridEmailTransport",
    "SmtpEmailTransport",
    "TelegramSender",
    "WebhookSender",
    "build_channel_senders",
    "build_email_transport",
]
