"""Email channel with SMTP and SendGrid transports."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from email.message import EmailMessage
from html import escape
from typing import Any

import aiosmtplib
from anyio import to_thread
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from notifier.application.use_cases.messages import BetMessage
from notifier.domain.entities import NotificationRecord
from notifier.domain.errors import ChannelDeliveryError

from .base import ChannelSender

CHANNEL = "email"


def render_email_html(message: BetMessage) -> str:
    """Return the HTML body for ``message``; every value is escaped."""

    parts = [
        f"<h2>{escape(message.headline)}</h2>",
        f"<p><strong>Creator:</strong> {escape(message.creator)}</p>",
    ]
    if message.is_taken:
        parts.append(f"<p><strong>Taker:</strong> {escape(message.taker or '')}</p>")
    parts.extend(
        [
            f"<p><strong>Amount:</strong> {escape(message.amount)}</p>",
            f"<p><strong>Description:</strong> {escape(message.description)}</p>",
            f'<p style="color: #666;">{escape(message.status_line)}</p>',
        ]
    )
    return "".join(parts)


def render_email_text(message: BetMessage) -> str:
    lines = [message.headline, "", f"Creator: {message.creator}"]
    if message.is_taken:
        lines.append(f"Taker: {message.taker}")
    lines.extend(
        [
            f"Amount: {message.amount}",
            f"Description: {message.description}",
            "",
            message.status_line,
        ]
    )
    return "\n".join(lines)


class EmailTransport(ABC):
    """Hand a rendered email to a relay."""

    @abstractmethod
    async def send(self, *, subject: str, html_content: str, text_content: str) -> None:
        """Deliver the message, raising :class:`ChannelDeliveryError` on failure."""


class SmtpEmailTransport(EmailTransport):
    """Deliver through an SMTP relay using STARTTLS."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        sender: str,
        recipient: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.sender = sender
        self.recipient = recipient
        self._username = username
        self._password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def build_message(self, *, subject: str, html_content: str, text_content: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = self.recipient
        message["Subject"] = subject
        message.set_content(text_content)
        message.add_alternative(html_content, subtype="html")
        return message

    async def send(self, *, subject: str, html_content: str, text_content: str) -> None:
        message = self.build_message(
            subject=subject, html_content=html_content, text_content=text_content
        )
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self._username,
                password=self._password,
                start_tls=self.use_tls,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise ChannelDeliveryError(CHANNEL, f"SMTP error: {exc}") from exc


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


def _describe_sendgrid_failure(status_code: Any, body: Any) -> str | None:
    details = _extract_sendgrid_error_details(body)
    if status_code and details:
        return f"SendGrid status {status_code}: {details}"
    if status_code:
        return f"SendGrid status {status_code}"
    if details:
        return f"SendGrid error: {details}"
    return None


class SendGridEmailTransport(EmailTransport):
    """Deliver through the SendGrid REST API.

    The SendGrid SDK is synchronous, so the request runs in a worker thread.
    """

    def __init__(self, *, api_key: str, sender: str, recipient: str) -> None:
        self._api_key = api_key
        self.sender = sender
        self.recipient = recipient

    def _send_sync(self, subject: str, html_content: str) -> None:
        message = Mail(
            from_email=self.sender,
            to_emails=self.recipient,
            subject=subject,
            html_content=html_content,
        )
        try:
            client = SendGridAPIClient(self._api_key)
            response = client.send(message)
        except Exception as exc:
            reason = _describe_sendgrid_failure(
                getattr(exc, "status_code", None), getattr(exc, "body", None)
            ) or f"SendGrid request failed: {exc}"
            raise ChannelDeliveryError(
                CHANNEL, reason, status_code=getattr(exc, "status_code", None)
            ) from exc

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            raise ChannelDeliveryError(
                CHANNEL,
                _describe_sendgrid_failure(status_code, getattr(response, "body", None))
                or f"SendGrid responded with status {status_code}",
                status_code=status_code if isinstance(status_code, int) else None,
            )

    async def send(self, *, subject: str, html_content: str, text_content: str) -> None:
        await to_thread.run_sync(self._send_sync, subject, html_content)


class EmailSender(ChannelSender):
    """Render bet notifications as HTML email and pass them to a transport."""

    channel = CHANNEL

    def __init__(self, transport: EmailTransport) -> None:
        self.transport = transport

    async def _deliver(self, record: NotificationRecord, message: BetMessage) -> None:
        await self.transport.send(
            subject=message.subject,
            html_content=render_email_html(message),
            text_content=render_email_text(message),
        )


__all__ = [
    "EmailSender",
    "EmailTransport",
    "SendGridEmailTransport",
    "SmtpEmailTransport",
    "render_email_html",
    "render_email_text",
]
