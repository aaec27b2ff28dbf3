"""Tests for the webhook, Telegram, custom callback and email channel senders."""

from __future__ import annotations

import json
import types

import httpx
import pytest

from notifier.application.use_cases.messages import build_bet_message
from notifier.infrastructure.channels import (
    CustomWebhookSender,
    EmailSender,
    EmailTransport,
    SendGridEmailTransport,
    SmtpEmailTransport,
    TelegramSender,
    WebhookSender,
    build_channel_senders,
)
from notifier.infrastructure.channels import email as email_module
from notifier.infrastructure.channels.email import render_email_html
from notifier.infrastructure.channels.webhook import build_webhook_payload


class Recorder:
    """httpx transport handler that records requests and replies with a fixed status."""

    def __init__(self, status_code: int = 200, body: str = "ok") -> None:
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, text=self.body)

    def json_bodies(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_slack_payload_bolds_names(make_record) -> None:
    record = make_record(type="bet_taken", takerName="Bob")
    payload = build_webhook_payload("slack", record, build_bet_message(record))

    assert set(payload) == {"text"}
    assert "*Bet Accepted!*" in payload["text"]
    assert "*Alice* vs *Bob* • $10.00" in payload["text"]
    assert payload["text"].endswith("Lakers win tonight")


def test_discord_and_teams_payloads(make_record) -> None:
    record = make_record()
    message = build_bet_message(record)

    discord = build_webhook_payload("discord", record, message)
    teams = build_webhook_payload("teams", record, message)

    assert "**New Bet Created!**" in discord["content"]
    assert "*" not in teams["text"]
    assert "Alice • $10.00" in teams["text"]


def test_generic_payload_is_the_record(make_record) -> None:
    record = make_record()

    assert build_webhook_payload("generic", record, build_bet_message(record)) == record.to_payload()


@pytest.mark.anyio
async def test_webhook_sender_posts_once(make_record) -> None:
    recorder = Recorder()
    async with _client(recorder) as client:
        sender = WebhookSender(client, url="https://hooks.example.com/x", webhook_type="slack")
        outcome = await sender.send(make_record())

    assert outcome.success and not outcome.skipped
    assert len(recorder.requests) == 1
    assert str(recorder.requests[0].url) == "https://hooks.example.com/x"
    assert "text" in recorder.json_bodies()[0]


@pytest.mark.anyio
async def test_webhook_sender_reports_http_errors(make_record) -> None:
    recorder = Recorder(status_code=500, body="boom")
    async with _client(recorder) as client:
        outcome = await WebhookSender(client, url="https://hooks.example.com/x").send(make_record())

    assert outcome.success is False
    assert outcome.channel == "webhook"
    assert outcome.error == "HTTP 500: boom"


@pytest.mark.anyio
async def test_webhook_sender_reports_unreachable_host(make_record) -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(refuse) as client:
        outcome = await WebhookSender(client, url="https://hooks.example.com/x").send(make_record())

    assert outcome.success is False
    assert "ConnectError" in outcome.error


@pytest.mark.anyio
async def test_unknown_type_is_skipped_without_a_request(make_record) -> None:
    recorder = Recorder()
    async with _client(recorder) as client:
        outcome = await WebhookSender(client, url="https://hooks.example.com/x").send(
            make_record(type="bet_settled")
        )

    assert outcome.success is True
    assert outcome.skipped is True
    assert recorder.requests == []


@pytest.mark.anyio
async def test_telegram_sender_uses_markdown(make_record) -> None:
    recorder = Recorder()
    async with _client(recorder) as client:
        sender = TelegramSender(client, bot_token="123:abc", chat_id="42")
        outcome = await sender.send(make_record(type="bet_taken", takerName="Bob"))

    assert outcome.success
    request = recorder.requests[0]
    assert str(request.url) == "https://api.telegram.org/bot123:abc/sendMessage"
    body = recorder.json_bodies()[0]
    assert body["chat_id"] == "42"
    assert body["parse_mode"] == "Markdown"
    assert "*Taker:* Bob" in body["text"]
    assert "*Amount:* $10.00" in body["text"]


@pytest.mark.anyio
async def test_custom_webhook_sends_record_with_headers(make_record) -> None:
    recorder = Recorder(status_code=204, body="")
    record = make_record()
    async with _client(recorder) as client:
        sender = CustomWebhookSender(
            client, url="https://example.com/callback", headers={"X-Api-Key": "secret"}
        )
        outcome = await sender.send(record)

    assert outcome.success
    assert recorder.requests[0].headers["x-api-key"] == "secret"
    assert recorder.json_bodies()[0] == record.to_payload()


class FakeTransport(EmailTransport):
    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []

    async def send(self, *, subject: str, html_content: str, text_content: str) -> None:
        self.sent.append({"subject": subject, "html": html_content, "text": text_content})


@pytest.mark.anyio
async def test_email_sender_renders_subject_and_body(make_record) -> None:
    transport = FakeTransport()

    outcome = await EmailSender(transport).send(make_record(type="bet_taken", takerName="Bob"))

    assert outcome.success
    sent = transport.sent[0]
    assert sent["subject"].endswith("Bet Accepted: Alice vs Bob")
    assert "<strong>Taker:</strong> Bob" in sent["html"]
    assert "The bet is on!" in sent["text"]


def test_email_html_escapes_user_content(make_record) -> None:
    record = make_record(betDescription="<script>alert(1)</script>")

    html = render_email_html(build_bet_message(record))

    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_smtp_message_has_text_and_html_parts() -> None:
    transport = SmtpEmailTransport(
        host="smtp.example.com", port=587, sender="bets@example.com", recipient="me@example.com"
    )

    message = transport.build_message(subject="Hi", html_content="<p>Hi</p>", text_content="Hi")

    assert message["To"] == "me@example.com"
    assert [part.get_content_type() for part in message.iter_parts()] == [
        "text/plain",
        "text/html",
    ]


@pytest.mark.anyio
async def test_smtp_failure_becomes_failed_outcome(make_record, monkeypatch) -> None:
    async def failing_send(*_args, **_kwargs):
        raise OSError("connection refused")

    monkeypatch.setattr(email_module.aiosmtplib, "send", failing_send)
    transport = SmtpEmailTransport(
        host="smtp.example.com", port=587, sender="bets@example.com", recipient="me@example.com"
    )

    outcome = await EmailSender(transport).send(make_record())

    assert outcome.success is False
    assert outcome.error == "SMTP error: connection refused"


@pytest.mark.anyio
async def test_sendgrid_transport_sends_mail(make_record, monkeypatch) -> None:
    sent_messages = []

    class SuccessfulClient:
        def __init__(self, api_key: str) -> None:
            self.api_key = api_key

        def send(self, message):
            sent_messages.append(message)
            return types.SimpleNamespace(status_code=202, body=b"")

    monkeypatch.setattr(email_module, "SendGridAPIClient", SuccessfulClient)
    transport = SendGridEmailTransport(
        api_key="SG.key", sender="bets@example.com", recipient="me@example.com"
    )

    outcome = await EmailSender(transport).send(make_record())

    assert outcome.success
    assert len(sent_messages) == 1


@pytest.mark.anyio
async def test_sendgrid_error_details_are_reported(make_record, monkeypatch) -> None:
    class FailingClient:
        def __init__(self, api_key: str) -> None:
            self.api_key = api_key

        def send(self, message):
            error = Exception("Forbidden")
            error.status_code = 403
            error.body = json.dumps(
                {"errors": [{"message": "The from address does not match a verified Sender Identity"}]}
            )
            raise error

    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)
    transport = SendGridEmailTransport(
        api_key="SG.key", sender="bets@example.com", recipient="me@example.com"
    )

    outcome = await EmailSender(transport).send(make_record())

    assert outcome.success is False
    assert outcome.error.startswith("SendGrid status 403")
    assert "verified Sender Identity" in outcome.error


@pytest.mark.anyio
async def test_build_channel_senders_follows_enable_flags(settings) -> None:
    configured = settings.model_copy(
        update={
            "enable_webhook": True,
            "webhook_url": "https://hooks.example.com/x",
            "enable_custom_webhook": True,
            "custom_webhook_url": "https://example.com/callback",
        }
    )
    async with httpx.AsyncClient() as client:
        senders = build_channel_senders(configured, client)
        none_enabled = build_channel_senders(settings, client)

    assert [sender.channel for sender in senders] == ["webhook", "customWebhook"]
    assert none_enabled == []
