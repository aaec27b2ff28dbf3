"""Integration tests for the HTTP surface and the dashboard websocket."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from notifier.infrastructure.change_sources import InMemoryChangeSource
from notifier.main import create_app


@pytest.fixture
def source() -> InMemoryChangeSource:
    return InMemoryChangeSource()


@pytest.fixture
def client(settings, source):
    """Return a test client running the full lifespan against the in-memory source."""

    app = create_app(settings, change_source=source, senders=[])
    with TestClient(app) as test_client:
        yield test_client


def _add_and_wait(client: TestClient, source: InMemoryChangeSource, document: dict) -> str:
    record_id = client.portal.call(source.add, document)
    client.portal.call(client.app.state.listener.wait_idle)
    return record_id


def test_notifications_start_empty(client) -> None:
    response = client.get("/api/notifications")

    assert response.status_code == 200
    assert response.json() == []


def test_dispatched_records_are_listed_newest_first(client, source, make_document) -> None:
    first = _add_and_wait(client, source, make_document())
    second = _add_and_wait(client, source, make_document(type="bet_taken", takerName="Bob"))

    body = client.get("/api/notifications").json()

    assert [item["id"] for item in body] == [second, first]
    assert body[0]["takerName"] == "Bob"
    assert body[0]["betAmount"] == 10.0
    assert "receivedAt" in body[0]
    assert source.is_processed(first) and source.is_processed(second)


def test_config_reports_enabled_channels(settings, source) -> None:
    configured = settings.model_copy(
        update={
            "enable_webhook": True,
            "webhook_url": "https://hooks.example.com/x",
            "webhook_type": "discord",
        }
    )
    app = create_app(configured, change_source=source, senders=[])

    with TestClient(app) as client:
        body = client.get("/api/config").json()

    assert body == {
        "channels": {
            "webhook": True,
            "email": False,
            "telegram": False,
            "customWebhook": False,
            "webDashboard": True,
        },
        "webhookType": "discord",
    }


def test_config_without_webhook_reports_none(client) -> None:
    assert client.get("/api/config").json()["webhookType"] == "none"


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok", "changeSource": "memory", "viewers": 0}


def test_websocket_replays_recent_then_streams(client, source, make_document) -> None:
    earlier = _add_and_wait(client, source, make_document())

    with client.websocket_connect("/ws") as websocket:
        recent = websocket.receive_json()
        assert recent["type"] == "recent"
        assert [item["id"] for item in recent["data"]] == [earlier]

        live = client.portal.call(source.add, make_document(type="bet_taken", takerName="Bob"))
        message = websocket.receive_json()

        assert message["type"] == "notification"
        assert message["data"]["id"] == live
        assert message["data"]["takerName"] == "Bob"


def test_websocket_answers_ping(client) -> None:
    with client.websocket_connect("/ws") as websocket:
        assert websocket.receive_json() == {"type": "recent", "data": []}
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}


def test_lifespan_stops_listener(settings, source) -> None:
    app = create_app(settings, change_source=source, senders=[])

    with TestClient(app):
        assert source.running

    assert not source.running


def test_received_at_uses_configured_timezone(settings, source, make_document) -> None:
    configured = settings.model_copy(update={"app_timezone": "UTC+05:30"})
    app = create_app(configured, change_source=source, senders=[])

    with TestClient(app) as client:
        _add_and_wait(client, source, make_document())
        body = client.get("/api/notifications").json()

    assert body[0]["receivedAt"].endswith("+05:30")
