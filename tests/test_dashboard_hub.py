"""Tests for the live dashboard buffer and viewer fan-out."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from datetime import datetime, timezone

import pytest

from notifier.infrastructure.realtime import DashboardHub, ViewerConnection


class FakeWebSocket:
    def __init__(self) -> None:
        self.accepted = False
        self.sent: list[dict] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, message: dict) -> None:
        self.sent.append(message)


def test_buffer_keeps_the_newest_hundred(make_record) -> None:
    hub = DashboardHub()

    for index in range(101):
        hub.broadcast(make_record(f"n{index}"))

    recent = hub.recent()
    assert len(recent) == 100
    assert recent[0].record.id == "n100"
    assert recent[-1].record.id == "n1"


def test_capacity_is_configurable(make_record) -> None:
    hub = DashboardHub(capacity=2)

    for record_id in ("a", "b", "c"):
        hub.broadcast(make_record(record_id))

    assert [entry.record.id for entry in hub.recent()] == ["c", "b"]


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        DashboardHub(capacity=0)


def test_entries_carry_received_at(make_record) -> None:
    received = datetime(2024, 5, 1, 13, 0, tzinfo=timezone.utc)
    hub = DashboardHub(clock=lambda: received)

    entry = hub.broadcast(make_record())

    assert entry.received_at == received
    assert entry.to_payload()["receivedAt"] == "2024-05-01T13:00:00+00:00"


@pytest.mark.anyio
async def test_new_viewer_gets_replay_before_live_events(make_record) -> None:
    hub = DashboardHub()
    hub.broadcast(make_record("n1"))
    hub.broadcast(make_record("n2"))

    websocket = FakeWebSocket()
    viewer = await hub.connect(websocket)
    hub.broadcast(make_record("n3"))

    pump = asyncio.create_task(viewer.pump())
    await asyncio.sleep(0.01)
    pump.cancel()
    with suppress(asyncio.CancelledError):
        await pump

    assert websocket.accepted
    assert hub.viewer_count == 1
    assert [message["type"] for message in websocket.sent] == ["recent", "notification"]
    assert [item["id"] for item in websocket.sent[0]["data"]] == ["n2", "n1"]
    assert websocket.sent[1]["data"]["id"] == "n3"


@pytest.mark.anyio
async def test_disconnected_viewer_misses_broadcasts(make_record) -> None:
    hub = DashboardHub()
    viewer = await hub.connect(FakeWebSocket())
    hub.disconnect(viewer)

    hub.broadcast(make_record("n1"))

    assert hub.viewer_count == 0
    # Only the replay was ever queued for the departed viewer.
    assert viewer.queue.qsize() == 1


@pytest.mark.anyio
async def test_empty_buffer_replays_empty_batch() -> None:
    hub = DashboardHub()
    viewer = await hub.connect(FakeWebSocket())

    assert viewer.queue.get_nowait() == {"type": "recent", "data": []}


class StalledWebSocket(FakeWebSocket):
    """Viewer whose socket accepts but never finishes a send."""

    def __init__(self) -> None:
        super().__init__()
        self.release = asyncio.Event()

    async def send_json(self, message: dict) -> None:
        await self.release.wait()


@pytest.mark.anyio
async def test_stalled_viewer_is_dropped_with_bounded_queue(make_record) -> None:
    hub = DashboardHub()
    websocket = StalledWebSocket()
    viewer = await hub.connect(websocket)
    pump = asyncio.create_task(viewer.pump())
    await asyncio.sleep(0.01)

    for index in range(1000):
        hub.broadcast(make_record(f"n{index}"))

    pump.cancel()
    with suppress(asyncio.CancelledError):
        await pump

    assert hub.viewer_count == 0
    assert viewer.queue.qsize() <= 101
    assert len(hub.recent()) == 100
    assert hub.recent()[0].record.id == "n999"


@pytest.mark.anyio
async def test_stalled_viewer_does_not_affect_healthy_viewers(make_record) -> None:
    hub = DashboardHub(capacity=2)
    stalled = await hub.connect(StalledWebSocket())
    healthy = await hub.connect(FakeWebSocket())
    await healthy.queue.get()

    for index in range(5):
        hub.broadcast(make_record(f"n{index}"))
        await healthy.queue.get()

    assert stalled.queue.full()
    assert hub.viewer_count == 1
    assert healthy.queue.empty()


def test_enqueue_reports_a_full_queue() -> None:
    viewer = ViewerConnection(FakeWebSocket(), queue_size=1)

    assert viewer.enqueue({"type": "pong"}) is True
    assert viewer.enqueue({"type": "pong"}) is False
    assert viewer.queue.qsize() == 1
