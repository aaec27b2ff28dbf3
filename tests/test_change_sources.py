"""Tests for the SQL polling, Firestore and in-memory change sources."""

from __future__ import annotations

import types

import pytest

from notifier.config import Settings
from notifier.domain.entities import ChangeEvent, ChangeKind
from notifier.infrastructure.change_sources import InMemoryChangeSource, build_change_source
from notifier.infrastructure.change_sources.firestore import change_to_event
from notifier.infrastructure.change_sources.sql_polling import SqlPollingChangeSource
from notifier.infrastructure.database import (
    create_database_engine,
    create_session_factory,
    initialize_database,
)
from notifier.infrastructure.repositories import NotificationRepository


@pytest.fixture
def session_factory(tmp_path):
    engine = create_database_engine(f"sqlite:///{tmp_path / 'notifications.db'}")
    initialize_database(engine)
    yield create_session_factory(engine)
    engine.dispose()


def _insert(session_factory, document, record_id):
    session = session_factory()
    try:
        return NotificationRepository(session).add(document, record_id=record_id)
    finally:
        session.close()


class Collector:
    def __init__(self) -> None:
        self.events: list[ChangeEvent] = []

    def __call__(self, events: list[ChangeEvent]) -> None:
        self.events.extend(events)

    def kinds(self) -> list[tuple[str, str]]:
        return [(event.kind.value, event.record_id) for event in self.events]


@pytest.mark.anyio
async def test_sql_source_reports_pending_rows_in_creation_order(session_factory, make_document):
    _insert(session_factory, make_document(createdAt="2024-05-01T12:05:00Z"), "late")
    _insert(session_factory, make_document(createdAt="2024-05-01T12:00:00Z"), "early")
    _insert(session_factory, make_document(processed=True), "done")
    source = SqlPollingChangeSource(session_factory, poll_interval=60)
    collector = Collector()

    await source.start(collector)
    await source.stop()

    assert collector.kinds() == [("added", "early"), ("added", "late")]
    assert collector.events[0].data["creatorName"] == "Alice"


@pytest.mark.anyio
async def test_sql_source_adds_once_and_removes_after_mark(session_factory, make_document):
    source = SqlPollingChangeSource(session_factory, poll_interval=60)
    collector = Collector()
    await source.start(collector)

    _insert(session_factory, make_document(), "n1")
    await source.poll_once()
    await source.poll_once()
    await source.mark_processed("n1")
    await source.poll_once()
    await source.stop()

    assert collector.kinds() == [("added", "n1"), ("removed", "n1")]


@pytest.mark.anyio
async def test_sql_source_mark_unknown_record_raises(session_factory):
    source = SqlPollingChangeSource(session_factory)

    with pytest.raises(LookupError):
        await source.mark_processed("missing")


def test_sql_diff_reports_modified_rows(session_factory, make_document):
    source = SqlPollingChangeSource(session_factory)
    source.diff([("n1", make_document())])

    events = source.diff([("n1", make_document(betDescription="Celtics win"))])

    assert [(event.kind, event.record_id) for event in events] == [(ChangeKind.MODIFIED, "n1")]


def test_repository_round_trips_wire_document(session_factory, make_document):
    record_id = _insert(session_factory, make_document(betAmount="12.50"), None)

    session = session_factory()
    try:
        document = NotificationRepository(session).get(record_id)
    finally:
        session.close()

    assert document is not None
    assert str(document["betAmount"]) == "12.50"
    assert document["createdAt"].tzinfo is not None
    assert document["processed"] is False


def _firestore_change(kind: str, doc_id: str, data: dict):
    return types.SimpleNamespace(
        type=types.SimpleNamespace(name=kind),
        document=types.SimpleNamespace(id=doc_id, to_dict=lambda: data),
    )


@pytest.mark.parametrize(
    ("kind", "expected"),
    [("ADDED", ChangeKind.ADDED), ("MODIFIED", ChangeKind.MODIFIED), ("REMOVED", ChangeKind.REMOVED)],
)
def test_firestore_changes_map_to_events(kind, expected, make_document):
    document = make_document()

    event = change_to_event(_firestore_change(kind, "abc", document))

    assert event == ChangeEvent(expected, "abc", document)


def test_firestore_deleted_document_has_empty_data():
    change = types.SimpleNamespace(
        type=types.SimpleNamespace(name="REMOVED"),
        document=types.SimpleNamespace(id="abc", to_dict=lambda: None),
    )

    assert change_to_event(change).data == {}


@pytest.mark.anyio
async def test_memory_mark_failure_is_simulated(make_document):
    source = InMemoryChangeSource([("n1", make_document())])
    source.fail_next_mark()

    with pytest.raises(RuntimeError):
        await source.mark_processed("n1")
    await source.mark_processed("n1")

    assert source.is_processed("n1")
    assert source.mark_calls == ["n1", "n1"]


def test_build_change_source_selects_sql(tmp_path):
    settings = Settings(
        _env_file=None,
        change_source="sql",
        database_url=f"sqlite:///{tmp_path / 'feed.db'}",
        poll_interval_seconds=0.5,
    )

    source = build_change_source(settings)

    assert isinstance(source, SqlPollingChangeSource)
    assert source.name == "sql"


def test_build_change_source_memory():
    source = build_change_source(Settings(_env_file=None, change_source="memory"))

    assert isinstance(source, InMemoryChangeSource)
