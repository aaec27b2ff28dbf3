"""In-process change source used for local runs and tests."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any
from uuid import uuid4

from notifier.domain.entities import ChangeEvent, ChangeKind
from notifier.utils.datetime import now_in_app_timezone, parse_timestamp

from .base import ChangeHandler, ChangeSource

logger = logging.getLogger(__name__)


class InMemoryChangeSource(ChangeSource):
    """Dictionary-backed store that feeds synthetic change events to the listener."""

    name = "memory"

    def __init__(self, documents: Iterable[tuple[str, Mapping[str, Any]]] = ()) -> None:
        self._documents: dict[str, dict[str, Any]] = {
            record_id: dict(data) for record_id, data in documents
        }
        self._handler: ChangeHandler | None = None
        self._pending_mark_failures = 0
        self.mark_calls: list[str] = []

    @property
    def running(self) -> bool:
        return self._handler is not None

    async def start(self, handler: ChangeHandler) -> None:
        self._handler = handler
        initial = [
            ChangeEvent(ChangeKind.ADDED, record_id, dict(data))
            for record_id, data in self._unprocessed()
        ]
        logger.info("In-memory change source started with %d pending record(s)", len(initial))
        if initial:
            handler(initial)

    async def stop(self) -> None:
        self._handler = None

    async def mark_processed(self, record_id: str) -> None:
        self.mark_calls.append(record_id)
        if self._pending_mark_failures:
            self._pending_mark_failures -= 1
            raise RuntimeError(f"simulated write failure for {record_id}")

        document = self._documents.get(record_id)
        if document is None:
            raise KeyError(record_id)
        if document.get("processed"):
            return
        document["processed"] = True
        self.emit([ChangeEvent(ChangeKind.REMOVED, record_id, dict(document))])

    def add(self, data: Mapping[str, Any], record_id: str | None = None) -> str:
        """Append a record the way a producer would and report it to the subscriber."""

        record_id = record_id or uuid4().hex
        document = dict(data)
        document.setdefault("createdAt", now_in_app_timezone())
        document.setdefault("processed", False)
        self._documents[record_id] = document
        if not document["processed"]:
            self.emit([ChangeEvent(ChangeKind.ADDED, record_id, dict(document))])
        return record_id

    def emit(self, events: list[ChangeEvent]) -> None:
        """Deliver a raw batch of events to the subscriber, if any."""

        if self._handler is not None:
            self._handler(events)

    def fail_next_mark(self, count: int = 1) -> None:
        """Make the next ``count`` processed-flag writes fail."""

        self._pending_mark_failures += count

    def is_processed(self, record_id: str) -> bool:
        return bool(self._documents.get(record_id, {}).get("processed"))

    def _unprocessed(self) -> list[tuple[str, dict[str, Any]]]:
        pending = [
            (record_id, data)
            for record_id, data in self._documents.items()
            if not data.get("processed")
        ]
        pending.sort(key=lambda item: parse_timestamp(item[1].get("createdAt")) or now_in_app_timezone())
        return pending


__all__ = ["InMemoryChangeSource"]
