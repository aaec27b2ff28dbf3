"""Live Firestore subscription over the notifications collection."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from pathlib import Path
from typing import Any

from anyio import to_thread
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from notifier.domain.entities import ChangeEvent, ChangeKind
from notifier.domain.errors import ChangeSourceError

from .base import ChangeHandler, ChangeSource

logger = logging.getLogger(__name__)


def change_to_event(change: Any) -> ChangeEvent:
    """Convert a Firestore ``DocumentChange`` into a :class:`ChangeEvent`."""

    kind = ChangeKind(change.type.name.lower())
    document = change.document
    return ChangeEvent(kind=kind, record_id=document.id, data=document.to_dict() or {})


class FirestoreChangeSource(ChangeSource):
    """Subscribe to ``processed == false`` documents ordered by ``createdAt``.

    Snapshot callbacks run on the Firestore client's background thread and are
    handed to the event loop with ``call_soon_threadsafe``. The underlying
    watch stream reconnects on its own; a supervisor re-subscribes only if the
    stream shuts down for good.
    """

    name = "firestore"

    def __init__(
        self,
        client: firestore.Client,
        *,
        collection: str = "notifications",
        health_check_interval: float = 30.0,
    ) -> None:
        self._client = client
        self._collection = collection
        self._health_check_interval = health_check_interval
        self._watch: Any = None
        self._supervisor: asyncio.Task[None] | None = None
        self._handler: ChangeHandler | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def from_service_account(
        cls, path: Path | None, *, collection: str = "notifications"
    ) -> "FirestoreChangeSource":
        """Create a client from a service-account file, or application default credentials."""

        try:
            if path:
                client = firestore.Client.from_service_account_json(str(Path(path).expanduser()))
            else:
                client = firestore.Client()
        except Exception as exc:
            raise ChangeSourceError(f"Unable to create Firestore client: {exc}") from exc
        logger.info("Firestore project: %s", client.project or "unknown")
        return cls(client, collection=collection)

    def _query(self) -> Any:
        return (
            self._client.collection(self._collection)
            .where(filter=FieldFilter("processed", "==", False))
            .order_by("createdAt", direction=firestore.Query.ASCENDING)
        )

    def _on_snapshot(self, _docs: Any, changes: Any, _read_time: Any) -> None:
        loop, handler = self._loop, self._handler
        if loop is None or handler is None:
            return
        try:
            events = [change_to_event(change) for change in changes]
        except Exception:
            logger.exception("Error reading Firestore snapshot for %s", self._collection)
            return
        if events:
            loop.call_soon_threadsafe(handler, events)

    async def _subscribe(self) -> None:
        self._watch = await to_thread.run_sync(self._query().on_snapshot, self._on_snapshot)

    async def start(self, handler: ChangeHandler) -> None:
        self._handler = handler
        self._loop = asyncio.get_running_loop()
        try:
            await self._subscribe()
        except Exception as exc:
            raise ChangeSourceError(
                f"Unable to subscribe to Firestore collection {self._collection!r}: {exc}"
            ) from exc
        self._supervisor = asyncio.create_task(self._supervise(), name="firestore-supervisor")
        logger.info("Listening to Firestore collection %r", self._collection)

    async def _supervise(self) -> None:
        while True:
            await asyncio.sleep(self._health_check_interval)
            watch = self._watch
            if watch is not None and getattr(watch, "is_active", True):
                continue
            logger.error("Firestore listener stopped; re-subscribing to %r", self._collection)
            try:
                await self._subscribe()
            except Exception:
                logger.exception("Error re-subscribing to Firestore; will retry")

    async def stop(self) -> None:
        self._handler = None
        if self._supervisor is not None:
            self._supervisor.cancel()
            with suppress(asyncio.CancelledError):
                await self._supervisor
            self._supervisor = None
        if self._watch is not None:
            watch, self._watch = self._watch, None
            await to_thread.run_sync(watch.unsubscribe)
            logger.info("Firestore listener unsubscribed")

    async def mark_processed(self, record_id: str) -> None:
        document = self._client.collection(self._collection).document(record_id)
        await to_thread.run_sync(document.update, {"processed": True})


__all__ = ["FirestoreChangeSource", "change_to_event"]
