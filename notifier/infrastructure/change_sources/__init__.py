"""Change-feed variants over the upstream record store."""

from __future__ import annotations

from notifier.config import Settings

from .base import ChangeHandler, ChangeSource
from .memory import InMemoryChangeSource


def build_change_source(settings: Settings) -> ChangeSource:
    """Instantiate the change source selected by ``settings.change_source``.

    The Firestore and SQL variants are imported lazily so a deployment only
    needs the client library of the store it actually uses.
    """

    if settings.change_source == "firestore":
        from .firestore import FirestoreChangeSource

        return FirestoreChangeSource.from_service_account(
            settings.firebase_service_account_path,
            collection=settings.firestore_collection,
        )

    if settings.change_source == "sql":
        from notifier.infrastructure.database import (
            create_database_engine,
            create_session_factory,
            initialize_database,
        )

        from .sql_polling import SqlPollingChangeSource

        engine = create_database_engine(settings.database_url)
        initialize_database(engine)
        return SqlPollingChangeSource(
            create_session_factory(engine),
            poll_interval=settings.poll_interval_seconds,
        )

    return InMemoryChangeSource()


__all__ = ["ChangeHandler", "ChangeSource", "InMemoryChangeSource", "build_change_source"]
