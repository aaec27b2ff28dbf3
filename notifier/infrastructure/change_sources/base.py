"""Abstract interface over the upstream record store's change feed."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from notifier.domain.entities import ChangeEvent

ChangeHandler = Callable[[list[ChangeEvent]], None]
"""Receives one batch of change events; always invoked on the event loop thread."""


class ChangeSource(ABC):
    """A subscription to unprocessed notification records plus the processed-flag write.

    Implementations report documents entering the ``processed == false`` result
    set as :attr:`ChangeKind.ADDED`, ordered by ``createdAt`` ascending, and
    report each document as added at most once per subscription lifetime.
    """

    name: str = "change-source"

    @abstractmethod
    async def start(self, handler: ChangeHandler) -> None:
        """Establish the subscription; raise :class:`ChangeSourceError` if that is impossible."""

    @abstractmethod
    async def stop(self) -> None:
        """Cancel the subscription. Safe to call more than once."""

    @abstractmethod
    async def mark_processed(self, record_id: str) -> None:
        """Set ``processed = true`` on the record; raise on write failure."""


__all__ = ["ChangeHandler", "ChangeSource"]
