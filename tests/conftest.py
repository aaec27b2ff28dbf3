"""Shared fixtures for the notifier test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import pytest

from notifier.config import Settings
from notifier.domain.entities import NotificationRecord


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""

    return "asyncio"


def bet_document(**overrides: Any) -> dict[str, Any]:
    """Return a store document for a freshly created 10 dollar bet."""

    document: dict[str, Any] = {
        "type": "bet_created",
        "betId": "bet-1",
        "betDescription": "Lakers win tonight",
        "betAmount": 10,
        "creatorName": "Alice",
        "creatorPhoto": None,
        "takerName": None,
        "takerPhoto": None,
        "createdAt": datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        "processed": False,
    }
    document.update(overrides)
    return document


@pytest.fixture
def make_record() -> Callable[..., NotificationRecord]:
    def _make(record_id: str = "n1", **overrides: Any) -> NotificationRecord:
        return NotificationRecord.from_mapping(record_id, bet_document(**overrides))

    return _make


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Settings isolated from the developer's environment and ``.env`` file."""

    for name in ("ENABLE_WEBHOOK", "ENABLE_EMAIL", "ENABLE_TELEGRAM", "ENABLE_CUSTOM_WEBHOOK"):
        monkeypatch.delenv(name, raising=False)
    return Settings(_env_file=None, change_source="memory")


@pytest.fixture
def make_document() -> Callable[..., dict[str, Any]]:
    return bet_document
