"""Domain entity for the live dashboard history buffer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .notification import NotificationRecord

RECENT_EVENT = "recent"
NOTIFICATION_EVENT = "notification"


@dataclass(frozen=True)
class DashboardBufferEntry:
    """A dispatched record together with the moment the dashboard received it."""

    record: NotificationRecord
    received_at: datetime

    def to_payload(self) -> dict[str, Any]:
        payload = self.record.to_payload()
        payload["receivedAt"] = self.received_at.isoformat()
        return payload


__all__ = ["DashboardBufferEntry", "NOTIFICATION_EVENT", "RECENT_EVENT"]
