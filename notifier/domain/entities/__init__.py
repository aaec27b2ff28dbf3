"""Domain entities exposed by the application."""

from .change_event import ChangeEvent, ChangeKind
from .dashboard_entry import NOTIFICATION_EVENT, RECENT_EVENT, DashboardBufferEntry
from .dispatch import DispatchOutcome, DispatchReport
from .notification import (
    BET_CREATED,
    BET_TAKEN,
    NOTIFICATION_TYPES,
    NotificationRecord,
)

__all__ = [
    "BET_CREATED",
    "BET_TAKEN",
    "NOTIFICATION_EVENT",
    "NOTIFICATION_TYPES",
    "RECENT_EVENT",
    "ChangeEvent",
    "ChangeKind",
    "DashboardBufferEntry",
    "DispatchOutcome",
    "DispatchReport",
    "NotificationRecord",
]
