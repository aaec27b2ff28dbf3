"""Realtime dashboard helpers for the infrastructure layer."""

from .hub import DEFAULT_CAPACITY, NOTIFICATION_EVENT, RECENT_EVENT, DashboardHub
from .manager import DashboardConnectionManager, ViewerConnection

__all__ = [
    "DEFAULT_CAPACITY",
    "NOTIFICATION_EVENT",
    "RECENT_EVENT",
    "DashboardConnectionManager",
    "DashboardHub",
    "ViewerConnection",
]
