"""Exceptions raised by the notification fan-out service."""

from __future__ import annotations


class NotifierError(Exception):
    """Base class for errors raised by the service."""


class InvalidNotificationRecord(NotifierError):
    """Raised when a store payload cannot be turned into a notification record."""

    def __init__(self, record_id: str | None, reason: str) -> None:
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Invalid notification record {record_id!r}: {reason}")


class ChannelDeliveryError(NotifierError):
    """Raised inside a channel sender when delivery to the external surface fails."""

    def __init__(self, channel: str, reason: str, *, status_code: int | None = None) -> None:
        self.channel = channel
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{channel} delivery failed: {reason}")


class ChangeSourceError(NotifierError):
    """Raised when the upstream subscription cannot be established."""


__all__ = [
    "NotifierError",
    "InvalidNotificationRecord",
    "ChannelDeliveryError",
    "ChangeSourceError",
]
