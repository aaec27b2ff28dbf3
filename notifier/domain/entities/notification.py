"""Domain entity representing a bet lifecycle notification."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Final

from notifier.domain.errors import InvalidNotificationRecord
from notifier.utils.datetime import isoformat_or_none, parse_timestamp

BET_CREATED: Final[str] = "bet_created"
BET_TAKEN: Final[str] = "bet_taken"
NOTIFICATION_TYPES: Final[frozenset[str]] = frozenset({BET_CREATED, BET_TAKEN})

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class NotificationRecord:
    """One bet lifecycle event appended to the upstream store by a producer.

    ``type`` is kept as a free string: unknown values must reach the channel
    senders so they can be logged and skipped there.
    """

    id: str
    type: str
    bet_id: str
    bet_description: str
    bet_amount: Decimal
    creator_name: str
    creator_photo: str | None = None
    taker_name: str | None = None
    taker_photo: str | None = None
    created_at: datetime | None = None
    processed: bool = False

    @property
    def is_known_type(self) -> bool:
        return self.type in NOTIFICATION_TYPES

    @classmethod
    def from_mapping(cls, record_id: str, data: Mapping[str, Any]) -> "NotificationRecord":
        """Build a record from a store document keyed by the camelCase wire names."""

        if not record_id:
            raise InvalidNotificationRecord(record_id, "missing id")

        record_type = data.get("type")
        if not record_type:
            raise InvalidNotificationRecord(record_id, "missing type")

        try:
            amount = Decimal(str(data.get("betAmount"))).quantize(_CENTS, ROUND_HALF_UP)
        except (InvalidOperation, ValueError) as exc:
            raise InvalidNotificationRecord(
                record_id, f"invalid betAmount {data.get('betAmount')!r}"
            ) from exc
        if not amount.is_finite() or amount <= 0:
            raise InvalidNotificationRecord(record_id, "betAmount must be positive")

        try:
            created_at = parse_timestamp(data.get("createdAt"))
        except ValueError as exc:
            raise InvalidNotificationRecord(record_id, str(exc)) from exc

        return cls(
            id=str(record_id),
            type=str(record_type),
            bet_id=str(data.get("betId") or ""),
            bet_description=str(data.get("betDescription") or ""),
            bet_amount=amount,
            creator_name=str(data.get("creatorName") or ""),
            creator_photo=data.get("creatorPhoto"),
            taker_name=data.get("takerName"),
            taker_photo=data.get("takerPhoto"),
            created_at=created_at,
            processed=bool(data.get("processed", False)),
        )

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-serializable wire representation of the record."""

        return {
            "id": self.id,
            "type": self.type,
            "betId": self.bet_id,
            "betDescription": self.bet_description,
            "betAmount": float(self.bet_amount),
            "creatorName": self.creator_name,
            "creatorPhoto": self.creator_photo,
            "takerName": self.taker_name,
            "takerPhoto": self.taker_photo,
            "createdAt": isoformat_or_none(self.created_at),
            "processed": self.processed,
        }


__all__ = [
    "BET_CREATED",
    "BET_TAKEN",
    "NOTIFICATION_TYPES",
    "NotificationRecord",
]
