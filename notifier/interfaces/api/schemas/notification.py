"""Pydantic models describing dashboard notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from notifier.domain.entities import DashboardBufferEntry


class DashboardEntryRead(BaseModel):
    """Representation of a buffered notification delivered to the dashboard."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: str
    bet_id: str = Field(alias="betId")
    bet_description: str = Field(alias="betDescription")
    bet_amount: float = Field(alias="betAmount")
    creator_name: str = Field(alias="creatorName")
    creator_photo: str | None = Field(default=None, alias="creatorPhoto")
    taker_name: str | None = Field(default=None, alias="takerName")
    taker_photo: str | None = Field(default=None, alias="takerPhoto")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    processed: bool = False
    received_at: datetime = Field(alias="receivedAt")

    @classmethod
    def from_entry(cls, entry: DashboardBufferEntry) -> "DashboardEntryRead":
        record = entry.record
        return cls(
            id=record.id,
            type=record.type,
            bet_id=record.bet_id,
            bet_description=record.bet_description,
            bet_amount=float(record.bet_amount),
            creator_name=record.creator_name,
            creator_photo=record.creator_photo,
            taker_name=record.taker_name,
            taker_photo=record.taker_photo,
            created_at=record.created_at,
            processed=record.processed,
            received_at=entry.received_at,
        )


__all__ = ["DashboardEntryRead"]
