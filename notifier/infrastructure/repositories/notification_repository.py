"""Persistence helpers for notification records stored in SQL."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy.orm import Session

from notifier.infrastructure.models import NotificationModel
from notifier.utils import ensure_aware, now_in_app_timezone, parse_timestamp


class NotificationRepository:
    """Read unprocessed records and flip their processed flag.

    Documents are exchanged in the same camelCase shape the other record stores
    use, so the listener parses every source identically.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def list_unprocessed(self, *, limit: int | None = None) -> list[tuple[str, dict[str, Any]]]:
        query = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.processed.is_(False))
            .order_by(NotificationModel.created_at.asc(), NotificationModel.id.asc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [(model.id, self._to_document(model)) for model in query.all()]

    def add(self, document: Mapping[str, Any], record_id: str | None = None) -> str:
        """Insert a record the way a producer would; returns its id."""

        model = NotificationModel(
            id=record_id or uuid4().hex,
            type=document["type"],
            bet_id=document.get("betId") or "",
            bet_description=document.get("betDescription") or "",
            bet_amount=Decimal(str(document["betAmount"])),
            creator_name=document.get("creatorName") or "",
            creator_photo=document.get("creatorPhoto"),
            taker_name=document.get("takerName"),
            taker_photo=document.get("takerPhoto"),
            created_at=parse_timestamp(document.get("createdAt")) or now_in_app_timezone(),
            processed=bool(document.get("processed", False)),
        )
        self.session.add(model)
        self.session.commit()
        return model.id

    def mark_processed(self, record_id: str) -> bool:
        """Set ``processed`` on ``record_id``; returns ``False`` if no such record exists."""

        updated = (
            self.session.query(NotificationModel)
            .filter(NotificationModel.id == record_id)
            .update({NotificationModel.processed: True}, synchronize_session=False)
        )
        self.session.commit()
        return bool(updated)

    def get(self, record_id: str) -> dict[str, Any] | None:
        model = self.session.get(NotificationModel, record_id)
        return self._to_document(model) if model is not None else None

    @staticmethod
    def _to_document(model: NotificationModel) -> dict[str, Any]:
        return {
            "type": model.type,
            "betId": model.bet_id,
            "betDescription": model.bet_description,
            "betAmount": model.bet_amount,
            "creatorName": model.creator_name,
            "creatorPhoto": model.creator_photo,
            "takerName": model.taker_name,
            "takerPhoto": model.taker_photo,
            "createdAt": ensure_aware(model.created_at),
            "processed": bool(model.processed),
        }


__all__ = ["NotificationRepository"]
