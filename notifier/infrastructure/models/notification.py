"""SQLAlchemy model for notification records."""

from sqlalchemy import Boolean, Column, DateTime, Numeric, String, Text

from notifier.infrastructure.database import Base
from notifier.utils import now_in_app_timezone


class NotificationModel(Base):
    """Database representation of a bet lifecycle notification."""

    __tablename__ = "notifications"

    id = Column(String(64), primary_key=True)
    type = Column(String(32), nullable=False)
    bet_id = Column(String(64), nullable=False, default="")
    bet_description = Column(Text, nullable=False, default="")
    bet_amount = Column(Numeric(12, 2), nullable=False)
    creator_name = Column(String(120), nullable=False, default="")
    creator_photo = Column(Text, nullable=True)
    taker_name = Column(String(120), nullable=True)
    taker_photo = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=now_in_app_timezone)
    processed = Column(Boolean, nullable=False, default=False, index=True)


__all__ = ["NotificationModel"]
