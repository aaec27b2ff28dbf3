"""Channel-independent content selection for bet notifications.

Every channel renders the same :class:`BetMessage`; only the presentation
(plain text, Markdown, HTML) differs between senders.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from notifier.domain.entities import BET_CREATED, BET_TAKEN, NotificationRecord

UNKNOWN_TAKER = "Unknown"


@dataclass(frozen=True)
class BetMessage:
    """Content shared by every rendering of a notification."""

    notification_type: str
    title: str
    emoji: str
    creator: str
    taker: str | None
    amount: str
    description: str
    status_line: str

    @property
    def is_taken(self) -> bool:
        return self.notification_type == BET_TAKEN

    @property
    def participants(self) -> str:
        """``Alice`` for open bets, ``Alice vs Bob`` once a taker accepted."""

        if self.is_taken:
            return f"{self.creator} vs {self.taker}"
        return self.creator

    @property
    def headline(self) -> str:
        return f"{self.emoji} {self.title}"

    @property
    def subject(self) -> str:
        if self.is_taken:
            return f"{self.emoji} Bet Accepted: {self.participants}"
        return f"{self.emoji} New Bet: {self.creator} - {self.amount}"


def format_currency(amount: Decimal | float) -> str:
    """Render ``amount`` as dollars with two decimals, e.g. ``$10.00``."""

    return f"${Decimal(str(amount)):.2f}"


def build_bet_message(record: NotificationRecord) -> BetMessage | None:
    """Select the content to deliver for ``record``.

    Returns ``None`` for notification types this service does not know how to
    present; callers log and skip those records.
    """

    amount = format_currency(record.bet_amount)

    if record.type == BET_CREATED:
        return BetMessage(
            notification_type=BET_CREATED,
            title="New Bet Created!",
            emoji="\U0001F3B2",
            creator=record.creator_name,
            taker=None,
            amount=amount,
            description=record.bet_description,
            status_line="Waiting for someone to take this bet...",
        )

    if record.type == BET_TAKEN:
        return BetMessage(
            notification_type=BET_TAKEN,
            title="Bet Accepted!",
            emoji="\U0001F91D",
            creator=record.creator_name,
            taker=record.taker_name or UNKNOWN_TAKER,
            amount=amount,
            description=record.bet_description,
            status_line="The bet is on!",
        )

    return None


__all__ = ["BetMessage", "build_bet_message", "format_currency", "UNKNOWN_TAKER"]
