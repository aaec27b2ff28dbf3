"""Ephemeral results produced while fanning out a notification."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one delivery attempt on one channel."""

    channel: str
    success: bool
    error: str | None = None
    skipped: bool = False

    @classmethod
    def succeeded(cls, channel: str) -> "DispatchOutcome":
        return cls(channel=channel, success=True)

    @classmethod
    def failed(cls, channel: str, error: str) -> "DispatchOutcome":
        return cls(channel=channel, success=False, error=error)

    @classmethod
    def skipped_outcome(cls, channel: str, reason: str) -> "DispatchOutcome":
        return cls(channel=channel, success=True, error=reason, skipped=True)


@dataclass
class DispatchReport:
    """Summary of one coordinator run for a single record."""

    record_id: str
    outcomes: list[DispatchOutcome] = field(default_factory=list)
    marked_processed: bool = False

    @property
    def failed_channels(self) -> list[str]:
        return [outcome.channel for outcome in self.outcomes if not outcome.success]

    def outcome_for(self, channel: str) -> DispatchOutcome | None:
        for outcome in self.outcomes:
            if outcome.channel == channel:
                return outcome
        return None


__all__ = ["DispatchOutcome", "DispatchReport"]
