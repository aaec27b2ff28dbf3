"""Domain entity describing one change reported by the upstream store."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ChangeKind(str, Enum):
    """Classification of a change-feed event."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class ChangeEvent:
    """A document entering, changing within or leaving the unprocessed result set."""

    kind: ChangeKind
    record_id: str
    data: Mapping[str, Any] = field(default_factory=dict)


__all__ = ["ChangeKind", "ChangeEvent"]
