"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_aware,
    get_app_timezone,
    isoformat_or_none,
    now_in_app_timezone,
    parse_timestamp,
    resolve_timezone,
)
from .logging import setup_logging

__all__ = [
    "ensure_aware",
    "get_app_timezone",
    "isoformat_or_none",
    "now_in_app_timezone",
    "parse_timestamp",
    "resolve_timezone",
    "setup_logging",
]
