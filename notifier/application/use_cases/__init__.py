"""Aggregate application use cases."""

from .dispatch import DispatchCoordinator
from .listener import ChangeFeedListener
from .messages import BetMessage, build_bet_message, format_currency

__all__ = [
    "BetMessage",
    "ChangeFeedListener",
    "DispatchCoordinator",
    "build_bet_message",
    "format_currency",
]
