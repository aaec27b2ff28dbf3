"""Notification fan-out service for bet lifecycle events."""

__version__ = "1.0.0"
