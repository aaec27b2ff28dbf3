"""Desktop companion: forwards live dashboard events to native alerts."""

from .alerts import DesktopAlert, DesktopAlertRenderer, build_desktop_alert
from .config import CompanionSettings, get_companion_settings
from .forwarder import CompanionForwarder, ConnectionState, backoff_delay

__all__ = [
    "CompanionForwarder",
    "CompanionSettings",
    "ConnectionState",
    "DesktopAlert",
    "DesktopAlertRenderer",
    "backoff_delay",
    "build_desktop_alert",
    "get_companion_settings",
]
