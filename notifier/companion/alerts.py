"""Native desktop alerts for forwarded notifications."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from notifier.application.use_cases.messages import build_bet_message
from notifier.domain.entities import NotificationRecord
from notifier.domain.errors import InvalidNotificationRecord

logger = logging.getLogger(__name__)

WINDOWS_APP_ID = "BettingApp"


@dataclass(frozen=True)
class DesktopAlert:
    title: str
    subtitle: str
    message: str


def build_desktop_alert(payload: Mapping[str, Any]) -> DesktopAlert | None:
    """Turn a pushed notification payload into alert text.

    Returns ``None`` when the payload is malformed or of an unknown type.
    """

    try:
        record = NotificationRecord.from_mapping(str(payload.get("id") or ""), payload)
    except InvalidNotificationRecord as exc:
        logger.warning("Ignoring malformed notification: %s", exc)
        return None

    message = build_bet_message(record)
    if message is None:
        logger.info("Unknown notification type: %s", record.type)
        return None

    if message.is_taken:
        return DesktopAlert(
            title=message.headline,
            subtitle=message.participants,
            message=f"{message.amount} - {message.description}",
        )
    return DesktopAlert(
        title=message.headline,
        subtitle=f"{message.creator} • {message.amount}",
        message=message.description,
    )


def _applescript_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _powershell_string(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class DesktopAlertRenderer:
    """Show alerts through the platform's notification tool.

    macOS uses ``osascript``, Linux ``notify-send`` and Windows a PowerShell
    toast. A missing tool or a failing command is logged; it never stops the
    companion.
    """

    def __init__(
        self,
        *,
        sound: str = "Ping",
        timeout: int = 10,
        platform: str | None = None,
        enabled: bool = True,
    ) -> None:
        self.sound = sound
        self.timeout = timeout
        self.platform = platform or sys.platform
        self.enabled = enabled

    def command_for(self, alert: DesktopAlert) -> list[str]:
        """Build the command line that displays ``alert`` on this platform."""

        if self.platform == "darwin":
            script = (
                f"display notification {_applescript_string(alert.message)} "
                f"with title {_applescript_string(alert.title)} "
                f"subtitle {_applescript_string(alert.subtitle)} "
                f"sound name {_applescript_string(self.sound)}"
            )
            return ["osascript", "-e", script]

        if self.platform.startswith("win"):
            body = f"{alert.subtitle}\n{alert.message}"
            script = (
                "[Windows.UI.Notifications.ToastNotificationManager, Windows.UI.Notifications, "
                "ContentType = WindowsRuntime] | Out-Null;"
                "$template = [Windows.UI.Notifications.ToastNotificationManager]::"
                "GetTemplateContent([Windows.UI.Notifications.ToastTemplateType]::ToastText02);"
                "$texts = $template.GetElementsByTagName('text');"
                f"$texts.Item(0).AppendChild($template.CreateTextNode({_powershell_string(alert.title)})) | Out-Null;"
                f"$texts.Item(1).AppendChild($template.CreateTextNode({_powershell_string(body)})) | Out-Null;"
                "$toast = [Windows.UI.Notifications.ToastNotification]::new($template);"
                f"$toast.ExpirationTime = [DateTimeOffset]::Now.AddSeconds({self.timeout});"
                "[Windows.UI.Notifications.ToastNotificationManager]::"
                f"CreateToastNotifier({_powershell_string(WINDOWS_APP_ID)}).Show($toast)"
            )
            return ["powershell", "-NoProfile", "-NonInteractive", "-Command", script]

        return [
            "notify-send",
            "--expire-time",
            str(self.timeout * 1000),
            alert.title,
            f"{alert.subtitle}\n{alert.message}",
        ]

    def show(self, alert: DesktopAlert) -> bool:
        """Display ``alert``; return whether the platform command succeeded."""

        if not self.enabled:
            logger.info("Alert (not displayed): %s | %s | %s", alert.title, alert.subtitle, alert.message)
            return True

        command = self.command_for(alert)
        if shutil.which(command[0]) is None:
            logger.error("Cannot display alert: %s is not installed", command[0])
            return False

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=15,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.error("Failed to display alert: %s", exc)
            return False

        if result.returncode != 0:
            logger.error(
                "%s exited with %d: %s", command[0], result.returncode, result.stderr.strip()
            )
            return False
        return True


__all__ = ["DesktopAlert", "DesktopAlertRenderer", "build_desktop_alert"]
