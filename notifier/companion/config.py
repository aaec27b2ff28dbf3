"""Companion forwarder configuration."""

from __future__ import annotations

from functools import lru_cache
from urllib.parse import urlsplit, urlunsplit

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

WEBSOCKET_PATH = "/ws"

_SCHEME_MAP = {"http": "ws", "https": "wss", "ws": "ws", "wss": "wss"}


class CompanionSettings(BaseSettings):
    """Settings read by the desktop companion from the environment or ``.env``."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    notifier_url: str = Field(
        default="http://localhost:5005",
        description="Base URL of the notification service",
    )
    notification_sound: str = Field(default="Ping", description="macOS alert sound name")
    notification_timeout: int = Field(default=10, gt=0, description="Seconds an alert stays visible")
    reconnect_initial_delay: float = Field(default=1.0, gt=0)
    reconnect_max_delay: float = Field(default=5.0, gt=0)
    reconnect_multiplier: float = Field(default=2.0, ge=1)
    debug: bool = False

    @field_validator("notifier_url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        scheme = urlsplit(value).scheme
        if scheme not in _SCHEME_MAP:
            raise ValueError("NOTIFIER_URL must be an http(s) or ws(s) URL")
        return value.rstrip("/")

    @model_validator(mode="after")
    def _validate_backoff(self) -> "CompanionSettings":
        if self.reconnect_max_delay < self.reconnect_initial_delay:
            raise ValueError("RECONNECT_MAX_DELAY must not be lower than RECONNECT_INITIAL_DELAY")
        return self

    @property
    def websocket_url(self) -> str:
        """Push endpoint URL derived from ``notifier_url``."""

        parts = urlsplit(self.notifier_url)
        path = parts.path.rstrip("/")
        if not path.endswith(WEBSOCKET_PATH):
            path = f"{path}{WEBSOCKET_PATH}"
        return urlunsplit((_SCHEME_MAP[parts.scheme], parts.netloc, path, parts.query, ""))


@lru_cache
def get_companion_settings() -> CompanionSettings:
    return CompanionSettings()


__all__ = ["CompanionSettings", "WEBSOCKET_PATH", "get_companion_settings"]
