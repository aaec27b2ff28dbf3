"""Application configuration settings."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

ChangeSourceName = Literal["firestore", "sql", "memory"]
WebhookType = Literal["slack", "discord", "teams", "generic"]
EmailProvider = Literal["smtp", "sendgrid"]


class Settings(BaseSettings):
    """Notification service configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    host: str = Field(default="0.0.0.0", description="Interface the HTTP server binds to")
    web_port: int = Field(
        default=5005, gt=0, lt=65536, description="Port for the HTTP surface and push endpoint"
    )
    debug: bool = False
    log_level: str = Field(default="INFO", description="Root logging level")
    log_file: Path | None = Field(default=None, description="Optional file to mirror logs into")
    app_timezone: str = Field(default="UTC", description="Timezone used for server timestamps")

    change_source: ChangeSourceName = Field(
        default="firestore",
        description="Upstream record store variant the listener subscribes to",
    )
    firestore_collection: str = Field(default="notifications", min_length=1)
    firebase_service_account_path: Path | None = Field(
        default=None,
        description="Service account JSON used to authenticate against Firestore",
    )
    database_url: str = Field(
        default="sqlite:///./notifications.db",
        description="SQLAlchemy URL for the polling change source",
    )
    poll_interval_seconds: float = Field(default=2.0, gt=0)

    dashboard_buffer_size: int = Field(
        default=100, gt=0, description="Number of recent notifications kept for the dashboard"
    )
    http_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout applied to every outbound HTTP request"
    )

    enable_webhook: bool = False
    webhook_url: str | None = None
    webhook_type: WebhookType = "slack"

    enable_email: bool = False
    email_provider: EmailProvider = "smtp"
    email_from: str | None = None
    email_to: str | None = None
    smtp_host: str | None = None
    smtp_port: int = Field(default=587, gt=0, lt=65536)
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_use_tls: bool = True
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used when the email provider is sendgrid",
    )

    enable_telegram: bool = False
    telegram_bot_token: str | None = None
    telegram_chat_id: str | None = None
    telegram_api_base: str = "https://api.telegram.org"

    enable_custom_webhook: bool = False
    custom_webhook_url: str | None = None
    custom_webhook_headers: dict[str, str] = Field(default_factory=dict)

    @field_validator("custom_webhook_headers", mode="before")
    @classmethod
    def _parse_custom_headers(cls, value: object) -> object:
        if value is None or value == "":
            return {}
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValueError("CUSTOM_WEBHOOK_HEADERS must be a JSON object") from exc
        return value

    @model_validator(mode="after")
    def _validate_enabled_channels(self) -> "Settings":
        if self.enable_webhook and not self.webhook_url:
            raise ValueError("WEBHOOK_URL is required when ENABLE_WEBHOOK is set")

        if self.enable_telegram and not (self.telegram_bot_token and self.telegram_chat_id):
            raise ValueError(
                "TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID must both be provided to enable Telegram"
            )

        if self.enable_custom_webhook and not self.custom_webhook_url:
            raise ValueError(
                "CUSTOM_WEBHOOK_URL is required when ENABLE_CUSTOM_WEBHOOK is set"
            )

        if self.enable_email:
            if not (self.email_from and self.email_to):
                raise ValueError("EMAIL_FROM and EMAIL_TO are required to enable email")
            if "@" not in self.email_from:
                raise ValueError("EMAIL_FROM must be a valid email address")
            if self.email_provider == "sendgrid" and not self.sendgrid_api_key:
                raise ValueError("SENDGRID_API_KEY is required for the sendgrid email provider")
            if self.email_provider == "smtp" and not self.smtp_host:
                raise ValueError("SMTP_HOST is required for the smtp email provider")
        return self

    def enabled_channels(self) -> dict[str, bool]:
        """Return the enabled flag of every delivery channel keyed by its public name."""

        return {
            "webhook": self.enable_webhook,
            "email": self.enable_email,
            "telegram": self.enable_telegram,
            "customWebhook": self.enable_custom_webhook,
            "webDashboard": True,
        }


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
