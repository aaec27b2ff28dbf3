"""Pydantic models describing the public configuration summary."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ChannelFlagsRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    webhook: bool
    email: bool
    telegram: bool
    custom_webhook: bool = Field(alias="customWebhook")
    web_dashboard: bool = Field(default=True, alias="webDashboard")


class ConfigRead(BaseModel):
    """Which channels are enabled and which webhook variant is configured."""

    model_config = ConfigDict(populate_by_name=True)

    channels: ChannelFlagsRead
    webhook_type: str = Field(alias="webhookType")


class HealthRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str = "ok"
    change_source: str = Field(alias="changeSource")
    viewers: int


__all__ = ["ChannelFlagsRead", "ConfigRead", "HealthRead"]
