"""FastAPI dependency utilities."""

from fastapi import Request, WebSocket

from notifier.config import Settings
from notifier.infrastructure.change_sources import ChangeSource
from notifier.infrastructure.realtime import DashboardHub


def get_app_settings(request: Request) -> Settings:
    """Return the settings the running application was created with."""

    return request.app.state.settings


def get_dashboard_hub(request: Request) -> DashboardHub:
    return request.app.state.hub


def get_websocket_hub(websocket: WebSocket) -> DashboardHub:
    return websocket.app.state.hub


def get_change_source(request: Request) -> ChangeSource:
    return request.app.state.change_source
