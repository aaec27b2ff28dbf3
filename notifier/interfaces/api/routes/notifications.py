"""Endpoints and websocket handler for the live dashboard."""

from __future__ import annotations

from fastapi import APIRouter, Depends, WebSocket

from notifier.infrastructure.realtime import DashboardHub
from notifier.interfaces.api.dependencies import get_dashboard_hub, get_websocket_hub
from notifier.interfaces.api.schemas import DashboardEntryRead

router = APIRouter(tags=["notifications"])


@router.get(
    "/api/notifications",
    response_model=list[DashboardEntryRead],
    response_model_by_alias=True,
)
def list_notifications(hub: DashboardHub = Depends(get_dashboard_hub)) -> list[DashboardEntryRead]:
    """Return the recent-history buffer, newest first."""

    return [DashboardEntryRead.from_entry(entry) for entry in hub.recent()]


@router.websocket("/ws")
async def dashboard_websocket(
    websocket: WebSocket, hub: DashboardHub = Depends(get_websocket_hub)
) -> None:
    """Replay the buffer as a ``recent`` event, then stream ``notification`` events."""

    await hub.serve(websocket)
