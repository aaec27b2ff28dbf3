from fastapi import APIRouter, Depends

from notifier.infrastructure.change_sources import ChangeSource
from notifier.infrastructure.realtime import DashboardHub
from notifier.interfaces.api.dependencies import get_change_source, get_dashboard_hub
from notifier.interfaces.api.schemas import HealthRead

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthRead, response_model_by_alias=True)
def health(
    source: ChangeSource = Depends(get_change_source),
    hub: DashboardHub = Depends(get_dashboard_hub),
) -> HealthRead:
    return HealthRead(change_source=source.name, viewers=hub.viewer_count)
