from fastapi import APIRouter, Depends

from notifier.config import Settings
from notifier.interfaces.api.dependencies import get_app_settings
from notifier.interfaces.api.schemas import ChannelFlagsRead, ConfigRead

router = APIRouter(prefix="/api", tags=["config"])


@router.get("/config", response_model=ConfigRead, response_model_by_alias=True)
def read_config(settings: Settings = Depends(get_app_settings)) -> ConfigRead:
    channels = settings.enabled_channels()
    return ConfigRead(
        channels=ChannelFlagsRead(
            webhook=channels["webhook"],
            email=channels["email"],
            telegram=channels["telegram"],
            custom_webhook=channels["customWebhook"],
            web_dashboard=channels["webDashboard"],
        ),
        webhook_type=settings.webhook_type if settings.enable_webhook else "none",
    )
