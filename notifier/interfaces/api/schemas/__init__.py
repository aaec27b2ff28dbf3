from .config import ChannelFlagsRead, ConfigRead, HealthRead
from .notification import DashboardEntryRead

__all__ = ["ChannelFlagsRead", "ConfigRead", "DashboardEntryRead", "HealthRead"]
