from .loader import get_app_config, reload_app_config
from .models import (
    AppSettings,
    BoundedStoreSettings,
    LoggingSettings,
    StoreSettings,
    TTLSettings,
)

__all__ = [
    "AppSettings",
    "BoundedStoreSettings",
    "LoggingSettings",
    "StoreSettings",
    "TTLSettings",
    "get_app_config",
    "reload_app_config",
]
