"""Configuration package."""

from expense_tracker.config.settings import (
    DEFAULT_ASSET_MANIFEST,
    AppSettings,
    OfflineCacheSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "DEFAULT_ASSET_MANIFEST",
    "AppSettings",
    "OfflineCacheSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
