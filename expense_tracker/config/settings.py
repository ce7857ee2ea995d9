"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every tunable (where state lives, which assets are cached, how many months
the charts show) is visible in one place and validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_ASSET_MANIFEST = [
    "./",
    "./index.html",
    "./analytics.html",
    "./goals.html",
    "./settings.html",
    "./style.css",
    "./script.js",
    "./manifest.json",
    "./icons/icon-192.png",
    "./icons/icon-512.png",
]


class StorageSettings(BaseSettings):
    """Durable record storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_TRACKER_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path(".expense-tracker"),
        description="Directory holding the durable record files"
    )
    state_key: str = Field(
        default="expense-tracker-state-v1",
        min_length=1,
        description="Key of the single durable record holding the domain state"
    )

    @field_validator('state_key')
    @classmethod
    def validate_state_key(cls, v: str) -> str:
        """The key becomes a file name, so path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"State key must not contain path separators: {v}")
        return v


class OfflineCacheSettings(BaseSettings):
    """Offline asset cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_TRACKER_CACHE_",
        extra="ignore"
    )

    prefix: str = Field(
        default="expense-tracker-cache-",
        min_length=1,
        description="Namespace prefix shared by every cache generation of this app"
    )
    version: str = Field(
        default="v1",
        min_length=1,
        description="Version tag of the current build"
    )
    base_url: str = Field(
        default="http://localhost:8000/",
        description="Origin the static assets are served from"
    )
    shell_path: str = Field(
        default="./index.html",
        description="Root shell document served when network and cache both miss"
    )
    assets: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ASSET_MANIFEST),
        description="Static assets fetched during install"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Network timeout for a single asset fetch"
    )

    @property
    def cache_name(self) -> str:
        """Cache key of the current generation."""
        return f"{self.prefix}{self.version}"


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG regardless of log_level"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level written to the structured log"
    )

    # Views
    chart_months_back: int = Field(
        default=6,
        ge=1,
        le=60,
        description="Number of months shown in the income/expense chart"
    )
    recent_transactions_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of transactions in the recent list"
    )

    # Import/export
    export_filename: str = Field(
        default="expense-tracker-data.json",
        description="File name offered for exported snapshots"
    )

    @property
    def effective_log_level(self) -> str:
        """DEBUG when debug_mode is on, otherwise log_level."""
        return "DEBUG" if self.debug_mode else self.log_level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def offline_cache(self) -> OfflineCacheSettings:
        return OfflineCacheSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with a
    "<name>_error" entry for every group that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "offline_cache", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
