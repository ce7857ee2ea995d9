"""
Offline Asset Cache Package

Versioned caching of the app's static assets for offline use.
"""

from expense_tracker.services.assets.interface import (
    AssetCacheError,
    AssetFetcherInterface,
    AssetFetchError,
    AssetInstallError,
    AssetRequest,
    AssetResponse,
    CacheStorageInterface,
)
from expense_tracker.services.assets.memory_cache import InMemoryCacheStorage
from expense_tracker.services.assets.requests_fetcher import RequestsAssetFetcher
from expense_tracker.services.assets.cache_manager import (
    CacheLifecycle,
    OfflineAssetCache,
    create_asset_cache,
)

__all__ = [
    # Interfaces and models
    "AssetFetcherInterface",
    "AssetRequest",
    "AssetResponse",
    "CacheStorageInterface",
    # Exceptions
    "AssetCacheError",
    "AssetFetchError",
    "AssetInstallError",
    # Implementations
    "InMemoryCacheStorage",
    "RequestsAssetFetcher",
    # Manager
    "CacheLifecycle",
    "OfflineAssetCache",
    "create_asset_cache",
]
