"""Services package."""

from expense_tracker.services.assets import (
    AssetCacheError,
    AssetFetchError,
    AssetInstallError,
    InMemoryCacheStorage,
    OfflineAssetCache,
    RequestsAssetFetcher,
    create_asset_cache,
)
from expense_tracker.services.storage import (
    FileRecordStore,
    InMemoryRecordStore,
    RecordStoreInterface,
    StateCodec,
    StorageError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    # Offline asset cache
    "AssetCacheError",
    "AssetFetchError",
    "AssetInstallError",
    "InMemoryCacheStorage",
    "OfflineAssetCache",
    "RequestsAssetFetcher",
    "create_asset_cache",
    # Storage services
    "FileRecordStore",
    "InMemoryRecordStore",
    "RecordStoreInterface",
    "StateCodec",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
