"""
Offline Asset Cache Manager

Keeps the static app shell available without a network connection.

Lifecycle of one build (one cache generation):

    parsed -> installing -> installed -> activating -> activated
                       \\-> redundant  (install failed, previous generation stays)

- install:  fetch the whole asset manifest and store it under
            "<prefix><version>"; any failure stores nothing
- activate: delete every older generation sharing the prefix and take
            control of already-open sessions
- fetch:    cache first, then network (keeping a copy), then the cached
            shell document

NOTE: On total network failure the shell document is served for every GET,
sub-resources (images, scripts) included, not only page navigations.
Handing HTML to an <img> is likely unintended, but it is the shipped
behavior and is kept until someone decides otherwise.
"""

import asyncio
from enum import Enum
from typing import Optional
from urllib.parse import urljoin

import structlog

from expense_tracker.audit import AuditLogger, AuditSink, configure_log_level
from expense_tracker.config import OfflineCacheSettings, get_settings
from expense_tracker.models.audit import AuditEventBuilder
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


logger = structlog.get_logger(__name__)


class CacheLifecycle(str, Enum):
    PARSED = "parsed"
    INSTALLING = "installing"
    INSTALLED = "installed"
    ACTIVATING = "activating"
    ACTIVATED = "activated"
    REDUNDANT = "redundant"


class OfflineAssetCache:
    """
    Cache manager for one build of the app.

    Several handle_fetch() calls may be awaited concurrently; they share
    nothing but the cache storage.
    """

    def __init__(
        self,
        storage: CacheStorageInterface,
        fetcher: AssetFetcherInterface,
        settings: Optional[OfflineCacheSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._fetcher = fetcher
        self._settings = settings or get_settings().offline_cache
        self._audit_logger = audit_logger
        self.lifecycle = CacheLifecycle.PARSED
        self.waiting_skipped = False
        self.controls_clients = False

    @property
    def fetcher(self) -> AssetFetcherInterface:
        return self._fetcher

    @property
    def cache_name(self) -> str:
        return self._settings.cache_name

    @property
    def prefix(self) -> str:
        return self._settings.prefix

    def resolve(self, url: str) -> str:
        """Absolute URL for a manifest path or request URL."""
        return urljoin(self._settings.base_url, url)

    def manifest_urls(self) -> list[str]:
        """Resolved manifest, duplicates removed, order kept."""
        return list(dict.fromkeys(self.resolve(path) for path in self._settings.assets))

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    async def install(self) -> int:
        """
        Fetch and store every manifest asset under the current cache name.

        Returns the number of assets cached.

        Raises:
            AssetInstallError: If any asset could not be fetched or came back
                               with a non-2xx status. Nothing is stored and
                               the previous generation stays in charge.
        """
        self.lifecycle = CacheLifecycle.INSTALLING
        urls = self.manifest_urls()

        results = await asyncio.gather(
            *(self._fetcher.fetch(AssetRequest(url=url)) for url in urls),
            return_exceptions=True,
        )

        failed = []
        entries: dict[str, AssetResponse] = {}
        for url, result in zip(urls, results):
            if isinstance(result, AssetFetchError):
                failed.append(url)
            elif isinstance(result, BaseException):
                self.lifecycle = CacheLifecycle.REDUNDANT
                raise result
            elif not result.ok:
                failed.append(url)
            else:
                entries[url] = result

        if failed:
            self.lifecycle = CacheLifecycle.REDUNDANT
            error = AssetInstallError(self.cache_name, failed)
            self._audit(AuditEventBuilder.asset_install_failed(self.cache_name, failed, str(error)))
            raise error

        await self._storage.put_all(self.cache_name, entries)
        self.lifecycle = CacheLifecycle.INSTALLED
        # Activate straight away instead of waiting for every open session to close
        self.waiting_skipped = True
        self._audit(AuditEventBuilder.asset_cache_installed(self.cache_name, len(entries)))
        return len(entries)

    async def activate(self) -> list[str]:
        """
        Delete stale generations of this app and take control of open sessions.

        Only caches whose name starts with this app's prefix are touched.

        Returns the names of the deleted caches.
        """
        if self.lifecycle == CacheLifecycle.REDUNDANT:
            raise AssetCacheError(f"{self.cache_name} failed to install and cannot be activated")

        self.lifecycle = CacheLifecycle.ACTIVATING
        stale = [
            key for key in await self._storage.keys()
            if key.startswith(self.prefix) and key != self.cache_name
        ]
        for key in stale:
            await self._storage.delete(key)
            logger.info("asset_cache_deleted", cache=key)

        self.lifecycle = CacheLifecycle.ACTIVATED
        self.controls_clients = True
        self._audit(AuditEventBuilder.asset_cache_activated(self.cache_name, stale))
        return stale

    async def handle_fetch(self, request: AssetRequest) -> Optional[AssetResponse]:
        """
        Answer an intercepted request.

        Returns None for non-GET requests, which are left to the network.

        Raises:
            AssetFetchError: If the network fails and the shell document is
                             not cached either
        """
        if request.method.upper() != "GET":
            return None

        url = self.resolve(request.url)
        cached = await self._storage.match(url, self.cache_name)
        if cached is not None:
            return cached

        try:
            response = await self._fetcher.fetch(request.model_copy(update={"url": url}))
        except AssetFetchError as e:
            shell = await self._storage.match(self.resolve(self._settings.shell_path), self.cache_name)
            if shell is None:
                raise
            self._audit(AuditEventBuilder.asset_shell_fallback(url, request.is_navigation, str(e)))
            return shell

        await self._storage.put(self.cache_name, url, response)
        return response


def create_asset_cache(
    storage: Optional[CacheStorageInterface] = None,
    audit_sink: Optional[AuditSink] = None,
) -> OfflineAssetCache:
    """
    Factory function to create an OfflineAssetCache for the current build.

    Args:
        storage: Cache storage to use. Defaults to a new in-memory storage.
        audit_sink: Optional receiver for every audit event.
    """
    settings = get_settings()
    configure_log_level(settings.app.effective_log_level)

    cache_settings = settings.offline_cache
    return OfflineAssetCache(
        storage if storage is not None else InMemoryCacheStorage(),
        RequestsAssetFetcher(timeout=cache_settings.request_timeout_seconds),
        settings=cache_settings,
        audit_logger=AuditLogger(audit_sink),
    )
