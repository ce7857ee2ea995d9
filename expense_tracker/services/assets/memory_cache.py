"""In-memory cache storage."""

import asyncio
from typing import Optional

from expense_tracker.services.assets.interface import AssetResponse, CacheStorageInterface


class InMemoryCacheStorage(CacheStorageInterface):
    """
    Caches held in nested dicts.

    Mutations take a lock so concurrent put/put_all/delete calls from
    several fetch handlers never interleave.
    """

    def __init__(self):
        self._caches: dict[str, dict[str, AssetResponse]] = {}
        self._lock = asyncio.Lock()

    async def keys(self) -> list[str]:
        return list(self._caches)

    async def match(self, url: str, cache_name: Optional[str] = None) -> Optional[AssetResponse]:
        if cache_name is not None:
            names = [cache_name]
        else:
            names = list(self._caches)
        for name in names:
            response = self._caches.get(name, {}).get(url)
            if response is not None:
                return response.model_copy()
        return None

    async def put(self, cache_name: str, url: str, response: AssetResponse) -> None:
        async with self._lock:
            self._caches.setdefault(cache_name, {})[url] = response.model_copy()

    async def put_all(self, cache_name: str, entries: dict[str, AssetResponse]) -> None:
        copies = {url: response.model_copy() for url, response in entries.items()}
        async with self._lock:
            self._caches.setdefault(cache_name, {}).update(copies)

    async def delete(self, cache_name: str) -> bool:
        async with self._lock:
            return self._caches.pop(cache_name, None) is not None
