"""
Abstract Offline Asset Cache Interfaces

DESIGN DECISION: Cache storage and network access are both behind
interfaces. The cache manager only implements policy (what to fetch, what
to keep, what to serve), so it can run against:
1. An in-memory cache and a fake network in tests
2. A real HTTP fetcher in the app

Cache storage is treated as an external atomic key-value service: several
fetch handlers may read and write it at the same time.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, Field


class AssetRequest(BaseModel):
    """An intercepted request for a static asset or page."""

    url: str = Field(
        ...,
        min_length=1,
        description="Absolute URL or path relative to the app origin"
    )
    method: str = Field(
        default="GET",
        description="HTTP method"
    )
    mode: str = Field(
        default="no-cors",
        pattern="^(navigate|same-origin|no-cors|cors)$",
        description="Request mode; 'navigate' for page loads"
    )

    @property
    def is_navigation(self) -> bool:
        return self.mode == "navigate"


class AssetResponse(BaseModel):
    """A stored or fetched response."""

    url: str
    status_code: int = Field(ge=100, le=599)
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class CacheStorageInterface(ABC):
    """
    Named caches, each mapping URL to response.

    Implementations must tolerate concurrent calls from several fetch
    handlers.
    """

    @abstractmethod
    async def keys(self) -> list[str]:
        """Names of every existing cache, in creation order."""
        pass

    @abstractmethod
    async def match(self, url: str, cache_name: Optional[str] = None) -> Optional[AssetResponse]:
        """
        Look up a response.

        Args:
            url: Absolute URL
            cache_name: Cache to search; None searches every cache in creation order
        """
        pass

    @abstractmethod
    async def put(self, cache_name: str, url: str, response: AssetResponse) -> None:
        """Store one response, creating the cache if needed."""
        pass

    @abstractmethod
    async def put_all(self, cache_name: str, entries: dict[str, AssetResponse]) -> None:
        """Store several responses at once; either all become visible or none do."""
        pass

    @abstractmethod
    async def delete(self, cache_name: str) -> bool:
        """
        Delete a whole cache.

        Returns:
            True if the cache existed
        """
        pass


class AssetFetcherInterface(ABC):
    """Network access for the cache manager."""

    @abstractmethod
    async def fetch(self, request: AssetRequest) -> AssetResponse:
        """
        Fetch from the network.

        Any HTTP status is returned as a response.

        Raises:
            AssetFetchError: If no response could be obtained at all
        """
        pass


class AssetCacheError(Exception):
    """Base exception for offline asset cache operations."""
    pass


class AssetFetchError(AssetCacheError):
    """The network did not produce a response."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Failed to fetch {url}: {message}")


class AssetInstallError(AssetCacheError):
    """One or more manifest assets could not be cached; nothing was stored."""

    def __init__(self, cache_name: str, failed_urls: list[str]):
        self.cache_name = cache_name
        self.failed_urls = failed_urls
        super().__init__(
            f"Install of {cache_name} failed for {len(failed_urls)} assets: "
            + ", ".join(failed_urls)
        )
