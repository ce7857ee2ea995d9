"""
HTTP asset fetcher built on requests.

requests is blocking, so each fetch runs in a worker thread; several
fetches can be in flight at once while the event loop keeps serving
cache hits. No retries: a failed fetch is reported once.
"""

import asyncio
from typing import Optional

import requests
import structlog

from expense_tracker.services.assets.interface import (
    AssetFetcherInterface,
    AssetFetchError,
    AssetRequest,
    AssetResponse,
)


logger = structlog.get_logger(__name__)


class RequestsAssetFetcher(AssetFetcherInterface):
    """Fetches assets over HTTP(S)."""

    def __init__(
        self,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def timeout(self) -> float:
        return self._timeout

    def _get(self, request: AssetRequest) -> AssetResponse:
        try:
            response = self._session.request(
                request.method,
                request.url,
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.warning("asset_fetch_failed", url=request.url, error=str(e))
            raise AssetFetchError(request.url, str(e))

        return AssetResponse(
            url=request.url,
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
        )

    async def fetch(self, request: AssetRequest) -> AssetResponse:
        return await asyncio.to_thread(self._get, request)

    def close(self) -> None:
        self._session.close()
