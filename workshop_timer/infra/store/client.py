"""Remote JSON store client singleton"""
import logging
from typing import Any, Optional

import httpx

from workshop_timer import config

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the remote store cannot be read or written"""


class RemoteStoreClient:
    """
    Thin client for a REST key-value store addressed by path.

    Every document lives at `{base_url}/{path}.json`. Reads return the decoded
    JSON value (None when the path is empty); writes replace the whole document.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = config.TIMER_STORE_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def _document_url(self, path: str) -> str:
        return f"/{path.strip('/')}.json"

    async def get_json(self, path: str) -> Any:
        """Read the JSON document at path"""
        try:
            response = await self._client.get(self._document_url(path))
            response.raise_for_status()
            if not response.content.strip():
                return None
            return response.json()
        except httpx.HTTPError as e:
            raise StoreError(f"Failed to read {path}: {e}") from e
        except ValueError as e:
            raise StoreError(f"Invalid JSON at {path}: {e}") from e

    async def put_json(self, path: str, data: Any) -> None:
        """Replace the JSON document at path"""
        try:
            response = await self._client.put(self._document_url(path), json=data)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError(f"Failed to write {path}: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()


_store_client: Optional[RemoteStoreClient] = None


def get_store_client() -> RemoteStoreClient:
    """Get or create the store client singleton"""
    global _store_client

    if _store_client is None:
        url = config.TIMER_STORE_URL

        if not url:
            raise ValueError("TIMER_STORE_URL must be set")

        _store_client = RemoteStoreClient(url)
        logger.info(f"Store client created for {url}")

    return _store_client


async def reset_store_client():
    """Close and drop the store client singleton (useful for testing)"""
    global _store_client

    if _store_client is not None:
        await _store_client.aclose()
    _store_client = None
