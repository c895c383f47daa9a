"""Bangumi (bgm.tv) collection API client."""

from __future__ import annotations

import logging
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from .config import settings
from .exceptions import FormatError, TransportError
from .models.page import Page

__all__ = [
    "CollectionSource",
    "BangumiClient",
    "COLLECTION_TYPE_DONE",
    "MAX_PAGE_LIMIT",
]

logger = logging.getLogger(__name__)

# Collection status "done" (watched / read / listened / played)
COLLECTION_TYPE_DONE = 2
# Largest ``limit`` the collections endpoint accepts
MAX_PAGE_LIMIT = 50


class CollectionSource(Protocol):
    """Anything that can return one page of a user's collection.

    ``limit`` is the number of entries per page; offsets are multiples of it.
    """

    limit: int

    async def fetch_page(self, username: str, offset: int) -> Page: ...


def _parse_page(data: Any, offset: int) -> Page:
    if not isinstance(data, dict):
        raise FormatError("collection response is not an object")
    total = data.get("total")
    entries = data.get("data")
    if isinstance(total, bool) or not isinstance(total, int) or total < 0:
        raise FormatError(f"collection response has invalid total: {total!r}")
    if not isinstance(entries, list):
        raise FormatError("collection response has no data list")
    return Page(offset=offset, total=total, entries=entries)


class BangumiClient:
    """Async client for ``GET /users/{username}/collections``.

    No retries happen here; every failure is reported once as
    ``TransportError`` or ``FormatError``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        limit: int = MAX_PAGE_LIMIT,
        timeout: float | None = None,
        user_agent: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.limit = min(limit, MAX_PAGE_LIMIT)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.TIMEOUT_S,
            headers={
                "User-Agent": user_agent or settings.USER_AGENT,
                "Accept": "application/json",
            },
        )

    async def __aenter__(self) -> BangumiClient:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def collections_url(self, username: str) -> str:
        return f"{self.base_url}/users/{quote(username, safe='')}/collections"

    async def fetch_page(self, username: str, offset: int) -> Page:
        params = {
            # Empty subject_type means every subject type
            "subject_type": "",
            "type": COLLECTION_TYPE_DONE,
            "limit": self.limit,
            "offset": offset,
        }
        url = self.collections_url(username)
        try:
            resp = await self._client.get(url, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            snippet = exc.response.text[:200].replace("\n", " ")
            logger.debug("Bangumi HTTP %d for %s offset=%d", status, username, offset)
            raise TransportError(
                f"Bangumi HTTP {status}: {snippet}", status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            logger.debug("Bangumi request failed for %s offset=%d: %s", username, offset, exc)
            raise TransportError(
                f"Bangumi request failed: {type(exc).__name__}: {exc}"
            ) from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise FormatError(f"collection response is not JSON: {exc}") from exc
        return _parse_page(data, offset)
