"""Business logic services.

``CollectionComparer`` ties the API client, paginator, filter, cache and
comparator together for one "what do these two users both like" request.
"""

from __future__ import annotations

import logging

from . import compare, filters, paginator
from .bangumi import BangumiClient, CollectionSource
from .cache import DEFAULT_TTL_S, CollectionCache
from .config import Settings, settings as default_settings
from .exceptions import (
    FormatError,
    IdentityResolutionError,
    PersistenceError,
    RetrievalError,
    TransportError,
)
from .models.item import Item
from .models.result import ComparisonResult
from .storage import JsonFileSlot

logger = logging.getLogger(__name__)


def _require_username(value: str | None, role: str) -> str:
    name = (value or "").strip()
    if not name:
        raise IdentityResolutionError(f"No {role} username available")
    return name


class CollectionComparer:
    """Compare two users' liked collections, caching each collection."""

    def __init__(
        self,
        source: CollectionSource,
        cache: CollectionCache,
        *,
        ttl_s: float = DEFAULT_TTL_S,
        batch_size: int = paginator.BATCH_SIZE,
        min_rating: int = filters.MIN_RATING,
        cache_self_only: bool = False,
        owns_source: bool = False,
    ) -> None:
        self.source = source
        self.cache = cache
        self.ttl_s = ttl_s
        self.batch_size = batch_size
        self.min_rating = min_rating
        self.cache_self_only = cache_self_only
        self._owns_source = owns_source

    async def __aenter__(self) -> CollectionComparer:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_source and isinstance(self.source, BangumiClient):
            await self.source.aclose()

    def _cacheable(self, username: str, protected_key: str | None) -> bool:
        return not self.cache_self_only or username == protected_key

    async def _fetch(self, username: str) -> list[Item]:
        try:
            entries = await paginator.fetch_all_entries(
                self.source, username, self.batch_size
            )
            return filters.filter_collection(entries, self.min_rating)
        except (TransportError, FormatError) as exc:
            logger.warning("Fetching collection of %s failed: %s", username, exc)
            raise RetrievalError(username, exc) from exc

    async def collection(
        self, username: str, *, protected_key: str | None = None
    ) -> list[Item]:
        """Return the liked collection of ``username``, from cache if fresh.

        Raises:
            RetrievalError: If any page could not be fetched or decoded.
        """
        use_cache = self._cacheable(username, protected_key)
        if use_cache:
            cached = await self.cache.get(username)
            if cached is not None:
                logger.debug("Using cached collection for %s", username)
                return cached

        items = await self._fetch(username)
        logger.info("Fetched %d liked items for %s", len(items), username)

        if use_cache:
            try:
                await self.cache.put(
                    username, items, self.ttl_s, protected_key=protected_key
                )
            except PersistenceError:
                logger.exception("Could not cache collection of %s", username)
        return items

    async def compare(
        self, my_username: str | None, friend_username: str | None
    ) -> ComparisonResult:
        """Return the friend's items that are also in my collection.

        ``common`` follows the friend's collection order. My username is the
        protected cache key, so my collection is never evicted by friends.

        Raises:
            IdentityResolutionError: If either username is missing.
            RetrievalError: If either collection could not be fetched.
        """
        me = _require_username(my_username, "own")
        friend = _require_username(friend_username, "friend")

        mine = await self.collection(me, protected_key=me)
        theirs = await self.collection(friend, protected_key=me)
        common = compare.intersect(mine, theirs)
        logger.info(
            "%s and %s share %d items (%d / %d)",
            me,
            friend,
            len(common),
            len(mine),
            len(theirs),
        )
        return ComparisonResult(common=common, count_a=len(mine), count_b=len(theirs))

    async def invalidate(self, username: str) -> bool:
        return await self.cache.invalidate(username)


def build_comparer(settings: Settings | None = None) -> CollectionComparer:
    """Wire a comparer from settings (environment by default)."""
    settings = settings or default_settings
    source = BangumiClient(
        base_url=settings.API_BASE_URL,
        limit=settings.PAGE_LIMIT,
        timeout=settings.TIMEOUT_S,
        user_agent=settings.USER_AGENT,
    )
    cache = CollectionCache(
        JsonFileSlot(settings.CACHE_FILE), max_size=settings.CACHE_MAX_USERS
    )
    return CollectionComparer(
        source,
        cache,
        ttl_s=settings.CACHE_TTL_S,
        batch_size=settings.BATCH_SIZE,
        min_rating=settings.MIN_RATING,
        cache_self_only=settings.CACHE_SELF_ONLY,
        owns_source=True,
    )
