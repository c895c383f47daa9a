"""Persisted multi-user collection cache.

Entries expire after a TTL and the number of cached users is bounded.
Eviction follows write order (a read never refreshes a key) and skips the
protected key, normally the caller's own username, which is passed in on
every write rather than looked up here.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Sequence

from .exceptions import CacheFormatError, PersistenceError
from .models.cache import CacheEntry, CacheSnapshot, decode_snapshot, encode_snapshot
from .models.item import Item
from .storage import CacheSlot

logger = logging.getLogger(__name__)

MAX_CACHED_USERS = 8
DEFAULT_TTL_S = 24 * 60 * 60


class CollectionCache:
    """Bounded username -> collection cache stored in a single slot.

    Every operation loads the slot, applies its change and writes it back
    while holding a lock, so each call is atomic within one process. A
    ``get`` followed later by a ``put`` is not.
    """

    def __init__(
        self,
        slot: CacheSlot,
        max_size: int = MAX_CACHED_USERS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be positive")
        self.slot = slot
        self.max_size = max_size
        self._clock = clock
        self._lock = asyncio.Lock()

    async def _load(self) -> CacheSnapshot:
        text = await self.slot.read()
        if text is None:
            return CacheSnapshot()
        try:
            return decode_snapshot(text)
        except CacheFormatError as exc:
            logger.warning("Discarding corrupt collection cache: %s", exc)
            await self._save_quietly(CacheSnapshot())
            return CacheSnapshot()

    async def _save(self, snapshot: CacheSnapshot) -> None:
        await self.slot.write(encode_snapshot(snapshot))

    async def _save_quietly(self, snapshot: CacheSnapshot) -> None:
        try:
            await self._save(snapshot)
        except PersistenceError:
            logger.exception("Failed to save collection cache")

    def _evict(self, snapshot: CacheSnapshot, protected_key: str | None) -> list[str]:
        evicted: list[str] = []
        while len(snapshot.cached_users) > self.max_size:
            victim = next(
                (key for key in snapshot.cached_users if key != protected_key), None
            )
            if victim is None:
                break
            snapshot.remove(victim)
            evicted.append(victim)
        return evicted

    async def get(self, key: str) -> list[Item] | None:
        """Return the cached items for ``key`` or None if absent or expired.

        An expired entry is dropped from the slot before returning.
        """
        async with self._lock:
            snapshot = await self._load()
            entry = snapshot.user_data.get(key)
            if entry is None:
                return None
            if entry.expired(self._clock()):
                logger.debug("Cache entry for %s expired", key)
                snapshot.remove(key)
                await self._save_quietly(snapshot)
                return None
            return list(entry.items)

    async def put(
        self,
        key: str,
        items: Sequence[Item],
        ttl: float = DEFAULT_TTL_S,
        protected_key: str | None = None,
    ) -> list[str]:
        """Cache ``items`` for ``key`` and enforce the size bound.

        Returns:
            Keys evicted to make room, oldest first.

        Raises:
            PersistenceError: If the slot could not be written.
        """
        async with self._lock:
            snapshot = await self._load()
            entry = CacheEntry(expires_at=self._clock() + ttl, items=list(items))
            snapshot.touch(key, entry)
            evicted = self._evict(snapshot, protected_key)
            if evicted:
                logger.debug("Evicted cached collections: %s", ", ".join(evicted))
            await self._save(snapshot)
            return evicted

    async def invalidate(self, key: str) -> bool:
        """Drop ``key`` from the cache. Returns True if it was present."""
        async with self._lock:
            snapshot = await self._load()
            if not snapshot.remove(key):
                return False
            await self._save(snapshot)
            return True

    async def clear(self) -> None:
        async with self._lock:
            await self._save(CacheSnapshot())

    async def keys(self) -> list[str]:
        """Cached usernames, oldest write first. Expired entries included."""
        async with self._lock:
            snapshot = await self._load()
            return list(snapshot.cached_users)
