"""Cache-related dataclasses and their persisted JSON shape."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import CacheFormatError
from .item import Item

SNAPSHOT_VERSION = 1


@dataclass
class CacheEntry:
    """Cached collection with a wall-clock expiry timestamp."""

    expires_at: float
    items: list[Item]

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass
class CacheSnapshot:
    """Whole cache slot: write-ordered keys plus their entries.

    ``cached_users`` is oldest-first and holds exactly the keys of
    ``user_data``.
    """

    cached_users: list[str] = field(default_factory=list)
    user_data: dict[str, CacheEntry] = field(default_factory=dict)

    def touch(self, key: str, entry: CacheEntry) -> None:
        """Store ``entry`` and move ``key`` to the most recent position."""
        if key in self.user_data:
            self.cached_users.remove(key)
        self.cached_users.append(key)
        self.user_data[key] = entry

    def remove(self, key: str) -> bool:
        if key not in self.user_data:
            return False
        self.user_data.pop(key)
        self.cached_users.remove(key)
        return True


def encode_snapshot(snapshot: CacheSnapshot) -> str:
    data = {
        "version": SNAPSHOT_VERSION,
        "cachedUsers": list(snapshot.cached_users),
        "userData": {
            key: {
                "items": [item.to_dict() for item in entry.items],
                "expiresAt": entry.expires_at,
            }
            for key, entry in snapshot.user_data.items()
        },
    }
    return json.dumps(data, ensure_ascii=False)


def _decode_entry(key: str, raw: Any) -> CacheEntry:
    if not isinstance(raw, dict):
        raise CacheFormatError(f"entry for {key!r} is not an object")
    expires_at = raw.get("expiresAt")
    if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
        raise CacheFormatError(f"entry for {key!r} has invalid expiresAt")
    raw_items = raw.get("items")
    if not isinstance(raw_items, list):
        raise CacheFormatError(f"entry for {key!r} has no item list")
    try:
        items = [Item.from_dict(item) for item in raw_items]
    except ValueError as exc:
        raise CacheFormatError(f"entry for {key!r}: {exc}") from exc
    return CacheEntry(expires_at=float(expires_at), items=items)


def decode_snapshot(text: str) -> CacheSnapshot:
    """Parse and validate persisted cache content.

    Raises:
        CacheFormatError: If the text is not valid JSON or any part of the
            structure is missing, mistyped or inconsistent.
    """
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise CacheFormatError(f"cache is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise CacheFormatError("cache root is not an object")
    if data.get("version") != SNAPSHOT_VERSION:
        raise CacheFormatError(f"unsupported cache version {data.get('version')!r}")

    cached_users = data.get("cachedUsers")
    user_data = data.get("userData")
    if not isinstance(cached_users, list) or not all(
        isinstance(key, str) for key in cached_users
    ):
        raise CacheFormatError("cachedUsers must be a list of strings")
    if not isinstance(user_data, dict):
        raise CacheFormatError("userData must be an object")
    if len(set(cached_users)) != len(cached_users):
        raise CacheFormatError("cachedUsers contains duplicates")
    if set(cached_users) != set(user_data):
        raise CacheFormatError("cachedUsers does not match userData keys")

    entries = {key: _decode_entry(key, user_data[key]) for key in cached_users}
    return CacheSnapshot(cached_users=list(cached_users), user_data=entries)
