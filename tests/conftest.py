"""Shared test fixtures and fake collaborators."""

from __future__ import annotations

import asyncio
from typing import Any

from bgm_overlap.models.page import Page


def raw_entry(subject_id: int, rate: int = 0, name: str | None = None) -> dict[str, Any]:
    """Build a raw collection entry shaped like the Bangumi API's."""
    return {
        "rate": rate,
        "subject": {
            "id": subject_id,
            "name": name or f"Subject {subject_id}",
            "images": {"small": f"https://lain.bgm.tv/s/{subject_id}.jpg"},
        },
    }


class FakeSource:
    """In-memory collection source that records every page request."""

    def __init__(
        self,
        collections: dict[str, list[dict[str, Any]]] | None = None,
        limit: int = 50,
        totals: dict[str, int] | None = None,
    ) -> None:
        self.collections = collections or {}
        self.limit = limit
        self.totals = totals or {}
        self.calls: list[tuple[str, int]] = []
        self.failures: dict[tuple[str, int], Exception] = {}
        self.in_flight = 0
        self.max_in_flight = 0

    def fail(self, username: str, offset: int, exc: Exception) -> None:
        self.failures[(username, offset)] = exc

    async def fetch_page(self, username: str, offset: int) -> Page:
        self.calls.append((username, offset))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Yield so sibling fetches of the same batch overlap
            await asyncio.sleep(0)
            exc = self.failures.get((username, offset))
            if exc is not None:
                raise exc
            entries = self.collections.get(username, [])
            total = self.totals.get(username, len(entries))
            return Page(
                offset=offset,
                total=total,
                entries=entries[offset : offset + self.limit],
            )
        finally:
            self.in_flight -= 1

    def offsets_for(self, username: str) -> list[int]:
        return [offset for name, offset in self.calls if name == username]


class FakeClock:
    """Settable wall clock for cache expiry tests."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now
