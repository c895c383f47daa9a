"""Fetch a whole collection page by page, a bounded batch at a time."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Sequence

from .bangumi import CollectionSource
from .models.page import Page

logger = logging.getLogger(__name__)

PAGE_LIMIT = 50
BATCH_SIZE = 8


def page_offsets(total: int, limit: int = PAGE_LIMIT) -> list[int]:
    """Return the offsets needed to cover ``total`` entries.

    Always contains at least ``0``: the first page is fetched even for an
    empty collection because that is where ``total`` comes from.

    Example:
        >>> page_offsets(120, 50)
        [0, 50, 100]
    """
    if limit < 1:
        raise ValueError("limit must be positive")
    page_count = max(1, math.ceil(total / limit))
    return [i * limit for i in range(page_count)]


def batched(offsets: Sequence[int], size: int = BATCH_SIZE) -> list[list[int]]:
    """Split ``offsets`` into consecutive groups of at most ``size``."""
    if size < 1:
        raise ValueError("batch size must be positive")
    return [list(offsets[i : i + size]) for i in range(0, len(offsets), size)]


async def fetch_all_entries(
    source: CollectionSource,
    username: str,
    batch_size: int = BATCH_SIZE,
) -> list[dict[str, Any]]:
    """Return every raw collection entry of ``username`` in offset order.

    The first page supplies ``total``; the remaining pages are requested in
    groups of ``batch_size`` concurrent fetches, one group after another.
    Offsets step by ``source.limit`` so they match the page size requested.
    Any failed page aborts the whole run with that page's exception.
    """
    first = await source.fetch_page(username, 0)
    total = first.total
    groups = batched(page_offsets(total, source.limit), batch_size)
    logger.debug(
        "Fetching %s: total=%d pages=%d batches=%d",
        username,
        total,
        sum(len(group) for group in groups),
        len(groups),
    )

    async def _page_at(offset: int) -> Page:
        if offset == 0:
            return first
        return await source.fetch_page(username, offset)

    pages: list[Page] = []
    for group in groups:
        pages.extend(await asyncio.gather(*(_page_at(offset) for offset in group)))

    entries: list[dict[str, Any]] = []
    for page in pages:
        entries.extend(page.entries)
    if len(entries) != total:
        logger.warning(
            "Collection of %s reported total=%d but %d entries were returned",
            username,
            total,
            len(entries),
        )
    return entries
