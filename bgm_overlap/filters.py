"""Turn raw collection entries into Items, keeping only liked ones."""

from __future__ import annotations

from typing import Any, Iterable

from .exceptions import FormatError
from .models.item import Item

# Entries rated at least this much count as liked
MIN_RATING = 7
# Rating the API reports when the user gave none
UNRATED = 0


def is_kept(rate: int | None, min_rating: int = MIN_RATING) -> bool:
    if rate is None:
        rate = UNRATED
    return rate == UNRATED or rate >= min_rating


def _rate_of(entry: dict[str, Any]) -> int:
    rate = entry.get("rate")
    if rate is None:
        return UNRATED
    if isinstance(rate, bool) or not isinstance(rate, int):
        raise FormatError(f"collection entry has invalid rate: {rate!r}")
    return rate


def normalize_entry(entry: dict[str, Any]) -> Item:
    """Project a raw ``{rate, subject: {...}}`` entry into an Item."""
    if not isinstance(entry, dict):
        raise FormatError("collection entry is not an object")
    subject = entry.get("subject")
    if not isinstance(subject, dict):
        raise FormatError("collection entry has no subject")
    subject_id = subject.get("id")
    if isinstance(subject_id, bool) or not isinstance(subject_id, (int, str)):
        raise FormatError(f"subject has invalid id: {subject_id!r}")
    images = subject.get("images")
    image = images.get("small") if isinstance(images, dict) else None
    return Item(
        id=subject_id,
        name=str(subject.get("name") or ""),
        image=image if isinstance(image, str) and image else None,
        rating=_rate_of(entry),
    )


def filter_collection(
    entries: Iterable[dict[str, Any]], min_rating: int = MIN_RATING
) -> list[Item]:
    """Keep entries rated >= ``min_rating`` or unrated, in input order."""
    items: list[Item] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise FormatError("collection entry is not an object")
        if not is_kept(_rate_of(entry), min_rating):
            continue
        items.append(normalize_entry(entry))
    return items
