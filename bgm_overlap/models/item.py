"""Collection item dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

SUBJECT_URL = "https://bgm.tv/subject/{id}"


@dataclass(frozen=True)
class Item:
    """One normalized collection entry. Compared by ``id`` only."""

    id: int | str
    name: str
    image: str | None
    rating: int

    @property
    def url(self) -> str:
        return SUBJECT_URL.format(id=self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "rating": self.rating,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Item:
        """Rebuild an item from ``to_dict`` output.

        Raises:
            ValueError: If a field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError("item must be an object")
        item_id = data.get("id")
        if isinstance(item_id, bool) or not isinstance(item_id, (int, str)):
            raise ValueError(f"invalid item id: {item_id!r}")
        name = data.get("name")
        if not isinstance(name, str):
            raise ValueError(f"invalid item name: {name!r}")
        image = data.get("image")
        if image is not None and not isinstance(image, str):
            raise ValueError(f"invalid item image: {image!r}")
        rating = data.get("rating")
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise ValueError(f"invalid item rating: {rating!r}")
        return cls(id=item_id, name=name, image=image, rating=rating)
