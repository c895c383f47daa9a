"""Collection intersection."""

from __future__ import annotations

from typing import Sequence

from .models.item import Item


def intersect(a: Sequence[Item], b: Sequence[Item]) -> list[Item]:
    """Return the items of ``b`` whose id also appears in ``a``.

    Order and item data come from ``b``; swap the arguments for the other
    side's view.
    """
    ids = {item.id for item in a}
    return [item for item in b if item.id in ids]
