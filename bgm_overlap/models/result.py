"""Comparison result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field

from .item import Item


@dataclass
class ComparisonResult:
    """Items both users share, plus each user's filtered collection size."""

    common: list[Item] = field(default_factory=list)
    count_a: int = 0
    count_b: int = 0
