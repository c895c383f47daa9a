"""Collection page dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Page:
    offset: int
    total: int
    entries: list[dict[str, Any]] = field(default_factory=list)
