"""Backends for the single persisted cache slot."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from .exceptions import PersistenceError

logger = logging.getLogger(__name__)


class CacheSlot(Protocol):
    """One named text slot. ``read`` returns None when nothing is stored."""

    async def read(self) -> str | None: ...

    async def write(self, text: str) -> None: ...


class JsonFileSlot:
    """Slot backed by a JSON file; disk I/O runs in a worker thread."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _read(self) -> str | None:
        try:
            data = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            # Leave the file alone; a failed read is only a cache miss
            logger.warning("Failed to read cache file %s: %s", self.path, exc)
            return None
        # Undecodable bytes are corrupt content, which the cache resets
        return data.decode("utf-8", errors="replace")

    def _write(self, text: str) -> None:
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(text)
            # Readers see either the old file or the new one, never a prefix
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise PersistenceError(
                f"Failed to write cache file {self.path}: {exc}"
            ) from exc

    async def read(self) -> str | None:
        return await asyncio.to_thread(self._read)

    async def write(self, text: str) -> None:
        await asyncio.to_thread(self._write, text)


class MemorySlot:
    """In-process slot. ``fail_writes`` simulates a full or read-only disk."""

    def __init__(self, text: str | None = None, fail_writes: bool = False) -> None:
        self.text = text
        self.fail_writes = fail_writes

    async def read(self) -> str | None:
        return self.text

    async def write(self, text: str) -> None:
        if self.fail_writes:
            raise PersistenceError("cache slot is not writable")
        self.text = text
