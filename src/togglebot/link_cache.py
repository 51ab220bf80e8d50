"""Process-wide LRU cache of resolved documentation links."""

from __future__ import annotations

import asyncio

from cachetools import LRUCache


class LinkCache:
    """Maps canonical item paths to documentation URLs.

    Bounded by entry count only; entries never expire by age. All access
    goes through one lock, held for the map operation alone.
    """

    def __init__(self, capacity: int = 500) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._entries: LRUCache[str, str] = LRUCache(maxsize=capacity)
        self._lock = asyncio.Lock()

    @property
    def capacity(self) -> int:
        return int(self._entries.maxsize)

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> str | None:
        """Return the cached URL for ``key`` and mark it most recently used."""
        async with self._lock:
            return self._entries.get(key)

    async def insert(self, key: str, value: str) -> None:
        """Insert or overwrite ``key``, evicting the least recently used entry if full."""
        async with self._lock:
            self._entries[key] = value
