"""
Image Cache
Bounded in-process cache of resolved image URLs.

Entries map a lookup key to a URL or to `None` (a remembered miss). The cache
holds at most `capacity` entries, evicting the least recently used one, and
entries older than `ttl_seconds` are treated as absent. `lock_for(key)` hands
out one asyncio.Lock per key so that concurrent lookups of the same key wait
for the first writer instead of calling the provider again.
"""
import asyncio
import time
import weakref
from collections import OrderedDict
from typing import Any, Optional, Tuple

MISSING = object()


class ImageCache:
    """LRU + TTL cache with per-key write serialization."""

    def __init__(self, capacity: int = 2048, ttl_seconds: Optional[float] = None):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._entries: "OrderedDict[str, Tuple[float, Optional[str]]]" = OrderedDict()
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not MISSING

    def get(self, key: str) -> Any:
        """Return the cached URL (or None for a cached miss), else MISSING."""
        entry = self._entries.get(key)
        if entry is None:
            return MISSING

        stored_at, value = entry
        if self.ttl_seconds is not None and time.monotonic() - stored_at > self.ttl_seconds:
            del self._entries[key]
            return MISSING

        self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: Optional[str]) -> None:
        self._entries[key] = (time.monotonic(), value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.capacity:
            self._entries.popitem(last=False)

    def lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def clear(self) -> None:
        self._entries.clear()
