"""
Bounded in-process caches for embeddings and moderation verdicts.

Keys are always produced by :func:`normalize_key`, so "Hello" and "hello "
share one entry. Entries are evicted least-recently-used once ``maxsize`` is
reached, and optionally expire after ``ttl_seconds``.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import Callable, Generic, Hashable, Optional, Tuple, TypeVar

V = TypeVar("V")


def normalize_key(text: str) -> str:
    """Case-folded, trimmed cache key."""
    return text.lower().strip()


class LRUCache(Generic[V]):
    """
    Size-bounded LRU mapping with optional expiry.

    No locking: concurrent misses for the same key both compute and the last
    write wins, which is harmless because values for a key are idempotent.
    """

    def __init__(
        self,
        maxsize: int = 1024,
        ttl_seconds: float = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.maxsize = maxsize
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._data: "OrderedDict[Hashable, Tuple[float, V]]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable) -> Optional[V]:
        item = self._data.get(key)
        if item is None:
            self.misses += 1
            return None
        stored_at, value = item
        if self.ttl_seconds and self._clock() - stored_at > self.ttl_seconds:
            del self._data[key]
            self.misses += 1
            return None
        self._data.move_to_end(key)
        self.hits += 1
        return value

    def set(self, key: Hashable, value: V) -> None:
        self._data[key] = (self._clock(), value)
        self._data.move_to_end(key)
        while len(self._data) > self.maxsize:
            self._data.popitem(last=False)

    def clear(self) -> None:
        self._data.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> dict:
        return {
            "size": len(self._data),
            "maxsize": self.maxsize,
            "hits": self.hits,
            "misses": self.misses,
        }

    def __contains__(self, key: Hashable) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)
