"""Short-lived memoization for search results."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 300.0
DEFAULT_MAX_ENTRIES = 1000


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    value: T
    expiry: float


class TTLCache(Generic[T]):
    """Dictionary with per-entry expiry.

    Expired entries are dropped when they are looked up. Once the cache grows
    past ``max_entries`` a ``set`` sweeps out everything that has expired;
    live entries are never evicted.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() > entry.expiry:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: T) -> None:
        self._entries[key] = CacheEntry(value=value, expiry=self._clock() + self.ttl)
        if len(self._entries) > self.max_entries:
            self.cleanup_expired()

    def cleanup_expired(self) -> int:
        """Remove expired entries and return how many were dropped."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now > entry.expiry]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
