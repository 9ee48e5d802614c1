"""Keyed in-memory cache whose entries go stale a fixed time after insertion."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Hashable, Optional, TypeVar

V = TypeVar("V")

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry(Generic[V]):
    value: V
    stored_at: float


class TTLCache(Generic[V]):
    """Lazy-expiry cache.

    An entry is served while ``clock() - stored_at < ttl``. Stale entries are not
    removed; they read as misses and are overwritten by the next ``put``. There
    is no lock: concurrent refreshes of one key compute the same value from the
    same source, so the last write wins without harm.
    """

    def __init__(self, ttl: float, *, clock: Clock = time.monotonic, name: str = "cache") -> None:
        if ttl < 0:
            raise ValueError("ttl must not be negative")
        self.ttl = float(ttl)
        self.name = name
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry[V]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _fresh(self, entry: CacheEntry[V]) -> bool:
        return self._clock() - entry.stored_at < self.ttl

    def get(self, key: Hashable) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None or not self._fresh(entry):
            return None
        return entry.value

    def put(self, key: Hashable, value: V) -> None:
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def get_or_load(self, key: Hashable, loader: Callable[[], V]) -> V:
        """Return the fresh value for ``key``, running ``loader`` on a miss.

        Exceptions from ``loader`` propagate and leave the cache untouched.
        """
        value = self.get(key)
        if value is not None:
            return value
        value = loader()
        self.put(key, value)
        return value


__all__ = ["CacheEntry", "Clock", "TTLCache"]
