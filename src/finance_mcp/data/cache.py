"""In-memory TTL cache for fetched market data."""

import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from finance_mcp.models import DataKind

logger = logging.getLogger(__name__)

DEFAULT_TTLS: dict[DataKind, float] = {
    DataKind.QUOTE: 300.0,
    DataKind.FUNDAMENTALS: 300.0,
    DataKind.INDICATOR: 300.0,
    # News moves slower and the news provider has a tighter daily quota
    DataKind.NEWS: 900.0,
}


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    captured_at: float


class CacheStore:
    """
    Per-kind key -> (value, captured_at) store.

    Freshness is evaluated lazily on lookup: an entry older than its kind's TTL
    behaves exactly like a miss. Each kind is LRU-bounded to `max_entries`.
    """

    def __init__(
        self,
        ttls: Mapping[DataKind, float] | None = None,
        max_entries: int = 512,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttls = dict(DEFAULT_TTLS)
        if ttls:
            self._ttls.update(ttls)
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[DataKind, OrderedDict[str, CacheEntry]] = {
            kind: OrderedDict() for kind in DataKind
        }

    def ttl(self, kind: DataKind) -> float:
        return self._ttls[kind]

    def get(self, kind: DataKind, key: str) -> Any | None:
        """
        Get a fresh value.

        Args:
            kind: Data kind (selects TTL)
            key: Cache key within the kind

        Returns:
            Cached value, or None on miss or stale entry
        """
        bucket = self._entries[kind]
        entry = bucket.get(key)
        if entry is None:
            return None
        if not self._is_fresh(kind, entry):
            del bucket[key]
            return None
        bucket.move_to_end(key)
        return entry.value

    def put(self, kind: DataKind, key: str, value: Any) -> None:
        bucket = self._entries[kind]
        bucket[key] = CacheEntry(value=value, captured_at=self._clock())
        bucket.move_to_end(key)
        while len(bucket) > self._max_entries:
            evicted, _ = bucket.popitem(last=False)
            logger.debug(f"cache[{kind.value}]: evicted {evicted}")

    def sweep(self) -> int:
        """Drop every stale entry. Returns the number removed."""
        removed = 0
        for kind, bucket in self._entries.items():
            stale = [k for k, e in bucket.items() if not self._is_fresh(kind, e)]
            for k in stale:
                del bucket[k]
            removed += len(stale)
        return removed

    def size(self, kind: DataKind | None = None) -> int:
        if kind is not None:
            return len(self._entries[kind])
        return sum(len(b) for b in self._entries.values())

    def clear(self) -> None:
        """Clear all cached data."""
        for bucket in self._entries.values():
            bucket.clear()

    def _is_fresh(self, kind: DataKind, entry: CacheEntry) -> bool:
        return self._clock() - entry.captured_at < self._ttls[kind]
