"""
Session-scoped memoization of historical series.

Keys are value-equal tuples, so two fetches for the same channel, window
and interval share an entry. No TTL, no size bound: the owning session
clears the cache on teardown.
"""

from dataclasses import dataclass
from threading import Lock
from typing import Dict, NamedTuple, Optional, Tuple


@dataclass(frozen=True)
class SamplePoint:
    """One bucket of a historical series."""
    value: float
    timestamp: float


Series = Tuple[SamplePoint, ...]


class CacheKey(NamedTuple):
    channel_id: str
    window_start_ms: int
    window_end_ms: int
    bucket_interval_seconds: int


@dataclass
class CacheStats:
    hit: int = 0
    miss: int = 0
    write: int = 0


class SeriesCache:
    """Thread-safe in-memory map of CacheKey -> Series."""

    def __init__(self):
        self._mu = Lock()
        self._data: Dict[CacheKey, Series] = {}
        self.stats = CacheStats()

    def get(self, key: CacheKey) -> Optional[Series]:
        with self._mu:
            series = self._data.get(key)
            if series is None:
                self.stats.miss += 1
            else:
                self.stats.hit += 1
            return series

    def put(self, key: CacheKey, series: Series) -> None:
        # Keys are fully determined by their inputs, so an existing entry is never replaced
        with self._mu:
            self._data.setdefault(key, tuple(series))
            self.stats.write += 1

    def clear(self) -> None:
        with self._mu:
            self._data.clear()

    def __len__(self) -> int:
        with self._mu:
            return len(self._data)

    def __contains__(self, key: CacheKey) -> bool:
        with self._mu:
            return key in self._data
