"""Result cache and false-positive memo.

Both are bounded LRU maps with a per-entry time-to-live so a long-running
process does not grow them without limit. Entries are keyed per package and
version, so concurrent analyses of different dependencies never touch the
same key.
"""

import time
from collections import OrderedDict
from typing import Callable, Generic, Hashable, List, Optional, Tuple, TypeVar

from .models import VulnerabilityRecord
from .versions import NormalizedVersion

V = TypeVar('V')


class TTLCache(Generic[V]):
    """Least-recently-used map whose entries also expire after ``ttl`` seconds."""

    def __init__(
        self,
        max_entries: int = 10_000,
        ttl: float = 24 * 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.max_entries = max_entries
        self.ttl = ttl
        self._clock = clock
        self._entries: "OrderedDict[Hashable, Tuple[float, V]]" = OrderedDict()

    def get(self, key: Hashable) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return value

    def set(self, key: Hashable, value: V) -> None:
        self._entries[key] = (self._clock() + self.ttl, value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


class ResultCache:
    """Vulnerability records per (package name, normalized version)."""

    def __init__(self, max_entries: int = 10_000, ttl: float = 24 * 3600) -> None:
        self._cache: TTLCache[List[VulnerabilityRecord]] = TTLCache(max_entries, ttl)

    @staticmethod
    def _key(package_name: str, version: NormalizedVersion) -> Tuple[str, Tuple[int, int, int]]:
        return (package_name.lower(), version.triple)

    def get(self, package_name: str, version: NormalizedVersion) -> Optional[List[VulnerabilityRecord]]:
        records = self._cache.get(self._key(package_name, version))
        return list(records) if records is not None else None

    def store(self, package_name: str, version: NormalizedVersion, records: List[VulnerabilityRecord]) -> None:
        self._cache.set(self._key(package_name, version), list(records))

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        self._cache.clear()


class FalsePositiveMemo:
    """(advisory id, package name, version) triples already judged safe."""

    def __init__(self, max_entries: int = 50_000, ttl: float = 24 * 3600) -> None:
        self._memo: TTLCache[bool] = TTLCache(max_entries, ttl)

    @staticmethod
    def _key(advisory_id: str, package_name: str, version: NormalizedVersion) -> Tuple[str, str, Tuple[int, int, int]]:
        return (advisory_id, package_name.lower(), version.triple)

    def record(self, advisory_id: str, package_name: str, version: NormalizedVersion) -> None:
        self._memo.set(self._key(advisory_id, package_name, version), True)

    def contains(self, advisory_id: str, package_name: str, version: NormalizedVersion) -> bool:
        return self._key(advisory_id, package_name, version) in self._memo

    def __len__(self) -> int:
        return len(self._memo)

    def clear(self) -> None:
        self._memo.clear()
