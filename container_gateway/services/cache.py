"""
ContainerCache - bounded async-safe LRU cache of assembled containers.

Features:
- Fixed capacity set at construction
- Strict least-recently-used eviction; reads and writes both count as use
- get_or_load memoizes a Result-returning loader; failures are never stored
- Single asyncio.Lock guarding the map and its recency order
"""

import asyncio
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Hashable, Iterable, TypeVar

from loguru import logger

from container_gateway.services.result import Result

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class ContainerCache(Generic[K, V]):
    """
    LRU cache keyed by container id.

    The lock is held only for bookkeeping, never while a loader runs, so a
    slow load for one id does not stall lookups of other ids. Two concurrent
    misses for the same id may both load; the later write wins.

    Usage:
        cache = ContainerCache(capacity=100)

        result = await cache.get_or_load(
            container_id, lambda: service.assemble_one(container_id)
        )
    """

    def __init__(self, capacity: int = 100, debug: bool = False):
        if capacity < 1:
            raise ValueError(f"Cache capacity must be at least 1, got {capacity}")
        self._entries: OrderedDict[K, V] = OrderedDict()
        self._capacity = capacity
        self._debug = debug
        self._lock = asyncio.Lock()
        self._stats = CacheStats()

    @property
    def capacity(self) -> int:
        return self._capacity

    async def get(self, key: K) -> V | None:
        """Return the cached value and mark it most recently used, or None."""
        async with self._lock:
            return self._lookup(key)

    async def get_or_load(
        self,
        key: K,
        loader: Callable[[], Awaitable[Result[V]]],
    ) -> Result[V]:
        """
        Return the cached value for ``key``, loading and storing it on a miss.

        Args:
            key: Container id
            loader: Produces the value on a miss; not called on a hit

        Returns:
            The cached or freshly loaded value, or the loader's failure
        """
        async with self._lock:
            cached = self._lookup(key)
        if cached is not None:
            return Result.success(cached)

        result = await loader()
        if not result.ok:
            self._log(f"LOAD FAILED: {key} ({result.error})")
            return result

        await self.put(key, result.data)
        return result

    async def put(self, key: K, value: V) -> None:
        """Insert or overwrite ``key``, evicting the LRU entry if over capacity."""
        async with self._lock:
            self._store(key, value)

    async def put_many(self, entries: Iterable[tuple[K, V]]) -> None:
        """Insert entries one at a time, in order, under a single lock hold."""
        async with self._lock:
            for key, value in entries:
                self._store(key, value)

    def keys(self) -> list[K]:
        """Keys from least to most recently used."""
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def _lookup(self, key: K) -> V | None:
        # Caller holds the lock
        if key not in self._entries:
            self._stats.misses += 1
            self._log(f"MISS: {key}")
            return None

        self._entries.move_to_end(key)
        self._stats.hits += 1
        self._log(f"HIT: {key}")
        return self._entries[key]

    def _store(self, key: K, value: V) -> None:
        # Caller holds the lock
        self._entries[key] = value
        self._entries.move_to_end(key)
        self._log(f"SET: {key}")

        while len(self._entries) > self._capacity:
            evicted, _ = self._entries.popitem(last=False)
            self._stats.evictions += 1
            self._log(f"EVICT: {evicted}")

    def get_stats(self) -> "CacheStats":
        """Get cache statistics."""
        self._stats.size = len(self._entries)
        self._stats.max_size = self._capacity
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[ContainerCache] {message}")


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0
    max_size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "size": self.size,
            "max_size": self.max_size,
            "hit_rate": f"{self.hit_rate:.2%}",
        }
