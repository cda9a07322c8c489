"""
Cache: a store wrapped with a TTL/TTI policy and statistics.
"""

from typing import Any, Optional

from shared.logging import get_logger
from .entry import CacheEntry
from .stats import CacheStats
from .stores import MemoryStore

DEFAULT_TTL = 300
DEFAULT_TTI = 300


class Cache:
    """One cache region.

    Entries expire ``ttl`` seconds after being written or ``tti`` seconds
    after their last read, whichever comes first. A faulty store never
    fails the caller: read errors are logged and reported as misses.
    """

    def __init__(self, store: Any = None, ttl: float = DEFAULT_TTL, tti: float = DEFAULT_TTI, **store_options: Any):
        if store is None:
            store = MemoryStore
        self.store = store(**store_options) if isinstance(store, type) else store
        self.ttl = ttl
        self.tti = tti
        self.stats = CacheStats()
        self.logger = get_logger("identity_sdk.cache")

    async def get(self, key: str) -> Optional[Any]:
        try:
            entry = await self.store.get(key)
        except Exception as e:
            self.logger.error("Cache read failed", key=key, error=str(e))
            return None

        if entry is None:
            return None

        if entry.is_expired(self.ttl, self.tti):
            self.stats.miss(expired=True)
            self.stats.delete()
            try:
                await self.store.delete(key)
            except Exception as e:
                self.logger.error("Cache eviction failed", key=key, error=str(e))
            return None

        self.stats.hit()
        entry.touch()
        if not getattr(self.store, "shares_entries", False):
            try:
                await self.store.set(key, entry, ttl=entry.remaining_seconds(self.ttl))
            except Exception as e:
                self.logger.error("Cache touch write-back failed", key=key, error=str(e))
        return entry.value

    async def put(self, key: str, value: Any, is_new: bool = True, keep_until: Optional[float] = None) -> None:
        """Store ``value``; ``keep_until`` (epoch ms) keeps it alive past ttl/tti."""
        entry = CacheEntry(value, keep_until=keep_until)
        await self.store.set(key, entry, ttl=entry.remaining_seconds(self.ttl))
        self.stats.put(is_new)

    async def delete(self, key: str) -> None:
        await self.store.delete(key)
        self.stats.delete()

    async def clear(self) -> None:
        await self.store.clear()
        self.stats.clear()

    async def size(self) -> int:
        return await self.store.size()


class DisabledCache:
    """Drop-in Cache that stores nothing."""

    def __init__(self, *args: Any, **kwargs: Any):
        self.stats = CacheStats()

    async def get(self, key: str) -> None:
        return None

    async def put(self, key: str, value: Any, is_new: bool = True, keep_until: Optional[float] = None) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None

    async def clear(self) -> None:
        return None

    async def size(self) -> int:
        return 0
