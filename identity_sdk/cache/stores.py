"""
Cache stores: where cache entries physically live.

Every store honours the same async contract: ``get``, ``set``, ``delete``,
``clear`` and ``size``.
"""

import json
from typing import Any, Dict, Optional

import redis.asyncio as redis

from shared.logging import get_logger
from .entry import CacheEntry


class MemoryStore:
    """In-process key to entry table."""

    # get() hands out the stored object itself, so touching it updates the store.
    shares_entries = True

    def __init__(self, **options: Any):
        self._store: Dict[str, CacheEntry] = {}

    async def get(self, key: str) -> Optional[CacheEntry]:
        return self._store.get(key)

    async def set(self, key: str, entry: CacheEntry, ttl: Optional[int] = None) -> bool:
        self._store[key] = entry
        return True

    async def delete(self, key: str) -> bool:
        self._store.pop(key, None)
        return True

    async def clear(self) -> None:
        self._store = {}

    async def size(self) -> int:
        return len(self._store)


class RedisStore:
    """Redis backed store; entries cross the boundary as JSON."""

    shares_entries = False

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        key_prefix: str = "identity_sdk",
        client: Optional[redis.Redis] = None,
        **options: Any,
    ):
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.logger = get_logger("identity_sdk.cache.redis")
        self._redis: Optional[redis.Redis] = client

    async def _get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
        return self._redis

    def _make_key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    async def get(self, key: str) -> Optional[CacheEntry]:
        client = await self._get_redis()
        raw = await client.get(self._make_key(key))
        if not raw:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return CacheEntry.parse(json.loads(raw))

    async def set(self, key: str, entry: CacheEntry, ttl: Optional[int] = None) -> bool:
        """Write ``entry``; ``ttl`` seconds becomes the Redis key expiry."""
        client = await self._get_redis()
        await client.set(self._make_key(key), json.dumps(entry.to_dict()), ex=ttl)
        return True

    async def delete(self, key: str) -> bool:
        client = await self._get_redis()
        await client.delete(self._make_key(key))
        return True

    async def clear(self) -> None:
        client = await self._get_redis()
        keys = [key async for key in client.scan_iter(match=f"{self.key_prefix}:*")]
        if keys:
            await client.delete(*keys)
        self.logger.info("Redis cache cleared", prefix=self.key_prefix, count=len(keys))

    async def size(self) -> int:
        client = await self._get_redis()
        count = 0
        async for _ in client.scan_iter(match=f"{self.key_prefix}:*"):
            count += 1
        return count

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
