"""
Unit tests for the Redis backed cache store.
"""

import json
import pytest
from unittest.mock import AsyncMock, patch

from identity_sdk.cache import Cache, RedisStore
from identity_sdk.cache.entry import CacheEntry


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the store."""

    def __init__(self):
        self.data = {}
        self.expiries = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.expiries[key] = ex
        return True

    async def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)
        return len(keys)

    async def scan_iter(self, match=None):
        prefix = match.rstrip("*") if match else ""
        for key in list(self.data):
            if key.startswith(prefix):
                yield key

    async def aclose(self):
        pass


class TestRedisStore:
    """Test cases for RedisStore."""

    @pytest.fixture
    def redis_client(self):
        return FakeRedis()

    @pytest.fixture
    def store(self, redis_client):
        return RedisStore(key_prefix="test:accounts", client=redis_client)

    @pytest.mark.asyncio
    async def test_entries_are_json_at_the_boundary(self, store, redis_client):
        entry = CacheEntry({"href": "h", "status": "ENABLED"}, created_at=1_000, last_accessed_at=2_000)

        await store.set("h", entry)

        raw = json.loads(redis_client.data["test:accounts:h"])
        assert raw["value"] == {"href": "h", "status": "ENABLED"}
        assert raw["createdAt"].startswith("1970-01-01T00:00:01.000")

        restored = await store.get("h")
        assert restored.value == entry.value
        assert restored.created_at == 1_000
        assert restored.last_accessed_at == 2_000

    @pytest.mark.asyncio
    async def test_missing_key(self, store):
        assert await store.get("nope") is None

    @pytest.mark.asyncio
    async def test_clear_and_size_only_touch_prefixed_keys(self, store, redis_client):
        redis_client.data["other:key"] = "x"
        await store.set("a", CacheEntry(1))
        await store.set("b", CacheEntry(2))

        assert await store.size() == 2

        await store.clear()

        assert await store.size() == 0
        assert redis_client.data == {"other:key": "x"}

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.set("a", CacheEntry(1))
        await store.delete("a")
        assert await store.get("a") is None

    @pytest.mark.asyncio
    async def test_cache_persists_touches(self, redis_client):
        cache = Cache(RedisStore, ttl=300, tti=60, key_prefix="p", client=redis_client)

        with patch("identity_sdk.cache.entry.now_ms", return_value=0):
            await cache.put("k", "v")
        with patch("identity_sdk.cache.entry.now_ms", return_value=30_000):
            assert await cache.get("k") == "v"

        stored = await cache.store.get("k")
        assert stored.last_accessed_at == 30_000
        assert redis_client.expiries["p:k"] == 270

    @pytest.mark.asyncio
    async def test_keys_expire_with_the_region_ttl(self, redis_client):
        cache = Cache(RedisStore, ttl=300, tti=60, key_prefix="p", client=redis_client)

        with patch("identity_sdk.cache.entry.now_ms", return_value=0):
            await cache.put("k", "v")

        assert redis_client.expiries["p:k"] == 300

    @pytest.mark.asyncio
    async def test_keep_until_extends_key_expiry(self, redis_client):
        cache = Cache(RedisStore, ttl=0, tti=0, key_prefix="p", client=redis_client)

        with patch("identity_sdk.cache.entry.now_ms", return_value=0):
            await cache.put("nonce", "nonce", keep_until=120_000)
        with patch("identity_sdk.cache.entry.now_ms", return_value=60_000):
            assert await cache.get("nonce") == "nonce"

        assert redis_client.expiries["p:nonce"] == 60

    @pytest.mark.asyncio
    async def test_connection_is_created_lazily(self):
        store = RedisStore(redis_url="redis://cache:6379/1")

        with patch("identity_sdk.cache.stores.redis.from_url") as mock_from_url:
            mock_from_url.return_value = AsyncMock()
            mock_from_url.return_value.get.return_value = None

            assert await store.get("k") is None

        mock_from_url.assert_called_once()
        assert mock_from_url.call_args[0][0] == "redis://cache:6379/1"
