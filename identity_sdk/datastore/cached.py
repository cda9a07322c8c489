"""
Data store that serves repeated resource lookups from the cache.
"""

from typing import Any, Dict, Optional, Type

from shared.logging import get_logger
from ..cache import CacheHandler
from ..resources import Resource
from .protocols import R, RequestExecutor


class CachingDataStore:
    """Implements the fetch/create interfaces on top of a request executor.

    Only plain GETs (no query parameters) are answered from the cache;
    ``query={"nocache": True}`` forces a remote read. Every resource that
    comes back with an ``href`` is written to its cache region.
    """

    def __init__(self, executor: RequestExecutor, cache_handler: CacheHandler):
        self.executor = executor
        self.cache_handler = cache_handler
        self.logger = get_logger("identity_sdk.datastore")

    async def get_resource(
        self,
        href: str,
        query: Optional[Dict[str, Any]] = None,
        resource_type: Type[R] = Resource,
    ) -> R:
        if not href or not isinstance(href, str):
            raise ValueError("href must be a non-empty string")

        query = dict(query or {})
        nocache = bool(query.pop("nocache", False))

        if not query and not nocache:
            cached = await self._cache_get(href)
            if cached is not None:
                self.logger.debug("Resource served from cache", href=href)
                return resource_type.model_validate(cached)

        data = await self.executor.execute("GET", href, query=query or None)
        await self._cache_put(data)
        return resource_type.model_validate(data)

    async def create_resource(
        self,
        href: str,
        body: Optional[Dict[str, Any]] = None,
        *,
        query: Optional[Dict[str, Any]] = None,
        form: Optional[Dict[str, Any]] = None,
        resource_type: Type[R] = Resource,
    ) -> R:
        if not href or not isinstance(href, str):
            raise ValueError("href must be a non-empty string")

        data = await self.executor.execute("POST", href, query=query, json=body, form=form)
        await self._cache_put(data)
        return resource_type.model_validate(data)

    async def _cache_get(self, href: str) -> Optional[Dict[str, Any]]:
        try:
            return await self.cache_handler.get(href)
        except Exception as e:
            self.logger.error("Cache lookup failed, falling back to remote", href=href, error=str(e))
            return None

    async def _cache_put(self, data: Any) -> None:
        if not isinstance(data, dict):
            return
        for item in data.get("items") or []:
            if isinstance(item, dict) and item.get("href"):
                await self.cache_handler.put(item["href"], item)
        if data.get("href"):
            await self.cache_handler.put(data["href"], data)
