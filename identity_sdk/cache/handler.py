"""
Href-addressed cache facade used by the data store.
"""

from typing import Any, Dict, Optional

from shared.config import IdentitySettings
from shared.logging import get_logger
from .cache import Cache, DisabledCache
from .manager import CacheManager
from .stores import MemoryStore, RedisStore

CACHE_REGIONS = (
    "applications",
    "directories",
    "accounts",
    "groups",
    "groupMemberships",
    "tenants",
    "accountStoreMappings",
    "apiKeys",
    "idSiteNonces",
)

# single-use guarantee of ID Site responses depends on this region storing entries
NONCE_REGION = "idSiteNonces"

STORES = {
    "memory": MemoryStore,
    "redis": RedisStore,
}


def region_for_href(href: Optional[str]) -> Optional[str]:
    """``https://host/v1/accounts/abc`` -> ``accounts``."""
    if not href:
        return None
    parts = href.rstrip("/").split("/")
    if len(parts) < 2:
        return None
    return parts[-2]


class CacheHandler:
    """Maps resource hrefs onto cache regions and flattens nested resources."""

    def __init__(self, settings: Optional[IdentitySettings] = None, cache_manager: Optional[CacheManager] = None):
        self.settings = settings or IdentitySettings()
        self.cache_manager = cache_manager or CacheManager()
        self.logger = get_logger("identity_sdk.cache.handler")
        self._disabled = DisabledCache()

        for region in CACHE_REGIONS:
            self._create_region(region)

    def _create_region(self, region: str) -> None:
        overrides = self.settings.cache_regions.get(region, {})
        store_name = overrides.get("store", self.settings.cache_store)

        if store_name == "disabled" and region == NONCE_REGION:
            self.logger.warning("Nonce region cannot be disabled, using the memory store", region=region)
            store_name = "memory"

        if store_name == "disabled":
            self.cache_manager.create(region, cache_class=DisabledCache)
            return

        options: Dict[str, Any] = {
            "store": STORES.get(store_name, MemoryStore),
            "ttl": overrides.get("ttl", self.settings.cache_ttl),
            "tti": overrides.get("tti", self.settings.cache_tti),
        }
        if store_name == "redis":
            options["redis_url"] = self.settings.redis_url
            options["key_prefix"] = f"{self.settings.redis_key_prefix}:{region}"

        self.cache_manager.create(region, options)

    def cache_for_href(self, href: Optional[str]) -> Any:
        region = region_for_href(href)
        if region not in CACHE_REGIONS:
            return self._disabled
        return self.cache_manager.get(region) or self._disabled

    async def get(self, href: str) -> Optional[Dict[str, Any]]:
        return await self.cache_for_href(href).get(href)

    async def put(self, href: str, data: Dict[str, Any], is_new: bool = True) -> None:
        """Cache ``data`` under ``href``.

        Expanded children are cached under their own hrefs and replaced by
        links in the parent; collection items are cached one by one.
        """
        resource_data: Dict[str, Any] = {}

        for name, value in data.items():
            if isinstance(value, dict) and value.get("href"):
                link: Dict[str, Any] = {"href": value["href"]}
                if "items" in value:
                    link["items"] = []
                    for item in value.get("items") or []:
                        if isinstance(item, dict) and item.get("href"):
                            await self.put(item["href"], item)
                            link["items"].append({"href": item["href"]})
                elif len(value) > 1:
                    await self.put(value["href"], value)
                resource_data[name] = link
            else:
                resource_data[name] = value

        try:
            await self.cache_for_href(href).put(href, resource_data, is_new)
        except Exception as e:
            self.logger.error("Cache write failed", href=href, error=str(e))

    async def remove(self, href: str) -> None:
        try:
            await self.cache_for_href(href).delete(href)
        except Exception as e:
            self.logger.error("Cache delete failed", href=href, error=str(e))
