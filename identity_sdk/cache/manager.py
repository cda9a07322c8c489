"""
Cache manager: one cache per named region.
"""

from typing import Any, Dict, Optional

from shared.logging import get_logger
from .cache import Cache
from .stats import CacheStats


class CacheManager:
    """Owns the caches of one client; regions are created up front by their users."""

    def __init__(self):
        self.caches: Dict[str, Any] = {}
        self.logger = get_logger("identity_sdk.cache.manager")

    def create(self, region: str, options: Optional[Dict[str, Any]] = None, cache_class: Any = Cache) -> Any:
        """Create the cache for ``region``, replacing any existing one."""
        cache = cache_class(**(options or {}))
        if region in self.caches:
            self.logger.debug("Replacing cache region", region=region)
        self.caches[region] = cache
        return cache

    def get(self, region: str) -> Optional[Any]:
        return self.caches.get(region)

    @property
    def stats(self) -> Dict[str, CacheStats]:
        return {region: cache.stats for region, cache in self.caches.items()}
