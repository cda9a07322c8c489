"""
Store of ID Site nonces that have already been accepted.
"""

from typing import Optional

from shared.errors import ConfigurationError
from ..cache import CacheManager, DisabledCache
from ..cache.handler import NONCE_REGION


class NonceStore:
    """Existence-only store on top of the ``idSiteNonces`` cache region."""

    def __init__(self, cache_manager: CacheManager):
        self.cache_manager = cache_manager

    def _cache(self):
        cache = self.cache_manager.get(NONCE_REGION)
        if cache is None:
            raise ConfigurationError(f"Cache region '{NONCE_REGION}' has not been created")
        if isinstance(cache, DisabledCache):
            raise ConfigurationError(f"Cache region '{NONCE_REGION}' must not be disabled")
        return cache

    async def get_nonce(self, nonce: str) -> Optional[str]:
        return await self._cache().get(nonce)

    async def put_nonce(self, nonce: str, expires_at: Optional[float] = None) -> None:
        """Record ``nonce``; it is kept at least until ``expires_at`` (epoch seconds)."""
        keep_until = expires_at * 1000 if expires_at is not None else None
        await self._cache().put(nonce, nonce, keep_until=keep_until)
