"""
Resource cache: entries, stores, regions and the href-addressed handler.
"""

from .cache import Cache, DisabledCache
from .entry import CacheEntry
from .handler import CACHE_REGIONS, CacheHandler
from .manager import CacheManager
from .stats import CacheStats, CacheStatsSummary
from .stores import MemoryStore, RedisStore

__all__ = [
    "CACHE_REGIONS",
    "Cache",
    "CacheEntry",
    "CacheHandler",
    "CacheManager",
    "CacheStats",
    "CacheStatsSummary",
    "DisabledCache",
    "MemoryStore",
    "RedisStore",
]
