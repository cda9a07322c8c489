"""
Cache statistics counters.
"""

from typing import NamedTuple


class CacheStatsSummary(NamedTuple):
    puts: int
    hits: int
    misses: int
    expirations: int
    size: int


class CacheStats:
    """Hit/miss/put counters for one cache region."""

    def __init__(self):
        self.puts = 0
        self.hits = 0
        self.misses = 0
        self.expirations = 0
        self.size = 0

    def put(self, is_new: bool = True) -> None:
        self.puts += 1
        if is_new:
            self.size += 1

    def hit(self) -> None:
        self.hits += 1

    def miss(self, expired: bool = False) -> None:
        self.misses += 1
        if expired:
            self.expirations += 1

    def delete(self) -> None:
        if self.size > 0:
            self.size -= 1

    def clear(self) -> None:
        self.size = 0

    @property
    def summary(self) -> CacheStatsSummary:
        return CacheStatsSummary(self.puts, self.hits, self.misses, self.expirations, self.size)

    def __repr__(self) -> str:
        return f"CacheStats({self.summary})"
