"""
Cache entry: a cached value plus its creation and last-access timestamps.
"""

import math
import time
from datetime import datetime, timezone
from numbers import Real
from typing import Any, Dict, Optional


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def _is_timestamp(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


class CacheEntry:
    """A single value inside a cache.

    ``created_at`` and ``last_accessed_at`` are epoch milliseconds. Either may
    be omitted (defaults to now); anything non-numeric is rejected, use
    :meth:`parse` for serialized forms. ``keep_until`` (epoch milliseconds)
    pins the entry: it does not expire before that instant whatever the
    region's ttl and tti say.
    """

    __slots__ = ("value", "created_at", "last_accessed_at", "keep_until")

    def __init__(
        self,
        value: Any,
        created_at: Optional[float] = None,
        last_accessed_at: Optional[float] = None,
        keep_until: Optional[float] = None,
    ):
        if created_at is not None and not _is_timestamp(created_at):
            raise TypeError("created_at must be epoch milliseconds; use CacheEntry.parse for other formats")
        if last_accessed_at is not None and not _is_timestamp(last_accessed_at):
            raise TypeError("last_accessed_at must be epoch milliseconds; use CacheEntry.parse for other formats")
        if keep_until is not None and not _is_timestamp(keep_until):
            raise TypeError("keep_until must be epoch milliseconds")

        self.value = value
        self.created_at = created_at if created_at is not None else now_ms()
        self.last_accessed_at = last_accessed_at if last_accessed_at is not None else self.created_at
        self.keep_until = keep_until

    def touch(self) -> None:
        self.last_accessed_at = now_ms()

    def is_expired(self, ttl: float, tti: float) -> bool:
        """True once ``ttl`` seconds passed since creation or ``tti`` since last access."""
        now = now_ms()
        if self.keep_until is not None and now < self.keep_until:
            return False
        return (
            now >= self.created_at + ttl * 1000
            or now >= self.last_accessed_at + tti * 1000
        )

    def remaining_seconds(self, ttl: float) -> int:
        """Whole seconds until the ttl (or ``keep_until``) deadline; at least 1."""
        deadline = self.created_at + ttl * 1000
        if self.keep_until is not None:
            deadline = max(deadline, self.keep_until)
        return max(1, math.ceil((deadline - now_ms()) / 1000))

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "value": self.value,
            "createdAt": _format_timestamp(self.created_at),
            "lastAccessedAt": _format_timestamp(self.last_accessed_at),
        }
        if self.keep_until is not None:
            data["keepUntil"] = _format_timestamp(self.keep_until)
        return data

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "CacheEntry":
        """Rebuild an entry whose dates may be ISO strings, datetimes or numbers.

        Unparsable dates are treated as missing.
        """
        return cls(
            data.get("value"),
            _parse_timestamp(data.get("createdAt")),
            _parse_timestamp(data.get("lastAccessedAt")),
            _parse_timestamp(data.get("keepUntil")),
        )

    def __repr__(self) -> str:
        return (
            f"CacheEntry(value={self.value!r}, created_at={self.created_at}, "
            f"last_accessed_at={self.last_accessed_at}, keep_until={self.keep_until})"
        )


def _format_timestamp(value: float) -> str:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).isoformat(timespec="milliseconds")


def _parse_timestamp(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    if _is_timestamp(value):
        return value
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(round(parsed.timestamp() * 1000))
