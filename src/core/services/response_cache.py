"""Time-bounded response memoization.

One instance is owned by whoever builds the HTTP app (or a test) and is
passed to the services that use it. Entries expire lazily: a read past
`expires_at` drops the entry and reports a miss. There is no sweeper thread;
the key space is bounded by the distinct requests seen within one TTL.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Hashable

from core.interfaces.clock import Clock

logger = logging.getLogger(__name__)

CacheKey = tuple[str, ...]


def cache_key(endpoint: str, *params: str) -> CacheKey:
    """Namespaced key for one logical request.

    A tuple keeps endpoints and parameter boundaries apart, so no two distinct
    (endpoint, params) pairs can collide.
    """

    return (endpoint, *params)


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: datetime


class ResponseCache:
    """Shared map of request signature -> (value, expiry)."""

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Any | None:
        now = self._clock.now()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if now > entry.expires_at:
                del self._entries[key]
                logger.debug("Cache entry expired: %s", key)
                return None
            return entry.value

    def put(self, key: Hashable, value: Any, ttl: timedelta | float) -> None:
        if not isinstance(ttl, timedelta):
            ttl = timedelta(seconds=ttl)
        entry = CacheEntry(value=value, expires_at=self._clock.now() + ttl)
        with self._lock:
            self._entries[key] = entry

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
