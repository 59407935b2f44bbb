"""In-memory TTL cache

Per-process map of key -> (value, expiry). Expired entries are evicted on
access; there is no background sweeper.
"""

import time
from typing import Any, Callable, Dict, Optional, Tuple

from src.app.services.cache import Cache


class InMemoryTTLCache(Cache):
    def __init__(self, ttl_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        self._evict_expired()
        entry = self._entries.get(key)
        return entry[0] if entry else None

    def set(self, key: str, value: Any) -> None:
        self._evict_expired()
        self._entries[key] = (value, self.clock() + self.ttl_seconds)

    def __len__(self) -> int:
        return len(self._entries)

    def _evict_expired(self) -> None:
        now = self.clock()
        for key in [k for k, (_, expires_at) in self._entries.items() if expires_at <= now]:
            del self._entries[key]
