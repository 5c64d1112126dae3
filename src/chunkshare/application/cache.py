"""Read-through cache for gateway lookups.

Entries are keyed by ``(operation, file_id)``. Only small lookups are held
(owned listings, published flags, chunk info); chunk payloads never are.
Mutations invalidate synchronously, before the mutating call returns.
Changes made through other clients are only seen once an entry expires, so
every entry carries a time-to-live.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Hashable, Optional

OWNED_OBJECTS = "owned_objects"
IS_PUBLISHED = "is_published"
CHUNK_INFO = "chunk_info"

# Key for operations that do not address a single file
ALL = "*"

DEFAULT_TTL_SECONDS = 30.0


class ReadThroughCache:
    """Thread-safe ``(operation, key) -> value`` map with load-on-miss."""

    def __init__(
        self,
        metrics: Optional[Any] = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._entries: dict[tuple[str, Hashable], tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._metrics = metrics
        self._ttl = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired()
            return len(self._entries)

    def __contains__(self, item: tuple[str, Hashable]) -> bool:
        with self._lock:
            self._evict_expired()
            return item in self._entries

    def get_or_load(
        self,
        operation: str,
        key: Hashable,
        loader: Callable[[], Any],
        keep: Optional[Callable[[Any], bool]] = None,
    ) -> Any:
        """Return the cached value, calling ``loader`` on a miss.

        Loader errors propagate and nothing is stored. A loaded value for
        which ``keep`` returns False is returned but not stored. The loader
        runs outside the lock; concurrent misses may both load, and the
        later store wins.
        """
        entry_key = (operation, key)
        with self._lock:
            entry = self._entries.get(entry_key)
            if entry is not None:
                value, expires_at = entry
                if self._clock() < expires_at:
                    self._record("hit", operation)
                    return value
                del self._entries[entry_key]
                self._update_size()

        self._record("miss", operation)
        value = loader()
        if keep is not None and not keep(value):
            return value

        with self._lock:
            self._entries[entry_key] = (value, self._clock() + self._ttl)
            self._update_size()
        return value

    def invalidate(self, key: Hashable) -> None:
        """Drop every entry for ``key`` plus the owned listing."""
        with self._lock:
            for entry_key in list(self._entries):
                operation, entry = entry_key
                if entry == key or operation == OWNED_OBJECTS:
                    del self._entries[entry_key]
            self._update_size()

    def invalidate_operation(self, operation: str) -> None:
        """Drop every entry cached for ``operation``."""
        with self._lock:
            for entry_key in list(self._entries):
                if entry_key[0] == operation:
                    del self._entries[entry_key]
            self._update_size()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._update_size()

    def _evict_expired(self) -> None:
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            self._update_size()

    def _record(self, outcome: str, operation: str) -> None:
        if self._metrics is None:
            return
        if outcome == "hit":
            self._metrics.cache_hits.labels(operation=operation).inc()
        else:
            self._metrics.cache_misses.labels(operation=operation).inc()

    def _update_size(self) -> None:
        if self._metrics is not None:
            self._metrics.cache_entries.set(len(self._entries))
