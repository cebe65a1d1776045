"""
Thread-safe LRU cache with TTL (Time-To-Live) expiration.

PATTERN RECOGNITION: This combines two complementary eviction policies:
  - Size-based (LRU): discards the least-recently-used entry when the cache
    exceeds max_size, so a long-running host that opens thousands of
    documents keeps a bounded table.
  - Time-based (TTL): lazily removes entries whose age exceeds ttl_seconds at
    the next access.

The scan context uses it as the debounce table: an entry is written when a
scan starts and a live entry means "a scan for this key started less than
ttl_seconds ago".

MAINTENANCE WISDOM: The clock is injectable so tests can step time without
sleeping.  It must be monotonic; wall-clock jumps would break debouncing.
"""

import threading
import time
from typing import Any, Callable, Hashable, List, Optional


class TTLCache:
    """
    Bounded key -> value table whose entries expire *ttl_seconds* after they
    were written.

    Overflow drops the entry touched longest ago (dict insertion order doubles
    as the LRU order).  Expired entries linger until the next ``get``,
    ``put_if_absent`` or ``__contains__`` for their key finds them.

    Note: ``None`` values are not supported; ``get`` returns ``None`` to signal
    a cache miss (absent or expired).

    Args:
        max_size:    Maximum number of live entries (default 512).
        ttl_seconds: Seconds before an entry is considered stale (default 3600).
        clock:       Zero-argument callable returning seconds (default
                     ``time.monotonic``).
    """

    def __init__(
        self,
        max_size: int = 512,
        ttl_seconds: float = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size <= 0:
            raise ValueError(f"max_size must be a positive integer, got {max_size}")
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self._store: dict = {}          # key -> (value, inserted_at)
        self._max_size = max_size
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._lock = threading.Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    # ------------------------------------------------------------------
    # Core API
    # ------------------------------------------------------------------

    def get(self, key: Hashable) -> Optional[Any]:
        """
        Return the cached value for *key*, or ``None`` if absent or expired.

        Accessing a live entry promotes it to most-recently-used position.
        """
        with self._lock:
            return self._get_locked(key)

    def put(self, key: Hashable, value: Any) -> None:
        """
        Store *value* under *key*; writing an existing key restarts its TTL.
        """
        with self._lock:
            self._put_locked(key, value)

    def put_if_absent(self, key: Hashable, value: Any) -> bool:
        """
        Atomically store *value* unless a live entry already exists.

        Returns:
            True if the value was stored, False if a live entry was found.
        """
        with self._lock:
            if self._get_locked(key) is not None:
                return False
            self._put_locked(key, value)
            return True

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._store.clear()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return self._get_locked(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def keys(self) -> List[Hashable]:
        """Return non-expired keys in LRU order (oldest first, newest last)."""
        now = self._clock()
        with self._lock:
            return [
                k for k, (_, ts) in self._store.items()
                if now - ts < self._ttl
            ]

    # ------------------------------------------------------------------
    # Private helpers (must be called with _lock already held)
    # ------------------------------------------------------------------

    def _put_locked(self, key: Hashable, value: Any) -> None:
        # Remove first so re-insertion places the key at the tail (newest)
        self._store.pop(key, None)
        self._store[key] = (value, self._clock())
        while len(self._store) > self._max_size:
            self._store.pop(next(iter(self._store)))

    def _get_locked(self, key: Hashable) -> Optional[Any]:
        if key not in self._store:
            return None
        value, timestamp = self._store[key]
        if self._clock() - timestamp >= self._ttl:
            del self._store[key]   # Lazy TTL eviction
            return None
        del self._store[key]
        self._store[key] = (value, timestamp)
        return value
