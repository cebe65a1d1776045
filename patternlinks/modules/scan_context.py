"""
Scan Context
Owns every piece of state that outlives a single scan
"""

import threading
import time
from typing import Callable, Dict, Optional

from ..utils.caching import TTLCache
from ..utils.metrics import ScanMetrics
from .link_data import RuleKey
from .loop_guard import GuardLimits, LoopGuard
from .regex_cache import RegexCache

DEFAULT_CHUNK_SIZE = 50000
DEFAULT_DEBOUNCE_MS = 250
DEFAULT_MAX_MATCHES_PER_DOCUMENT = 1000


class ScanContext:
    """
    Shared state for a family of scans: the regex cache, the debounce table,
    per-scan match counters, the loop guard and the metrics.

    Hosts normally create one context and pass it to every RuleMatcher;
    tests create a fresh one per case.  Debounce stamps and match counters
    are keyed by :class:`RuleKey` (document plus the whole rule); guard
    sessions by :class:`ScanKey`.  Concurrent scans of different documents or
    rules never see each other's state.

    Args:
        debounce_ms: Minimum time between two scans of the same key.
            ``0`` disables debouncing.
        max_matches_per_document: Matches allowed in one scan before it stops.
        clock: Monotonic seconds clock shared by debounce and the guard.
    """

    def __init__(
        self,
        regex_cache: Optional[RegexCache] = None,
        guard_limits: Optional[GuardLimits] = None,
        debounce_ms: float = DEFAULT_DEBOUNCE_MS,
        max_matches_per_document: int = DEFAULT_MAX_MATCHES_PER_DOCUMENT,
        metrics: Optional[ScanMetrics] = None,
        clock: Callable[[], float] = time.monotonic,
        max_tracked_scans: int = 512,
    ):
        self.clock = clock
        self.metrics = metrics or ScanMetrics()
        self.regex_cache = regex_cache or RegexCache()
        self.loop_guard = LoopGuard(
            guard_limits, clock=clock, on_trip=self.metrics.record_guard_trip
        )
        self.debounce: Optional[TTLCache] = None
        if debounce_ms > 0:
            self.debounce = TTLCache(
                max_size=max_tracked_scans, ttl_seconds=debounce_ms / 1000, clock=clock
            )
        self.max_matches_per_document = max_matches_per_document
        self._match_counts: Dict[RuleKey, int] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, scan_config, **kwargs) -> "ScanContext":
        """Build a context from a :class:`ScanConfig`."""
        return cls(
            debounce_ms=scan_config.debounce_ms,
            max_matches_per_document=scan_config.max_matches_per_document,
            **kwargs,
        )

    def try_begin_scan(self, key: RuleKey) -> bool:
        """
        Claim the debounce slot for *key* and reset its match counter.

        Returns:
            False if a scan for the same key started within the debounce
            interval; the caller must skip this scan.
        """
        if self.debounce is not None and not self.debounce.put_if_absent(key, self.clock()):
            return False
        with self._lock:
            self._match_counts[key] = 0
        return True

    def should_continue_matching(self, key: RuleKey) -> bool:
        """Count one more match for *key*; False once the ceiling is exceeded."""
        with self._lock:
            count = self._match_counts.get(key, 0) + 1
            self._match_counts[key] = count
        return count <= self.max_matches_per_document

    def match_count(self, key: RuleKey) -> int:
        with self._lock:
            return self._match_counts.get(key, 0)

    def end_scan(self, key: RuleKey) -> None:
        with self._lock:
            self._match_counts.pop(key, None)

    def clear(self) -> None:
        """Forget everything: compiled patterns, debounce stamps, counters, sessions."""
        self.regex_cache.clear()
        if self.debounce is not None:
            self.debounce.clear()
        with self._lock:
            self._match_counts.clear()
        self.loop_guard.clear()
