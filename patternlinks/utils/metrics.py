"""
Metrics Collection Module
Tracks scan volume, link output and guard activity
"""

from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Deque, Dict


@dataclass
class ScanMetrics:
    """
    Collects operational metrics for the link engine.

    PATTERN RECOGNITION: Guard trips and ceiling hits are the interesting
    signals here.  A rule that trips the LoopGuard on every document is a
    rule that needs rewriting, and the per-reason counter tells you which
    kind of runaway it is.
    """

    # Scans that actually ran over at least one eligible chunk
    scans_run: int = 0

    # Scans skipped before matching, by reason ("debounce", "self_exclusion")
    scans_skipped: Counter = field(default_factory=Counter)

    # Links emitted, keyed by rule pattern
    links_created: Counter = field(default_factory=Counter)

    # LoopGuard trips by reason ("iterations", "elapsed", ...)
    guard_trips: Counter = field(default_factory=Counter)

    # Scans stopped by the per-document match ceiling
    ceiling_hits: int = 0

    # Rules rejected by RegexCache
    invalid_patterns: int = 0

    # Wall time per scan in milliseconds
    # SECURITY STORY: bounded so a host scanning forever cannot grow it.
    scan_time_ms: Deque[float] = field(default_factory=lambda: deque(maxlen=1000))

    start_time: datetime = field(default_factory=datetime.now)

    def record_scan(self, time_ms: float):
        """Record a completed scan and how long it took."""
        self.scans_run += 1
        self.scan_time_ms.append(time_ms)

    def record_skip(self, reason: str):
        self.scans_skipped[reason] += 1

    def record_link(self, pattern: str):
        self.links_created[pattern] += 1

    def record_guard_trip(self, reason: str):
        """
        Record that the LoopGuard stopped a scan.

        Args:
            reason: Short trip identifier (e.g. "same_position")
        """
        self.guard_trips[reason] += 1

    def record_ceiling_hit(self):
        self.ceiling_hits += 1

    def record_invalid_pattern(self):
        self.invalid_patterns += 1

    def get_summary(self) -> Dict:
        """
        Get a summary of all metrics.

        Returns:
            Dictionary suitable for logging or JSON export
        """
        stats = {}
        if self.scan_time_ms:
            sorted_times = sorted(self.scan_time_ms)
            n = len(sorted_times)
            stats = {
                "avg_ms": sum(sorted_times) / n,
                "min_ms": sorted_times[0],
                "max_ms": sorted_times[-1],
                "p50_ms": sorted_times[n // 2],
                "p95_ms": sorted_times[int(n * 0.95)] if n > 1 else sorted_times[0],
            }

        return {
            "uptime_seconds": (datetime.now() - self.start_time).total_seconds(),
            "scans_run": self.scans_run,
            "scans_skipped": dict(self.scans_skipped),
            "links_created": sum(self.links_created.values()),
            "links_by_pattern": dict(self.links_created),
            "guard_trips": dict(self.guard_trips),
            "ceiling_hits": self.ceiling_hits,
            "invalid_patterns": self.invalid_patterns,
            "scan_time_stats": stats,
        }

    def reset(self):
        """Reset all metrics to initial state."""
        self.scans_run = 0
        self.scans_skipped.clear()
        self.links_created.clear()
        self.guard_trips.clear()
        self.ceiling_hits = 0
        self.invalid_patterns = 0
        self.scan_time_ms.clear()
        self.start_time = datetime.now()
