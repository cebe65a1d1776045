"""
Runaway Scan Detection
Watches each (document, pattern) scan and tells the caller when to give up
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Optional

from .link_data import ScanKey


@dataclass(frozen=True)
class GuardLimits:
    """Thresholds past which a scan is considered runaway."""
    max_iterations: int = 10000
    max_elapsed_ms: float = 5000
    # Trips on the (max_same_position + 1)th consecutive hit at one offset
    max_same_position: int = 5
    max_matches_per_window: int = 1000
    window_ms: float = 1000


@dataclass
class ScanSession:
    """Counters for one monitored scan.  Times are clock() seconds."""
    started_at: float
    window_started_at: float
    iterations: int = 0
    last_match_position: int = -1
    same_position_count: int = 0
    matches_in_window: int = 0
    trip_reason: Optional[str] = None

    @property
    def tripped(self) -> bool:
        return self.trip_reason is not None


class LoopGuard:
    """
    Detects infinite or pathological regex loops.

    Usage per chunk::

        guard.start_monitoring(doc, pattern)
        try:
            for m in regex.finditer(text):
                if not guard.check_iteration(doc, pattern, m.start()):
                    break
                ...
        finally:
            guard.stop_monitoring(doc, pattern)

    A tripped session stays tripped until ``stop_monitoring`` discards it.
    """

    def __init__(
        self,
        limits: Optional[GuardLimits] = None,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
        on_trip: Optional[Callable[[str], None]] = None,
    ):
        self.limits = limits or GuardLimits()
        self._clock = clock
        self.logger = logger or logging.getLogger("LoopGuard")
        self._on_trip = on_trip
        self._sessions: Dict[ScanKey, ScanSession] = {}
        self._lock = threading.Lock()

    def start_monitoring(self, document_identity: Hashable, pattern: str) -> None:
        """Begin (or restart) monitoring the scan for this key."""
        now = self._clock()
        with self._lock:
            self._sessions[ScanKey(document_identity, pattern)] = ScanSession(
                started_at=now, window_started_at=now
            )

    def stop_monitoring(self, document_identity: Hashable, pattern: str) -> None:
        """Discard the session for this key; unknown keys are ignored."""
        with self._lock:
            self._sessions.pop(ScanKey(document_identity, pattern), None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def session(self, document_identity: Hashable, pattern: str) -> Optional[ScanSession]:
        with self._lock:
            return self._sessions.get(ScanKey(document_identity, pattern))

    def is_monitoring(self, document_identity: Hashable, pattern: str) -> bool:
        return self.session(document_identity, pattern) is not None

    def check_iteration(self, document_identity: Hashable, pattern: str, match_position: int) -> bool:
        """
        Record one match at *match_position* and evaluate the trip conditions.

        Returns:
            True if the scan may continue, False if it must stop now.
        """
        session = self.session(document_identity, pattern)
        if session is None:
            self.logger.debug("No monitoring session for %r", ScanKey(document_identity, pattern))
            return False
        if session.tripped:
            return False

        limits = self.limits
        session.iterations += 1
        now = self._clock()
        elapsed_ms = (now - session.started_at) * 1000

        if match_position == session.last_match_position:
            session.same_position_count += 1
        else:
            session.same_position_count = 1
        session.last_match_position = match_position

        if (now - session.window_started_at) * 1000 >= limits.window_ms:
            session.matches_in_window = 0
            session.window_started_at = now
        session.matches_in_window += 1

        if session.iterations > limits.max_iterations:
            reason, detail = "iterations", f"Too many iterations ({session.iterations})"
        elif elapsed_ms > limits.max_elapsed_ms:
            reason, detail = "elapsed", f"Execution time exceeded ({elapsed_ms:.0f}ms)"
        elif session.same_position_count > limits.max_same_position:
            reason, detail = "same_position", f"Too many matches at same position ({match_position})"
        elif session.matches_in_window > limits.max_matches_per_window:
            reason, detail = "match_rate", f"Too many matches per window ({session.matches_in_window})"
        else:
            return True

        session.trip_reason = reason
        self._log_trip(document_identity, pattern, detail, session, elapsed_ms)
        if self._on_trip is not None:
            self._on_trip(reason)
        return False

    def _log_trip(self, document_identity, pattern, detail, session, elapsed_ms):
        self.logger.warning(
            "Guard tripped: potential infinite loop in %s: %s",
            document_identity,
            detail,
            extra={"extra_fields": {
                "event": "guard_trip",
                "document": str(document_identity),
                "pattern": pattern,
                "reason": session.trip_reason,
                "iterations": session.iterations,
                "elapsed_ms": round(elapsed_ms, 1),
                "same_position_count": session.same_position_count,
                "matches_in_window": session.matches_in_window,
                "last_match_position": session.last_match_position,
            }},
        )
