"""
Compiled Pattern Cache
Process-wide (or context-wide) memo of validated, compiled rule patterns
"""

import logging
import threading
from typing import Dict, Optional, Pattern, Tuple

from ..utils.pattern_compiler import InvalidPattern, compile_rule_pattern
from ..utils.sanitization import sanitize_for_logging


class RegexCache:
    """
    Maps ``(pattern, flags)`` to a compiled :class:`re.Pattern`.

    Entries are append-only until ``clear()``.  Compiled patterns carry no
    scan state (each scan iterates with its own ``finditer``), so one entry
    can serve concurrent scans of different documents.

    Compilation happens outside the lock; when two threads race on the same
    key the last writer wins, which is harmless because both compiled the
    same source with the same flags.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._compiled: Dict[Tuple[str, str], Pattern] = {}
        self._lock = threading.Lock()
        self.logger = logger or logging.getLogger("RegexCache")

    def get(self, pattern: str, flags: str = "") -> Pattern:
        """
        Return the compiled pattern, compiling and caching it on first use.

        Raises:
            InvalidPattern: If the pattern is rejected or fails to compile.
        """
        key = (pattern, flags)
        with self._lock:
            compiled = self._compiled.get(key)
        if compiled is not None:
            return compiled

        try:
            compiled = compile_rule_pattern(pattern, flags)
        except InvalidPattern as e:
            self.logger.error(
                "Rejected pattern %s (flags=%r): %s",
                sanitize_for_logging(pattern, max_length=120),
                flags,
                e.reason,
            )
            raise

        with self._lock:
            self._compiled[key] = compiled
        self.logger.debug("Compiled pattern %s (flags=%r)", sanitize_for_logging(pattern, max_length=120), flags)
        return compiled

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            self._compiled.clear()

    def __contains__(self, key: Tuple[str, str]) -> bool:
        with self._lock:
            return key in self._compiled

    def __len__(self) -> int:
        with self._lock:
            return len(self._compiled)
