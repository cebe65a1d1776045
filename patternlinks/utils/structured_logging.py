"""
Structured Logging Module
Provides JSON-formatted logging for the debug log file
"""

import json
import logging
from typing import Any

from .sanitization import sanitize_for_logging


class JSONFormatter(logging.Formatter):
    """
    Custom formatter that outputs log records as JSON, one object per line.

    Link and guard events carry their details in ``extra_fields`` (pattern,
    flags, target, final URI, trip reason...), which end up as top-level
    keys so the file can be queried with jq.

    SECURITY STORY: String fields can hold arbitrary document text.  They
    are passed through ``sanitize_for_logging`` so a match spanning several
    lines, or containing terminal escapes, cannot break the one-record-per-line
    format.
    """

    # Field values longer than this are truncated
    MAX_FIELD_LENGTH = 1024

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as JSON.

        Args:
            record: Python logging.LogRecord to format

        Returns:
            JSON string with structured log data
        """
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_for_logging(record.getMessage(), self.MAX_FIELD_LENGTH),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Added via logger.debug("msg", extra={"extra_fields": {...}})
        if hasattr(record, "extra_fields"):
            log_data.update({
                k: self._sanitize_value(v)
                for k, v in record.extra_fields.items()
            })

        return json.dumps(log_data, default=str)

    def _sanitize_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return sanitize_for_logging(value, self.MAX_FIELD_LENGTH)
        return value
