"""
Sanitization Utility Module
Makes document text and rule patterns safe to put in log records.
"""

import re
import unicodedata

_ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


def sanitize_for_logging(text: str, max_length: int = 255) -> str:
    """
    Sanitize text for safe logging to prevent log injection and terminal manipulation.

    Matched document text is attacker-controlled as far as the log is
    concerned: a match spanning lines would otherwise forge extra log lines.

    Args:
        text: The input string to sanitize.
        max_length: Maximum allowed length for the log entry (truncates if longer).

    Returns:
        Sanitized string safe for logging.
    """
    if not text:
        return ""

    text = unicodedata.normalize('NFKC', text)

    text = text.replace('\n', '\\n').replace('\r', '\\r')

    text = _ANSI_ESCAPE.sub('', text)

    # Remaining control characters (ASCII 0-31 except tab)
    text = "".join(ch for ch in text if ch == '\t' or ord(ch) >= 32)

    if len(text) > max_length:
        text = text[:max_length] + "..."

    return text


def describe_span(text: str, start: int, end: int, context: int = 20) -> str:
    """
    Render ``text[start:end]`` with a little surrounding context for debug logs.

    The matched part is wrapped in ``>>`` / ``<<`` markers.
    """
    before = text[max(0, start - context):start]
    after = text[end:end + context]
    return sanitize_for_logging(f"{before}>>{text[start:end]}<<{after}", max_length=2 * context + 255)
