"""
Pattern Compiler Utility

Validates rule patterns and translates the configuration's regex dialect
(JavaScript-style flag letters and named groups) into Python ``re`` terms.

SECURITY STORY: Rule patterns come from user settings and are run against
arbitrary documents.  A pattern that backtracks catastrophically can freeze
the host, so every pattern is screened here before it is compiled.  The
screen is a heuristic; the runtime LoopGuard is the real backstop.

MAINTENANCE WISDOM: Compile rule patterns only through RegexCache, which
calls these helpers, so the screen and the flag translation are applied
uniformly.
"""

import re
from typing import Dict, List, Pattern

MAX_PATTERN_LENGTH = 1000

# Find-all is implied by scanning with finditer; it is kept in Rule.flags for
# compatibility with the configuration format but maps to no re flag.
GLOBAL_FLAG = "g"

_FLAG_MAP: Dict[str, int] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    # str patterns are unicode-aware already
    "u": 0,
    "v": 0,
    # match indices are always available on re.Match
    "d": 0,
    GLOBAL_FLAG: 0,
}

_UNSUPPORTED_FLAGS = {
    "y": "sticky matching is not supported",
}

# Signatures are searched for in the pattern *source*.  Each one describes a
# quantified group that is repeated and then referenced again, the shape
# behind most catastrophic backtracking reports.
_CATASTROPHIC_SIGNATURES: List[Pattern] = [
    # (\w+)*\1, (.+)*\1, (a+)+\2 ...
    re.compile(r"\([^()]*[+*]\)[+*]\\\d"),
    # (\w+)\1+, (.+)\1* ...
    re.compile(r"\([^()]*[+*]\)\\\d[+*]"),
]

_NAMED_GROUP = re.compile(r"(?<!\\)\(\?<(?![=!])")
_NAMED_BACKREF = re.compile(r"\\k<([A-Za-z_][A-Za-z0-9_]*)>")


class InvalidPattern(ValueError):
    """Raised when a rule pattern is empty, too long, dangerous or unparsable."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern {pattern[:80]!r}: {reason}")


def check_catastrophic_backtracking(pattern: str) -> None:
    """
    Raise InvalidPattern if *pattern* contains a known backtracking signature.

    Note: This is a lightweight static check on the pattern text, not a
    ReDoS prover.  It rejects the nested-quantifier-plus-backreference forms
    that are statistically the worst offenders and lets everything else
    through to the runtime guard.
    """
    for signature in _CATASTROPHIC_SIGNATURES:
        if signature.search(pattern):
            raise InvalidPattern(pattern, "pattern may cause catastrophic backtracking")


def validate_pattern(pattern: str) -> None:
    """
    Run the cheap pre-compilation checks on a rule pattern.

    Raises:
        InvalidPattern: If the pattern is empty, whitespace only, longer than
            MAX_PATTERN_LENGTH or matches a backtracking signature.
    """
    if not pattern or not pattern.strip():
        raise InvalidPattern(pattern or "", "empty pattern")

    if len(pattern) > MAX_PATTERN_LENGTH:
        raise InvalidPattern(
            pattern, f"pattern too long ({len(pattern)} > {MAX_PATTERN_LENGTH} characters)"
        )

    check_catastrophic_backtracking(pattern)


def translate_flags(pattern: str, flags: str) -> int:
    """
    Convert configuration flag letters (``"gi"``, ``"ms"``...) into re flags.

    Raises:
        InvalidPattern: On a flag letter Python cannot honour.
    """
    result = 0
    for letter in flags:
        if letter in _UNSUPPORTED_FLAGS:
            raise InvalidPattern(pattern, f"flag {letter!r}: {_UNSUPPORTED_FLAGS[letter]}")
        if letter not in _FLAG_MAP:
            raise InvalidPattern(pattern, f"unknown flag {letter!r}")
        result |= _FLAG_MAP[letter]
    return result


def translate_pattern(pattern: str) -> str:
    """
    Rewrite the named-group syntax of the configuration dialect for ``re``.

    ``(?<name>...)`` becomes ``(?P<name>...)`` (lookbehinds are left alone)
    and ``\\k<name>`` becomes ``(?P=name)``.
    """
    pattern = _NAMED_GROUP.sub("(?P<", pattern)
    return _NAMED_BACKREF.sub(r"(?P=\1)", pattern)


def compile_rule_pattern(pattern: str, flags: str = "") -> Pattern:
    """
    Validate and compile a single rule pattern.

    Args:
        pattern: Regex source as written in the rule configuration.
        flags: Configuration flag letters.

    Returns:
        A compiled :class:`re.Pattern`.

    Raises:
        InvalidPattern: If validation or compilation fails.  The message of
            the underlying :class:`re.error` is kept as the reason.
    """
    validate_pattern(pattern)
    re_flags = translate_flags(pattern, flags)
    try:
        return re.compile(translate_pattern(pattern), re_flags)
    except re.error as e:
        raise InvalidPattern(pattern, f"invalid regex pattern: {e}") from e
