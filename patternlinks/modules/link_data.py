"""
Link Data Model
Value types shared by the matching pipeline: rules, matches and link results
"""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Hashable, Iterable, Mapping, NamedTuple, Optional, Tuple

from ..utils.pattern_compiler import GLOBAL_FLAG

ALL_LANGUAGES = "*"
FILE_SCHEME = "file://"


def normalize_flags(flags: Optional[str]) -> str:
    """
    Deduplicate flag letters (first occurrence wins) and make sure the
    find-all flag is present exactly once.

    >>> normalize_flags("i")
    'ig'
    >>> normalize_flags("gig")
    'gi'
    """
    seen = []
    for letter in flags or "":
        if letter not in seen:
            seen.append(letter)
    if GLOBAL_FLAG not in seen:
        seen.append(GLOBAL_FLAG)
    return "".join(seen)


@dataclass(frozen=True)
class Rule:
    """
    A configured pattern -> target template mapping.

    Flags are normalized on construction, so ``Rule("x", "i", "...").flags``
    is ``"ig"``.  Whether the pattern compiles is checked by RegexCache when
    the rule is first scanned.
    """
    pattern: str
    flags: str
    target_template: str
    language_filter: FrozenSet[str] = field(default_factory=lambda: frozenset({ALL_LANGUAGES}))
    description: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "flags", normalize_flags(self.flags))
        languages = frozenset(lang for lang in self.language_filter if lang)
        object.__setattr__(self, "language_filter", languages or frozenset({ALL_LANGUAGES}))

    @classmethod
    def from_config(cls, entry: Mapping[str, Any]) -> Optional["Rule"]:
        """
        Build a rule from one entry of the rule configuration.

        Returns ``None`` for entries without ``linkPattern`` or ``linkTarget``;
        such entries are dropped, not reported.  ``languages`` may be a list of
        language ids or a single id.
        """
        if not isinstance(entry, Mapping):
            return None
        pattern = entry.get("linkPattern")
        target = entry.get("linkTarget")
        if not pattern or not target:
            return None

        languages: Iterable[str] = entry.get("languages") or []
        if isinstance(languages, str):
            languages = [languages]
        return cls(
            pattern=str(pattern),
            flags=str(entry.get("linkPatternFlags") or ""),
            target_template=str(target),
            language_filter=frozenset(str(lang) for lang in languages if lang),
            description=entry.get("description") or None,
        )

    @property
    def is_file_rule(self) -> bool:
        """Rules that produce file links get the ``@document`` rewrite."""
        return self.pattern.startswith(FILE_SCHEME) or self.target_template.startswith(FILE_SCHEME)

    def applies_to(self, language_id: str) -> bool:
        return ALL_LANGUAGES in self.language_filter or language_id in self.language_filter


class ScanKey(NamedTuple):
    """Identifies one scan: the document being scanned and the rule pattern."""
    document_identity: Hashable
    pattern: str


class RuleKey(NamedTuple):
    """
    Identifies one rule applied to one document.

    Debounce stamps and match counters use it, so two rules that share a
    pattern but differ in flags or target are scanned independently.
    """
    document_identity: Hashable
    rule: "Rule"


@dataclass(frozen=True)
class Match:
    """
    One regex match, detached from the ``re.Match`` it came from.

    ``captures[0]`` is group 1; a group that did not take part in the match
    is ``None``.  Offsets are absolute document offsets.
    """
    full_text: str
    captures: Tuple[Optional[str], ...]
    start: int
    end: int

    @classmethod
    def from_re_match(cls, m, offset: int = 0) -> "Match":
        return cls(
            full_text=m.group(0),
            captures=m.groups(),
            start=offset + m.start(),
            end=offset + m.end(),
        )

    def group(self, index: int) -> Optional[str]:
        """Return group *index* (0 = full match), ``None`` if it did not participate."""
        if index == 0:
            return self.full_text
        return self.captures[index - 1]


@dataclass(frozen=True)
class LinkResult:
    """A span of the scanned text and the URI it links to."""
    span: Tuple[int, int]
    target_uri: str
    tooltip: Optional[str] = None

    @property
    def start(self) -> int:
        return self.span[0]

    @property
    def end(self) -> int:
        return self.span[1]
