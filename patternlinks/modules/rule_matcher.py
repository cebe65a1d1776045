"""
Rule Matching
Turns a rule and a document text into an ordered list of links
"""

import logging
import time
from typing import Hashable, List, Optional, Sequence

from ..utils.pattern_compiler import InvalidPattern
from ..utils.sanitization import describe_span, sanitize_for_logging
from .file_uri import FileUriNormalizer
from .link_data import LinkResult, Match, Rule, RuleKey
from .scan_context import DEFAULT_CHUNK_SIZE, ScanContext
from .template import TemplateSubstitutor
from .text_chunker import TextChunker


def format_hover_message(text: str, rule: Rule, uri: str) -> str:
    """Markdown tooltip describing how a link was produced (debug mode)."""
    description = f"\n* Description: {rule.description}" if rule.description else ""
    return (
        "**Pattern Links Debug Info**\n"
        f"* Matched text: `{text}`\n"
        f"* Pattern: `{rule.pattern}`\n"
        f"* Flags: `{rule.flags or 'none'}`\n"
        f"* Target template: `{rule.target_template}`{description}\n"
        f"* Final URI: {uri}"
    )


class RuleMatcher:
    """
    Orchestrates one scan: chunks -> compiled pattern -> guarded match loop
    -> template rendering -> file URI normalization.

    Results are in document order.  A scan that is stopped early (guard
    trip or match ceiling) returns the links found so far.
    """

    def __init__(
        self,
        context: Optional[ScanContext] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        debug: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        self.context = context or ScanContext()
        self.chunker = TextChunker(self.context, chunk_size)
        self.substitutor = TemplateSubstitutor()
        self.normalizer = FileUriNormalizer()
        self.debug = debug
        self.logger = logger or logging.getLogger("RuleMatcher")

    def find_links(
        self,
        rule: Rule,
        document_identity: Hashable,
        text: str,
        skip_substrings: Sequence[str] = (),
    ) -> List[LinkResult]:
        """
        Scan *text* with *rule*.

        Args:
            rule: The rule to apply.
            document_identity: Stable token naming the document (e.g. its URI).
            text: Full document text.
            skip_substrings: Extra self-exclusion tokens on top of the rule's
                own pattern source.

        Returns:
            The links found, ordered by position.

        Raises:
            InvalidPattern: If the rule's pattern is rejected.  Nothing is
                scanned in that case.
        """
        try:
            regex = self.context.regex_cache.get(rule.pattern, rule.flags)
        except InvalidPattern:
            self.context.metrics.record_invalid_pattern()
            raise

        key = RuleKey(document_identity, rule)
        guard = self.context.loop_guard
        links: List[LinkResult] = []
        tokens = (rule.pattern,) + tuple(skip_substrings)
        started = time.perf_counter()
        scanned = False

        self.logger.debug(
            "Scanning %s with pattern %s (flags=%r)",
            document_identity,
            sanitize_for_logging(rule.pattern, max_length=120),
            rule.flags,
        )

        try:
            for chunk in self.chunker.chunks(document_identity, text, tokens, rule=rule):
                if not chunk.eligible:
                    continue
                scanned = True

                guard.start_monitoring(document_identity, rule.pattern)
                try:
                    # finditer keeps its own cursor, so the cached pattern
                    # starts fresh for every chunk.
                    for m in regex.finditer(chunk.text):
                        match = Match.from_re_match(m, chunk.offset)

                        if not self.context.should_continue_matching(key):
                            self.logger.info(
                                "Match limit of %d reached for %s; stopping scan",
                                self.context.max_matches_per_document,
                                document_identity,
                            )
                            self.context.metrics.record_ceiling_hit()
                            return links

                        if not guard.check_iteration(document_identity, rule.pattern, match.start):
                            return links

                        link = self._build_link(rule, match, text)
                        if link is not None:
                            links.append(link)
                finally:
                    guard.stop_monitoring(document_identity, rule.pattern)
        finally:
            self.context.end_scan(key)
            if scanned:
                self.context.metrics.record_scan((time.perf_counter() - started) * 1000)

        return links

    def create_uri(self, rule: Rule, match: Match) -> str:
        """
        Render the target URI for one match.

        For file rules a match beginning with ``@document`` is rewritten to a
        file URI directly instead of going through the template.
        """
        if rule.is_file_rule and self.normalizer.is_document_tag(match.full_text):
            uri = self.normalizer.rewrite_document_tag(match.full_text)
        else:
            uri = self.substitutor.render(rule.target_template, match)
        return self.normalizer.normalize(uri) if uri else ""

    def _build_link(self, rule: Rule, match: Match, text: str) -> Optional[LinkResult]:
        if match.start == match.end:
            return None

        uri = self.create_uri(rule, match)
        if not uri:
            self.logger.debug("Empty target for match at %d; no link", match.start)
            return None

        tooltip = format_hover_message(match.full_text, rule, uri) if self.debug else None
        self.context.metrics.record_link(rule.pattern)
        if self.logger.isEnabledFor(logging.DEBUG):
            self._log_link(rule, match, text, uri)
        return LinkResult(span=(match.start, match.end), target_uri=uri, tooltip=tooltip)

    def _log_link(self, rule: Rule, match: Match, text: str, uri: str) -> None:
        self.logger.debug(
            "Link created: %s -> %s",
            sanitize_for_logging(match.full_text, max_length=120),
            uri,
            extra={"extra_fields": {
                "event": "link_created",
                "text": sanitize_for_logging(match.full_text),
                "context": describe_span(text, match.start, match.end),
                "pattern": rule.pattern,
                "flags": rule.flags,
                "target": rule.target_template,
                "description": rule.description,
                "uri": uri,
                "start": match.start,
                "end": match.end,
            }},
        )
