"""
Text Chunking
Splits a document into bounded slices and decides whether a scan may run at all
"""

import logging
from dataclasses import dataclass
from typing import Hashable, Iterator, Optional, Sequence

from .link_data import Rule, RuleKey
from .scan_context import DEFAULT_CHUNK_SIZE, ScanContext


@dataclass(frozen=True)
class Chunk:
    """A slice of the document starting at absolute offset ``offset``."""
    text: str
    offset: int
    eligible: bool = True


SKIPPED = Chunk(text="", offset=0, eligible=False)


class TextChunker:
    """
    Produces the chunks a scan iterates over.

    A scan yields a single ineligible placeholder instead of real chunks
    when:

    - a scan for the same key started within the debounce interval, or
    - the text contains one of the skip substrings (usually the rule's own
      pattern source), so a rule never links its own configuration echoed
      into a document.

    Chunks do not overlap.  A match that straddles two chunks is not found
    as a whole: either it is missed, or the part inside the first chunk
    matches on its own (``FOO-1`` out of ``FOO-1|23``) and produces a link
    to the truncated text.
    """

    def __init__(
        self,
        context: ScanContext,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        logger: Optional[logging.Logger] = None,
    ):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be a positive integer, got {chunk_size}")
        self.context = context
        self.chunk_size = chunk_size
        self.logger = logger or logging.getLogger("TextChunker")

    def chunks(
        self,
        document_identity: Hashable,
        text: str,
        skip_substrings: Sequence[str] = (),
        rule: Optional[Rule] = None,
    ) -> Iterator[Chunk]:
        """
        Yield the chunks of *text* for one scan.

        Each call returns a fresh, finite generator; nothing is shared
        between two iterations apart from the debounce stamp taken when the
        generator starts.  The stamp is keyed by *rule* and the document, so
        different rules never debounce each other.
        """
        key = RuleKey(document_identity, rule)
        if not self.context.try_begin_scan(key):
            self.logger.debug("Debounced scan of %s", document_identity)
            self.context.metrics.record_skip("debounce")
            yield SKIPPED
            return

        if any(token and token in text for token in skip_substrings):
            self.logger.debug("Skipping %s: text contains a self-exclusion token", document_identity)
            self.context.metrics.record_skip("self_exclusion")
            yield SKIPPED
            return

        for offset in range(0, len(text), self.chunk_size):
            yield Chunk(text=text[offset:offset + self.chunk_size], offset=offset)
