#!/usr/bin/env python3
"""
Pattern Links
Scans documents with the configured rules and prints the links found
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from patternlinks.modules.link_data import Rule
from patternlinks.modules.rule_matcher import RuleMatcher
from patternlinks.modules.scan_context import ScanContext
from patternlinks.modules.text_document import DocumentLink, Range, TextDocument
from patternlinks.utils.colors import Colors
from patternlinks.utils.config import Config, ConfigurationError, load_rules_file
from patternlinks.utils.logging_utils import setup_logging
from patternlinks.utils.pattern_compiler import InvalidPattern
from patternlinks.utils.validators import validate_rules

__version__ = "0.3.0"


class PatternLinksScanner:
    """Applies every configured rule to a document"""

    def __init__(self, config: Config, context: Optional[ScanContext] = None):
        """
        Initialize scanner

        Args:
            config: Loaded configuration
            context: Shared scan state (a fresh one is built from config.scan
                when omitted)
        """
        self.config = config
        self.logger = logging.getLogger("PatternLinksScanner")
        self.context = context or ScanContext.from_config(config.scan)
        self.matcher = RuleMatcher(
            self.context,
            chunk_size=config.scan.chunk_size,
            debug=config.debug.enabled,
        )

    @property
    def rules(self) -> List[Rule]:
        return self.config.rules

    def rules_for(self, language_id: str) -> List[Rule]:
        return [rule for rule in self.rules if rule.applies_to(language_id)]

    def scan_document(self, document: TextDocument) -> List[DocumentLink]:
        """
        Run all rules that apply to the document's language.

        Invalid rules are logged and skipped; links from the remaining rules
        are still returned, ordered by position.
        """
        text = document.get_text()
        links = []

        for rule in self.rules_for(document.language_id):
            try:
                results = self.matcher.find_links(rule, document.uri, text)
            except InvalidPattern as e:
                self.logger.error("Skipping rule %r: %s", rule.description or rule.pattern, e.reason)
                continue

            for result in results:
                links.append(DocumentLink(
                    range=Range(document.position_at(result.start), document.position_at(result.end)),
                    target=result.target_uri,
                    tooltip=result.tooltip,
                ))

        links.sort(key=lambda link: link.range)
        return links

    def scan_path(self, path: str, language_id: Optional[str] = None) -> List[DocumentLink]:
        document = TextDocument.from_path(path, language_id=language_id)
        self.logger.debug("Scanning %s as %s", path, document.language_id)
        return self.scan_document(document)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pattern-links",
        description="Find configured patterns in files and print the links they map to.",
    )
    parser.add_argument("files", nargs="*", help="Files to scan")
    parser.add_argument("--env", default=".env", help="Environment file (default: .env)")
    parser.add_argument("--rules", help="JSON rules file (overrides PATTERNLINKS_RULES_FILE)")
    parser.add_argument("--language", help="Language id to use instead of guessing from the extension")
    parser.add_argument("--json", action="store_true", help="Print links as a JSON array")
    parser.add_argument("--check", action="store_true", help="Validate the rules and exit")
    parser.add_argument("--stats", action="store_true", help="Print scan metrics to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def format_link(path: str, link: DocumentLink, color: bool = False) -> str:
    start = link.range.start
    location = f"{path}:{start.line + 1}:{start.character + 1}"
    return f"{Colors.location(location, color)}: {Colors.link(link.target, color)}"


def link_to_dict(path: str, link: DocumentLink) -> dict:
    return {
        "path": path,
        "start": {"line": link.range.start.line, "character": link.range.start.character},
        "end": {"line": link.range.end.line, "character": link.range.end.character},
        "target": link.target,
        "tooltip": link.tooltip,
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)

    try:
        config = Config(args.env)
        if args.rules:
            config.rules = load_rules_file(args.rules)
        setup_logging(config.debug)
        config.validate()
    except ValueError as e:
        # ConfigurationError is a ValueError too
        kind = "Configuration error" if isinstance(e, ConfigurationError) else "Invalid configuration"
        print(Colors.error(f"{kind}: {e}", sys.stderr.isatty()), file=sys.stderr)
        return 1

    problems = validate_rules(config.rules)
    for problem in problems:
        logging.getLogger("PatternLinks").warning(problem)
    if args.check:
        print(f"{len(config.rules)} rule(s), {len(problems)} problem(s)")
        return 1 if problems else 0

    scanner = PatternLinksScanner(config)
    color = sys.stdout.isatty()
    collected = []
    exit_code = 0

    for path in args.files:
        try:
            links = scanner.scan_path(path, args.language)
        except OSError as e:
            print(Colors.error(f"{path}: {e}", sys.stderr.isatty()), file=sys.stderr)
            exit_code = 1
            continue

        if args.json:
            collected.extend(link_to_dict(path, link) for link in links)
        else:
            for link in links:
                print(format_link(path, link, color))

    if args.json:
        print(json.dumps(collected, indent=2))

    if args.stats:
        print(json.dumps(scanner.context.metrics.get_summary(), indent=2, default=str), file=sys.stderr)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
