"""
Rule Validation
Dry-run checks on configured rules, reported as human-readable messages
"""

import re
from typing import List, Optional

from .pattern_compiler import InvalidPattern, compile_rule_pattern
from ..modules.link_data import Rule

_PLACEHOLDER = re.compile(r"(?<!\\)\$(\d+)")


def validate_rules(rules: List[Rule]) -> List[str]:
    """
    Check configured rules without scanning anything.
    Returns a list of error messages, one per problem found.

    A rule whose template names a group the pattern does not have still
    works (the placeholder is left in the link), so that is reported too.
    """
    errors = []

    for number, rule in enumerate(rules, start=1):
        label = rule.description or rule.pattern
        try:
            compiled = compile_rule_pattern(rule.pattern, rule.flags)
        except InvalidPattern as e:
            errors.append(f"Rule {number} ({label}): {e.reason}")
            continue

        highest = _highest_placeholder(rule.target_template)
        if highest is not None and highest > compiled.groups:
            errors.append(
                f"Rule {number} ({label}): target uses ${highest} but the pattern "
                f"has {compiled.groups} capture group(s)"
            )

    return errors


def _highest_placeholder(template: str) -> Optional[int]:
    indices = [int(m.group(1)) for m in _PLACEHOLDER.finditer(template)]
    return max(indices) if indices else None
