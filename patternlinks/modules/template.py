"""
Target Template Rendering
Substitutes capture groups from a match into a rule's target URI template
"""

import re

from .link_data import Match

# One token per alternative: an escaped dollar, or a $<digits> placeholder.
_TOKEN_PATTERN = re.compile(r"\\\$|\$(\d+)")


class TemplateSubstitutor:
    """
    Renders target templates such as ``https://example.com/$1/$2``.

    - ``$0`` is the full match, ``$1``.. ``$N`` the capture groups.
    - A group that did not participate renders as an empty string.
    - ``$i`` with ``i`` greater than the group count is left as written.
    - ``\\$`` renders as a literal ``$``.

    The template is tokenized in a single left-to-right pass, so text coming
    from the match is never re-scanned for placeholders or escapes.
    """

    def render(self, template: str, match: Match) -> str:
        group_count = len(match.captures)

        def replace(token: "re.Match") -> str:
            digits = token.group(1)
            if digits is None:
                return "$"
            index = int(digits)
            if index > group_count:
                return token.group(0)
            return match.group(index) or ""

        return _TOKEN_PATTERN.sub(replace, template)
