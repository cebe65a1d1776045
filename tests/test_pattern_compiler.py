"""
Unit tests for patternlinks/utils/pattern_compiler.py

Tests cover:
- validate_pattern: empty, whitespace-only and over-long patterns
- check_catastrophic_backtracking: known signatures raise, safe patterns pass
- translate_flags: flag letter mapping, unknown and unsupported letters
- translate_pattern: named group and named backreference rewriting
- compile_rule_pattern: compile errors surface as InvalidPattern
"""

import re
import pytest

from patternlinks.utils.pattern_compiler import (
    MAX_PATTERN_LENGTH,
    InvalidPattern,
    check_catastrophic_backtracking,
    compile_rule_pattern,
    translate_flags,
    translate_pattern,
    validate_pattern,
)


# ---------------------------------------------------------------------------
# validate_pattern
# ---------------------------------------------------------------------------


class TestValidatePattern:
    @pytest.mark.parametrize("pattern", ["", "   ", "\t\n"])
    def test_empty_patterns_raise(self, pattern):
        with pytest.raises(InvalidPattern, match="empty pattern"):
            validate_pattern(pattern)

    def test_pattern_at_limit_passes(self):
        validate_pattern("a" * MAX_PATTERN_LENGTH)

    def test_pattern_over_limit_raises(self):
        with pytest.raises(InvalidPattern, match="too long"):
            validate_pattern("a" * (MAX_PATTERN_LENGTH + 1))

    def test_invalid_pattern_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_pattern("")


# ---------------------------------------------------------------------------
# check_catastrophic_backtracking
# ---------------------------------------------------------------------------


class TestCatastrophicBacktracking:
    def test_safe_patterns_pass(self):
        """Typical link rule patterns should not raise."""
        safe = [
            r"FOO-\d+",
            r"(FOO|BAR)-(\d+)",
            r"@document\s+(.*)",
            r"file://(/[^ \n]*(?:%20[^ \n]*)*)",
            r"(\w+)-\1",
        ]
        for pattern in safe:
            check_catastrophic_backtracking(pattern)  # must not raise

    @pytest.mark.parametrize(
        "bad_pattern",
        [
            r"(\w+)*\1",
            r"(.+)*\1",
            r"(\w+)\1+",
            r"x(a+)+\1y",
        ],
    )
    def test_known_signatures_raise(self, bad_pattern):
        with pytest.raises(InvalidPattern, match="catastrophic backtracking"):
            check_catastrophic_backtracking(bad_pattern)


# ---------------------------------------------------------------------------
# translate_flags / translate_pattern
# ---------------------------------------------------------------------------


class TestTranslateFlags:
    def test_global_flag_maps_to_nothing(self):
        assert translate_flags("p", "g") == 0

    def test_common_flags(self):
        assert translate_flags("p", "gi") == re.IGNORECASE
        assert translate_flags("p", "ms") == re.MULTILINE | re.DOTALL

    def test_unicode_and_indices_flags_accepted(self):
        assert translate_flags("p", "gud") == 0

    def test_unknown_flag_raises(self):
        with pytest.raises(InvalidPattern, match="unknown flag 'x'"):
            translate_flags("p", "gx")

    def test_sticky_flag_rejected(self):
        with pytest.raises(InvalidPattern, match="sticky"):
            translate_flags("p", "gy")


class TestTranslatePattern:
    def test_named_group_rewritten(self):
        assert translate_pattern(r"(?<id>\d+)") == r"(?P<id>\d+)"

    def test_lookbehind_untouched(self):
        assert translate_pattern(r"(?<=a)b(?<!c)") == r"(?<=a)b(?<!c)"

    def test_named_backreference_rewritten(self):
        assert translate_pattern(r"(?<q>['\"]).*?\k<q>") == r"(?P<q>['\"]).*?(?P=q)"

    def test_plain_pattern_unchanged(self):
        assert translate_pattern(r"(FOO|BAR)-(\d+)") == r"(FOO|BAR)-(\d+)"


# ---------------------------------------------------------------------------
# compile_rule_pattern
# ---------------------------------------------------------------------------


class TestCompileRulePattern:
    def test_compiles_with_flags(self):
        compiled = compile_rule_pattern(r"bar-(\d+)", "ig")
        assert compiled.search("BAR-72").group(1) == "72"

    def test_named_groups_usable(self):
        compiled = compile_rule_pattern(r"(?<key>[A-Z]+)-\d+", "g")
        assert compiled.search("ABC-1").group("key") == "ABC"

    def test_compile_error_keeps_diagnostic(self):
        with pytest.raises(InvalidPattern, match="invalid regex pattern") as exc_info:
            compile_rule_pattern("(unclosed", "g")
        assert exc_info.value.pattern == "(unclosed"
        assert isinstance(exc_info.value.__cause__, re.error)

    def test_signature_checked_before_compiling(self):
        with pytest.raises(InvalidPattern, match="catastrophic"):
            compile_rule_pattern(r"(\w+)*\1", "g")
