"""
Tests for the compiled pattern cache
"""

import threading
import unittest

from patternlinks.modules.regex_cache import RegexCache
from patternlinks.utils.pattern_compiler import InvalidPattern


class TestRegexCache(unittest.TestCase):
    """Test cases for RegexCache"""

    def setUp(self):
        self.cache = RegexCache()

    def test_returns_same_object_for_same_key(self):
        first = self.cache.get(r"FOO-\d+", "g")
        second = self.cache.get(r"FOO-\d+", "g")
        self.assertIs(first, second)
        self.assertEqual(len(self.cache), 1)

    def test_flags_are_part_of_the_key(self):
        plain = self.cache.get("bar", "g")
        folded = self.cache.get("bar", "ig")
        self.assertIsNot(plain, folded)
        self.assertIsNone(plain.search("BAR"))
        self.assertIsNotNone(folded.search("BAR"))
        self.assertIn(("bar", "ig"), self.cache)

    def test_invalid_pattern_not_cached(self):
        with self.assertRaises(InvalidPattern):
            self.cache.get("(oops", "g")
        self.assertEqual(len(self.cache), 0)

    def test_empty_pattern_rejected(self):
        with self.assertRaises(InvalidPattern):
            self.cache.get("", "g")

    def test_dangerous_pattern_rejected(self):
        with self.assertRaises(InvalidPattern):
            self.cache.get(r"(.+)*\1", "g")

    def test_too_long_pattern_rejected(self):
        with self.assertRaises(InvalidPattern):
            self.cache.get("x" * 1001, "g")

    def test_clear_empties_cache(self):
        self.cache.get("a", "g")
        self.cache.get("b", "g")
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)
        self.assertNotIn(("a", "g"), self.cache)

    def test_cached_pattern_keeps_no_scan_state(self):
        """Two interleaved scans with one cached pattern see independent cursors"""
        compiled = self.cache.get(r"\d", "g")
        first = compiled.finditer("1 2 3")
        second = compiled.finditer("1 2 3")
        self.assertEqual(next(first).start(), 0)
        self.assertEqual(next(first).start(), 2)
        self.assertEqual(next(second).start(), 0)

    def test_concurrent_first_use(self):
        results = []

        def worker():
            results.append(self.cache.get(r"(FOO|BAR)-(\d+)", "g"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(results), 8)
        self.assertEqual(len(self.cache), 1)
        self.assertTrue(all(r.pattern == results[0].pattern for r in results))


if __name__ == '__main__':
    unittest.main()
