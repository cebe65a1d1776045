"""
Tests for structured logging functionality
"""

import json
import logging
import sys
import unittest

from patternlinks.utils.structured_logging import JSONFormatter


def make_record(msg="Test message", level=logging.INFO, args=(), exc_info=None, **extra):
    record = logging.LogRecord(
        name="test_logger",
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=args,
        exc_info=exc_info,
        func="test_function",
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter(unittest.TestCase):
    """Test cases for JSONFormatter"""

    def setUp(self):
        self.formatter = JSONFormatter()

    def test_basic_json_format(self):
        data = json.loads(self.formatter.format(make_record()))

        self.assertIn("timestamp", data)
        self.assertEqual(data["level"], "INFO")
        self.assertEqual(data["logger"], "test_logger")
        self.assertEqual(data["message"], "Test message")
        self.assertEqual(data["module"], "test")
        self.assertEqual(data["function"], "test_function")
        self.assertEqual(data["line"], 42)

    def test_message_arguments_applied(self):
        record = make_record("Link created: %s -> %s", args=("FOO-1", "https://x/FOO-1"))
        data = json.loads(self.formatter.format(record))
        self.assertEqual(data["message"], "Link created: FOO-1 -> https://x/FOO-1")

    def test_extra_fields_become_keys(self):
        record = make_record(extra_fields={
            "event": "link_created",
            "pattern": r"FOO-\d+",
            "start": 3,
        })
        data = json.loads(self.formatter.format(record))
        self.assertEqual(data["event"], "link_created")
        self.assertEqual(data["pattern"], r"FOO-\d+")
        self.assertEqual(data["start"], 3)

    def test_multiline_values_stay_on_one_line(self):
        record = make_record(
            "matched\nfake record",
            extra_fields={"text": "line one\nline two\x1b[31m"},
        )
        result = self.formatter.format(record)
        self.assertNotIn("\n", result)
        data = json.loads(result)
        self.assertEqual(data["message"], "matched\\nfake record")
        self.assertEqual(data["text"], "line one\\nline two")

    def test_long_values_truncated(self):
        record = make_record(extra_fields={"text": "a" * 5000})
        data = json.loads(self.formatter.format(record))
        self.assertEqual(len(data["text"]), JSONFormatter.MAX_FIELD_LENGTH + 3)

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = make_record(level=logging.ERROR, exc_info=sys.exc_info())
        data = json.loads(self.formatter.format(record))
        self.assertIn("ValueError: boom", data["exception"])


if __name__ == '__main__':
    unittest.main()
