"""
Tests for file URI normalization and the @document convention
"""

import pytest

from patternlinks.modules.file_uri import FileUriNormalizer


@pytest.fixture
def normalizer():
    return FileUriNormalizer()


class TestAbsolutePaths:
    def test_spaces_encoded(self, normalizer):
        assert normalizer.normalize("file:///a b/c.txt") == "file:///a%20b/c.txt"

    def test_idempotent(self, normalizer):
        for uri in [
            "file:///a b/c.txt",
            "file:///path/with spaces/file name (1).txt",
            "file:///100%/done",
            "file:///café/menü.md",
            "file:///already%20encoded/x.txt",
        ]:
            once = normalizer.normalize(uri)
            assert normalizer.normalize(once) == once

    def test_existing_encoding_not_doubled(self, normalizer):
        assert normalizer.normalize("file:///path/with%20spaces/f.txt") == "file:///path/with%20spaces/f.txt"

    def test_plain_path_unchanged(self, normalizer):
        assert normalizer.normalize("file:///path/to/file.txt") == "file:///path/to/file.txt"

    def test_separators_never_encoded(self, normalizer):
        assert normalizer.normalize("file:///a/b c/d/") == "file:///a/b%20c/d"

    def test_special_characters(self, normalizer):
        assert normalizer.normalize("file:///notes/a#b?c.md") == "file:///notes/a%23b%3Fc.md"
        assert normalizer.normalize("file:///x/it's (draft)!.md") == "file:///x/it's%20(draft)!.md"

    def test_non_ascii_utf8_encoded(self, normalizer):
        assert normalizer.normalize("file:///café") == "file:///caf%C3%A9"

    def test_trailing_slashes_stripped(self, normalizer):
        assert normalizer.normalize("file:///dir/sub///") == "file:///dir/sub"

    def test_lone_percent_survives(self, normalizer):
        assert normalizer.normalize("file:///100%/x") == "file:///100%25/x"


class TestRelativePaths:
    def test_relative_path_not_encoded(self, normalizer):
        assert normalizer.normalize("file://./rel path.txt") == "file://./rel path.txt"

    def test_parent_relative_path(self, normalizer):
        assert normalizer.normalize("file://../parent/path.txt") == "file://../parent/path.txt"

    def test_relative_trailing_slash_stripped(self, normalizer):
        assert normalizer.normalize("file://./docs/") == "file://./docs"


class TestPassThrough:
    @pytest.mark.parametrize(
        "uri",
        [
            "https://example.com/a b/",
            "http://x/%20",
            "mailto:someone@example.com",
            "FILE:///upper case",
            "",
        ],
    )
    def test_non_file_uris_untouched(self, normalizer, uri):
        assert normalizer.normalize(uri) == uri


class TestDocumentTag:
    def test_is_document_tag(self):
        assert FileUriNormalizer.is_document_tag("@document ../x.md")
        assert not FileUriNormalizer.is_document_tag("see @document ../x.md")

    def test_rewrite_adds_scheme(self):
        assert FileUriNormalizer.rewrite_document_tag("@document ../docs/md030.md") == "file://../docs/md030.md"

    def test_rewrite_keeps_existing_scheme(self):
        assert FileUriNormalizer.rewrite_document_tag("@document   file:///abs/x.md") == "file:///abs/x.md"

    def test_rewrite_absolute_path(self, normalizer):
        uri = FileUriNormalizer.rewrite_document_tag("@document /abs/my doc.md")
        assert normalizer.normalize(uri) == "file:///abs/my%20doc.md"
