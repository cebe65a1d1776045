"""
File URI Normalization
Re-encodes the path of rendered ``file://`` links and handles ``@document`` tags
"""

import re
from urllib.parse import quote, unquote

from .link_data import FILE_SCHEME

DOCUMENT_TAG = "@document"

# Characters encodeURIComponent leaves alone on top of quote()'s always-safe set
_SEGMENT_SAFE = "!*'()"

_DOCUMENT_TAG_PATTERN = re.compile(re.escape(DOCUMENT_TAG) + r"\s+")


class FileUriNormalizer:
    """
    Normalizes ``file://`` URIs so hosts can open them verbatim.

    Absolute paths are decoded once and re-encoded one segment at a time, so
    ``/`` survives, spaces become ``%20`` and already-encoded input is not
    double-encoded.  Relative paths (``file://./x``, ``file://../x``) are
    kept exactly as written apart from trailing slashes.  Anything that is
    not a ``file://`` URI is returned untouched.
    """

    def normalize(self, uri: str) -> str:
        if not uri.startswith(FILE_SCHEME):
            return uri

        path = uri[len(FILE_SCHEME):]
        if path.startswith("."):
            return FILE_SCHEME + path.rstrip("/")

        decoded = unquote(path)
        encoded = "/".join(
            quote(segment, safe=_SEGMENT_SAFE) for segment in decoded.split("/")
        )
        return FILE_SCHEME + encoded.rstrip("/")

    @staticmethod
    def is_document_tag(text: str) -> bool:
        return text.startswith(DOCUMENT_TAG)

    @staticmethod
    def rewrite_document_tag(text: str) -> str:
        """
        Turn ``@document some/path.md`` into ``file://some/path.md``.

        The marker and the whitespace after it are removed; the scheme is
        only added when the remaining text does not already carry it.
        """
        path = _DOCUMENT_TAG_PATTERN.sub("", text, count=1)
        if not path.startswith(FILE_SCHEME):
            path = FILE_SCHEME + path
        return path
