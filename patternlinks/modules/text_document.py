"""
Text Document Host Adapter
Minimal text buffer with the offset <-> position mapping hosts provide
"""

import bisect
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, NamedTuple, Optional, Union

PLAINTEXT = "plaintext"

# File extension -> language id, the subset of common editor ids rules use
LANGUAGE_BY_EXTENSION = {
    ".c": "c",
    ".cpp": "cpp",
    ".cs": "csharp",
    ".css": "css",
    ".go": "go",
    ".h": "c",
    ".html": "html",
    ".java": "java",
    ".js": "javascript",
    ".json": "json",
    ".jsx": "javascriptreact",
    ".md": "markdown",
    ".markdown": "markdown",
    ".py": "python",
    ".rb": "ruby",
    ".rs": "rust",
    ".sh": "shellscript",
    ".toml": "toml",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".txt": PLAINTEXT,
    ".yaml": "yaml",
    ".yml": "yaml",
}


class Position(NamedTuple):
    """Zero-based line and character."""
    line: int
    character: int


class Range(NamedTuple):
    start: Position
    end: Position


@dataclass(frozen=True)
class DocumentLink:
    """A link as a host presents it: a position range and a target."""
    range: Range
    target: str
    tooltip: Optional[str] = None


def guess_language(path: Union[str, Path]) -> str:
    return LANGUAGE_BY_EXTENSION.get(Path(path).suffix.lower(), PLAINTEXT)


@dataclass
class TextDocument:
    """
    An in-memory document.

    Line starts are computed once; ``position_at`` and ``offset_at`` are
    binary searches over them.  Offsets outside the text are clamped.
    """
    uri: str
    text: str
    language_id: str = PLAINTEXT
    _line_starts: List[int] = field(init=False, repr=False)

    def __post_init__(self):
        self._line_starts = [0]
        for index, ch in enumerate(self.text):
            if ch == "\n":
                self._line_starts.append(index + 1)

    @classmethod
    def from_path(cls, path: Union[str, Path], language_id: Optional[str] = None,
                  encoding: str = "utf-8") -> "TextDocument":
        path = Path(path)
        text = path.read_text(encoding=encoding, errors="replace")
        return cls(
            uri=path.resolve().as_uri(),
            text=text,
            language_id=language_id or guess_language(path),
        )

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def get_text(self) -> str:
        return self.text

    def position_at(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return Position(line, offset - self._line_starts[line])

    def offset_at(self, position: Position) -> int:
        if position.line < 0:
            return 0
        if position.line >= len(self._line_starts):
            return len(self.text)
        line_start = self._line_starts[position.line]
        if position.line + 1 < len(self._line_starts):
            line_end = self._line_starts[position.line + 1] - 1
        else:
            line_end = len(self.text)
        return line_start + max(0, min(position.character, line_end - line_start))
