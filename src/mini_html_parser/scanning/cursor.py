"""Scanning primitives over an input buffer.

A ``Cursor`` is a read-only view of the source text plus a current offset.
Character classes follow ASCII semantics regardless of the text's content.
"""

import re
import string
from bisect import bisect_right
from typing import Callable, List, Optional, Tuple

# Constants for character classification
WHITESPACE = frozenset(" \t\n\v\f\r")
TAG_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "-")
ATTR_NAME_STOP_CHARS = frozenset("/>=") | WHITESPACE

SNIPPET_LENGTH = 12  # Max characters of context in error messages

CharPredicate = Callable[[str], bool]


def is_space(ch: str) -> bool:
    return ch in WHITESPACE


def is_tag_name_char(ch: str) -> bool:
    return ch in TAG_NAME_CHARS


def is_attr_name_char(ch: str) -> bool:
    return ch not in ATTR_NAME_STOP_CHARS


class Cursor:
    """Position within an immutable text buffer.

    Examples:
        >>> cursor = Cursor("  <p>")
        >>> cursor.skip_space()
        >>> cursor.peek()
        '<'
        >>> cursor.advance()
        >>> cursor.scan_while(is_tag_name_char)
        'p'
    """

    __slots__ = ("text", "offset", "length", "_line_starts")

    def __init__(self, text: str, offset: int = 0) -> None:
        if not 0 <= offset <= len(text):
            raise ValueError("Cursor offset out of range")
        self.text = text
        self.offset = offset
        self.length = len(text)
        self._line_starts: Optional[List[int]] = None

    def __repr__(self) -> str:
        return f"Cursor(offset={self.offset}, next={self.snippet()})"

    @property
    def at_end(self) -> bool:
        return self.offset >= self.length

    @property
    def remaining(self) -> int:
        return self.length - self.offset

    def peek(self, ahead: int = 0) -> str:
        """Return the character ``ahead`` positions away, or '' past the end."""
        index = self.offset + ahead
        if index < self.length:
            return self.text[index]
        return ""

    def advance(self, count: int = 1) -> None:
        """Move forward by ``count`` characters, stopping at the end."""
        self.offset = min(self.offset + count, self.length)

    def startswith(self, prefix: str, ignore_case: bool = False) -> bool:
        """Check whether the unread input begins with ``prefix``."""
        if not ignore_case:
            return self.text.startswith(prefix, self.offset)
        candidate = self.text[self.offset:self.offset + len(prefix)]
        return len(candidate) == len(prefix) and candidate.lower() == prefix.lower()

    def skip_space(self) -> None:
        """Advance past a maximal run of whitespace. Never fails."""
        text = self.text
        offset = self.offset
        while offset < self.length and text[offset] in WHITESPACE:
            offset += 1
        self.offset = offset

    def scan_while(self, predicate: CharPredicate) -> Optional[str]:
        """Capture the maximal run of characters satisfying ``predicate``.

        Returns:
            The captured substring, or None when the run is empty. The cursor
            only moves when something was captured.
        """
        text = self.text
        start = end = self.offset
        while end < self.length and predicate(text[end]):
            end += 1
        if end == start:
            return None
        self.offset = end
        return text[start:end]

    def scan_until(self, stop: CharPredicate) -> str:
        """Capture characters up to the first one satisfying ``stop``.

        Unlike ``scan_while`` an empty run is a valid, empty result.
        """
        text = self.text
        start = end = self.offset
        while end < self.length and not stop(text[end]):
            end += 1
        self.offset = end
        return text[start:end]

    def find(self, needle: str, ignore_case: bool = False) -> int:
        """Return the offset of the next ``needle`` at or after the cursor, or -1."""
        if ignore_case:
            match = re.compile(re.escape(needle), re.IGNORECASE).search(
                self.text, self.offset
            )
            return match.start() if match else -1
        return self.text.find(needle, self.offset)

    def search(self, pattern: "re.Pattern[str]") -> int:
        """Return the start offset of the next ``pattern`` match, or -1."""
        match = pattern.search(self.text, self.offset)
        return match.start() if match else -1

    def location(self, offset: Optional[int] = None) -> Tuple[int, int]:
        """Return the 1-based (line, column) of ``offset`` (default: cursor)."""
        if offset is None:
            offset = self.offset
        if self._line_starts is None:
            self._line_starts = [0]
            self._line_starts.extend(
                match.end() for match in re.finditer("\n", self.text)
            )
        line = bisect_right(self._line_starts, offset)
        return line, offset - self._line_starts[line - 1] + 1

    def snippet(self, offset: Optional[int] = None, length: int = SNIPPET_LENGTH) -> str:
        """Describe the input at ``offset`` (default: cursor) for error messages."""
        if offset is None:
            offset = self.offset
        if offset >= self.length:
            return "end of input"
        return repr(self.text[offset:offset + length])
