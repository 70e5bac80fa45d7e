"""Failure taxonomy for HTML parsing.

The grammar raises these exceptions at the point of detection; the API layer
converts them into failed ``ParseResult`` objects. Each error carries the
offset where it was detected plus a short expected-vs-found description.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ParseErrorKind(Enum):
    """Kinds of parse failure reported to callers."""

    MALFORMED_TAG = "malformed-tag"
    MISMATCHED_CLOSING_TAG = "mismatched-closing-tag"
    UNEXPECTED_END_OF_INPUT = "unexpected-end-of-input"
    TRAILING_INPUT = "trailing-input"
    TEXT_AT_ROOT = "text-at-root"
    DEPTH_LIMIT_EXCEEDED = "depth-limit-exceeded"

    @property
    def is_structural(self) -> bool:
        """True for failures inside the markup, False for trailing input."""
        return self is not ParseErrorKind.TRAILING_INPUT


class HTMLParseError(Exception):
    """Base class for all recoverable parse failures."""

    kind = ParseErrorKind.MALFORMED_TAG

    def __init__(
        self,
        message: str,
        offset: int,
        line: int = 1,
        column: int = 1,
        expected: Optional[str] = None,
        found: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.line = line
        self.column = column
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        text = f"{self.message} at line {self.line}, column {self.column}"
        if self.expected is not None:
            text += f" (expected {self.expected}, found {self.found})"
        return text

    @property
    def position(self) -> Dict[str, int]:
        return {"offset": self.offset, "line": self.line, "column": self.column}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "offset": self.offset,
            "line": self.line,
            "column": self.column,
            "expected": self.expected,
            "found": self.found,
        }


class MalformedTagError(HTMLParseError):
    """Tag syntax is broken: missing name, unterminated value, missing ``>``."""

    kind = ParseErrorKind.MALFORMED_TAG


class MismatchedClosingTagError(HTMLParseError):
    """Closing tag does not match the element being closed."""

    kind = ParseErrorKind.MISMATCHED_CLOSING_TAG


class UnexpectedEndOfInputError(HTMLParseError):
    """Input ended inside a construct that requires a terminator."""

    kind = ParseErrorKind.UNEXPECTED_END_OF_INPUT


class TrailingInputError(HTMLParseError):
    """Non-whitespace input remains after the document root."""

    kind = ParseErrorKind.TRAILING_INPUT


class TextRootError(HTMLParseError):
    """The first structural node of the document is a text run."""

    kind = ParseErrorKind.TEXT_AT_ROOT


class DepthLimitError(HTMLParseError):
    """Element nesting exceeds the configured maximum depth."""

    kind = ParseErrorKind.DEPTH_LIMIT_EXCEEDED
