"""Scanning primitives for the mini HTML parser.

Key Components:
    Cursor: Read-only position over the input text with whitespace skipping
        and predicate-bounded capture
"""

from .cursor import (
    WHITESPACE,
    Cursor,
    is_attr_name_char,
    is_space,
    is_tag_name_char,
)

__all__ = [
    "WHITESPACE",
    "Cursor",
    "is_attr_name_char",
    "is_space",
    "is_tag_name_char",
]
