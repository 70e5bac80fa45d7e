"""Parsing engine for the mini HTML parser.

Key Components:
    MarkupGrammar: Recursive-descent parsers for elements, text and comments
    DocumentParser: Document entry point selecting the single root node
    ParseResult: Root node or failure, with diagnostics and metrics
    parse_document: Raising convenience wrapper around DocumentParser
"""

from .document import DOCTYPE_MARKER, DocumentParser, ParseResult, parse_document
from .grammar import (
    RAW_TEXT_ELEMENTS,
    VOID_ELEMENTS,
    MarkupGrammar,
    collapse_whitespace,
    is_raw_text_element,
    is_void_element,
)

__all__ = [
    "DOCTYPE_MARKER",
    "DocumentParser",
    "ParseResult",
    "parse_document",
    "RAW_TEXT_ELEMENTS",
    "VOID_ELEMENTS",
    "MarkupGrammar",
    "collapse_whitespace",
    "is_raw_text_element",
    "is_void_element",
]
