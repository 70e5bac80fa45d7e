"""Mini HTML Parser.

A minimal non-validating HTML parser that turns a complete document into a
tree of elements, text, comments and whitespace, or reports the first
structural problem it meets with its position.

API levels:
- Level 1: Simple functions - parse(), parse_string(), parse_bytes(), parse_file()
- Level 2: Configured parser - MiniHTMLParser class
- Level 3: Raising entry point - parse_document()
"""

__version__ = "0.1.0"
__author__ = "Mini HTML Parser Team"

from .api import MiniHTMLParser, parse, parse_bytes, parse_file, parse_string
from .parsing import ParseResult, parse_document
from .shared import HTMLParseError, ParseErrorKind, ParserConfig
from .tree import (
    CommentNode,
    ElementNode,
    TextNode,
    WhitespaceNode,
    dump_tree,
    release_tree,
)

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions
    "parse",
    "parse_string",
    "parse_bytes",
    "parse_file",

    # Level 2: Configured parser
    "MiniHTMLParser",

    # Level 3: Raising entry point and its failure type
    "parse_document",
    "HTMLParseError",
    "ParseErrorKind",

    # Result objects and data structures
    "ParseResult",
    "ElementNode",
    "TextNode",
    "CommentNode",
    "WhitespaceNode",
    "dump_tree",
    "release_tree",

    # Configuration
    "ParserConfig",
]
