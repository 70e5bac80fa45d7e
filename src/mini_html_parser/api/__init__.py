"""Public parsing API for the mini HTML parser."""

from .parser import (
    MiniHTMLParser,
    parse,
    parse_bytes,
    parse_file,
    parse_string,
)

__all__ = [
    "MiniHTMLParser",
    "parse",
    "parse_bytes",
    "parse_file",
    "parse_string",
]
