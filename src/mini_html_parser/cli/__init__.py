"""Command-line interface for the mini HTML parser.

This module provides batch parse summaries, the tree dump of a single
document and element search from the command line.
"""

from .main import main

__all__ = ["main"]
