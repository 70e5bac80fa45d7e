"""Shared utilities for the mini HTML parser.

This module provides the configuration object, failure taxonomy, diagnostic
types and logging helpers used across all parsing layers.
"""

from .config import (
    ConfigError,
    ConfigValidationError,
    ParserConfig,
)
from .errors import (
    DepthLimitError,
    HTMLParseError,
    MalformedTagError,
    MismatchedClosingTagError,
    ParseErrorKind,
    TextRootError,
    TrailingInputError,
    UnexpectedEndOfInputError,
)
from .logging import (
    CorrelationFilter,
    CorrelationLogger,
    configure_logging,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)

__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "DepthLimitError",
    "HTMLParseError",
    "MalformedTagError",
    "MismatchedClosingTagError",
    "ParseErrorKind",
    "TextRootError",
    "TrailingInputError",
    "UnexpectedEndOfInputError",
    "CorrelationFilter",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
]
