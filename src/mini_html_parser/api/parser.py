"""Public parsing API.

Module-level functions cover one-off parsing of strings, bytes, files and
file-like objects; ``MiniHTMLParser`` keeps a configuration and usage
statistics across many parses. None of these raise on malformed input: the
outcome is always a ``ParseResult``.
"""

import time
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, TextIO, Union

from mini_html_parser.parsing import DocumentParser, ParseResult
from mini_html_parser.shared import (
    DiagnosticSeverity,
    ParserConfig,
    get_logger,
)

# Type definitions for input data
InputType = Union[str, bytes, BinaryIO, TextIO, Path]

# Constants for API operations
PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000


def parse(
    input_data: InputType,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Parse HTML from a string, bytes, Path or file-like object.

    Args:
        input_data: Markup as string, bytes, file-like object, or Path
        config: Optional parser configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult holding the root node or the failure

    Examples:
        >>> result = parse('<div class="a" disabled>x</div>')
        >>> result.root.attribute_items()
        [('class', 'a'), ('disabled', '')]
        >>> parse('<p>hi</div>').failure_kind.value
        'mismatched-closing-tag'
    """
    start_time = time.time()
    config = config or ParserConfig()
    logger = get_logger(__name__, correlation_id, "parse")

    logger.debug(
        "Starting universal parse operation",
        extra={"input_type": type(input_data).__name__}
    )

    try:
        if isinstance(input_data, str):
            return _parse_direct_content(input_data, config, correlation_id)
        if isinstance(input_data, (bytes, bytearray)):
            return parse_bytes(bytes(input_data), config, correlation_id)
        if isinstance(input_data, Path):
            return parse_file(input_data, config=config, correlation_id=correlation_id)
        if hasattr(input_data, "read"):
            return _parse_file_like_object(input_data, config, correlation_id)
        return _create_error_result(
            f"Unsupported input type: {type(input_data).__name__}",
            correlation_id,
            (time.time() - start_time) * MS_PER_SECOND,
        )

    except Exception as e:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        logger.exception(
            "Parse operation failed",
            extra={"processing_time_ms": processing_time}
        )
        return _create_error_result(
            f"Parse operation failed: {e}",
            correlation_id,
            processing_time
        )


def parse_string(
    html: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Parse HTML from a string.

    Examples:
        >>> parse_string("<BR>").root.self_closing
        True
        >>> parse_string("<p>a</p><p>b</p>").is_trailing_input
        True
    """
    config = config or ParserConfig()
    logger = get_logger(__name__, correlation_id, "parse_string")
    logger.debug(
        "Starting string parse operation",
        extra={
            "content_length": len(html),
            "preview": (
                html[:PREVIEW_LENGTH] + "..."
                if len(html) > PREVIEW_LENGTH else html
            )
        }
    )
    return _parse_direct_content(html, config, correlation_id)


def parse_bytes(
    data: bytes,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Decode ``data`` with the configured encoding and parse it.

    The encoding is taken from the configuration as-is; no sniffing of BOMs
    or ``<meta charset>`` is performed.
    """
    start_time = time.time()
    config = config or ParserConfig()
    try:
        text = data.decode(config.encoding, config.decode_errors)
    except UnicodeDecodeError as e:
        return _create_error_result(
            f"Input is not valid {config.encoding}: {e.reason}",
            correlation_id,
            (time.time() - start_time) * MS_PER_SECOND,
            severity=DiagnosticSeverity.ERROR,
            details={"encoding": config.encoding, "offset": e.start},
        )
    return _parse_direct_content(text, config, correlation_id)


def parse_file(
    file_path: Union[str, Path],
    encoding: Optional[str] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Read a file and parse its content.

    Args:
        file_path: Path to the HTML file
        encoding: Optional encoding override for this file
        config: Optional parser configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult; a missing or unreadable file yields a failed result
    """
    start_time = time.time()
    config = config or ParserConfig()
    if encoding:
        config = config.override(encoding=encoding)
    path_obj = Path(file_path)
    logger = get_logger(__name__, correlation_id, "parse_file").bind(
        file_path=str(path_obj)
    )

    logger.debug(
        "Starting file parse operation",
        extra={"encoding": config.encoding}
    )

    error_message = None
    if not path_obj.exists():
        error_message = f"File not found: {path_obj}"
    elif not path_obj.is_file():
        error_message = f"Path is not a file: {path_obj}"
    if error_message:
        result = _create_error_result(
            error_message, correlation_id, (time.time() - start_time) * MS_PER_SECOND
        )
        result.source_name = str(path_obj)
        return result

    try:
        raw_data = path_obj.read_bytes()
    except OSError as e:
        logger.warning(
            "Could not read file",
            extra={"error": str(e)}
        )
        result = _create_error_result(
            f"Cannot read file {path_obj}: {e.strerror or e}",
            correlation_id,
            (time.time() - start_time) * MS_PER_SECOND,
        )
        result.source_name = str(path_obj)
        return result

    result = parse_bytes(raw_data, config, correlation_id)
    result.source_name = str(path_obj)
    return result


def _parse_direct_content(
    content: str, config: ParserConfig, correlation_id: Optional[str]
) -> ParseResult:
    """Parse decoded content, enforcing the configured input size limit."""
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "parse_direct")

    if config.max_input_size is not None and len(content) > config.max_input_size:
        return _create_error_result(
            f"Input of {len(content)} characters exceeds limit of "
            f"{config.max_input_size}",
            correlation_id,
            (time.time() - start_time) * MS_PER_SECOND,
            severity=DiagnosticSeverity.ERROR,
            details={"input_size": len(content), "limit": config.max_input_size},
        )

    result = DocumentParser(config, correlation_id).build(content)
    result.performance.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND

    logger.info(
        "Direct content parsing completed",
        extra={
            "success": result.success,
            "failure_kind": result.failure_kind.value if result.failure_kind else None,
            "nodes_created": result.performance.nodes_created,
            "processing_time_ms": result.performance.processing_time_ms,
        }
    )
    return result


def _parse_file_like_object(
    file_obj: Union[BinaryIO, TextIO],
    config: ParserConfig,
    correlation_id: Optional[str]
) -> ParseResult:
    content = file_obj.read()
    source_name = getattr(file_obj, "name", None)
    if isinstance(content, (bytes, bytearray)):
        result = parse_bytes(bytes(content), config, correlation_id)
    else:
        result = _parse_direct_content(content, config, correlation_id)
    if isinstance(source_name, str):
        result.source_name = source_name
    return result


def _create_error_result(
    error_message: str,
    correlation_id: Optional[str],
    processing_time: float,
    severity: DiagnosticSeverity = DiagnosticSeverity.CRITICAL,
    details: Optional[Dict[str, Any]] = None,
) -> ParseResult:
    """Create a failed result for problems outside the markup grammar.

    Args:
        error_message: Error description
        correlation_id: Optional correlation ID
        processing_time: Processing time in milliseconds
        severity: Diagnostic severity to record
        details: Optional structured details

    Returns:
        ParseResult with success False and no parse error attached
    """
    result = ParseResult(correlation_id=correlation_id)
    result.success = False
    result.performance.processing_time_ms = processing_time
    result.add_diagnostic(severity, error_message, "api_parser", details=details)
    return result


class MiniHTMLParser:
    """Reusable parser holding a configuration and usage statistics.

    Examples:
        >>> parser = MiniHTMLParser(ParserConfig.lenient())
        >>> parser.parse("just text").root.content
        'just text'
        >>> parser.statistics["total_parses"]
        1
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "mini_html_parser")

        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

    def parse(
        self,
        input_data: InputType,
        config_override: Optional[ParserConfig] = None,
        correlation_id_override: Optional[str] = None
    ) -> ParseResult:
        """Parse with this parser's configuration, or a one-off override."""
        config = config_override or self.config
        correlation_id = correlation_id_override or self.correlation_id

        result = parse(input_data, config, correlation_id)

        self._parse_count += 1
        self._total_processing_time += result.performance.processing_time_ms
        if result.success:
            self._successful_parses += 1

        self.logger.debug(
            "Configured parse completed",
            extra={
                "success": result.success,
                "total_parses": self._parse_count,
            }
        )
        return result

    def reconfigure(self, config: ParserConfig) -> None:
        """Replace the parser configuration."""
        self.config = config
        self.logger.info(
            "Parser reconfigured",
            extra={"config_name": config.name}
        )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0
