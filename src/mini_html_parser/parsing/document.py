"""Document entry point and parse result.

``DocumentParser.build`` turns a complete text buffer into a ``ParseResult``
holding either the single root node or the failure that stopped the parse.
``parse_document`` is the raising variant used when a caller prefers
exceptions to result objects.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from mini_html_parser.scanning import Cursor
from mini_html_parser.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    HTMLParseError,
    ParseErrorKind,
    ParserConfig,
    PerformanceMetrics,
    TextRootError,
    TrailingInputError,
    UnexpectedEndOfInputError,
    get_logger,
)
from mini_html_parser.tree import (
    CommentNode,
    ElementNode,
    Node,
    TextNode,
    WhitespaceNode,
    by_tag,
    count_nodes,
    dump_tree,
    find_all,
    find_first,
    release_tree,
    walk,
)
from mini_html_parser.tree.traversal import NodePredicate

from .grammar import MarkupGrammar

DOCTYPE_MARKER = "<!doctype"


@dataclass
class ParseResult:
    """Outcome of parsing one document.

    On success ``root`` holds the tree, which the caller owns. On failure
    ``root`` is None and ``error`` describes what went wrong and where; any
    partially built nodes have already been released.
    """

    root: Optional[Node] = None
    success: bool = True
    error: Optional[HTMLParseError] = None

    # Metadata and diagnostics
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None
    source_name: Optional[str] = None
    released: bool = field(default=False, repr=False)

    @property
    def tree(self) -> Optional[Node]:
        """Direct access to the root node."""
        return self.root

    @property
    def failure_kind(self) -> Optional[ParseErrorKind]:
        """Kind of parse failure, or None when the parse succeeded."""
        return self.error.kind if self.error else None

    @property
    def is_trailing_input(self) -> bool:
        return self.failure_kind is ParseErrorKind.TRAILING_INPUT

    @property
    def node_count(self) -> int:
        return count_nodes(self.root)

    @property
    def element_count(self) -> int:
        return sum(1 for node in walk(self.root) if isinstance(node, ElementNode))

    @property
    def processing_time_ms(self) -> float:
        return self.performance.processing_time_ms

    def find(self, tag: str) -> Optional[ElementNode]:
        """Find the first element with a matching tag name."""
        found = find_first(self.root, by_tag(tag))
        return found if isinstance(found, ElementNode) else None

    def find_all(self, tag: str) -> List[ElementNode]:
        """Find all elements with a matching tag name."""
        return [node for node in find_all(self.root, by_tag(tag))
                if isinstance(node, ElementNode)]

    def find_first(self, predicate: NodePredicate) -> Optional[Node]:
        return find_first(self.root, predicate)

    def dump(self) -> str:
        """Render the tree with the debug dump format."""
        return dump_tree(self.root)

    def release(self) -> int:
        """Release the tree. Later calls do nothing.

        Returns:
            Number of nodes released by this call
        """
        if self.released:
            return 0
        released = release_tree(self.root)
        self.performance.nodes_released += released
        self.root = None
        self.released = True
        return released

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id,
        ))

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the parse result."""
        return {
            "source": self.source_name,
            "success": self.success,
            "failure_kind": self.failure_kind.value if self.failure_kind else None,
            "root_tag": self.root.tag if isinstance(self.root, ElementNode) else None,
            "element_count": self.element_count,
            "node_count": self.node_count,
            "processing_time_ms": self.performance.processing_time_ms,
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert result, including the tree, to dictionary representation."""
        result = self.summary()
        result["error"] = self.error.to_dict() if self.error else None
        result["performance"] = self.performance.to_dict()
        result["root"] = self.root.to_dict() if self.root is not None else None
        return result


class DocumentParser:
    """Selects the single root node of a document.

    A leading doctype is skipped, top-level comments and whitespace are
    discarded, the first element becomes the root, and anything but
    whitespace after the root is rejected.

    Examples:
        >>> result = DocumentParser().build("<!-- note --><p>ok</p>")
        >>> result.root.tag
        'p'
        >>> DocumentParser().build("<p>a</p><p>b</p>").failure_kind.value
        'trailing-input'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id or self.config.correlation_id
        self.logger = get_logger(__name__, self.correlation_id, "document_parser")

    def build(self, text: str) -> ParseResult:
        """Parse ``text`` into a result. Malformed input never raises."""
        start_time = time.time()
        result = ParseResult(correlation_id=self.correlation_id)
        result.performance.characters_processed = len(text)

        grammar = MarkupGrammar(Cursor(text), self.config, self.correlation_id)
        self.logger.debug(
            "Starting document parse",
            extra={"content_length": len(text)}
        )

        try:
            result.root = self._parse_root(grammar)
        except HTMLParseError as e:
            result.success = False
            result.error = e
            if self.config.enable_diagnostics:
                result.add_diagnostic(
                    DiagnosticSeverity.ERROR,
                    e.message,
                    "document_parser",
                    position=e.position,
                    details={
                        "kind": e.kind.value,
                        "expected": e.expected,
                        "found": e.found,
                    },
                )
            self.logger.warning(
                "Document parse failed",
                extra={"kind": e.kind.value, "offset": e.offset}
            )

        if self.config.enable_diagnostics:
            for offset in grammar.unterminated_comments:
                line, column = grammar.cursor.location(offset)
                result.add_diagnostic(
                    DiagnosticSeverity.WARNING,
                    "Comment without '-->' runs to end of input",
                    "markup_grammar",
                    position={"offset": offset, "line": line, "column": column},
                )

        result.performance.nodes_created = grammar.nodes_created
        result.performance.elements_created = grammar.elements_created
        result.performance.nodes_released = grammar.nodes_released
        result.performance.processing_time_ms = (time.time() - start_time) * 1000

        self.logger.debug(
            "Document parse completed",
            extra={
                "success": result.success,
                "nodes_created": grammar.nodes_created,
                "processing_time_ms": result.performance.processing_time_ms,
            }
        )
        return result

    def parse(self, text: str) -> Node:
        """Parse ``text`` and return the root node.

        Raises:
            HTMLParseError: On any malformed input
        """
        return self._parse_root(MarkupGrammar(Cursor(text), self.config, self.correlation_id))

    def _parse_root(self, grammar: MarkupGrammar) -> Node:
        cursor = grammar.cursor
        cursor.skip_space()
        if self.config.skip_doctype and cursor.startswith(DOCTYPE_MARKER, ignore_case=True):
            end = cursor.find(">")
            cursor.advance(cursor.remaining if end < 0 else end - cursor.offset + 1)

        root: Optional[Node] = None
        while root is None:
            if cursor.at_end:
                raise grammar.error(
                    UnexpectedEndOfInputError,
                    "Document has no root element",
                    expected="an element",
                )
            node = grammar.parse_node()
            if isinstance(node, (CommentNode, WhitespaceNode)):
                grammar.release(node)
            else:
                root = node

        if isinstance(root, TextNode) and not self.config.allow_text_root:
            offset = root.position.offset if root.position else cursor.offset
            grammar.release(root)
            raise grammar.error(
                TextRootError,
                "Document root is a text run",
                expected="an element",
                offset=offset,
            )

        cursor.skip_space()
        if not cursor.at_end:
            grammar.release(root)
            raise grammar.error(
                TrailingInputError,
                "Unexpected content after the document root",
                expected="end of input",
            )
        return root


def parse_document(text: str, config: Optional[ParserConfig] = None) -> Node:
    """Parse ``text`` and return its root node, raising on malformed input.

    Raises:
        HTMLParseError: Subclass describing the failure and its position
    """
    return DocumentParser(config).parse(text)
