"""Tests for the document entry point and parse results."""

import pytest

from mini_html_parser.parsing import DocumentParser, ParseResult, parse_document
from mini_html_parser.shared import (
    DiagnosticSeverity,
    MismatchedClosingTagError,
    ParseErrorKind,
    ParserConfig,
    TextRootError,
    TrailingInputError,
    UnexpectedEndOfInputError,
)
from mini_html_parser.tree import ElementNode, TextNode, WhitespaceNode, by_tag


def build(text, **config):
    return DocumentParser(ParserConfig(**config)).build(text)


class TestDocumentRoot:
    """Test selection of the single root node."""

    def test_empty_element(self):
        """Test a bare element with no attributes or children."""
        result = build("<p></p>")

        assert result.success is True
        assert result.root.tag == "p"
        assert result.root.attributes == []
        assert result.root.children == []

    @pytest.mark.parametrize("text", ["<br>", "<br/>", "<BR>"])
    def test_void_root(self, text):
        """Test void elements as the root."""
        result = build(text)
        assert result.root.tag_name == "br"
        assert result.root.self_closing is True
        assert result.root.children == []

    def test_attributes_and_text(self):
        """Test attributes and a single text child."""
        result = build('<div class="a" disabled>x</div>')

        assert result.root.attribute_items() == [("class", "a"), ("disabled", "")]
        assert len(result.root.children) == 1
        assert result.root.children[0] == TextNode("x")

    def test_text_collapsing_inside_element(self):
        """Test text runs collapse and whitespace-only runs stay structural."""
        result = build("<div>a   b\n\tc<br>\n  \t</div>")

        text, br, whitespace = result.root.children
        assert text.content == "a b c"
        assert br.tag == "br"
        assert isinstance(whitespace, WhitespaceNode)

    def test_surrounding_whitespace_ignored(self):
        """Test whitespace around the root is skipped."""
        result = build("\n  <html><body></body></html>\n\n")
        assert result.root.tag == "html"

    def test_leading_comments_discarded(self):
        """Test top-level comments are dropped and released."""
        result = build("<!-- note --><p>ok</p>")

        assert result.root.tag == "p"
        assert result.performance.nodes_released == 1

    def test_comments_after_root_are_trailing_input(self):
        """Test nothing but whitespace may follow the root."""
        result = build("<p>ok</p><!-- late -->")
        assert result.failure_kind is ParseErrorKind.TRAILING_INPUT


class TestDoctype:
    """Test doctype handling."""

    @pytest.mark.parametrize("text", [
        "<!DOCTYPE html><html></html>",
        "  <!doctype html>\n<html></html>",
        "<!DocType html SYSTEM 'x'>  <!-- c --> <html></html>",
    ])
    def test_doctype_skipped(self, text):
        """Test a leading doctype is skipped case-insensitively."""
        result = build(text)
        assert result.success is True
        assert result.root.tag == "html"

    def test_doctype_without_close(self):
        """Test an unterminated doctype consumes the rest of the input."""
        result = build("<!doctype html")
        assert result.failure_kind is ParseErrorKind.UNEXPECTED_END_OF_INPUT

    def test_doctype_not_skipped_when_disabled(self):
        """Test the doctype is an ordinary malformed tag when not skipped."""
        result = build("<!DOCTYPE html><html></html>", skip_doctype=False)
        assert result.failure_kind is ParseErrorKind.MALFORMED_TAG


class TestDocumentFailures:
    """Test failed parses."""

    def test_mismatched_closing_tag_leaks_nothing(self):
        """Test a mismatch fails and releases the whole partial subtree."""
        result = build("<p>hi</div>")

        assert result.success is False
        assert result.root is None
        assert result.failure_kind is ParseErrorKind.MISMATCHED_CLOSING_TAG
        assert isinstance(result.error, MismatchedClosingTagError)
        assert result.performance.nodes_created == 2
        assert result.performance.nodes_released == 2

    def test_trailing_input(self):
        """Test a second top-level element is trailing input."""
        result = build("<p>a</p><p>b</p>")

        assert result.success is False
        assert result.is_trailing_input is True
        assert result.failure_kind.is_structural is False
        assert result.error.offset == 8
        assert result.performance.nodes_released == result.performance.nodes_created

    @pytest.mark.parametrize("text", ["", "   \n", "<!-- only a comment -->"])
    def test_no_root(self, text):
        """Test documents without any root node."""
        result = build(text)
        assert result.failure_kind is ParseErrorKind.UNEXPECTED_END_OF_INPUT
        assert result.error.message == "Document has no root element"

    def test_failure_diagnostic(self):
        """Test failures are recorded as ERROR diagnostics with position."""
        result = build("<p>\n<b></i></p>")

        errors = result.get_diagnostics_by_severity(DiagnosticSeverity.ERROR)
        assert len(errors) == 1
        assert errors[0].position == {"offset": 7, "line": 2, "column": 4}
        assert errors[0].details["kind"] == "mismatched-closing-tag"
        assert errors[0].details["expected"] == "'</b>'"
        assert result.has_errors() is True

    def test_diagnostics_can_be_disabled(self):
        """Test no diagnostics are recorded when disabled."""
        result = build("<p>", enable_diagnostics=False)
        assert result.success is False
        assert result.diagnostics == []

    def test_depth_limit(self):
        """Test deep nesting is a reported failure."""
        result = build("<a><b><c></c></b></a>", max_depth=2)
        assert result.failure_kind is ParseErrorKind.DEPTH_LIMIT_EXCEEDED


class TestTextRoot:
    """Test the bare top-level text decision."""

    def test_text_root_rejected_by_default(self):
        """Test a text run cannot be the document by default."""
        result = build("  just text  ")

        assert result.failure_kind is ParseErrorKind.TEXT_AT_ROOT
        assert isinstance(result.error, TextRootError)
        assert result.error.offset == 2
        assert result.performance.nodes_released == 1

    def test_text_root_allowed(self):
        """Test the lenient behaviour keeps the text node as root."""
        result = build("just   text", allow_text_root=True)

        assert result.success is True
        assert isinstance(result.root, TextNode)
        assert result.root.content == "just text"

    def test_text_root_followed_by_element(self):
        """Test content after an allowed text root is trailing input."""
        result = build("text<p></p>", allow_text_root=True)
        assert result.is_trailing_input is True


class TestUnterminatedComments:
    """Test the lenient comment rule."""

    def test_warning_recorded(self):
        """Test an unterminated comment inside the root is a warning."""
        result = build("<!-- a --><div><!-- open")

        assert result.failure_kind is ParseErrorKind.UNEXPECTED_END_OF_INPUT
        warnings = result.get_diagnostics_by_severity(DiagnosticSeverity.WARNING)
        assert len(warnings) == 1
        assert warnings[0].position["offset"] == 15


class TestParseResult:
    """Test result helpers."""

    def test_counts_and_search(self):
        """Test node counts and lookups on a successful result."""
        result = build("<ul><li class=x>a</li><!-- c --><li>b</li></ul>")

        assert result.element_count == 3
        assert result.node_count == 6
        assert result.find("LI").get_attribute("class") == "x"
        assert len(result.find_all("li")) == 2
        assert result.find("table") is None
        assert result.find_first(by_tag("ul")) is result.root
        assert result.tree is result.root

    def test_created_equals_retained_plus_released(self):
        """Test every created node is either in the tree or released."""
        result = build("<!-- a --> <!-- b --><div> <p>x</p> </div>")
        metrics = result.performance
        assert metrics.nodes_created == result.node_count + metrics.nodes_released

    def test_dump_is_deterministic(self):
        """Test dumps depend only on the tree."""
        first = build('<div a="1">\n  <p>x   y</p>\n</div>')
        second = build('<!-- c --><div a="1"> <p>x y</p> </div>')

        assert first.dump() == second.dump()
        assert first.dump() == (
            "#Element div\n"
            '  a="1"\n'
            "\t#Element p\n"
            '\t\t#Text "x y"\n'
        )

    def test_release_is_idempotent(self):
        """Test release tears the tree down exactly once."""
        result = build("<div><p>x</p></div>")
        root = result.root

        assert result.release() == 3
        assert result.release() == 0
        assert result.root is None
        assert root.children == []
        assert result.performance.nodes_released == 3

    def test_summary_and_to_dict(self):
        """Test structured views of a result."""
        result = build("<p>a</p><i>")

        summary = result.summary()
        assert summary["success"] is False
        assert summary["failure_kind"] == "trailing-input"
        assert summary["root_tag"] is None

        data = result.to_dict()
        assert data["error"]["kind"] == "trailing-input"
        assert data["root"] is None
        assert data["performance"]["characters_processed"] == 11

    def test_to_dict_includes_tree(self):
        """Test the tree is included on success."""
        data = build("<p>a</p>").to_dict()
        assert data["root"]["tag"] == "p"
        assert data["root"]["children"] == [{"kind": "text", "content": "a"}]

    def test_default_result(self):
        """Test an empty result object."""
        result = ParseResult()
        assert result.success is True
        assert result.failure_kind is None
        assert result.node_count == 0
        assert result.release() == 0


class TestRaisingEntryPoint:
    """Test the exception-raising API."""

    def test_parse_document_returns_root(self):
        """Test parse_document returns the root node."""
        root = parse_document("<p>x</p>")
        assert isinstance(root, ElementNode)

    def test_parse_document_raises(self):
        """Test parse_document raises the matching failure."""
        with pytest.raises(TrailingInputError):
            parse_document("<p></p>x")
        with pytest.raises(UnexpectedEndOfInputError):
            parse_document("")

    def test_parse_document_with_config(self):
        """Test parse_document honours its configuration."""
        root = parse_document("text", ParserConfig.lenient())
        assert root.content == "text"

    def test_document_parser_correlation_id(self):
        """Test the correlation ID is propagated to results."""
        result = DocumentParser(correlation_id="req-1").build("<p></p>")
        assert result.correlation_id == "req-1"
