"""Recursive-descent grammar for elements, text runs and comments.

``MarkupGrammar`` parses one node at a time from a shared ``Cursor``. Element
parsing recurses through ``parse_node`` for children. Failures are raised as
``HTMLParseError`` subclasses; before an error leaves a construct, everything
that construct built so far is released with ``release_tree``.

Every loop below either consumes at least one character per iteration or
exits, so parsing always terminates.
"""

import re
from typing import List, Optional, Type

from mini_html_parser.scanning import (
    WHITESPACE,
    Cursor,
    is_attr_name_char,
    is_tag_name_char,
)
from mini_html_parser.shared import (
    DepthLimitError,
    HTMLParseError,
    MalformedTagError,
    MismatchedClosingTagError,
    ParserConfig,
    UnexpectedEndOfInputError,
    get_logger,
)
from mini_html_parser.tree import (
    Attribute,
    CommentNode,
    ElementNode,
    Node,
    SourcePosition,
    TextNode,
    WhitespaceNode,
    release_all,
    release_tree,
)

TAG_OPEN = "<"
TAG_CLOSE = ">"
SELF_CLOSE = "/>"
CLOSING_TAG_OPEN = "</"
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"
QUOTES = ('"', "'")

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})
RAW_TEXT_ELEMENTS = frozenset({"script", "style"})

_WHITESPACE_RUN = re.compile(r"[ \t\n\v\f\r]+")
_WHITESPACE_CHARS = "".join(sorted(WHITESPACE))


def collapse_whitespace(run: str) -> str:
    """Replace every maximal whitespace run with a single space."""
    return _WHITESPACE_RUN.sub(" ", run)


def is_void_element(tag: str) -> bool:
    return tag.lower() in VOID_ELEMENTS


def is_raw_text_element(tag: str) -> bool:
    return tag.lower() in RAW_TEXT_ELEMENTS


def _raw_text_end_pattern(tag: str) -> "re.Pattern[str]":
    return re.compile(
        re.escape(CLOSING_TAG_OPEN + tag) + r"[ \t\n\v\f\r]*" + TAG_CLOSE,
        re.IGNORECASE,
    )


class MarkupGrammar:
    """Node parsers sharing one cursor and one set of per-parse counters.

    A grammar instance belongs to a single parse; nothing is shared between
    parses.
    """

    def __init__(
        self,
        cursor: Cursor,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.cursor = cursor
        self.config = config or ParserConfig()
        self.logger = get_logger(__name__, correlation_id, "markup_grammar")

        self.depth = 0
        self.nodes_created = 0
        self.elements_created = 0
        self.nodes_released = 0
        self.unterminated_comments: List[int] = []

    # Node dispatch

    def parse_node(self) -> Node:
        """Parse the next element, comment or text run.

        Raises:
            UnexpectedEndOfInputError: If the cursor is already at the end
        """
        cursor = self.cursor
        if cursor.at_end:
            raise self.error(
                UnexpectedEndOfInputError,
                "Unexpected end of input",
                expected="an element or text",
            )
        if cursor.peek() == TAG_OPEN:
            return self.parse_element()
        return self.parse_text()

    # Text

    def parse_text(self) -> Node:
        """Parse a run of characters up to the next ``<`` or end of input.

        Returns:
            WhitespaceNode when the run is only whitespace, TextNode otherwise
        """
        cursor = self.cursor
        position = self.position()
        run = cursor.scan_until(lambda ch: ch == TAG_OPEN)
        if not run:
            raise ValueError("parse_text called at a tag opener or end of input")

        self.nodes_created += 1
        if not run.strip(_WHITESPACE_CHARS):
            return WhitespaceNode(position=position)
        return TextNode(collapse_whitespace(run), position=position)

    # Comments

    def parse_comment(self) -> CommentNode:
        """Parse ``<!-- ... -->`` and the whitespace that follows it.

        A comment without ``-->`` runs to the end of input and still parses
        successfully. Its start offset is recorded in
        ``unterminated_comments`` so callers can report it.
        """
        cursor = self.cursor
        position = self.position()
        cursor.advance(len(COMMENT_OPEN))

        end = cursor.find(COMMENT_CLOSE)
        if end < 0:
            content = cursor.text[cursor.offset:]
            cursor.advance(cursor.remaining)
            self.unterminated_comments.append(position.offset)
            self.logger.debug(
                "Unterminated comment runs to end of input",
                extra={"offset": position.offset},
            )
        else:
            content = cursor.text[cursor.offset:end]
            cursor.advance(end - cursor.offset + len(COMMENT_CLOSE))

        cursor.skip_space()
        self.nodes_created += 1
        return CommentNode(content, position=position)

    # Elements

    def parse_element(self) -> Node:
        """Parse an element starting at ``<``, or a comment at ``<!--``."""
        cursor = self.cursor
        if cursor.startswith(COMMENT_OPEN):
            return self.parse_comment()

        position = self.position()
        if cursor.peek() != TAG_OPEN:
            raise self.error(MalformedTagError, "Expected a tag", expected="'<'")
        cursor.advance()
        cursor.skip_space()

        tag = cursor.scan_while(is_tag_name_char)
        if tag is None:
            raise self.error(MalformedTagError, "Missing tag name", expected="a tag name")
        cursor.skip_space()

        attributes = self._parse_attributes(tag)
        self_closing = is_void_element(tag)
        if cursor.peek() == "/":
            cursor.advance()
            self_closing = True
        if cursor.at_end:
            raise self.error(
                UnexpectedEndOfInputError,
                f"Unterminated start tag <{tag}>",
                expected="'>'",
            )
        if cursor.peek() != TAG_CLOSE:
            raise self.error(
                MalformedTagError,
                f"Malformed start tag <{tag}>",
                expected="'>'",
            )
        cursor.advance()

        element = ElementNode(
            tag, attributes, self_closing=self_closing, position=position
        )
        self.nodes_created += 1
        self.elements_created += 1
        if self_closing:
            return element

        if self.depth >= self.config.max_depth:
            self.nodes_released += release_tree(element)
            raise self.error(
                DepthLimitError,
                f"Element nesting exceeds {self.config.max_depth} levels",
                offset=position.offset,
            )

        self.depth += 1
        try:
            if is_raw_text_element(tag):
                self._skip_raw_text(tag)
            else:
                # Inline loop: two interpreter frames per nesting level.
                while not cursor.startswith(CLOSING_TAG_OPEN):
                    if cursor.at_end:
                        raise self.error(
                            UnexpectedEndOfInputError,
                            f"Missing closing tag for <{tag}>",
                            expected=f"'</{tag}>'",
                        )
                    element.children.append(self.parse_node())
            self._parse_closing_tag(tag)
        except HTMLParseError:
            self.nodes_released += release_tree(element)
            raise
        finally:
            self.depth -= 1

        return element

    def _parse_attributes(self, tag: str) -> List[Attribute]:
        """Parse attributes until ``>``, ``/`` or end of input."""
        cursor = self.cursor
        attributes: List[Attribute] = []
        try:
            while not cursor.at_end and cursor.peek() not in (TAG_CLOSE, "/"):
                name = cursor.scan_while(is_attr_name_char)
                if name is None:
                    raise self.error(
                        MalformedTagError,
                        f"Missing attribute name in <{tag}>",
                        expected="an attribute name",
                    )
                cursor.skip_space()
                if cursor.at_end:
                    raise self.error(
                        UnexpectedEndOfInputError,
                        f"Unterminated start tag <{tag}>",
                        expected="'>'",
                    )
                if cursor.peek() != "=":
                    # Boolean attribute; the next name starts here.
                    attributes.append(Attribute(name, ""))
                    continue

                cursor.advance()
                cursor.skip_space()
                if cursor.at_end:
                    raise self.error(
                        UnexpectedEndOfInputError,
                        f"Missing value for attribute {name!r}",
                        expected="an attribute value",
                    )
                attributes.append(Attribute(name, self._parse_attribute_value(name)))
                cursor.skip_space()
        except HTMLParseError:
            attributes.clear()
            raise
        return attributes

    def _parse_attribute_value(self, name: str) -> str:
        """Parse a quoted or unquoted attribute value. No escapes are processed."""
        cursor = self.cursor
        quote = cursor.peek()
        if quote in QUOTES:
            start = cursor.offset
            cursor.advance()
            end = cursor.find(quote)
            if end < 0:
                raise self.error(
                    MalformedTagError,
                    f"Unterminated value for attribute {name!r}",
                    expected=f"closing {quote}",
                    offset=start,
                    found="end of input",
                )
            value = cursor.text[cursor.offset:end]
            cursor.advance(end - cursor.offset + 1)
            return value

        text = cursor.text
        start = end = cursor.offset
        while end < cursor.length:
            ch = text[end]
            if ch in WHITESPACE or ch == TAG_CLOSE or text.startswith(SELF_CLOSE, end):
                break
            end += 1
        cursor.advance(end - start)
        return text[start:end]

    def _skip_raw_text(self, tag: str) -> None:
        """Skip a script/style body up to its closing tag. The body is dropped."""
        cursor = self.cursor
        start = cursor.offset
        end = cursor.search(_raw_text_end_pattern(tag))
        if end < 0:
            raise self.error(
                UnexpectedEndOfInputError,
                f"Unterminated <{tag}> element",
                expected=f"'</{tag}>'",
                offset=start,
                found="end of input",
            )
        cursor.advance(end - start)
        self.logger.debug(
            "Skipped raw text body",
            extra={"tag": tag, "offset": start, "length": end - start},
        )

    def _parse_closing_tag(self, tag: str) -> None:
        """Parse ``</tag>``, matching the name case-insensitively."""
        cursor = self.cursor
        start = cursor.offset
        cursor.advance(len(CLOSING_TAG_OPEN))
        cursor.skip_space()
        name = cursor.scan_while(is_tag_name_char)
        if name is None or name.lower() != tag.lower():
            raise self.error(
                MismatchedClosingTagError,
                f"Mismatched closing tag for <{tag}>",
                expected=f"'</{tag}>'",
                offset=start,
            )
        cursor.skip_space()
        if cursor.at_end:
            raise self.error(
                UnexpectedEndOfInputError,
                f"Unterminated closing tag for <{tag}>",
                expected="'>'",
            )
        if cursor.peek() != TAG_CLOSE:
            raise self.error(
                MismatchedClosingTagError,
                f"Mismatched closing tag for <{tag}>",
                expected=f"'</{tag}>'",
                offset=start,
            )
        cursor.advance()

    # Helpers

    def position(self) -> SourcePosition:
        offset = self.cursor.offset
        line, column = self.cursor.location(offset)
        return SourcePosition(offset, line, column)

    def release(self, *nodes: Node) -> None:
        """Release discarded nodes and count them."""
        self.nodes_released += release_all(nodes)

    def error(
        self,
        error_class: Type[HTMLParseError],
        message: str,
        expected: Optional[str] = None,
        offset: Optional[int] = None,
        found: Optional[str] = None,
    ) -> HTMLParseError:
        """Build an error located at ``offset`` (default: the cursor)."""
        cursor = self.cursor
        if offset is None:
            offset = cursor.offset
        if found is None and expected is not None:
            found = cursor.snippet(offset)
        line, column = cursor.location(offset)
        error = error_class(message, offset, line, column, expected, found)
        self.logger.debug(
            "Parse error detected",
            extra={"kind": error.kind.value, "offset": offset, "line": line},
        )
        return error
