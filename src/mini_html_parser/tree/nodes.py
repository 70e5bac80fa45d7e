"""Node and attribute data model for parsed HTML trees.

A tree is built from four node kinds, each with its own payload shape:

    ElementNode     tag name, ordered attributes, ordered children
    TextNode        text content with whitespace runs collapsed
    CommentNode     raw comment content
    WhitespaceNode  a whitespace-only text run, no payload

Nodes are created by the parser and are not mutated once the parse that
created them returns. A tree is strictly hierarchical: every node has at most
one parent and no node is reachable from itself.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Union


class NodeKind(Enum):
    """Discriminator for the node sum type."""

    ELEMENT = auto()
    TEXT = auto()
    COMMENT = auto()
    WHITESPACE = auto()


@dataclass(frozen=True)
class SourcePosition:
    """Where a node started in the source text."""

    offset: int
    line: int
    column: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")

    def to_dict(self) -> Dict[str, int]:
        return {"offset": self.offset, "line": self.line, "column": self.column}


@dataclass
class Attribute:
    """A single ``name=value`` pair from a start tag.

    ``value`` is the empty string both for an explicitly empty value
    (``alt=""``) and for a boolean attribute written without ``=`` at all
    (``disabled``). The two spellings cannot be told apart after parsing.
    """

    name: str
    value: str = ""

    def __post_init__(self) -> None:
        """Validate attribute values."""
        if not self.name:
            raise ValueError("Attribute name cannot be empty")

    def name_matches(self, name: str) -> bool:
        """Case-insensitive comparison against an attribute name."""
        return self.name.lower() == name.lower()

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(eq=False)
class ElementNode:
    """An element with its attributes and children.

    The tag keeps its source spelling; comparisons go through ``tag_matches``
    because tag identity is case-insensitive.
    """

    kind: ClassVar[NodeKind] = NodeKind.ELEMENT

    tag: str
    attributes: List[Attribute] = field(default_factory=list)
    children: List["Node"] = field(default_factory=list)
    self_closing: bool = False
    position: Optional[SourcePosition] = None

    def __post_init__(self) -> None:
        """Validate element values."""
        if not self.tag:
            raise ValueError("Element tag cannot be empty")

    def __repr__(self) -> str:
        return (
            f"ElementNode(tag={self.tag!r}, attributes={len(self.attributes)}, "
            f"children={len(self.children)})"
        )

    @property
    def tag_name(self) -> str:
        """Lower-cased tag name, the element's identity."""
        return self.tag.lower()

    def tag_matches(self, name: str) -> bool:
        """Check the tag name case-insensitively."""
        return self.tag.lower() == name.lower()

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Value of the first attribute called ``name`` (case-insensitive)."""
        for attribute in self.attributes:
            if attribute.name_matches(name):
                return attribute.value
        return default

    def get_attributes(self, name: str) -> List[str]:
        """Values of every attribute called ``name``, duplicates included."""
        return [a.value for a in self.attributes if a.name_matches(name)]

    def has_attribute(self, name: str) -> bool:
        """Check if element has a specific attribute."""
        return any(a.name_matches(name) for a in self.attributes)

    def attribute_items(self) -> List[Tuple[str, str]]:
        """Attributes as ``(name, value)`` pairs in source order."""
        return [(a.name, a.value) for a in self.attributes]

    @property
    def element_children(self) -> List["ElementNode"]:
        """Direct children that are elements."""
        return [child for child in self.children if isinstance(child, ElementNode)]

    @property
    def text_content(self) -> str:
        """Concatenated content of all descendant text nodes, in order."""
        parts: List[str] = []
        stack: List[Node] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if isinstance(node, TextNode):
                parts.append(node.content)
            elif isinstance(node, ElementNode):
                stack.extend(reversed(node.children))
        return "".join(parts)

    def iter_children(self) -> Iterator["Node"]:
        return iter(self.children)

    def to_dict(self) -> Dict[str, Any]:
        """Convert element to dictionary representation."""
        result: Dict[str, Any] = {
            "kind": self.kind.name.lower(),
            "tag": self.tag,
            "attributes": [attribute.to_dict() for attribute in self.attributes],
            "self_closing": self.self_closing,
        }
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


@dataclass
class TextNode:
    """A text run with every whitespace run collapsed to a single space."""

    kind: ClassVar[NodeKind] = NodeKind.TEXT

    content: str
    position: Optional[SourcePosition] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        """Validate text content."""
        if not self.content:
            raise ValueError("Text content cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "text", "content": self.content}


@dataclass
class CommentNode:
    """Raw content between ``<!--`` and ``-->``."""

    kind: ClassVar[NodeKind] = NodeKind.COMMENT

    content: str
    position: Optional[SourcePosition] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "comment", "content": self.content}


@dataclass
class WhitespaceNode:
    """A text run made only of whitespace. Its content is not kept."""

    kind: ClassVar[NodeKind] = NodeKind.WHITESPACE

    position: Optional[SourcePosition] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "whitespace"}


Node = Union[ElementNode, TextNode, CommentNode, WhitespaceNode]
