r"""Indented textual dump of a parsed tree, for debugging and golden tests.

One line per node, children indented by one tab more than their parent::

    #Element div
      class="a"
    \t#Text "x"
    \t#Comment " note "

Attributes follow their element at the element's indentation plus two
spaces. Whitespace nodes produce no output.
"""

import sys
from typing import List, Optional, TextIO

from .nodes import CommentNode, ElementNode, Node, TextNode, WhitespaceNode
from .traversal import walk_with_depth


def dump_lines(root: Optional[Node]) -> List[str]:
    """Render the tree as a list of lines without trailing newlines."""
    lines: List[str] = []
    for node, depth in walk_with_depth(root):
        indent = "\t" * depth
        if isinstance(node, ElementNode):
            lines.append(f"{indent}#Element {node.tag}")
            for attribute in node.attributes:
                lines.append(f'{indent}  {attribute.name}="{attribute.value}"')
        elif isinstance(node, TextNode):
            lines.append(f'{indent}#Text "{node.content}"')
        elif isinstance(node, CommentNode):
            lines.append(f'{indent}#Comment "{node.content}"')
        elif isinstance(node, WhitespaceNode):
            continue
        else:
            raise TypeError(f"Cannot dump object of type {type(node).__name__}")
    return lines


def dump_tree(root: Optional[Node]) -> str:
    """Render the tree as text, one newline-terminated line per node."""
    return "".join(f"{line}\n" for line in dump_lines(root))


def print_tree(root: Optional[Node], stream: Optional[TextIO] = None) -> None:
    """Write the dump of ``root`` to ``stream`` (default: stdout)."""
    (stream or sys.stdout).write(dump_tree(root))
