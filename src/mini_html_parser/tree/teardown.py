"""Release of parsed trees and partially built subtrees.

``release_tree`` drops every reference a node owns: attributes, children
and strings. The parser calls it on partial subtrees when a parse fails and
``ParseResult.release`` calls it on a finished tree. Siblings are walked
iteratively and depth with an explicit stack.
"""

from typing import Iterable, List, Optional

from .nodes import CommentNode, ElementNode, Node, TextNode, WhitespaceNode


def release_tree(root: Optional[Node]) -> int:
    """Release ``root`` and everything it owns.

    Args:
        root: Node of any kind, or None

    Returns:
        Number of nodes released
    """
    if root is None:
        return 0

    released = 0
    stack: List[Node] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, ElementNode):
            # Detach first; the stack holds the only remaining references.
            children = node.children
            node.children = []
            stack.extend(children)
            node.attributes.clear()
        elif isinstance(node, (TextNode, CommentNode)):
            node.content = ""
        elif not isinstance(node, WhitespaceNode):
            raise TypeError(f"Cannot release object of type {type(node).__name__}")
        released += 1
    return released


def release_all(nodes: Iterable[Node]) -> int:
    """Release a sequence of sibling nodes."""
    released = 0
    for node in nodes:
        released += release_tree(node)
    return released
