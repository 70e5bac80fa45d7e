"""Tree data model for the mini HTML parser.

Key Components:
    ElementNode, TextNode, CommentNode, WhitespaceNode: The node sum type
    Attribute: A name/value pair on an element
    release_tree: Teardown of a tree or partial subtree
    walk, visit, find_first: Read-only traversal and search
    dump_tree: Indented textual rendering for debugging
"""

from .dump import dump_lines, dump_tree, print_tree
from .nodes import (
    Attribute,
    CommentNode,
    ElementNode,
    Node,
    NodeKind,
    SourcePosition,
    TextNode,
    WhitespaceNode,
)
from .teardown import release_all, release_tree
from .traversal import (
    by_attribute,
    by_tag,
    count_nodes,
    find_all,
    find_first,
    max_depth,
    visit,
    walk,
    walk_with_depth,
)

__all__ = [
    "Attribute",
    "CommentNode",
    "ElementNode",
    "Node",
    "NodeKind",
    "SourcePosition",
    "TextNode",
    "WhitespaceNode",
    "release_all",
    "release_tree",
    "dump_lines",
    "dump_tree",
    "print_tree",
    "by_attribute",
    "by_tag",
    "count_nodes",
    "find_all",
    "find_first",
    "max_depth",
    "visit",
    "walk",
    "walk_with_depth",
]
