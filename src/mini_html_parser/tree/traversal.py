"""Read-only traversal and search over parsed trees."""

from typing import Callable, Iterator, List, Optional, Tuple

from .nodes import ElementNode, Node

NodePredicate = Callable[[Node], bool]
NodeVisitor = Callable[[Node, int], None]


def walk(root: Optional[Node]) -> Iterator[Node]:
    """Yield every node of the tree in pre-order (document order)."""
    for node, _depth in walk_with_depth(root):
        yield node


def walk_with_depth(root: Optional[Node]) -> Iterator[Tuple[Node, int]]:
    """Yield ``(node, depth)`` pairs in pre-order, the root at depth 0."""
    if root is None:
        return
    stack: List[Tuple[Node, int]] = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        if isinstance(node, ElementNode):
            stack.extend((child, depth + 1) for child in reversed(node.children))


def visit(root: Optional[Node], visitor: NodeVisitor) -> int:
    """Call ``visitor(node, depth)`` once per node in pre-order.

    Returns:
        Number of nodes visited
    """
    count = 0
    for node, depth in walk_with_depth(root):
        visitor(node, depth)
        count += 1
    return count


def find_first(root: Optional[Node], predicate: NodePredicate) -> Optional[Node]:
    """Return the first node in pre-order satisfying ``predicate``, or None."""
    return next((node for node in walk(root) if predicate(node)), None)


def find_all(root: Optional[Node], predicate: NodePredicate) -> List[Node]:
    """Return every node satisfying ``predicate`` in pre-order."""
    return [node for node in walk(root) if predicate(node)]


def by_tag(name: str) -> NodePredicate:
    """Predicate matching elements whose tag equals ``name`` case-insensitively."""
    def predicate(node: Node) -> bool:
        return isinstance(node, ElementNode) and node.tag_matches(name)
    return predicate


def by_attribute(name: str, value: Optional[str] = None) -> NodePredicate:
    """Predicate matching elements carrying attribute ``name``.

    When ``value`` is given, one of the attributes called ``name`` must also
    have exactly that value.
    """
    def predicate(node: Node) -> bool:
        if not isinstance(node, ElementNode):
            return False
        if value is None:
            return node.has_attribute(name)
        return value in node.get_attributes(name)
    return predicate


def count_nodes(root: Optional[Node]) -> int:
    return sum(1 for _ in walk(root))


def max_depth(root: Optional[Node]) -> int:
    """Depth of the deepest node, 0 for a lone root or an empty tree."""
    return max((depth for _node, depth in walk_with_depth(root)), default=0)
