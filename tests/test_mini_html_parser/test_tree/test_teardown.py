"""Tests for tree release."""

import pytest

from mini_html_parser.tree import (
    Attribute,
    CommentNode,
    ElementNode,
    TextNode,
    WhitespaceNode,
    release_all,
    release_tree,
)


class TestReleaseTree:
    """Test release of trees and partial subtrees."""

    def test_release_none(self):
        """Test releasing nothing is a no-op."""
        assert release_tree(None) == 0

    def test_release_counts_every_node(self):
        """Test the release count covers the whole subtree."""
        root = ElementNode("div", [Attribute("a", "1")], [
            TextNode("x"),
            ElementNode("p", children=[CommentNode("c"), WhitespaceNode()]),
        ])
        assert release_tree(root) == 5

    def test_release_drops_owned_data(self):
        """Test released nodes no longer hold children, attributes or text."""
        text = TextNode("x")
        child = ElementNode("p", [Attribute("b")], [text])
        root = ElementNode("div", [Attribute("a", "1")], [child])

        release_tree(root)

        assert root.children == []
        assert root.attributes == []
        assert child.children == []
        assert child.attributes == []
        assert text.content == ""

    def test_release_leaf(self):
        """Test releasing single leaf nodes."""
        comment = CommentNode("note")
        assert release_tree(comment) == 1
        assert comment.content == ""
        assert release_tree(WhitespaceNode()) == 1

    def test_release_deep_tree_does_not_recurse(self):
        """Test a very deep chain is released iteratively."""
        root = ElementNode("d0")
        node = root
        for depth in range(1, 5000):
            child = ElementNode(f"d{depth}")
            node.children.append(child)
            node = child

        assert release_tree(root) == 5000

    def test_release_wide_tree(self):
        """Test a very wide sibling list is released."""
        root = ElementNode("ul", children=[ElementNode("li") for _ in range(10000)])
        assert release_tree(root) == 10001

    def test_release_unknown_type(self):
        """Test non-node objects are rejected."""
        with pytest.raises(TypeError, match="Cannot release"):
            release_tree("not a node")

    def test_release_all(self):
        """Test releasing a sibling sequence."""
        nodes = [TextNode("a"), ElementNode("b", children=[TextNode("c")])]
        assert release_all(nodes) == 3
