"""Small helpers over tree-sitter-go nodes."""

from __future__ import annotations

import tree_sitter


def node_text(node: tree_sitter.Node | None) -> str:
    """Decode a node's source text. CRITICAL: always node.text, never slicing."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def unwrap_element(node: tree_sitter.Node) -> tree_sitter.Node:
    """Strip the ``literal_element`` wrapper tree-sitter-go puts around
    composite-literal elements, keys and values."""
    if node.type == "literal_element" and node.named_children:
        return node.named_children[0]
    return node


def keyed_parts(
    element: tree_sitter.Node,
) -> tuple[tree_sitter.Node | None, tree_sitter.Node | None]:
    """Return the (key, value) nodes of a ``keyed_element``, unwrapped."""
    key = element.child_by_field_name("key")
    value = element.child_by_field_name("value")
    if key is None or value is None:
        # Grammar versions without field names: key ':' value
        named = [c for c in element.named_children if c.type != "comment"]
        if len(named) < 2:
            return None, None
        key, value = named[0], named[-1]
    return unwrap_element(key), unwrap_element(value)
