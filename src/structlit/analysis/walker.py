"""Walk Go syntax trees and tally keyed struct literals."""

from __future__ import annotations

import tree_sitter

from structlit.analysis.counter import Counter
from structlit.analysis.matcher import match_names
from structlit.analysis.shapes import classify
from structlit.analysis.syntax import keyed_parts, node_text
from structlit.analysis.types import TypeInfo
from structlit.loading.schemas import Package


def count_package(package: Package) -> Counter:
    """Tally every syntax tree of ``package`` into a fresh counter."""
    counter = Counter(package.id)
    if package.types is None:
        return counter
    for tree in package.trees:
        count_tree(tree, package.types, counter)
    return counter


def count_tree(
    tree: tree_sitter.Tree,
    types: TypeInfo,
    counter: Counter,
) -> None:
    """Visit every node of ``tree`` in document order.

    Iterative, so deeply nested literals cannot exhaust the stack.
    """
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        body = _literal_body(node)
        if body is not None and types.is_struct_literal(body):
            count_literal(body, counter)
        stack.extend(reversed(node.children))


def _literal_body(node: tree_sitter.Node) -> tree_sitter.Node | None:
    """The ``literal_value`` of a literal, each literal exactly once.

    A ``composite_literal`` owns its body; a ``literal_value`` elsewhere
    is an element whose type was elided (``[]T{{X: 1}}``).
    """
    if node.type == "composite_literal":
        return node.child_by_field_name("body")
    if node.type == "literal_value":
        parent = node.parent
        if parent is not None and parent.type != "composite_literal":
            return node
    return None


def count_literal(body: tree_sitter.Node, counter: Counter) -> None:
    """Record every keyed element of a struct literal's body.

    The literal itself counts once, and only if it had a keyed element.
    """
    keyed = False
    for element in body.named_children:
        if element.type != "keyed_element":
            continue
        keyed = True
        key, value = keyed_parts(element)
        classification = classify(value) if value is not None else None
        if classification is None:
            counter.record(None)
            continue
        match = match_names(
            node_text(key), classification.name, classification.qualified
        )
        counter.record(classification, match)
    if keyed:
        counter.literals += 1
