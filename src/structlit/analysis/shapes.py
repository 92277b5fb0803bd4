"""Classify the value expression of a keyed struct-literal field."""

from __future__ import annotations

from dataclasses import dataclass

import tree_sitter

from structlit.analysis.syntax import node_text
from structlit.constants import Shape

# Unary operators that wrap a candidate, mapped to their shape prefix
_PREFIXES: dict[str, str] = {"*": "*", "&": "&"}


@dataclass(frozen=True)
class Classification:
    """A candidate value: its shape and the identifier name it resolves to."""

    shape: Shape
    name: str

    @property
    def qualified(self) -> bool:
        return self.shape.qualified


def ident_of(node: tree_sitter.Node) -> tuple[str, bool] | None:
    """Resolve ``name`` or ``pkg.name`` to ``(name, qualified)``.

    Only a two-part selector whose operand is a plain identifier counts;
    ``a.b.c`` and ``f().x`` do not.
    """
    if node.type == "identifier":
        return node_text(node), False
    if node.type == "selector_expression":
        operand = node.child_by_field_name("operand")
        field = node.child_by_field_name("field")
        if operand is not None and field is not None and operand.type == "identifier":
            return node_text(field), True
    return None


def classify(value: tree_sitter.Node) -> Classification | None:
    """Return the shape of ``value``, or None for a non-candidate.

    ``*x`` and ``&x`` are unwrapped exactly once; any other unary
    operator, or a wrapped operand that is not identifier-shaped, makes
    the value a non-candidate.
    """
    prefix = ""
    target = value
    if value.type == "unary_expression":
        operator = value.child_by_field_name("operator")
        op = node_text(operator) if operator is not None else ""
        if op not in _PREFIXES:
            return None
        operand = value.child_by_field_name("operand")
        if operand is None:
            return None
        prefix = _PREFIXES[op]
        target = operand

    resolved = ident_of(target)
    if resolved is None:
        return None
    name, qualified = resolved
    return Classification(
        shape=Shape.of(qualified=qualified, prefix=prefix), name=name
    )
