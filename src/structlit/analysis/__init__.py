"""Keyed struct-literal census — deterministic analysis via tree-sitter."""

from structlit.analysis.counter import Counter, Tally, merge_counters
from structlit.analysis.matcher import MatchResult, equal_fold, match_names
from structlit.analysis.shapes import Classification, classify
from structlit.analysis.types import GoTypeResolver, TypeInfo, Universe
from structlit.analysis.walker import count_literal, count_package, count_tree

__all__ = [
    "Classification",
    "Counter",
    "GoTypeResolver",
    "MatchResult",
    "Tally",
    "TypeInfo",
    "Universe",
    "classify",
    "count_literal",
    "count_package",
    "count_tree",
    "equal_fold",
    "match_names",
    "merge_counters",
]
