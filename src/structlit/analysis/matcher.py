"""Compare a field key with the name of the identifier assigned to it."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchResult:
    """How a key name relates to the value's identifier name.

    At most one of ``identical`` and ``partial`` is set.
    """

    identical: bool = False
    partial: bool = False


def equal_fold(a: str, b: str) -> bool:
    """Case-insensitive equality using per-character simple case folding.

    Unlike ``str.casefold`` this never expands a character, so ``"ß"``
    and ``"ss"`` stay different.
    """
    if len(a) != len(b):
        return False
    for x, y in zip(a, b, strict=True):
        if x == y:
            continue
        if x.lower() == y.lower() or x.upper() == y.upper():
            continue
        return False
    return True


def match_names(key: str, name: str, qualified: bool) -> MatchResult:
    """Decide exact/partial match between ``key`` and ``name``.

    Qualified values (``Title: pkg.Title``) are never partial matches,
    even when only the case differs.
    """
    identical = key == name
    partial = not identical and not qualified and equal_fold(key, name)
    return MatchResult(identical=identical, partial=partial)
