"""Shared constants — single source of truth for cross-module values.

StrEnum members are str-compatible, so the report renderer can print
shape labels directly.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class Shape(StrEnum):
    """Syntactic shape of a keyed field's value expression.

    Member order is the fixed report order.
    """

    IDENT = "ident"
    QUAL_IDENT = "qual.ident"
    STAR = "*ident"
    QUAL_STAR = "*qual.ident"
    AMP = "&ident"
    QUAL_AMP = "&qual.ident"

    @property
    def qualified(self) -> bool:
        """True for the ``pkg.Name`` based shapes."""
        return self in _QUALIFIED

    @classmethod
    def of(cls, *, qualified: bool, prefix: str = "") -> Shape:
        """Pick the shape for a ``*``/``&``/bare prefix and qualification."""
        return cls(prefix + ("qual.ident" if qualified else "ident"))


_QUALIFIED = frozenset({Shape.QUAL_IDENT, Shape.QUAL_STAR, Shape.QUAL_AMP})


# ── Report ───────────────────────────────────────────────

TOTAL_LABEL = "<total>"
NOT_APPLICABLE = "N/A"

# ── Process ──────────────────────────────────────────────

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

# ── Loader ───────────────────────────────────────────────

ERROR_TRUNCATION_CHARS = 2000
