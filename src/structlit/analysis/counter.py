"""Hierarchical tallies of keyed struct-literal fields."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from structlit.analysis.matcher import MatchResult
from structlit.analysis.shapes import Classification
from structlit.constants import Shape


@dataclass
class Tally:
    """Occurrences of one shape and how many of them matched by name."""

    total: int = 0
    exact: int = 0
    partial: int = 0

    @property
    def no_match(self) -> int:
        return self.total - self.exact - self.partial

    def count(self, match: MatchResult) -> None:
        self.total += 1
        if match.identical:
            self.exact += 1
        elif match.partial:
            self.partial += 1

    def merge(self, other: Tally) -> None:
        self.total += other.total
        self.exact += other.exact
        self.partial += other.partial


def _empty_tallies() -> dict[Shape, Tally]:
    return {shape: Tally() for shape in Shape}


@dataclass
class Counter:
    """All tallies for one package, or for the aggregate of many.

    INVARIANT: ``kv_pairs == non_candidates + sum(t.total for t in
    tallies.values())`` and every tally has ``exact + partial <= total``.
    Counters only ever grow; there is no decrement.
    """

    identifier: str
    literals: int = 0
    kv_pairs: int = 0
    non_candidates: int = 0
    tallies: dict[Shape, Tally] = field(default_factory=_empty_tallies)

    def tally(self, shape: Shape) -> Tally:
        return self.tallies[shape]

    def record(
        self,
        classification: Classification | None,
        match: MatchResult | None = None,
    ) -> None:
        """Count one key/value pair.

        A ``None`` classification is a non-candidate and touches no tally.
        """
        self.kv_pairs += 1
        if classification is None:
            self.non_candidates += 1
            return
        self.tallies[classification.shape].count(
            match if match is not None else MatchResult()
        )

    def merge(self, other: Counter) -> Counter:
        """Add every field of ``other`` into this counter; returns self."""
        self.literals += other.literals
        self.kv_pairs += other.kv_pairs
        self.non_candidates += other.non_candidates
        for shape in Shape:
            self.tallies[shape].merge(other.tallies[shape])
        return self

    def check_invariants(self) -> None:
        """Raise ``ValueError`` if the counts are inconsistent."""
        candidates = sum(t.total for t in self.tallies.values())
        if self.kv_pairs != self.non_candidates + candidates:
            raise ValueError(
                f"{self.identifier}: {self.kv_pairs} KV pairs but "
                f"{self.non_candidates} non-candidates + "
                f"{candidates} candidates"
            )
        for shape, t in self.tallies.items():
            if t.exact + t.partial > t.total:
                raise ValueError(
                    f"{self.identifier}: {shape} has more matches "
                    f"than occurrences"
                )
            if shape.qualified and t.partial:
                raise ValueError(
                    f"{self.identifier}: {shape} cannot have "
                    f"partial matches"
                )


def merge_counters(identifier: str, counters: Iterable[Counter]) -> Counter:
    """Fold ``counters`` into a fresh counter labelled ``identifier``."""
    total = Counter(identifier)
    for c in counters:
        total.merge(c)
    return total
