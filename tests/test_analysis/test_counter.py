"""Tests for Counter / Tally accumulation and merging."""

from __future__ import annotations

import itertools

import pytest

from structlit.analysis.counter import Counter, Tally, merge_counters
from structlit.analysis.matcher import MatchResult
from structlit.analysis.shapes import Classification
from structlit.constants import Shape

EXACT = MatchResult(identical=True)
PARTIAL = MatchResult(partial=True)
NONE = MatchResult()


def _fields(c: Counter) -> tuple[object, ...]:
    """Everything but the label."""
    return (
        c.literals,
        c.kv_pairs,
        c.non_candidates,
        tuple((t.total, t.exact, t.partial) for t in c.tallies.values()),
    )


def _sample(label: str, seed: int) -> Counter:
    c = Counter(label)
    c.literals = seed
    shapes = list(Shape)
    for i in range(seed * 3):
        shape = shapes[i % len(shapes)]
        match = (EXACT, PARTIAL, NONE)[i % 3]
        if shape.qualified and match is PARTIAL:
            match = NONE
        c.record(Classification(shape, "n"), match)
    for _ in range(seed):
        c.record(None)
    return c


class TestTally:
    def test_count(self) -> None:
        t = Tally()
        t.count(EXACT)
        t.count(PARTIAL)
        t.count(NONE)
        assert (t.total, t.exact, t.partial, t.no_match) == (3, 1, 1, 1)

    def test_merge(self) -> None:
        t = Tally(total=3, exact=1, partial=1)
        t.merge(Tally(total=2, exact=2))
        assert (t.total, t.exact, t.partial) == (5, 3, 1)


class TestRecord:
    def test_non_candidate(self) -> None:
        c = Counter("p")
        c.record(None)
        assert (c.kv_pairs, c.non_candidates) == (1, 1)
        assert all(t.total == 0 for t in c.tallies.values())

    def test_candidate(self) -> None:
        c = Counter("p")
        c.record(Classification(Shape.AMP, "x"), PARTIAL)
        c.record(Classification(Shape.AMP, "X"), EXACT)
        c.record(Classification(Shape.IDENT, "y"), NONE)
        amp = c.tally(Shape.AMP)
        assert (amp.total, amp.exact, amp.partial) == (2, 1, 1)
        assert c.tally(Shape.IDENT).no_match == 1
        assert (c.kv_pairs, c.non_candidates) == (3, 0)
        c.check_invariants()

    def test_record_never_touches_literals(self) -> None:
        c = Counter("p")
        c.record(Classification(Shape.IDENT, "x"), EXACT)
        assert c.literals == 0


class TestMerge:
    def test_adds_every_field(self) -> None:
        a = _sample("a", 2)
        b = _sample("b", 3)
        expected_kv = a.kv_pairs + b.kv_pairs
        a.merge(b)
        assert a.kv_pairs == expected_kv
        assert a.literals == 5
        assert a.non_candidates == 5
        a.check_invariants()

    def test_commutative_and_associative(self) -> None:
        samples = [_sample(name, seed) for name, seed in (("a", 1), ("b", 2), ("c", 4))]
        results = {
            _fields(merge_counters("t", order))
            for order in itertools.permutations(samples)
        }
        assert len(results) == 1

        left = Counter("l").merge(samples[0]).merge(samples[1])
        left.merge(samples[2])
        right = Counter("r").merge(samples[1]).merge(samples[2])
        nested = Counter("n").merge(samples[0]).merge(right)
        assert _fields(left) == _fields(nested)

    def test_zero_is_identity(self) -> None:
        a = _sample("a", 3)
        before = _fields(a)
        for _ in range(60):
            a.merge(Counter("empty"))
        assert _fields(a) == before

    def test_sixty_empty_counters_are_zero(self) -> None:
        total = merge_counters("t", (Counter(str(i)) for i in range(60)))
        assert _fields(total) == _fields(Counter("zero"))

    def test_merge_leaves_other_untouched(self) -> None:
        a = _sample("a", 1)
        b = _sample("b", 2)
        before = _fields(b)
        a.merge(b)
        assert _fields(b) == before


class TestInvariants:
    def test_sample_is_consistent(self) -> None:
        _sample("a", 5).check_invariants()

    def test_kv_mismatch_raises(self) -> None:
        c = Counter("p")
        c.kv_pairs = 2
        with pytest.raises(ValueError, match="KV pairs"):
            c.check_invariants()

    def test_too_many_matches_raises(self) -> None:
        c = Counter("p", kv_pairs=1)
        c.tallies[Shape.IDENT] = Tally(total=1, exact=1, partial=1)
        with pytest.raises(ValueError, match="more matches"):
            c.check_invariants()

    def test_qualified_partial_raises(self) -> None:
        c = Counter("p", kv_pairs=1)
        c.tallies[Shape.QUAL_IDENT] = Tally(total=1, partial=1)
        with pytest.raises(ValueError, match="partial"):
            c.check_invariants()
