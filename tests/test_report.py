"""Tests for the plain-text census report."""

from __future__ import annotations

from structlit.analysis.counter import Counter, Tally, merge_counters
from structlit.constants import TOTAL_LABEL, Shape
from structlit.report import ordered_blocks, render_counter, render_report


def _counter(identifier: str) -> Counter:
    c = Counter(identifier, literals=2, kv_pairs=4, non_candidates=1)
    c.tallies[Shape.IDENT] = Tally(total=2, exact=1, partial=1)
    c.tallies[Shape.QUAL_AMP] = Tally(total=1)
    return c


def test_render_block() -> None:
    assert render_counter(_counter("example.com/a")) == (
        "example.com/a:\n"
        "\tkeyed struct literals: 2\n"
        "\ttotal KV pairs: 4\n"
        "\tnon-candidate KV pairs: 1\n"
        "\tident:\n"
        "\t\ttotal: 2\n"
        "\t\tno match: 0\n"
        "\t\texact: 1\n"
        "\t\tpartial: 1\n"
        "\t&qual.ident:\n"
        "\t\ttotal: 1\n"
        "\t\tno match: 1\n"
        "\t\texact: 0\n"
        "\t\tpartial: N/A\n"
    )


def test_empty_counter() -> None:
    assert render_counter(Counter("example.com/empty")) == (
        "example.com/empty: no keyed struct literals\n"
    )


def test_literals_without_pairs_still_reported() -> None:
    out = render_counter(Counter("p", literals=1))
    assert "keyed struct literals: 1" in out
    assert "total KV pairs: 0" in out
    assert "\tident:" not in out


def test_blocks_sorted_and_total_last() -> None:
    counters = [_counter("b"), _counter("a")]
    total = merge_counters(TOTAL_LABEL, counters)
    assert [c.identifier for c in ordered_blocks(counters, total)] == [
        "a",
        "b",
        TOTAL_LABEL,
    ]


def test_single_package_has_no_total() -> None:
    c = _counter("a")
    report = render_report([c], merge_counters(TOTAL_LABEL, [c]))
    assert TOTAL_LABEL not in report
    assert report == render_counter(c)


def test_blocks_separated_by_blank_line() -> None:
    counters = [Counter("a"), Counter("b")]
    report = render_report(counters, merge_counters(TOTAL_LABEL, counters))
    assert report == (
        "a: no keyed struct literals\n"
        "\n"
        "b: no keyed struct literals\n"
        "\n"
        "<total>: no keyed struct literals\n"
    )


def test_total_sums_packages() -> None:
    counters = [_counter("a"), _counter("b")]
    report = render_report(counters, merge_counters(TOTAL_LABEL, counters))
    total_block = report.split("\n\n")[-1]
    assert total_block.startswith("<total>:\n")
    assert "\tkeyed struct literals: 4\n" in total_block
    assert "\ttotal KV pairs: 8\n" in total_block
