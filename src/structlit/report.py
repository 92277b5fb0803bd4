"""Render counters as the plain-text census report."""

from __future__ import annotations

from collections.abc import Sequence

from structlit.analysis.counter import Counter, Tally
from structlit.constants import NOT_APPLICABLE, Shape


def render_counter(counter: Counter) -> str:
    """One report block, ending with a newline."""
    if counter.literals == 0:
        return f"{counter.identifier}: no keyed struct literals\n"

    lines = [
        f"{counter.identifier}:",
        f"\tkeyed struct literals: {counter.literals}",
        f"\ttotal KV pairs: {counter.kv_pairs}",
        f"\tnon-candidate KV pairs: {counter.non_candidates}",
    ]
    for shape in Shape:
        tally = counter.tally(shape)
        if tally.total == 0:
            continue
        lines.extend(_tally_lines(shape, tally))
    return "\n".join(lines) + "\n"


def _tally_lines(shape: Shape, tally: Tally) -> list[str]:
    partial = NOT_APPLICABLE if shape.qualified else str(tally.partial)
    return [
        f"\t{shape}:",
        f"\t\ttotal: {tally.total}",
        f"\t\tno match: {tally.no_match}",
        f"\t\texact: {tally.exact}",
        f"\t\tpartial: {partial}",
    ]


def ordered_blocks(
    counters: Sequence[Counter], total: Counter
) -> list[Counter]:
    """Per-package counters by identifier, then the total if there are
    two or more packages."""
    blocks = sorted(counters, key=lambda c: c.identifier)
    if len(blocks) > 1:
        blocks.append(total)
    return blocks


def render_report(counters: Sequence[Counter], total: Counter) -> str:
    """The whole report; blocks are separated by a blank line."""
    return "\n".join(
        render_counter(c) for c in ordered_blocks(counters, total)
    )
