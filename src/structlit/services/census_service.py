"""Census orchestration — load packages, walk each, sum the counters."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from structlit.analysis.counter import Counter, merge_counters
from structlit.analysis.walker import count_package
from structlit.config import Settings
from structlit.constants import TOTAL_LABEL
from structlit.loading.loader import load_packages
from structlit.loading.schemas import Package

logger = logging.getLogger(__name__)

PackageCounter = Callable[[Package], Counter]


@dataclass
class CensusResult:
    """Per-package counters (sorted by identifier) and their total."""

    counters: list[Counter] = field(
        default_factory=lambda: list[Counter]()
    )
    total: Counter = field(default_factory=lambda: Counter(TOTAL_LABEL))
    cancelled: bool = False
    skipped: list[str] = field(default_factory=lambda: list[str]())
    duration_ms: float = 0.0


async def run_census(
    patterns: Sequence[str],
    settings: Settings | None = None,
    cancel: asyncio.Event | None = None,
) -> CensusResult:
    """Load the packages selected by ``patterns`` and tally them.

    :class:`~structlit.loading.go_list.PackageLoadError` propagates
    unchanged; nothing is walked if loading fails.
    """
    cfg = settings if settings is not None else Settings()
    packages = await load_packages(patterns, cfg, cancel)
    return await count_packages(
        packages,
        max_concurrency=cfg.walk_max_concurrency,
        cancel=cancel,
    )


async def count_packages(
    packages: Sequence[Package],
    *,
    max_concurrency: int = 1,
    cancel: asyncio.Event | None = None,
    counter: PackageCounter = count_package,
) -> CensusResult:
    """Walk ``packages`` on worker threads, one private counter each.

    ``cancel`` is checked before each walk starts; walks already running
    finish. Counters are merged serially once every walk is done.
    """
    start = time.monotonic()
    semaphore = asyncio.Semaphore(max_concurrency)

    async def _walk(pkg: Package) -> Counter | None:
        async with semaphore:
            if cancel is not None and cancel.is_set():
                return None
            c = await asyncio.to_thread(counter, pkg)
            c.check_invariants()
            logger.info(
                "Counted %s: %d keyed literals, %d KV pairs",
                c.identifier,
                c.literals,
                c.kv_pairs,
            )
            return c

    walked = await asyncio.gather(*(_walk(p) for p in packages))

    result = CensusResult()
    for pkg, c in zip(packages, walked, strict=True):
        if c is None:
            result.skipped.append(pkg.id)
        else:
            result.counters.append(c)
    result.counters.sort(key=lambda c: c.identifier)
    result.total = merge_counters(TOTAL_LABEL, result.counters)
    result.total.check_invariants()
    result.cancelled = bool(result.skipped) or (
        cancel is not None and cancel.is_set()
    )
    if result.cancelled:
        logger.warning(
            "Interrupted: %d of %d packages counted",
            len(result.counters),
            len(packages),
        )
    result.duration_ms = (time.monotonic() - start) * 1000
    return result
