"""Resolve, read and parse the packages selected by patterns."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

import tree_sitter

from structlit.analysis.types import GoTypeResolver, PackageTypes, Universe
from structlit.config import Settings
from structlit.loading.go_list import PackageLoadError, run_go_list
from structlit.loading.parser import parse_file, syntax_errors
from structlit.loading.schemas import GoListPackage, Package

logger = logging.getLogger(__name__)


async def load_packages(
    patterns: Sequence[str],
    settings: Settings | None = None,
    cancel: asyncio.Event | None = None,
) -> list[Package]:
    """Load the root packages matching ``patterns``, in go list order.

    Raises :class:`PackageLoadError` if go list fails, matches nothing,
    or reports an error for any package (dependencies included), or if a
    root file cannot be read or parsed. Every diagnostic is logged
    before the error is raised.
    """
    cfg = settings if settings is not None else Settings()
    listed = await run_go_list(
        patterns,
        go_binary=cfg.go_binary,
        build_tags=cfg.build_tags,
        work_dir=cfg.work_dir,
        timeout=cfg.load_timeout_seconds,
        cancel=cancel,
    )
    roots = [p for p in listed if not p.dep_only]
    if not roots:
        raise PackageLoadError("no packages to load")

    diagnostics = package_errors(listed)
    if diagnostics:
        for message in diagnostics:
            logger.error("%s", message)
        raise PackageLoadError("could not load packages")

    if cancel is not None and cancel.is_set():
        raise PackageLoadError("loading cancelled")

    return await asyncio.to_thread(build_packages, roots, listed)


def package_errors(listed: Sequence[GoListPackage]) -> list[str]:
    """Collect every error go list attached to a package, deduplicated."""
    messages: list[str] = []
    seen: set[str] = set()
    for pkg in listed:
        errors = [pkg.error] if pkg.error is not None else []
        errors.extend(pkg.deps_errors)
        for err in errors:
            text = str(err)
            if text not in seen:
                seen.add(text)
                messages.append(text)
    return messages


def build_packages(
    roots: Sequence[GoListPackage],
    listed: Sequence[GoListPackage],
) -> list[Package]:
    """Parse each root's files and attach a type resolver."""
    universe = Universe(listed)
    packages: list[Package] = []
    diagnostics: list[str] = []
    for desc in roots:
        files: list[tuple[Path, tree_sitter.Tree]] = []
        for path in desc.source_files:
            try:
                tree = parse_file(path)
            except OSError as exc:
                diagnostics.append(f"{path}: {exc}")
                continue
            diagnostics.extend(syntax_errors(tree, path))
            files.append((path, tree))

        pkg_types = PackageTypes.build(
            desc.import_path, desc.name, files, universe, desc.import_map
        )
        universe.register(pkg_types)
        packages.append(
            Package(
                id=desc.import_path,
                name=desc.name,
                files=[f for f, _ in files],
                trees=[t for _, t in files],
                types=GoTypeResolver(pkg_types, universe),
            )
        )
        logger.debug(
            "Parsed %s (%d files)", desc.import_path, len(files)
        )

    if diagnostics:
        for message in diagnostics:
            logger.error("%s", message)
        raise PackageLoadError("could not load packages")
    return packages
