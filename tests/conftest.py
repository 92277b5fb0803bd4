"""Shared test helpers — parse Go snippets into loaded packages."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest
import tree_sitter

from structlit.analysis.counter import Counter
from structlit.analysis.types import GoTypeResolver, PackageTypes, Universe
from structlit.analysis.walker import count_package
from structlit.loading.parser import parse_source
from structlit.loading.schemas import GoListPackage, Package

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures" / "gomod"


def parse_go(source: str) -> tree_sitter.Tree:
    """Parse a (dedented) Go snippet."""
    return parse_source(dedent(source))


def go_package(
    *sources: str,
    path: str = "example.com/p",
    name: str = "p",
    universe: Universe | None = None,
) -> Package:
    """Build a :class:`Package` from in-memory Go sources.

    Each source becomes one file of the package; ``universe`` supplies
    any imported packages.
    """
    universe = universe if universe is not None else Universe()
    files = [
        (Path(f"file{i}.go"), parse_go(src))
        for i, src in enumerate(sources)
    ]
    pkg_types = PackageTypes.build(path, name, files, universe)
    universe.register(pkg_types)
    return Package(
        id=path,
        name=name,
        files=[f for f, _ in files],
        trees=[t for _, t in files],
        types=GoTypeResolver(pkg_types, universe),
    )


def count_go(*sources: str, universe: Universe | None = None) -> Counter:
    """Count a package built from ``sources`` and check its invariants."""
    counter = count_package(go_package(*sources, universe=universe))
    counter.check_invariants()
    return counter


def listed_package(
    import_path: str,
    directory: Path,
    files: list[str],
    *,
    name: str | None = None,
    dep_only: bool = False,
    **extra: object,
) -> GoListPackage:
    """A go list record, as decoded from ``go list -json``."""
    data: dict[str, object] = {
        "ImportPath": import_path,
        "Name": name if name is not None else import_path.rsplit("/", 1)[-1],
        "Dir": str(directory),
        "GoFiles": files,
        "DepOnly": dep_only,
    }
    data.update(extra)
    return GoListPackage.model_validate(data)


@pytest.fixture
def fixture_listing() -> list[GoListPackage]:
    """go list output for ``./app`` in the fixture module."""
    return [
        listed_package(
            "example.com/gomod/model",
            FIXTURE_DIR / "model",
            ["model.go"],
            dep_only=True,
        ),
        listed_package(
            "example.com/gomod/app",
            FIXTURE_DIR / "app",
            ["app.go"],
            Imports=["example.com/gomod/model"],
        ),
    ]
