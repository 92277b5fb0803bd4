"""Models for the package loading data flow."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import tree_sitter
from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from structlit.analysis.types import TypeInfo


class GoListError(BaseModel):
    """A ``PackageError`` as reported by ``go list -e -json``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    pos: str = Field(default="", alias="Pos")
    err: str = Field(default="", alias="Err")

    def __str__(self) -> str:
        return f"{self.pos}: {self.err}" if self.pos else self.err


class GoListPackage(BaseModel):
    """One package object from the ``go list -json`` stream."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    import_path: str = Field(alias="ImportPath")
    name: str = Field(default="", alias="Name")
    dir: Path | None = Field(default=None, alias="Dir")
    go_files: list[str] = Field(default_factory=list, alias="GoFiles")
    cgo_files: list[str] = Field(default_factory=list, alias="CgoFiles")
    import_map: dict[str, str] = Field(default_factory=dict, alias="ImportMap")
    dep_only: bool = Field(default=False, alias="DepOnly")
    error: GoListError | None = Field(default=None, alias="Error")
    deps_errors: list[GoListError] = Field(
        default_factory=list, alias="DepsErrors"
    )

    @property
    def source_files(self) -> list[Path]:
        """Absolute paths of the Go files compiled into the package."""
        base = self.dir or Path()
        return [base / f for f in [*self.go_files, *self.cgo_files]]


@dataclass
class Package:
    """A loaded root package: identifier, syntax trees and type capability."""

    id: str
    name: str
    files: list[Path] = field(default_factory=lambda: list[Path]())
    trees: list[tree_sitter.Tree] = field(
        default_factory=lambda: list[tree_sitter.Tree]()
    )
    types: TypeInfo | None = None
