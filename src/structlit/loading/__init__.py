"""Package loading — list packages with go, read and parse their files."""

from structlit.loading.schemas import (
    GoListError,
    GoListPackage,
    Package,
)

__all__ = [
    "GoListError",
    "GoListPackage",
    "Package",
]
