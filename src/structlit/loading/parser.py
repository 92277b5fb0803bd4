"""Parse Go source files with tree-sitter."""

from __future__ import annotations

import importlib
import threading
from pathlib import Path

import tree_sitter

from structlit.config import GRAMMAR_MODULES

# ---------------------------------------------------------------------------
# Parser cache
# ---------------------------------------------------------------------------

# tree_sitter.Parser is not safe for concurrent use; one per thread.
_local = threading.local()
_language_cache: dict[str, tree_sitter.Language] = {}


def _get_language(language: str) -> tree_sitter.Language:
    """Get or create a cached tree-sitter language."""
    if language in _language_cache:
        return _language_cache[language]

    module_name = GRAMMAR_MODULES[language]
    mod = importlib.import_module(module_name)
    capsule: object = mod.language()
    lang = tree_sitter.Language(capsule)
    _language_cache[language] = lang
    return lang


def get_parser(language: str = "go") -> tree_sitter.Parser:
    """Get or create this thread's cached parser for ``language``."""
    cache: dict[str, tree_sitter.Parser] | None = getattr(
        _local, "parsers", None
    )
    if cache is None:
        cache = {}
        _local.parsers = cache
    parser = cache.get(language)
    if parser is None:
        parser = tree_sitter.Parser(_get_language(language))
        cache[language] = parser
    return parser


def parse_source(source: bytes | str) -> tree_sitter.Tree:
    """Parse Go source text."""
    if isinstance(source, str):
        source = source.encode("utf-8")
    return get_parser("go").parse(source)


def parse_file(path: Path) -> tree_sitter.Tree:
    """Read and parse one Go file. Raises OSError if it cannot be read."""
    return parse_source(path.read_bytes())


def syntax_errors(tree: tree_sitter.Tree, path: Path | str) -> list[str]:
    """Describe every ERROR / MISSING node in ``tree`` as ``file:line:col``."""
    errors: list[str] = []
    if not tree.root_node.has_error:
        return errors
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if not node.has_error:
            continue
        if node.is_error or node.is_missing:
            line, col = node.start_point
            what = (
                f"missing {node.type}" if node.is_missing else "syntax error"
            )
            errors.append(f"{path}:{line + 1}:{col + 1}: {what}")
            continue
        stack.extend(reversed(node.children))
    return errors
