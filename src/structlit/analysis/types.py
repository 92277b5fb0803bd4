"""Decide whether a composite literal has struct type.

The literal walker needs exactly one capability from a type checker:
"is this literal's type, after resolving names, a struct?". The
:class:`TypeInfo` protocol is that capability. :class:`GoTypeResolver`
provides it from tree-sitter syntax alone by following type declarations
through the package, its enclosing function blocks and the packages it
imports (indexed lazily through :class:`Universe`).
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

import tree_sitter

from structlit.analysis.syntax import node_text
from structlit.loading.parser import parse_file
from structlit.loading.schemas import GoListPackage

logger = logging.getLogger(__name__)

# Type expression node types that refer to another type by name
_NAMED_TYPES = frozenset({"type_identifier", "qualified_type", "generic_type"})

_ARRAY_TYPES = frozenset({"array_type", "slice_type", "implicit_length_array_type"})

# Nodes whose direct children may hold statements (and so local types)
_STATEMENT_HOLDERS = frozenset({
    "block",
    "statement_list",
    "expression_case",
    "default_case",
    "type_case",
    "communication_case",
})


class TypeInfo(Protocol):
    """Static type capability consumed by the literal walker."""

    def is_struct_literal(self, body: tree_sitter.Node) -> bool:
        """True if the literal whose ``literal_value`` is ``body`` has
        an underlying struct type."""
        ...


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------


@dataclass
class FileScope:
    """Names visible at the top level of one file."""

    path: Path
    package: PackageTypes
    imports: dict[str, str] = field(default_factory=lambda: dict[str, str]())
    dot_imports: list[str] = field(default_factory=lambda: list[str]())


@dataclass(frozen=True)
class TypeRef:
    """A type expression together with the file it must be read in.

    ``bindings`` maps the type parameters of the enclosing generic
    declaration to the type arguments of the instantiation being
    followed.
    """

    node: tree_sitter.Node
    scope: FileScope
    bindings: dict[str, TypeRef] = field(
        default_factory=lambda: dict[str, TypeRef](), compare=False
    )

    def derive(self, node: tree_sitter.Node) -> TypeRef:
        """``node`` read in the same file with the same bindings."""
        return TypeRef(node, self.scope, self.bindings)


@dataclass
class PackageTypes:
    """Top-level type declarations of one package."""

    path: str
    name: str
    decls: dict[str, TypeRef] = field(default_factory=lambda: dict[str, TypeRef]())
    scopes: dict[int, FileScope] = field(
        default_factory=lambda: dict[int, FileScope]()
    )

    @classmethod
    def build(
        cls,
        path: str,
        name: str,
        files: Iterable[tuple[Path, tree_sitter.Tree]],
        universe: Universe,
        import_map: Mapping[str, str] | None = None,
    ) -> PackageTypes:
        pkg = cls(path=path, name=name)
        for file_path, tree in files:
            root = tree.root_node
            scope = FileScope(path=file_path, package=pkg)
            _collect_imports(root, scope, universe, import_map or {})
            for spec in _type_specs(root.named_children):
                decl_name = spec.child_by_field_name("name")
                decl_type = spec.child_by_field_name("type")
                if decl_name is None or decl_type is None:
                    continue
                pkg.decls.setdefault(
                    node_text(decl_name), TypeRef(decl_type, scope)
                )
            pkg.scopes[root.id] = scope
        return pkg


def _type_specs(
    nodes: Iterable[tree_sitter.Node],
) -> Iterator[tree_sitter.Node]:
    """Yield ``type_spec``/``type_alias`` nodes of ``type_declaration`` s."""
    for node in nodes:
        if node.type != "type_declaration":
            continue
        for spec in node.named_children:
            if spec.type in ("type_spec", "type_alias"):
                yield spec


def _collect_imports(
    root: tree_sitter.Node,
    scope: FileScope,
    universe: Universe,
    import_map: Mapping[str, str],
) -> None:
    for decl in root.named_children:
        if decl.type != "import_declaration":
            continue
        specs: list[tree_sitter.Node] = []
        for child in decl.named_children:
            if child.type == "import_spec":
                specs.append(child)
            elif child.type == "import_spec_list":
                specs.extend(
                    c for c in child.named_children if c.type == "import_spec"
                )
        for spec in specs:
            path_node = spec.child_by_field_name("path")
            if path_node is None:
                continue
            raw = node_text(path_node).strip('"`')
            resolved = import_map.get(raw, raw)
            name_node = spec.child_by_field_name("name")
            if name_node is None:
                scope.imports[universe.package_name(resolved)] = resolved
            elif name_node.type == "dot":
                scope.dot_imports.append(resolved)
            elif name_node.type == "blank_identifier":
                continue
            else:
                scope.imports[node_text(name_node)] = resolved


# ---------------------------------------------------------------------------
# Universe — lazily indexed dependency packages
# ---------------------------------------------------------------------------


class Universe:
    """Every package ``go list -deps`` reported, indexed on first use.

    Thread-safe: concurrent package walks may resolve the same
    dependency.
    """

    def __init__(self, packages: Iterable[GoListPackage] = ()) -> None:
        self._descriptors = {p.import_path: p for p in packages}
        self._index: dict[str, PackageTypes | None] = {}
        self._lock = threading.Lock()

    def package_name(self, path: str) -> str:
        """Declared name of the package at ``path``.

        Falls back to the last path element when the package is unknown.
        """
        desc = self._descriptors.get(path)
        if desc is not None and desc.name:
            return desc.name
        return path.rsplit("/", 1)[-1]

    def register(self, pkg: PackageTypes) -> None:
        with self._lock:
            self._index[pkg.path] = pkg

    def package(self, path: str) -> PackageTypes | None:
        with self._lock:
            if path in self._index:
                return self._index[path]
            pkg = self._build(path)
            self._index[path] = pkg
            return pkg

    def _build(self, path: str) -> PackageTypes | None:
        desc = self._descriptors.get(path)
        if desc is None:
            logger.debug("No package information for %s", path)
            return None
        files: list[tuple[Path, tree_sitter.Tree]] = []
        for file_path in desc.source_files:
            try:
                files.append((file_path, parse_file(file_path)))
            except OSError:
                logger.debug("Cannot read %s", file_path, exc_info=True)
        logger.debug("Indexed %s (%d files)", path, len(files))
        return PackageTypes.build(
            path, desc.name, files, self, desc.import_map
        )


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class GoTypeResolver:
    """:class:`TypeInfo` for one package, resolved from syntax."""

    def __init__(self, package: PackageTypes, universe: Universe) -> None:
        self._package = package
        self._universe = universe
        self._literal_types: dict[int, TypeRef | None] = {}

    def is_struct_literal(self, body: tree_sitter.Node) -> bool:
        ref = self.literal_type(body)
        if ref is None:
            return False
        base = self.underlying(ref)
        return base is not None and base.node.type == "struct_type"

    def literal_type(self, body: tree_sitter.Node) -> TypeRef | None:
        """Static type of the literal whose ``literal_value`` is ``body``.

        Literals with an elided type take it from the element, key or
        value type of the enclosing literal.
        """
        if body.id in self._literal_types:
            return self._literal_types[body.id]
        ref = self._literal_type(body)
        self._literal_types[body.id] = ref
        return ref

    def _literal_type(self, body: tree_sitter.Node) -> TypeRef | None:
        parent = body.parent
        if parent is None:
            return None
        if parent.type == "composite_literal":
            type_node = parent.child_by_field_name("type")
            scope = self._scope_of(parent)
            if type_node is None or scope is None:
                return None
            return TypeRef(type_node, scope)

        # Elided type: {…} as an element, key or value of an outer literal
        slot = parent if parent.type == "literal_element" else body
        holder = slot.parent
        if holder is None:
            return None
        if holder.type == "keyed_element":
            key = holder.child_by_field_name("key")
            role = "key" if key is not None and key.id == slot.id else "value"
            outer = holder.parent
        elif holder.type == "literal_value":
            role = "element"
            outer = holder
        else:
            return None
        if outer is None or outer.type != "literal_value":
            return None

        container = self.literal_type(outer)
        if container is None:
            return None
        return self._element_type(container, role)

    def _element_type(self, container: TypeRef, role: str) -> TypeRef | None:
        base = self.underlying(container)
        # *T implies &T{}: a pointer container is walked through its base
        if base is not None and base.node.type == "pointer_type":
            base = self.underlying(_pointee(base))
        if base is None:
            return None
        kind = base.node.type
        if kind in _ARRAY_TYPES and role != "key":
            elem = base.node.child_by_field_name("element")
            return base.derive(elem) if elem is not None else None
        if kind == "map_type":
            name = "key" if role == "key" else "value"
            elem = base.node.child_by_field_name(name)
            return base.derive(elem) if elem is not None else None
        return None

    def underlying(self, ref: TypeRef | None) -> TypeRef | None:
        """Follow named types and aliases to a type literal.

        Returns None for predeclared, unresolved or cyclic names.
        """
        seen: set[tuple[str, int]] = set()
        while ref is not None:
            kind = ref.node.type
            if kind == "parenthesized_type":
                inner = ref.node.named_children
                ref = ref.derive(inner[0]) if inner else None
                continue
            if kind not in _NAMED_TYPES:
                return ref
            marker = (str(ref.scope.path), ref.node.id)
            if marker in seen:
                return None
            seen.add(marker)
            ref = self._lookup(ref)
        return None

    def _lookup(self, ref: TypeRef) -> TypeRef | None:
        node = ref.node
        if node.type == "generic_type":
            base = node.child_by_field_name("type")
            decl = self._lookup(ref.derive(base)) if base is not None else None
            if decl is None:
                return None
            params = _declared_type_parameters(decl.node)
            args = [ref.derive(a) for a in _type_arguments(node)]
            return TypeRef(decl.node, decl.scope, dict(zip(params, args)))
        if node.type == "qualified_type":
            pkg_node = node.child_by_field_name("package")
            name_node = node.child_by_field_name("name")
            if pkg_node is None or name_node is None:
                return None
            path = ref.scope.imports.get(node_text(pkg_node))
            if path is None:
                return None
            target = self._universe.package(path)
            if target is None:
                return None
            return target.decls.get(node_text(name_node))

        name = node_text(node)
        if name in ref.bindings:
            return ref.bindings[name]
        found, local = _local_decl(node, name)
        if found:
            # A type parameter has no fixed underlying type
            return TypeRef(local, ref.scope) if local is not None else None
        decl = ref.scope.package.decls.get(name)
        if decl is not None:
            return decl
        for path in ref.scope.dot_imports:
            target = self._universe.package(path)
            if target is not None and name in target.decls:
                return target.decls[name]
        return None

    def _scope_of(self, node: tree_sitter.Node) -> FileScope | None:
        root = node
        while root.parent is not None:
            root = root.parent
        return self._package.scopes.get(root.id)


def _pointee(ref: TypeRef) -> TypeRef | None:
    inner = ref.node.named_children
    return ref.derive(inner[0]) if inner else None


def _local_decl(
    node: tree_sitter.Node, name: str
) -> tuple[bool, tree_sitter.Node | None]:
    """Find ``name`` among type declarations of enclosing blocks, or as a
    type parameter of an enclosing declaration or method receiver.

    A block-local type is only in scope after its declaration.

    Returns ``(found, type_node)``; a type parameter is found with no
    type node.
    """
    current = node.parent
    while current is not None and current.type != "source_file":
        params = current.child_by_field_name("type_parameters")
        if params is not None and name in _type_parameter_names(params):
            return True, None
        if (
            current.type == "method_declaration"
            and name in _receiver_type_parameters(current)
        ):
            return True, None
        if current.type in _STATEMENT_HOLDERS:
            for spec in _type_specs(_statements(current)):
                decl_name = spec.child_by_field_name("name")
                if (
                    decl_name is not None
                    and decl_name.end_byte <= node.start_byte
                    and node_text(decl_name) == name
                ):
                    return True, spec.child_by_field_name("type")
        current = current.parent
    return False, None


def _statements(holder: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    for child in holder.named_children:
        if child.type == "statement_list":
            yield from child.named_children
        else:
            yield child


def _type_parameter_names(params: tree_sitter.Node) -> set[str]:
    return set(_type_parameter_list(params))


def _type_parameter_list(params: tree_sitter.Node) -> list[str]:
    """Type parameter names in declaration order (``[K, V any]`` is two)."""
    return [
        node_text(child)
        for decl in params.named_children
        if decl.type == "type_parameter_declaration"
        for child in decl.named_children
        if child.type == "identifier"
    ]


def _declared_type_parameters(type_node: tree_sitter.Node) -> list[str]:
    """Type parameters of the declaration whose right-hand side is
    ``type_node``."""
    spec = type_node.parent
    if spec is None or spec.type not in ("type_spec", "type_alias"):
        return []
    params = spec.child_by_field_name("type_parameters")
    return _type_parameter_list(params) if params is not None else []


def _type_arguments(generic: tree_sitter.Node) -> list[tree_sitter.Node]:
    args = generic.child_by_field_name("type_arguments")
    if args is None:
        return []
    result: list[tree_sitter.Node] = []
    for arg in args.named_children:
        # newer grammars wrap each argument in a (possibly union) type_elem
        if arg.type == "type_elem" and len(arg.named_children) == 1:
            arg = arg.named_children[0]
        result.append(arg)
    return result


def _receiver_type_parameters(method: tree_sitter.Node) -> set[str]:
    """Names bound by a generic receiver, as ``T`` in ``func (g *G[T]) m()``."""
    receiver = method.child_by_field_name("receiver")
    if receiver is None:
        return set()
    names: set[str] = set()
    for param in receiver.named_children:
        recv_type = param.child_by_field_name("type")
        while recv_type is not None and recv_type.type in (
            "pointer_type",
            "parenthesized_type",
        ):
            inner = recv_type.named_children
            recv_type = inner[0] if inner else None
        if recv_type is None or recv_type.type != "generic_type":
            continue
        for arg in _type_arguments(recv_type):
            if arg.type in ("type_identifier", "identifier"):
                names.add(node_text(arg))
    return names
