"""ES module import/export extraction backed by tree-sitter."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Set, Tuple

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser

from .errors import BundleSyntaxError

JS_LANGUAGE = Language(tree_sitter_javascript.language())

_NAMED_DECLARATIONS = {
    "function_declaration",
    "generator_function_declaration",
    "class_declaration",
}
_VARIABLE_DECLARATIONS = {"lexical_declaration", "variable_declaration"}
_PATTERN_IDENTIFIERS = {"identifier", "shorthand_property_identifier_pattern"}
_BINDING_IDENTIFIERS = _PATTERN_IDENTIFIERS | {"shorthand_property_identifier"}
_FUNCTION_NODES = {
    "function_declaration",
    "function_expression",
    "function",
    "generator_function_declaration",
    "generator_function",
    "arrow_function",
    "method_definition",
}
_PROLOGUE_SKIP = {"comment", "hash_bang_line"}


@dataclass(frozen=True)
class ImportBinding:
    """A local name bound by an import; ``imported`` is ``*`` for namespaces."""

    imported: str
    local: str


@dataclass
class Statement:
    """Byte and line span of a top-level statement."""

    start_byte: int
    end_byte: int
    start_line: int
    end_line: int


@dataclass
class ImportDecl(Statement):
    source: str = ""
    bindings: List[ImportBinding] = field(default_factory=list)


@dataclass
class ExportDecl(Statement):
    """An export statement.

    ``kind`` is one of ``declaration``, ``default``, ``clause``, ``reexport``,
    ``namespace`` (``export * as ns from``) or ``star``. ``names`` holds
    ``(exported, local)`` pairs; for re-exports ``local`` is the name in the
    source module. ``body_start`` marks where the declaration or default value
    begins so the ``export`` keyword can be cut away.
    """

    kind: str = "declaration"
    names: List[Tuple[str, str]] = field(default_factory=list)
    source: Optional[str] = None
    body_start: Optional[int] = None
    anonymous: bool = False


@dataclass
class ModuleInfo:
    """Static import/export facts for one module."""

    imports: List[ImportDecl]
    exports: List[ExportDecl]
    identifiers: Set[str]

    @property
    def sources(self) -> List[str]:
        """Distinct specifiers in first-seen order, including re-export sources."""
        statements = sorted([*self.imports, *self.exports], key=lambda stmt: stmt.start_byte)
        seen: List[str] = []
        for stmt in statements:
            if stmt.source and stmt.source not in seen:
                seen.append(stmt.source)
        return seen

    @property
    def export_names(self) -> List[str]:
        return [exported for decl in self.exports for exported, _ in decl.names]

    @property
    def has_star_exports(self) -> bool:
        return any(decl.kind == "star" for decl in self.exports)


def _text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")


def _unquote(node: Node, source: bytes) -> str:
    text = _text(node, source)
    if node.type == "string" and len(text) >= 2:
        return text[1:-1]
    return text


def _span(node: Node) -> dict:
    return {
        "start_byte": node.start_byte,
        "end_byte": node.end_byte,
        "start_line": node.start_point[0],
        "end_line": node.end_point[0],
    }


def _first_error(node: Node) -> Optional[Node]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def _walk(node: Node) -> Iterator[Node]:
    yield node
    for child in node.children:
        yield from _walk(child)


def _pattern_names(node: Node, source: bytes) -> List[str]:
    if node.type == "identifier":
        return [_text(node, source)]
    return [_text(child, source) for child in _walk(node) if child.type in _PATTERN_IDENTIFIERS]


def _declared_names(node: Node, source: bytes) -> List[str]:
    if node.type in _NAMED_DECLARATIONS:
        name = node.child_by_field_name("name")
        return [_text(name, source)] if name is not None else []
    if node.type in _VARIABLE_DECLARATIONS:
        names: List[str] = []
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            target = declarator.child_by_field_name("name")
            if target is not None:
                names.extend(_pattern_names(target, source))
        return names
    return []


def _parse_import(node: Node, source: bytes) -> ImportDecl:
    source_node = node.child_by_field_name("source")
    decl = ImportDecl(source=_unquote(source_node, source) if source_node else "", **_span(node))
    clause = next((child for child in node.named_children if child.type == "import_clause"), None)
    if clause is None:
        return decl
    for child in clause.named_children:
        if child.type == "identifier":
            decl.bindings.append(ImportBinding("default", _text(child, source)))
        elif child.type == "namespace_import":
            local = next(c for c in child.named_children if c.type == "identifier")
            decl.bindings.append(ImportBinding("*", _text(local, source)))
        elif child.type == "named_imports":
            for spec in child.named_children:
                if spec.type != "import_specifier":
                    continue
                name = spec.child_by_field_name("name")
                alias = spec.child_by_field_name("alias")
                imported = _unquote(name, source)
                local = _text(alias, source) if alias is not None else imported
                decl.bindings.append(ImportBinding(imported, local))
    return decl


def _export_pairs(clause: Node, source: bytes) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, str]] = []
    for spec in clause.named_children:
        if spec.type != "export_specifier":
            continue
        name = spec.child_by_field_name("name")
        alias = spec.child_by_field_name("alias")
        local = _unquote(name, source)
        exported = _unquote(alias, source) if alias is not None else local
        pairs.append((exported, local))
    return pairs


def _parse_export(node: Node, source: bytes) -> ExportDecl:
    span = _span(node)
    declaration = node.child_by_field_name("declaration")
    value = node.child_by_field_name("value")
    source_node = node.child_by_field_name("source")
    is_default = any(child.type == "default" for child in node.children)

    if is_default:
        if value is not None and value.type == "identifier":
            return ExportDecl(kind="default", names=[("default", _text(value, source))], **span)
        if declaration is not None:
            name = declaration.child_by_field_name("name")
            if name is not None:
                return ExportDecl(
                    kind="default",
                    names=[("default", _text(name, source))],
                    body_start=declaration.start_byte,
                    **span,
                )
            body = declaration
        else:
            body = value
        return ExportDecl(
            kind="default",
            names=[("default", "")],
            body_start=body.start_byte if body is not None else None,
            anonymous=True,
            **span,
        )

    if declaration is not None:
        names = _declared_names(declaration, source)
        return ExportDecl(
            kind="declaration",
            names=[(name, name) for name in names],
            body_start=declaration.start_byte,
            **span,
        )

    specifier = _unquote(source_node, source) if source_node is not None else None
    clause = next((child for child in node.named_children if child.type == "export_clause"), None)
    if clause is not None:
        return ExportDecl(
            kind="reexport" if specifier else "clause",
            names=_export_pairs(clause, source),
            source=specifier,
            **span,
        )
    namespace = next(
        (child for child in node.named_children if child.type == "namespace_export"), None
    )
    if namespace is not None:
        exported = namespace.named_children[-1]
        return ExportDecl(
            kind="namespace",
            names=[(_unquote(exported, source), "*")],
            source=specifier,
            **span,
        )
    return ExportDecl(kind="star", source=specifier, **span)


def _prologue(block: Node) -> Iterator[Node]:
    for child in block.named_children:
        if child.type in _PROLOGUE_SKIP:
            continue
        if child.type != "expression_statement" or child.named_child_count != 1:
            return
        if child.named_children[0].type != "string":
            return
        yield child


def directive_ranges(source: bytes, directive: str = "use strict") -> List[Tuple[int, int]]:
    """Byte ranges of ``directive`` prologue statements, in source order.

    Only directives at the top of the program or of a function body count;
    the same text inside strings, templates or later statements is left alone.
    """
    root = Parser(JS_LANGUAGE).parse(source).root_node
    blocks = [root]
    blocks.extend(
        node
        for node in _walk(root)
        if node.type == "statement_block"
        and node.parent is not None
        and node.parent.type in _FUNCTION_NODES
    )
    ranges: List[Tuple[int, int]] = []
    for block in blocks:
        for statement in _prologue(block):
            if _unquote(statement.named_children[0], source) == directive:
                ranges.append((statement.start_byte, statement.end_byte))
    return sorted(ranges)


def parse_module(code: str, path: Path | str = "<module>") -> ModuleInfo:
    """Parse ``code`` and return its top-level imports and exports."""
    source = code.encode("utf-8")
    tree = Parser(JS_LANGUAGE).parse(source)
    root = tree.root_node
    if root.has_error:
        error = _first_error(root) or root
        row, column = error.start_point
        line_text = code.splitlines()[row] if row < len(code.splitlines()) else ""
        raise BundleSyntaxError(path, row + 1, column + 1, line_text.strip())

    imports: List[ImportDecl] = []
    exports: List[ExportDecl] = []
    for child in root.named_children:
        if child.type == "import_statement":
            imports.append(_parse_import(child, source))
        elif child.type == "export_statement":
            exports.append(_parse_export(child, source))

    identifiers = {
        _text(node, source) for node in _walk(root) if node.type in _BINDING_IDENTIFIERS
    }
    return ModuleInfo(imports=imports, exports=exports, identifiers=identifiers)


__all__ = [
    "ExportDecl",
    "ImportBinding",
    "ImportDecl",
    "JS_LANGUAGE",
    "ModuleInfo",
    "directive_ranges",
    "parse_module",
]
