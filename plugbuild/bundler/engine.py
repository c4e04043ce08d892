"""Module graph construction and UMD bundle generation."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from ..logging import get_logger
from .errors import BundleError
from .parser import ImportDecl, ModuleInfo, parse_module
from .plugins import Plugin, apply_plugins
from .sourcemap import Mapping as LineMapping
from .sourcemap import SourceMap, encode_mappings
from .umd import WrapperImport, member, property_key, render_wrapper

ExternalPredicate = Callable[[str], bool]

_RELATIVE = re.compile(r"^\.+/")
_SCRIPT_SUFFIXES = (".js", ".mjs")
_NON_IDENTIFIER = re.compile(r"[^\w$]")

# Names used by the wrapper itself plus words a factory parameter cannot take.
_RESERVED = {
    "global", "factory", "exports", "module", "require", "define", "self", "globalThis",
    "arguments", "await", "break", "case", "catch", "class", "const", "continue",
    "debugger", "default", "delete", "do", "else", "enum", "eval", "export", "extends",
    "false", "finally", "for", "function", "if", "implements", "import", "in",
    "instanceof", "interface", "let", "new", "null", "package", "private", "protected",
    "public", "return", "static", "super", "switch", "this", "throw", "true", "try",
    "typeof", "undefined", "var", "void", "while", "with", "yield",
}

logger = get_logger("bundler")


@dataclass(frozen=True)
class ResolvedImport:
    """Where an import specifier points: a file to inline or an external id."""

    id: str
    external: bool


@dataclass
class ModuleRecord:
    """A loaded, transformed and parsed module in the bundle graph."""

    path: Path
    original: str
    code: str
    info: ModuleInfo
    resolved: Dict[str, ResolvedImport] = field(default_factory=dict)


@dataclass(frozen=True)
class ExternalModule:
    """A dependency left out of the bundle and loaded at runtime."""

    id: str
    import_path: str


@dataclass
class OutputOptions:
    """Options for rendering and writing one bundle."""

    file: Path
    name: str
    format: str = "umd"
    globals: Mapping[str, str] = field(default_factory=dict)
    banner: Optional[str] = None
    sourcemap: bool = True


@dataclass
class RenderedChunk:
    """Generated code and source map for one bundle."""

    file: Path
    code: str
    map: Optional[SourceMap]

    @property
    def map_path(self) -> Path:
        return self.file.with_name(f"{self.file.name}.map")


class _NameAllocator:
    """Hands out identifiers that collide with nothing in the bundled sources."""

    def __init__(self, reserved: Iterable[str]) -> None:
        self._used: Set[str] = set(reserved) | _RESERVED

    def allocate(self, hint: str) -> str:
        base = _NON_IDENTIFIER.sub("_", hint) or "_"
        if base[0].isdigit():
            base = f"_{base}"
        candidate = base
        counter = 1
        while candidate in self._used:
            candidate = f"{base}${counter}"
            counter += 1
        self._used.add(candidate)
        return candidate


def _strip_script_suffix(value: str) -> str:
    for suffix in _SCRIPT_SUFFIXES:
        if value.endswith(suffix):
            return value[: -len(suffix)]
    return value


def _guess_global(module_id: str) -> str:
    base = module_id.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]
    name = re.sub(r"[^A-Za-z0-9_$]+(.?)", lambda match: match.group(1).upper(), base)
    if not name or name[0].isdigit():
        name = f"_{name}"
    return name


def _export_mode(info: ModuleInfo) -> str:
    names = info.export_names
    if info.has_star_exports or any(name != "default" for name in names):
        return "named"
    if names:
        return "default"
    return "none"


def _apply_edits(source: bytes, edits: Iterable[Tuple[int, int, str]]) -> str:
    """Splice replacements into ``source`` while keeping every line in place."""
    output = source
    for start, end, replacement in sorted(edits, key=lambda edit: edit[0], reverse=True):
        newlines = output[start:end].count(b"\n")
        text = replacement.replace("\n", " ") + "\n" * newlines
        output = output[:start] + text.encode("utf-8") + output[end:]
    return output.decode("utf-8")


class _ModuleRenderer:
    """Rewrites one module's import and export statements into plain bindings."""

    def __init__(
        self,
        record: ModuleRecord,
        refs: Mapping[str, str],
        interop: str,
        names: _NameAllocator,
    ) -> None:
        self.record = record
        self.refs = refs
        self.interop = interop
        self.names = names
        self.uses_interop = False

    def _default_of(self, ref: str, external: bool) -> str:
        if external:
            self.uses_interop = True
            return f"{self.interop}({ref})"
        return member(ref, "default")

    def _import_bindings(self, decl: ImportDecl) -> str:
        resolved = self.record.resolved[decl.source]
        ref = self.refs[resolved.id]
        statements: List[str] = []
        named: List[str] = []
        for binding in decl.bindings:
            if binding.imported == "*":
                statements.append(f"const {binding.local} = {ref};")
            elif binding.imported == "default":
                statements.append(
                    f"const {binding.local} = {self._default_of(ref, resolved.external)};"
                )
            elif binding.imported == binding.local:
                named.append(binding.local)
            else:
                named.append(f"{property_key(binding.imported)}: {binding.local}")
        if named:
            statements.append(f"const {{ {', '.join(named)} }} = {ref};")
        return " ".join(statements)

    def render(self) -> Tuple[str, str, List[Tuple[str, str]], List[str]]:
        """Return the import bindings, rewritten code, export pairs and star sources.

        Import statements are blanked in place and their bindings returned
        separately so the caller can declare them ahead of the module body.
        """
        source = self.record.code.encode("utf-8")
        edits: List[Tuple[int, int, str]] = []
        bindings: List[str] = []
        exports: List[Tuple[str, str]] = []
        stars: List[str] = []

        for decl in self.record.info.imports:
            edits.append((decl.start_byte, decl.end_byte, ""))
            bindings.append(self._import_bindings(decl))

        for decl in self.record.info.exports:
            if decl.kind == "declaration":
                edits.append((decl.start_byte, decl.body_start or decl.end_byte, ""))
                exports.extend(decl.names)
            elif decl.kind == "default":
                if decl.anonymous:
                    local = self.names.allocate(f"{self.record.path.stem}_default")
                    edits.append(
                        (decl.start_byte, decl.body_start or decl.end_byte, f"var {local} = ")
                    )
                else:
                    local = decl.names[0][1]
                    edits.append((decl.start_byte, decl.body_start or decl.end_byte, ""))
                exports.append(("default", local))
            elif decl.kind == "clause":
                edits.append((decl.start_byte, decl.end_byte, ""))
                exports.extend(decl.names)
            else:
                resolved = self.record.resolved[decl.source or ""]
                ref = self.refs[resolved.id]
                edits.append((decl.start_byte, decl.end_byte, ""))
                if decl.kind == "star":
                    stars.append(ref)
                elif decl.kind == "namespace":
                    exports.append((decl.names[0][0], ref))
                else:
                    for exported, imported in decl.names:
                        if imported == "default":
                            exports.append((exported, self._default_of(ref, resolved.external)))
                        else:
                            exports.append((exported, member(ref, imported)))

        prelude = " ".join(binding for binding in bindings if binding)
        return prelude, _apply_edits(source, edits), exports, stars


def _exports_object(exports: Sequence[Tuple[str, str]], stars: Sequence[str]) -> str:
    entries = ", ".join(f"{property_key(name)}: {expression}" for name, expression in exports)
    literal = f"{{ {entries} }}" if entries else "{}"
    if not stars:
        return literal
    return f"Object.assign({{}}, {', '.join(stars)}, {literal})"


def _entry_exports(
    mode: str, exports: Sequence[Tuple[str, str]], stars: Sequence[str]
) -> List[str]:
    if mode == "default":
        return [f"return {exports[0][1]};"]
    if mode == "none":
        return []
    lines = [f"{member('exports', name)} = {expression};" for name, expression in exports]
    for ref in stars:
        lines.append(
            f"Object.keys({ref}).forEach(function (k) {{ "
            "if (k !== 'default' && !Object.prototype.hasOwnProperty.call(exports, k)) "
            f"exports[k] = {ref}[k]; }});"
        )
    lines.append("Object.defineProperty(exports, '__esModule', { value: true });")
    return lines


class Bundle:
    """A resolved module graph ready to be rendered to one artifact."""

    def __init__(
        self,
        entry: ModuleRecord,
        modules: List[ModuleRecord],
        externals: Dict[str, ExternalModule],
    ) -> None:
        self.entry = entry
        self.modules = modules
        self.externals = externals

    def generate(self, options: OutputOptions) -> RenderedChunk:
        """Render the bundle in memory."""
        if options.format != "umd":
            raise BundleError(f"Unsupported output format: {options.format}")
        mode = _export_mode(self.entry.info)
        if mode != "none" and not options.name:
            raise BundleError("A name is required for UMD bundles that have exports")

        reserved: Set[str] = set()
        for record in self.modules:
            reserved |= record.info.identifiers
        names = _NameAllocator(reserved)

        refs: Dict[str, str] = {}
        imports: List[WrapperImport] = []
        for external in self.externals.values():
            global_name = options.globals.get(external.id)
            if global_name is None:
                global_name = _guess_global(external.id)
                logger.warning(
                    "No global name provided for external module %s, guessing %s",
                    external.id,
                    global_name,
                )
            param = names.allocate(global_name)
            refs[external.id] = param
            imports.append(
                WrapperImport(path=external.import_path, global_name=global_name, param=param)
            )
        for record in self.modules:
            if record is not self.entry:
                refs[str(record.path)] = names.allocate(record.path.stem)
        interop = names.allocate("_interopDefault")

        body: List[Tuple[str, Optional[LineMapping]]] = []
        uses_interop = False
        for index, record in enumerate(self.modules):
            renderer = _ModuleRenderer(record, refs, interop, names)
            prelude, code, exports, stars = renderer.render()
            uses_interop = uses_interop or renderer.uses_interop
            if code.endswith("\n"):
                code = code[:-1]
            mapped = [(line, (index, number, 0)) for number, line in enumerate(code.split("\n"))]
            if record is self.entry:
                if prelude:
                    body.append((prelude, None))
                body.extend(mapped)
                body.extend((line, None) for line in _entry_exports(mode, exports, stars))
            else:
                opener = f"var {refs[str(record.path)]} = (function () {{"
                body.append((f"{opener} {prelude}" if prelude else opener, None))
                body.extend(mapped)
                body.append((f"return {_exports_object(exports, stars)};", None))
                body.append(("})();", None))

        header, footer = render_wrapper(options.name, imports, mode)
        lines: List[Tuple[str, Optional[LineMapping]]] = []
        if options.banner:
            lines.extend((line, None) for line in options.banner.splitlines())
        lines.extend((line, None) for line in header)
        if uses_interop:
            lines.append(
                (
                    f"function {interop} (e) {{ return e && typeof e === 'object' "
                    "&& 'default' in e ? e['default'] : e; }",
                    None,
                )
            )
        lines.extend(body)
        lines.extend((line, None) for line in footer)

        code = "\n".join(line for line, _ in lines) + "\n"
        source_map = None
        if options.sourcemap:
            out_dir = options.file.parent
            source_map = SourceMap(
                file=options.file.name,
                sources=[
                    Path(os.path.relpath(record.path, out_dir)).as_posix()
                    for record in self.modules
                ],
                sources_content=[record.original for record in self.modules],
                mappings=encode_mappings([mapping for _, mapping in lines]),
            )
        return RenderedChunk(file=options.file, code=code, map=source_map)

    def write(self, options: OutputOptions) -> RenderedChunk:
        """Render the bundle and write it, plus its source map, to ``options.file``."""
        chunk = self.generate(options)
        options.file.parent.mkdir(parents=True, exist_ok=True)
        code = chunk.code
        if chunk.map is not None:
            code += f"//# sourceMappingURL={chunk.map_path.name}\n"
            chunk.map_path.write_text(chunk.map.to_json(), encoding="utf-8")
        options.file.write_text(code, encoding="utf-8")
        logger.debug("Wrote %s", options.file)
        return chunk


class ModuleBundler:
    """Builds a module graph from an entry point.

    ``external`` is consulted once per distinct specifier. Specifiers it
    accepts are left as runtime dependencies; relative specifiers it rejects
    are loaded, transformed by ``plugins`` and inlined.
    """

    def __init__(
        self,
        plugins: Sequence[Plugin] = (),
        external: Optional[ExternalPredicate] = None,
    ) -> None:
        self.plugins = list(plugins)
        self.external = external

    def bundle(self, entry: Path | str) -> Bundle:
        entry_path = self._resolve_file(Path(entry))
        if entry_path is None:
            raise BundleError(f"Could not resolve entry module {entry}")

        decisions: Dict[str, bool] = {}
        records: Dict[Path, ModuleRecord] = {}
        order: List[ModuleRecord] = []
        externals: Dict[str, ExternalModule] = {}
        visiting: List[Path] = []

        def visit(path: Path) -> None:
            if path in records:
                return
            if path in visiting:
                cycle = [*visiting[visiting.index(path) :], path]
                raise BundleError(
                    "Circular dependency: " + " -> ".join(item.name for item in cycle)
                )
            visiting.append(path)
            record = self._load(path)
            for specifier in record.info.sources:
                if specifier not in decisions:
                    decisions[specifier] = bool(self.external and self.external(specifier))
                if decisions[specifier]:
                    module_id = self._external_id(specifier, path)
                    externals.setdefault(
                        module_id,
                        ExternalModule(
                            id=module_id,
                            import_path=self._import_path(module_id, specifier, entry_path),
                        ),
                    )
                    record.resolved[specifier] = ResolvedImport(module_id, external=True)
                    continue
                target = self._resolve_internal(specifier, path)
                visit(target)
                record.resolved[specifier] = ResolvedImport(str(target), external=False)
            visiting.pop()
            records[path] = record
            order.append(record)

        visit(entry_path)
        logger.debug(
            "Bundled %s with %d module(s) and %d external(s)",
            entry_path,
            len(order),
            len(externals),
        )
        return Bundle(entry=records[entry_path], modules=order, externals=externals)

    def _load(self, path: Path) -> ModuleRecord:
        original = path.read_text(encoding="utf-8")
        code = apply_plugins(original, path, self.plugins)
        return ModuleRecord(path=path, original=original, code=code, info=parse_module(code, path))

    @staticmethod
    def _resolve_file(candidate: Path) -> Optional[Path]:
        options = (candidate, candidate.with_name(f"{candidate.name}.js"), candidate / "index.js")
        for option in options:
            if option.is_file():
                return option.resolve()
        return None

    def _resolve_internal(self, specifier: str, importer: Path) -> Path:
        if not _RELATIVE.match(specifier):
            raise BundleError(
                f"Cannot inline '{specifier}' imported by {importer}: "
                "only relative imports are bundled"
            )
        target = self._resolve_file(importer.parent / specifier)
        if target is None:
            raise BundleError(f"Could not resolve '{specifier}' from {importer}")
        return target

    @staticmethod
    def _external_id(specifier: str, importer: Path) -> str:
        if not _RELATIVE.match(specifier):
            return specifier
        return _strip_script_suffix(os.path.normpath(os.path.join(importer.parent, specifier)))

    @staticmethod
    def _import_path(module_id: str, specifier: str, entry: Path) -> str:
        if not _RELATIVE.match(specifier):
            return specifier
        relative = Path(os.path.relpath(module_id, entry.parent)).as_posix()
        if not relative.startswith("../"):
            relative = f"./{relative}"
        return f"{relative}.js"


__all__ = [
    "Bundle",
    "ExternalModule",
    "ExternalPredicate",
    "ModuleBundler",
    "ModuleRecord",
    "OutputOptions",
    "RenderedChunk",
    "ResolvedImport",
]
