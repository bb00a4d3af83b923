"""Cross-file resolution of imports, exports and call targets."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from .config import ProjectConfig
from .extract import CallDraft, FileAnalysis
from .models import (
    MODULE_CALLER,
    CallRelation,
    ExportRelation,
    ImportRelation,
    Participant,
    Resolved,
    Symbol,
    Unresolved,
)


logger = logging.getLogger(__name__)

# Probe groups for extensionless specifiers: file then index per group, first match wins.
RESOLVE_GROUPS = (
    (".ts", ".tsx"),
    (".mts", ".cts", ".js", ".jsx", ".mjs", ".cjs"),
)
_TS_FOR_JS = {
    ".js": (".ts", ".tsx"),
    ".jsx": (".tsx",),
    ".mjs": (".mts",),
    ".cjs": (".cts",),
}


class ModuleResolver:
    """Map import specifiers onto the set of analyzed files.

    Only files in the analyzed set are ever returned; bare package
    specifiers stay unresolved unless a path alias or ``baseUrl`` maps them
    onto one of those files.
    """

    def __init__(self, files: Iterable[str], config: ProjectConfig | None = None) -> None:
        self.files = {os.path.normpath(path) for path in files}
        self.config = config or ProjectConfig()
        self._cache: dict[tuple[str, str], str | None] = {}

    def resolve(self, specifier: str, importer: str) -> str | None:
        key = (specifier, os.path.dirname(importer))
        if key not in self._cache:
            self._cache[key] = self._resolve(specifier, importer)
        return self._cache[key]

    def _resolve(self, specifier: str, importer: str) -> str | None:
        if specifier.startswith("."):
            return self._probe(os.path.join(os.path.dirname(importer), specifier))
        if os.path.isabs(specifier):
            return self._probe(specifier)
        for pattern, targets in self.config.paths.items():
            matched = _match_alias(pattern, specifier)
            if matched is None:
                continue
            for target in targets:
                found = self._probe(target.replace("*", matched, 1))
                if found:
                    return found
        if self.config.base_url:
            return self._probe(os.path.join(self.config.base_url, specifier))
        return None

    def _probe(self, base: str) -> str | None:
        base = os.path.normpath(base)
        candidates = [base]
        stem, ext = os.path.splitext(base)
        candidates.extend(stem + alternative for alternative in _TS_FOR_JS.get(ext, ()))
        for group in RESOLVE_GROUPS:
            candidates.extend(base + extension for extension in group)
            candidates.extend(os.path.join(base, "index" + extension) for extension in group)
        for candidate in candidates:
            if candidate in self.files:
                return candidate
        return None


def _match_alias(pattern: str, specifier: str) -> str | None:
    if "*" not in pattern:
        return "" if pattern == specifier else None
    prefix, suffix = pattern.split("*", 1)
    if (
        specifier.startswith(prefix)
        and specifier.endswith(suffix)
        and len(specifier) >= len(prefix) + len(suffix)
    ):
        return specifier[len(prefix) : len(specifier) - len(suffix)]
    return None


ADDED = "added"
DUPLICATE_ID = "duplicate-id"
NAME_TIE = "name-tie"


class SymbolIndex:
    def __init__(self) -> None:
        self.symbols: list[Symbol] = []
        self.by_id: dict[str, Symbol] = {}
        self.by_qualname: dict[tuple[str, str], Symbol] = {}
        # (file, name, class) for top-level declarations and class members.
        self.by_name: dict[tuple[str, str, str | None], Symbol] = {}

    def add(self, symbol: Symbol) -> str:
        """Register ``symbol``; returns ADDED, DUPLICATE_ID or NAME_TIE.

        A duplicate id is dropped entirely. A name tie keeps the symbol but
        leaves the first registration in the name index.
        """
        if symbol.id in self.by_id:
            return DUPLICATE_ID
        self.by_id[symbol.id] = symbol
        self.symbols.append(symbol)
        self.by_qualname.setdefault((symbol.file_path, symbol.qualname), symbol)
        if symbol.class_name is not None or symbol.qualname == symbol.name:
            key = (symbol.file_path, symbol.name, symbol.class_name)
            if key in self.by_name:
                return NAME_TIE
            self.by_name[key] = symbol
        return ADDED

    def lookup(self, path: str, name: str, class_name: str | None = None) -> Symbol | None:
        return self.by_name.get((path, name, class_name))

    def qualified(self, path: str, qualname: str) -> Symbol | None:
        return self.by_qualname.get((path, qualname))


@dataclass(frozen=True)
class LinkResult:
    symbols: tuple[Symbol, ...] = ()
    call_relations: tuple[CallRelation, ...] = ()
    import_relations: tuple[ImportRelation, ...] = ()
    export_relations: tuple[ExportRelation, ...] = ()
    warnings: tuple[str, ...] = ()


def link(analyses: Sequence[FileAnalysis], config: ProjectConfig | None = None) -> LinkResult:
    return Linker(analyses, config).run()


class Linker:
    """Single-threaded global pass over already-extracted files.

    All indices are fully built before any call draft is resolved.
    """

    def __init__(self, analyses: Sequence[FileAnalysis], config: ProjectConfig | None = None) -> None:
        self.analyses = list(analyses)
        self.resolver = ModuleResolver([analysis.path for analysis in self.analyses], config)
        self.index = SymbolIndex()
        self.warnings: list[str] = []
        # file -> local name -> (resolved file, imported name)
        self.import_bindings: dict[str, dict[str, tuple[str | None, str]]] = {}
        # file -> exported name -> (re-exporting target or None for local, local name)
        self.export_tables: dict[str, dict[str, tuple[str | None, str]]] = {}
        self.star_exports: dict[str, list[str]] = {}
        self.class_bases: dict[str, dict[str, str]] = {}

    def run(self) -> LinkResult:
        imports: list[ImportRelation] = []
        exports: list[ExportRelation] = []
        for analysis in self.analyses:
            file_imports = [self._resolve_import(item) for item in analysis.imports]
            file_exports = [self._resolve_export_relation(item) for item in analysis.exports]
            self._register_imports(analysis.path, file_imports)
            self._register_exports(analysis.path, file_exports)
            self.class_bases[analysis.path] = analysis.class_bases
            imports.extend(file_imports)
            exports.extend(file_exports)

        for analysis in self.analyses:
            for symbol in analysis.symbols:
                status = self.index.add(symbol)
                if status == DUPLICATE_ID:
                    self._warn(f"Duplicate symbol {symbol.id} ignored")
                elif status == NAME_TIE:
                    first = self.index.lookup(symbol.file_path, symbol.name, symbol.class_name)
                    self._warn(f"Duplicate name for {symbol.id}: lookups keep {first.id}")

        calls = [
            self._resolve_call(analysis.path, draft)
            for analysis in self.analyses
            for draft in analysis.calls
        ]
        return LinkResult(
            symbols=tuple(self.index.symbols),
            call_relations=tuple(calls),
            import_relations=tuple(imports),
            export_relations=tuple(exports),
            warnings=tuple(self.warnings),
        )

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def _resolve_import(self, relation: ImportRelation) -> ImportRelation:
        target = self.resolver.resolve(relation.specifier, relation.file_path)
        if target is None and relation.specifier.startswith("."):
            logger.debug("Unresolved import %r in %s", relation.specifier, relation.file_path)
        return replace(relation, resolved_file_path=target)

    def _resolve_export_relation(self, relation: ExportRelation) -> ExportRelation:
        if relation.specifier is None:
            return relation
        return replace(
            relation,
            resolved_file_path=self.resolver.resolve(relation.specifier, relation.file_path),
        )

    def _register_imports(self, path: str, relations: list[ImportRelation]) -> None:
        table = self.import_bindings.setdefault(path, {})
        for relation in relations:
            for binding in relation.bindings:
                table.setdefault(binding.local, (relation.resolved_file_path, binding.imported))

    def _register_exports(self, path: str, relations: list[ExportRelation]) -> None:
        table = self.export_tables.setdefault(path, {})
        stars = self.star_exports.setdefault(path, [])
        for relation in relations:
            for binding in relation.bindings:
                if relation.specifier is None:
                    table.setdefault(binding.exported, (None, binding.local))
                elif binding.exported == "*":
                    if relation.resolved_file_path:
                        stars.append(relation.resolved_file_path)
                else:
                    table.setdefault(binding.exported, (relation.resolved_file_path, binding.local))

    def resolve_export(self, path: str | None, name: str, seen: set | None = None) -> Symbol | None:
        """Follow export tables and re-export chains to the declaring symbol."""
        if path is None:
            return None
        seen = set() if seen is None else seen
        if (path, name) in seen:
            return None
        seen.add((path, name))

        entry = self.export_tables.get(path, {}).get(name)
        if entry is not None:
            target, local = entry
            if target is None:
                return self._local_or_imported(path, local, seen)
            if local == "*":
                return None
            return self.resolve_export(target, local, seen)
        if name != "default":
            for target in self.star_exports.get(path, ()):
                found = self.resolve_export(target, name, seen)
                if found is not None:
                    return found
        return None

    def _local_or_imported(self, path: str, name: str, seen: set) -> Symbol | None:
        symbol = self.index.lookup(path, name)
        if symbol is not None:
            return symbol
        binding = self.import_bindings.get(path, {}).get(name)
        if binding is None or binding[1] == "*":
            return None
        return self.resolve_export(binding[0], binding[1], seen)

    def resolve_identifier(self, path: str, name: str, scope: Sequence[str] = ()) -> Symbol | None:
        for qualname in scope:
            symbol = self.index.qualified(path, f"{qualname}.{name}")
            if symbol is not None:
                return symbol
        return self._local_or_imported(path, name, set())

    def resolve_class(self, path: str, name: str) -> Symbol | None:
        symbol = self._local_or_imported(path, name, set())
        if symbol is not None and symbol.kind in ("class", "interface"):
            return symbol
        return None

    def resolve_member(self, class_symbol: Symbol, name: str) -> Symbol | None:
        """Look ``name`` up on a class, then along its ``extends`` chain."""
        seen = set()
        current = class_symbol
        while current is not None and current.id not in seen:
            seen.add(current.id)
            found = self.index.lookup(current.file_path, name, current.name)
            if found is not None:
                return found
            base = self.class_bases.get(current.file_path, {}).get(current.name)
            current = self.resolve_class(current.file_path, base) if base else None
        return None

    def _module_member(self, path: str, receiver: str | None, name: str) -> tuple[Symbol | None, str | None]:
        """Resolve ``ns.name`` where ``ns`` is bound by an import."""
        if not receiver:
            return None, None
        binding = self.import_bindings.get(path, {}).get(receiver)
        if binding is None or binding[0] is None:
            return None, None
        target, imported = binding
        if imported != "*":
            imported_symbol = self.resolve_export(target, imported)
            if imported_symbol is not None and imported_symbol.kind == "class":
                return self.resolve_member(imported_symbol, name), imported_symbol.file_path
        return self.resolve_export(target, name), target

    def _resolve_call(self, path: str, draft: CallDraft) -> CallRelation:
        symbol: Symbol | None = None
        target_file: str | None = None
        class_name = draft.receiver_type

        if draft.call_type == "constructor":
            cls = self.resolve_class(path, draft.receiver_type) if draft.receiver_type else None
            if cls is not None:
                symbol = self.resolve_member(cls, "constructor") or cls
                target_file = cls.file_path
                class_name = cls.name
        elif draft.call_type == "function":
            symbol = self.resolve_identifier(path, draft.callee_name, draft.scope)
        else:
            if draft.receiver_type:
                cls = self.resolve_class(path, draft.receiver_type)
                if cls is not None:
                    symbol = self.resolve_member(cls, draft.callee_name)
                    target_file = cls.file_path
            if symbol is None and target_file is None:
                symbol, target_file = self._module_member(path, draft.receiver, draft.callee_name)
            if symbol is None and draft.target_qualname:
                symbol = self.index.qualified(path, draft.target_qualname)

        if symbol is not None:
            callee = Participant(
                name=draft.callee_name,
                file_path=symbol.file_path,
                reference=Resolved(symbol.id),
                class_name=class_name if draft.call_type == "constructor" else symbol.class_name,
            )
        else:
            file_path = target_file or path
            callee = Participant(
                name=draft.callee_name,
                file_path=file_path,
                reference=Unresolved(draft.callee_name, file_path),
                class_name=class_name,
            )
        return CallRelation(
            id=draft.id,
            caller=self._caller(path, draft),
            callee=callee,
            call_type=draft.call_type,
            location=draft.location,
        )

    def _caller(self, path: str, draft: CallDraft) -> Participant:
        symbol = self.index.qualified(path, draft.caller_qualname) if draft.caller_qualname else None
        if symbol is not None:
            reference = Resolved(symbol.id)
        else:
            reference = Unresolved(draft.caller_name or MODULE_CALLER, path)
        return Participant(
            name=draft.caller_name,
            file_path=path,
            reference=reference,
            class_name=draft.caller_class,
        )
