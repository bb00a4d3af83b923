"""Immutable analysis result and the read-only queries renderers rely on."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from .models import (
    CallRelation,
    ExportRelation,
    ImportRelation,
    PatternCatalog,
    Symbol,
    to_json,
)


@dataclass(frozen=True)
class AnalysisMetadata:
    analysis_date: str
    total_files: int = 0
    total_symbols: int = 0
    total_call_relations: int = 0


@dataclass(frozen=True)
class AnalysisResult:
    symbols: tuple[Symbol, ...] = ()
    call_relations: tuple[CallRelation, ...] = ()
    import_relations: tuple[ImportRelation, ...] = ()
    export_relations: tuple[ExportRelation, ...] = ()
    patterns: PatternCatalog = field(default_factory=PatternCatalog)
    files: tuple[str, ...] = ()
    metadata: AnalysisMetadata = field(default_factory=lambda: AnalysisMetadata(_now()))
    warnings: tuple[str, ...] = ()
    error: str | None = None

    @classmethod
    def empty(cls, warnings: Iterable[str] = (), error: str | None = None) -> "AnalysisResult":
        return cls(warnings=tuple(warnings), error=error)

    def cross_file_calls(self) -> list[CallRelation]:
        return [relation for relation in self.call_relations if relation.is_cross_file]

    def class_relation_counts(self) -> dict[str, dict[str, int]]:
        """Per class: relations whose callee (inbound) or caller (outbound) belongs to it."""
        inbound: Counter = Counter()
        outbound: Counter = Counter()
        for relation in self.call_relations:
            if relation.callee.class_name:
                inbound[relation.callee.class_name] += 1
            if relation.caller.class_name:
                outbound[relation.caller.class_name] += 1
        return {
            name: {"inbound": inbound[name], "outbound": outbound[name]}
            for name in sorted(set(inbound) | set(outbound))
        }

    def pattern_counts(self) -> dict[str, int]:
        return self.patterns.counts()

    def symbol_by_id(self, symbol_id: str) -> Symbol | None:
        for symbol in self.symbols:
            if symbol.id == symbol_id:
                return symbol
        return None

    def symbols_in(self, file_path: str) -> list[Symbol]:
        return [symbol for symbol in self.symbols if symbol.file_path == file_path]

    def to_dict(self) -> dict:
        data = {
            "symbols": to_json(self.symbols),
            "callRelations": [_relation_dict(relation) for relation in self.call_relations],
            "importRelations": to_json(self.import_relations),
            "exportRelations": to_json(self.export_relations),
            "patterns": {
                "dynamicProperties": to_json(self.patterns.dynamic_properties),
                "closures": to_json(self.patterns.closures),
                "prototypeMethods": to_json(self.patterns.prototype_methods),
                "modulePatterns": to_json(self.patterns.module_patterns),
                "callbackPatterns": to_json(self.patterns.callbacks),
                "objectLiterals": to_json(self.patterns.object_literals),
                "functionExpressions": to_json(self.patterns.function_expressions),
            },
            "files": list(self.files),
            "metadata": to_json(self.metadata),
            "warnings": list(self.warnings),
        }
        if self.error:
            data["error"] = self.error
        return data

    def to_graph(self):
        from .graph import build_graph

        return build_graph(self)


def aggregate(
    files: Iterable[str],
    symbols: Iterable[Symbol],
    call_relations: Iterable[CallRelation],
    import_relations: Iterable[ImportRelation],
    export_relations: Iterable[ExportRelation],
    catalogs: Iterable[PatternCatalog],
    warnings: Iterable[str] = (),
) -> AnalysisResult:
    files = tuple(files)
    symbols = tuple(symbols)
    call_relations = tuple(call_relations)
    return AnalysisResult(
        symbols=symbols,
        call_relations=call_relations,
        import_relations=tuple(import_relations),
        export_relations=tuple(export_relations),
        patterns=PatternCatalog.merge(catalogs),
        files=files,
        metadata=AnalysisMetadata(
            analysis_date=_now(),
            total_files=len(files),
            total_symbols=len(symbols),
            total_call_relations=len(call_relations),
        ),
        warnings=tuple(warnings),
    )


def _relation_dict(relation: CallRelation) -> dict:
    return {
        "id": relation.id,
        "caller": relation.caller.to_dict(),
        "callee": relation.callee.to_dict(),
        "callType": relation.call_type,
        "location": to_json(relation.location),
        "isCrossFile": relation.is_cross_file,
    }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
