"""Data models for symbols, relations and JavaScript idiom records."""

from __future__ import annotations

from dataclasses import dataclass, fields, is_dataclass
from typing import ClassVar, Union


SYMBOL_KINDS = (
    "class",
    "interface",
    "function",
    "method",
    "property",
    "variable",
    "constructor",
)
VISIBILITIES = ("public", "protected", "private")
CALL_TYPES = ("method", "constructor", "function", "property")

# Caller name used when a call site has no enclosing declaration.
MODULE_CALLER = "<module>"


@dataclass(frozen=True)
class Position:
    line: int
    column: int


@dataclass(frozen=True)
class Location:
    file_path: str
    start: Position
    end: Position


def symbol_id(file_path: str, qualname: str, start: Position) -> str:
    return f"{file_path}#{qualname}@{start.line}:{start.column}"


@dataclass(frozen=True)
class Symbol:
    id: str
    name: str
    kind: str
    qualname: str
    location: Location
    class_name: str | None = None
    is_exported: bool = False
    visibility: str = "public"

    @property
    def file_path(self) -> str:
        return self.location.file_path


@dataclass(frozen=True)
class Resolved:
    symbol_id: str


@dataclass(frozen=True)
class Unresolved:
    name: str
    file_path: str


Reference = Union[Resolved, Unresolved]


@dataclass(frozen=True)
class Participant:
    """One end of a call relation.

    ``reference`` is either ``Resolved`` (linked to a known symbol) or
    ``Unresolved`` (external or unknown target, identified by text only).
    """

    name: str
    file_path: str
    reference: Reference
    class_name: str | None = None

    @property
    def symbol_id(self) -> str | None:
        if isinstance(self.reference, Resolved):
            return self.reference.symbol_id
        return None

    @property
    def is_resolved(self) -> bool:
        return isinstance(self.reference, Resolved)

    def to_dict(self) -> dict:
        data = {"name": self.name, "filePath": self.file_path}
        if self.class_name:
            data["className"] = self.class_name
        if self.symbol_id:
            data["symbolId"] = self.symbol_id
        return data


@dataclass(frozen=True)
class CallRelation:
    id: str
    caller: Participant
    callee: Participant
    call_type: str
    location: Location

    @property
    def is_cross_file(self) -> bool:
        return self.caller.file_path != self.callee.file_path


@dataclass(frozen=True)
class ImportBinding:
    local: str
    imported: str  # exported name, "default" or "*"
    kind: str


@dataclass(frozen=True)
class ImportRelation:
    file_path: str
    specifier: str
    kind: str  # default | named | namespace | mixed | side-effect | require | dynamic
    location: Location
    imported_names: tuple[str, ...] = ()
    bindings: tuple[ImportBinding, ...] = ()
    resolved_file_path: str | None = None


@dataclass(frozen=True)
class ExportBinding:
    local: str
    exported: str


@dataclass(frozen=True)
class ExportRelation:
    file_path: str
    kind: str  # named | default | reexport | commonjs
    location: Location
    exported_names: tuple[str, ...] = ()
    bindings: tuple[ExportBinding, ...] = ()
    specifier: str | None = None
    resolved_file_path: str | None = None


@dataclass(frozen=True)
class DynamicPropertyPattern:
    kind: ClassVar[str] = "dynamic-property"

    location: Location
    object: str
    property: str
    access_type: str  # read | write | call
    is_computed: bool = True


@dataclass(frozen=True)
class PrototypeMethodPattern:
    kind: ClassVar[str] = "prototype-method"

    location: Location
    constructor: str
    method_name: str
    implementation: str


@dataclass(frozen=True)
class ClosurePattern:
    kind: ClassVar[str] = "closure"

    location: Location
    inner_functions: tuple[str, ...] = ()
    outer_variables: tuple[str, ...] = ()


@dataclass(frozen=True)
class ModulePattern:
    kind: ClassVar[str] = "module-pattern"

    location: Location
    pattern_type: str  # IIFE | CommonJS | AMD | UMD | unknown
    exports: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()


@dataclass(frozen=True)
class CallbackPattern:
    kind: ClassVar[str] = "callback"

    location: Location
    caller_function: str
    callback_arguments: tuple[str, ...] = ()
    is_async: bool = False


@dataclass(frozen=True)
class ObjectProperty:
    name: str
    kind: str  # pair | method | shorthand | spread
    is_method: bool = False
    is_getter: bool = False
    is_setter: bool = False


@dataclass(frozen=True)
class ObjectLiteralPattern:
    kind: ClassVar[str] = "object-literal"

    location: Location
    properties: tuple[ObjectProperty, ...] = ()
    methods: tuple[str, ...] = ()
    computed_properties: tuple[str, ...] = ()


@dataclass(frozen=True)
class FunctionExpressionPattern:
    kind: ClassVar[str] = "function-expression"

    location: Location
    is_arrow: bool
    is_iife: bool = False
    captures_this: bool = False
    parameters: tuple[str, ...] = ()


@dataclass(frozen=True)
class PatternCatalog:
    dynamic_properties: tuple[DynamicPropertyPattern, ...] = ()
    closures: tuple[ClosurePattern, ...] = ()
    prototype_methods: tuple[PrototypeMethodPattern, ...] = ()
    module_patterns: tuple[ModulePattern, ...] = ()
    callbacks: tuple[CallbackPattern, ...] = ()
    object_literals: tuple[ObjectLiteralPattern, ...] = ()
    function_expressions: tuple[FunctionExpressionPattern, ...] = ()

    @classmethod
    def merge(cls, catalogs) -> "PatternCatalog":
        merged: dict[str, list] = {item.name: [] for item in fields(cls)}
        for catalog in catalogs:
            for name, values in merged.items():
                values.extend(getattr(catalog, name))
        return cls(**{name: tuple(values) for name, values in merged.items()})

    def counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for item in fields(self):
            records = getattr(self, item.name)
            counts[_PATTERN_KIND_BY_FIELD[item.name]] = len(records)
        return counts


_PATTERN_KIND_BY_FIELD = {
    "dynamic_properties": DynamicPropertyPattern.kind,
    "closures": ClosurePattern.kind,
    "prototype_methods": PrototypeMethodPattern.kind,
    "module_patterns": ModulePattern.kind,
    "callbacks": CallbackPattern.kind,
    "object_literals": ObjectLiteralPattern.kind,
    "function_expressions": FunctionExpressionPattern.kind,
}


def to_json(value):
    """Convert models into JSON-ready data with camelCase keys, dropping None."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if is_dataclass(value):
        data = {}
        kind = getattr(type(value), "kind", None)
        if isinstance(kind, str):
            data["type"] = kind
        for item in fields(value):
            attr = getattr(value, item.name)
            if attr is None:
                continue
            data[_camel(item.name)] = to_json(attr)
        return data
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    return value


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)
