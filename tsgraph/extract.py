"""Extract symbols, call-site drafts and module declarations from a TS/JS syntax tree."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable

from .models import (
    MODULE_CALLER,
    ExportBinding,
    ExportRelation,
    ImportBinding,
    ImportRelation,
    Location,
    PatternCatalog,
    Symbol,
    symbol_id,
)
from .patterns import detect_patterns
from .syntax import (
    CLASS_TYPES,
    FUNCTION_EXPRESSION_TYPES,
    NodeCategory,
    accessibility,
    child_of_type,
    classify,
    compact_text,
    has_token,
    is_custom_type,
    is_same_node,
    location,
    node_text,
    string_value,
    synthetic_name,
    type_name,
    unwrap,
)


PARAMETER_TYPES = ("required_parameter", "optional_parameter")


@dataclass(frozen=True)
class CallDraft:
    """A call, construct or property-use site before cross-file linking.

    Only textual references are kept here: ``receiver`` is the source text of
    the object expression, ``receiver_type`` the class name inferred for it
    from declarations in the same file, and ``scope`` the qualified names of
    the enclosing lexical scopes, innermost first.
    """

    id: str
    call_type: str
    callee_name: str
    location: Location
    caller_name: str
    caller_qualname: str | None = None
    caller_class: str | None = None
    receiver: str | None = None
    receiver_type: str | None = None
    target_qualname: str | None = None
    scope: tuple[str, ...] = ()


@dataclass(frozen=True)
class FileAnalysis:
    path: str
    is_typescript: bool
    is_javascript: bool
    symbols: tuple[Symbol, ...] = ()
    calls: tuple[CallDraft, ...] = ()
    imports: tuple[ImportRelation, ...] = ()
    exports: tuple[ExportRelation, ...] = ()
    # Class name -> name of the class it extends.
    class_bases: dict[str, str] = field(default_factory=dict)
    patterns: PatternCatalog = field(default_factory=PatternCatalog)


@dataclass
class _Frame:
    name: str
    qualname: str
    kind: str
    owner: str | None = None
    this_class: str | None = None
    is_caller: bool = False
    is_lexical: bool = False
    bindings: dict[str, str] = field(default_factory=dict)


class _FileContext:
    def __init__(self, parsed, include_private: bool) -> None:
        self.path = parsed.path
        self.source = parsed.source_bytes
        self.is_typescript = parsed.is_typescript
        self.is_javascript = parsed.is_javascript
        self.include_private = include_private
        self.symbols: list[Symbol] = []
        self.calls: list[CallDraft] = []
        self.imports: list[ImportRelation] = []
        self.exports: list[ExportRelation] = []
        self.class_bases: dict[str, str] = {}
        self.class_fields: dict[str, dict[str, str]] = {}
        self.module_bindings: dict[str, str] = {}
        self.known_classes: set[str] = set()
        self.exported_locals: set[str] = set()
        self.scope: list[_Frame] = []

    def text(self, node) -> str:
        return node_text(node, self.source)

    def location(self, node) -> Location:
        return location(node, self.path, self.source)

    def qualify(self, name: str) -> str:
        if self.scope:
            return f"{self.scope[-1].qualname}.{name}"
        return name

    def frame(self, name: str, kind: str, **attrs) -> _Frame:
        return _Frame(name=name, qualname=self.qualify(name), kind=kind, **attrs)

    def add_symbol(
        self,
        node,
        name: str,
        kind: str,
        owner: str | None = None,
        visibility: str = "public",
        exported: bool = False,
    ) -> Symbol | None:
        if visibility == "private" and not self.include_private:
            return None
        loc = self.location(node)
        qualname = self.qualify(name)
        symbol = Symbol(
            id=symbol_id(self.path, qualname, loc.start),
            name=name,
            kind=kind,
            qualname=qualname,
            location=loc,
            class_name=owner,
            is_exported=exported,
            visibility=visibility,
        )
        self.symbols.append(symbol)
        return symbol

    def add_call(
        self,
        node,
        call_type: str,
        callee_name: str,
        receiver: str | None = None,
        receiver_type: str | None = None,
        target_qualname: str | None = None,
    ) -> None:
        loc = self.location(node)
        caller = self.caller()
        self.calls.append(
            CallDraft(
                id=(
                    f"{call_type}:{self.path}:{loc.start.line}:{loc.start.column}"
                    f"-{loc.end.line}:{loc.end.column}:{callee_name}"
                ),
                call_type=call_type,
                callee_name=callee_name,
                location=loc,
                caller_name=caller.name if caller else MODULE_CALLER,
                caller_qualname=caller.qualname if caller else None,
                caller_class=caller.owner if caller else None,
                receiver=receiver,
                receiver_type=receiver_type,
                target_qualname=target_qualname,
                scope=tuple(frame.qualname for frame in reversed(self.scope) if frame.is_lexical),
            )
        )

    def add_import(self, node, specifier: str, kind: str, bindings: Iterable[ImportBinding]) -> None:
        bindings = tuple(bindings)
        for binding in bindings:
            if binding.local[:1].isupper():
                self.known_classes.add(binding.local)
        self.imports.append(
            ImportRelation(
                file_path=self.path,
                specifier=specifier,
                kind=kind,
                location=self.location(node),
                imported_names=tuple(binding.imported for binding in bindings),
                bindings=bindings,
            )
        )

    def add_export(
        self,
        node,
        kind: str,
        bindings: Iterable[ExportBinding],
        specifier: str | None = None,
    ) -> None:
        bindings = tuple(bindings)
        names = tuple(binding.exported for binding in bindings)
        if not names and kind in ("default", "commonjs"):
            names = ("default",)
        if specifier is None:
            self.exported_locals.update(binding.local for binding in bindings)
        self.exports.append(
            ExportRelation(
                file_path=self.path,
                kind=kind,
                location=self.location(node),
                exported_names=names,
                bindings=bindings,
                specifier=specifier,
            )
        )

    def caller(self) -> _Frame | None:
        for frame in reversed(self.scope):
            if frame.is_caller:
                return frame
        return None

    def this_class(self) -> str | None:
        return self.scope[-1].this_class if self.scope else None

    def bind(self, name: str, bound_type: str) -> None:
        for frame in reversed(self.scope):
            if frame.is_lexical:
                frame.bindings[name] = bound_type
                return
        self.module_bindings[name] = bound_type

    def lookup_binding(self, name: str) -> str | None:
        for frame in reversed(self.scope):
            if name in frame.bindings:
                return frame.bindings[name]
        return self.module_bindings.get(name)

    def infer_type(self, node) -> str | None:
        """Best-effort class name for an expression, from this file's declarations."""
        node = unwrap(node)
        if node is None:
            return None
        if node.type == "this":
            return self.this_class()
        if node.type == "super":
            current = self.this_class()
            return self.class_bases.get(current) if current else None
        if node.type == "identifier":
            name = self.text(node)
            bound = self.lookup_binding(name)
            if bound:
                return bound
            return name if name in self.known_classes else None
        if node.type == "new_expression":
            return _constructor_name(self, node)
        if node.type == "member_expression":
            obj = unwrap(node.child_by_field_name("object"))
            prop = node.child_by_field_name("property")
            current = self.this_class()
            if obj is not None and obj.type == "this" and prop is not None and current:
                return self.field_type(current, self.text(prop))
        return None

    def field_type(self, class_name: str, field_name: str) -> str | None:
        seen = set()
        while class_name and class_name not in seen:
            seen.add(class_name)
            fields = self.class_fields.get(class_name, {})
            if field_name in fields:
                return fields[field_name]
            class_name = self.class_bases.get(class_name)
        return None

    def finish(self, patterns: PatternCatalog) -> FileAnalysis:
        symbols = tuple(
            replace(symbol, is_exported=True)
            if not symbol.is_exported
            and symbol.qualname == symbol.name
            and symbol.name in self.exported_locals
            else symbol
            for symbol in self.symbols
        )
        return FileAnalysis(
            path=self.path,
            is_typescript=self.is_typescript,
            is_javascript=self.is_javascript,
            symbols=symbols,
            calls=tuple(self.calls),
            imports=tuple(self.imports),
            exports=tuple(self.exports),
            class_bases=dict(self.class_bases),
            patterns=patterns,
        )


def extract_file(parsed, include_private: bool = True) -> FileAnalysis:
    ctx = _FileContext(parsed, include_private)
    root = parsed.tree.root_node
    ctx.known_classes.update(_top_level_classes(root, parsed.source_bytes))
    _walk(ctx, root)
    return ctx.finish(detect_patterns(parsed))


_LEAVE_SCOPE = object()


def _walk(ctx: _FileContext, root) -> None:
    # Pre-order with an explicit stack; a marker pops each frame after its subtree.
    stack = [root]
    while stack:
        node = stack.pop()
        if node is _LEAVE_SCOPE:
            ctx.scope.pop()
            continue
        handler = _HANDLERS.get(classify(node))
        frame = handler(ctx, node) if handler is not None else None
        if frame is not None:
            ctx.scope.append(frame)
            stack.append(_LEAVE_SCOPE)
        stack.extend(reversed(node.children))


def _on_class(ctx: _FileContext, node) -> _Frame:
    name = _declared_name(node, ctx.source)
    ctx.add_symbol(node, name, "class", exported=_is_exported(node))
    heritage = child_of_type(node, "class_heritage")
    if heritage is not None:
        base = _extends_name(heritage, ctx.source)
        if base:
            ctx.class_bases[name] = base
    ctx.class_fields.setdefault(name, {}).update(_field_types(ctx, node))
    ctx.known_classes.add(name)
    return ctx.frame(name, "class", this_class=name)


def _on_interface(ctx: _FileContext, node) -> _Frame | None:
    if not ctx.is_typescript:
        return None
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None
    name = ctx.text(name_node)
    ctx.add_symbol(node, name, "interface", exported=_is_exported(node))
    return ctx.frame(name, "interface")


def _on_function(ctx: _FileContext, node) -> _Frame:
    name = _declared_name(node, ctx.source)
    ctx.add_symbol(node, name, "function", exported=_is_exported(node))
    frame = ctx.frame(name, "function", is_caller=True, is_lexical=True)
    _bind_parameters(ctx, node, frame)
    return frame


def _on_function_expression(ctx: _FileContext, node) -> _Frame | None:
    parent = node.parent
    if (
        parent is not None
        and parent.type in ("public_field_definition", "field_definition")
        and ctx.scope
        and ctx.scope[-1].kind == "property"
    ):
        # `handler = () => {}`: the property frame already owns this body.
        _bind_parameters(ctx, node, ctx.scope[-1])
        return None
    name = _declared_name(node, ctx.source)
    ctx.add_symbol(node, name, "function", exported=_is_exported(node))
    # Arrow functions see the enclosing `this`; other function expressions rebind it.
    this_class = ctx.this_class() if node.type == "arrow_function" else None
    frame = ctx.frame(name, "function", this_class=this_class, is_caller=True, is_lexical=True)
    _bind_parameters(ctx, node, frame)
    return frame


def _on_method(ctx: _FileContext, node) -> _Frame:
    name_node = node.child_by_field_name("name")
    if name_node is not None:
        name = ctx.text(name_node)
    else:
        name = synthetic_name("anonymous", node, ctx.source)
    owner_frame = ctx.scope[-1] if ctx.scope else None
    parent = node.parent
    if (
        parent is not None
        and parent.type == "class_body"
        and owner_frame is not None
        and owner_frame.kind == "class"
    ):
        owner = owner_frame.name
        kind = "constructor" if name == "constructor" else "method"
        ctx.add_symbol(node, name, kind, owner=owner, visibility=accessibility(node, ctx.source))
        if kind == "constructor":
            _add_parameter_properties(ctx, node, owner)
        frame = ctx.frame(name, kind, owner=owner, this_class=owner, is_caller=True, is_lexical=True)
    else:
        # Shorthand method inside an object literal.
        ctx.add_symbol(node, name, "function")
        frame = ctx.frame(name, "function", is_caller=True, is_lexical=True)
    _bind_parameters(ctx, node, frame)
    return frame


def _on_field(ctx: _FileContext, node) -> _Frame | None:
    owner_frame = ctx.scope[-1] if ctx.scope else None
    if owner_frame is None or owner_frame.kind != "class":
        return None
    name_node = node.child_by_field_name("name") or node.child_by_field_name("property")
    if name_node is None:
        return None
    name = ctx.text(name_node)
    owner = owner_frame.name
    ctx.add_symbol(node, name, "property", owner=owner, visibility=accessibility(node, ctx.source))
    return ctx.frame(name, "property", owner=owner, this_class=owner, is_caller=True, is_lexical=True)


def _on_member_signature(ctx: _FileContext, node) -> None:
    owner_frame = ctx.scope[-1] if ctx.scope else None
    parent = node.parent
    if owner_frame is None or parent is None:
        return None
    in_interface = (
        owner_frame.kind == "interface"
        and parent.type in ("interface_body", "object_type")
        and parent.parent is not None
        and parent.parent.type == "interface_declaration"
    )
    # Plain method signatures in a class body are overloads of a real method.
    in_abstract_class = (
        owner_frame.kind == "class"
        and parent.type == "class_body"
        and node.type == "abstract_method_signature"
    )
    if not (in_interface or in_abstract_class):
        return None
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None
    kind = "property" if node.type == "property_signature" else "method"
    ctx.add_symbol(
        node,
        ctx.text(name_node),
        kind,
        owner=owner_frame.name,
        visibility=accessibility(node, ctx.source),
    )
    return None


def _on_variable(ctx: _FileContext, node) -> _Frame | None:
    name_node = node.child_by_field_name("name")
    value = node.child_by_field_name("value")
    if name_node is None:
        return None
    if value is not None and (value.type in FUNCTION_EXPRESSION_TYPES or value.type in CLASS_TYPES):
        # Named after the variable by the function/class handler.
        return None

    exported = _is_exported(node)
    if name_node.type != "identifier":
        for target in _pattern_identifiers(name_node):
            ctx.add_symbol(target, ctx.text(target), "variable", exported=exported)
        return None

    name = ctx.text(name_node)
    bound = _binding_type(ctx, node, value)
    if bound:
        ctx.bind(name, bound)
    ctx.add_symbol(node, name, "variable", exported=exported)
    inner = unwrap(value)
    if inner is not None and inner.type == "object":
        return ctx.frame(name, "variable", this_class=ctx.this_class())
    return None


def _on_import(ctx: _FileContext, node) -> None:
    source_node = node.child_by_field_name("source")
    bindings: list[ImportBinding] = []
    require_clause = child_of_type(node, "import_require_clause")
    if require_clause is not None:
        source_node = require_clause.child_by_field_name("source") or child_of_type(
            require_clause, "string"
        )
        local = child_of_type(require_clause, "identifier")
        if local is not None:
            bindings.append(ImportBinding(ctx.text(local), "default", "require"))
    clause = child_of_type(node, "import_clause")
    if clause is not None:
        bindings.extend(_import_clause_bindings(ctx, clause))

    specifier = string_value(source_node, ctx.source)
    if specifier is None:
        return None
    if require_clause is not None:
        kind = "require"
    elif not bindings:
        kind = "side-effect"
    else:
        kinds = {binding.kind for binding in bindings}
        kind = kinds.pop() if len(kinds) == 1 else "mixed"
    ctx.add_import(node, specifier, kind, bindings)
    return None


def _on_export(ctx: _FileContext, node) -> None:
    specifier = string_value(node.child_by_field_name("source"), ctx.source)
    clause = child_of_type(node, "export_clause")

    if specifier is not None:
        namespace = child_of_type(node, "namespace_export")
        if clause is not None:
            bindings = _export_clause_bindings(ctx, clause)
        elif namespace is not None and namespace.named_children:
            bindings = [ExportBinding("*", ctx.text(namespace.named_children[-1]).strip("'\""))]
        else:
            bindings = [ExportBinding("*", "*")]
        ctx.add_export(node, "reexport", bindings, specifier=specifier)
        return None

    is_default = has_token(node, "default")
    declaration = node.child_by_field_name("declaration")
    value = node.child_by_field_name("value")
    if clause is not None:
        ctx.add_export(node, "named", _export_clause_bindings(ctx, clause))
    elif declaration is not None:
        names = _declaration_names(ctx, declaration)
        if is_default:
            ctx.add_export(node, "default", [ExportBinding(name, "default") for name in names])
        else:
            ctx.add_export(node, "named", [ExportBinding(name, name) for name in names])
    elif is_default or has_token(node, "="):
        if value is None:
            value = node.named_children[-1] if node.named_children else None
        local = _expression_local(ctx, value)
        kind = "default" if is_default else "commonjs"
        ctx.add_export(node, kind, [ExportBinding(local, "default")] if local else [])
    return None


def _on_call(ctx: _FileContext, node) -> None:
    function = node.child_by_field_name("function")
    if function is None:
        return None
    arguments = node.child_by_field_name("arguments")
    if function.type == "import":
        specifier = _first_string_argument(ctx, arguments)
        if specifier is not None:
            ctx.add_import(node, specifier, "dynamic", ())
        return None

    callee = unwrap(function)
    if callee is None:
        return None
    if callee.type == "identifier":
        name = ctx.text(callee)
        if name == "require":
            _record_require(ctx, node, arguments)
        ctx.add_call(node, "function", name)
    elif callee.type == "super":
        base = ctx.infer_type(callee)
        ctx.add_call(
            node,
            "constructor",
            "constructor" if base else "super",
            receiver="super",
            receiver_type=base,
        )
    elif callee.type == "member_expression":
        obj = callee.child_by_field_name("object")
        prop = callee.child_by_field_name("property")
        if obj is None or prop is None:
            return None
        receiver_type = ctx.infer_type(obj)
        if not is_custom_type(receiver_type):
            receiver_type = None
        ctx.add_call(
            node,
            "method" if receiver_type else "property",
            ctx.text(prop),
            receiver=compact_text(obj, ctx.source),
            receiver_type=receiver_type,
        )
    elif callee.type in FUNCTION_EXPRESSION_TYPES:
        name = _declared_name(callee, ctx.source)
        ctx.add_call(node, "property", name, target_qualname=ctx.qualify(name))
    else:
        ctx.add_call(node, "property", compact_text(callee, ctx.source))
    return None


def _on_new(ctx: _FileContext, node) -> None:
    constructor = node.child_by_field_name("constructor")
    name = _constructor_name(ctx, node)
    ctx.add_call(
        node,
        "constructor",
        "constructor",
        receiver=compact_text(constructor, ctx.source) if constructor is not None else None,
        receiver_type=name,
    )
    return None


def _on_member_access(ctx: _FileContext, node) -> None:
    parent = node.parent
    if parent is not None:
        # Heads of calls and constructions are reported by those handlers.
        if parent.type == "call_expression" and is_same_node(parent.child_by_field_name("function"), node):
            return None
        if parent.type == "new_expression" and is_same_node(parent.child_by_field_name("constructor"), node):
            return None
    obj = node.child_by_field_name("object")
    prop = node.child_by_field_name("property")
    if obj is None or prop is None:
        return None
    receiver_type = ctx.infer_type(obj)
    if not is_custom_type(receiver_type):
        receiver_type = None
    ctx.add_call(
        node,
        "property",
        ctx.text(prop),
        receiver=compact_text(obj, ctx.source),
        receiver_type=receiver_type,
    )
    return None


def _on_assignment(ctx: _FileContext, node) -> None:
    if node.type != "assignment_expression":
        return None
    left = node.child_by_field_name("left")
    right = node.child_by_field_name("right")
    if left is None or right is None:
        return None

    target = ctx.text(left)
    inner = unwrap(right)
    if target == "module.exports":
        ctx.add_export(node, "commonjs", _commonjs_bindings(ctx, right))
    elif target.startswith(("exports.", "module.exports.")):
        exported = target.rsplit(".", 1)[-1]
        local = _expression_local(ctx, right)
        ctx.add_export(node, "commonjs", [ExportBinding(local or exported, exported)])
    elif inner is not None and inner.type == "new_expression":
        constructed = _constructor_name(ctx, inner)
        if not constructed:
            return None
        if left.type == "identifier":
            ctx.bind(target, constructed)
        elif left.type == "member_expression":
            obj = unwrap(left.child_by_field_name("object"))
            prop = left.child_by_field_name("property")
            current = ctx.this_class()
            if obj is not None and obj.type == "this" and prop is not None and current:
                ctx.class_fields.setdefault(current, {})[ctx.text(prop)] = constructed
    return None


_HANDLERS = {
    NodeCategory.CLASS: _on_class,
    NodeCategory.INTERFACE: _on_interface,
    NodeCategory.FUNCTION: _on_function,
    NodeCategory.FUNCTION_EXPRESSION: _on_function_expression,
    NodeCategory.METHOD: _on_method,
    NodeCategory.FIELD: _on_field,
    NodeCategory.MEMBER_SIGNATURE: _on_member_signature,
    NodeCategory.VARIABLE: _on_variable,
    NodeCategory.IMPORT: _on_import,
    NodeCategory.EXPORT: _on_export,
    NodeCategory.CALL: _on_call,
    NodeCategory.NEW: _on_new,
    NodeCategory.MEMBER_ACCESS: _on_member_access,
    NodeCategory.ASSIGNMENT: _on_assignment,
}


def _declared_name(node, source_bytes: bytes) -> str:
    """Name of a class/function node, synthesised from its context when anonymous."""
    parent = node.parent
    if (
        parent is not None
        and parent.type == "variable_declarator"
        and is_same_node(parent.child_by_field_name("value"), node)
    ):
        target = parent.child_by_field_name("name")
        if target is not None and target.type == "identifier":
            return node_text(target, source_bytes)
    own = node.child_by_field_name("name")
    if own is not None:
        return node_text(own, source_bytes)
    return synthetic_name(_name_hint(node, source_bytes), node, source_bytes)


def _name_hint(node, source_bytes: bytes) -> str:
    parent = node.parent
    if parent is None:
        return "anonymous"
    if parent.type == "export_statement":
        return "default"
    if parent.type == "pair":
        key = parent.child_by_field_name("key")
        if key is not None:
            return node_text(key, source_bytes).strip("'\"`")
    if parent.type == "assignment_expression":
        left = parent.child_by_field_name("left")
        if left is not None and left.type == "member_expression":
            prop = left.child_by_field_name("property")
            if prop is not None:
                return node_text(prop, source_bytes)
        if left is not None and left.type == "identifier":
            return node_text(left, source_bytes)
    return "anonymous"


def _is_exported(node) -> bool:
    parent = node.parent
    if parent is not None and parent.type == "variable_declarator":
        parent = parent.parent
    if parent is not None and parent.type in ("lexical_declaration", "variable_declaration"):
        parent = parent.parent
    return parent is not None and parent.type == "export_statement"


def _top_level_classes(root, source_bytes: bytes) -> set[str]:
    names = set()
    for child in root.named_children:
        node = child
        if node.type == "export_statement":
            node = node.child_by_field_name("declaration")
        if node is None or node.type not in ("class_declaration", "abstract_class_declaration"):
            continue
        name = node.child_by_field_name("name")
        if name is not None:
            names.add(node_text(name, source_bytes))
    return names


def _extends_name(heritage, source_bytes: bytes) -> str | None:
    for child in heritage.named_children:
        if child.type == "extends_clause":
            value = child.child_by_field_name("value")
            if value is None and child.named_children:
                value = child.named_children[0]
            return type_name(node_text(value, source_bytes)) if value is not None else None
        if child.type != "implements_clause":
            return type_name(node_text(child, source_bytes))
    return None


def _field_types(ctx: _FileContext, class_node) -> dict[str, str]:
    types: dict[str, str] = {}
    body = class_node.child_by_field_name("body")
    if body is None:
        return types
    for member in body.named_children:
        if member.type in ("public_field_definition", "field_definition"):
            name = member.child_by_field_name("name") or member.child_by_field_name("property")
            if name is None:
                continue
            bound = _binding_type(ctx, member, member.child_by_field_name("value"))
            if bound:
                types[ctx.text(name)] = bound
        elif member.type == "method_definition":
            name = member.child_by_field_name("name")
            if name is None or ctx.text(name) != "constructor":
                continue
            for param in _parameter_properties(member):
                pattern = param.child_by_field_name("pattern")
                annotation = param.child_by_field_name("type")
                if pattern is not None and annotation is not None:
                    bound = type_name(ctx.text(annotation))
                    if bound:
                        types[ctx.text(pattern)] = bound
    return types


def _parameter_properties(constructor) -> list:
    params = constructor.child_by_field_name("parameters")
    if params is None:
        return []
    return [
        param
        for param in params.named_children
        if param.type in PARAMETER_TYPES
        and (child_of_type(param, "accessibility_modifier") is not None or has_token(param, "readonly"))
    ]


def _add_parameter_properties(ctx: _FileContext, constructor, owner: str) -> None:
    for param in _parameter_properties(constructor):
        pattern = param.child_by_field_name("pattern")
        if pattern is None or pattern.type != "identifier":
            continue
        ctx.add_symbol(
            param,
            ctx.text(pattern),
            "property",
            owner=owner,
            visibility=accessibility(param, ctx.source),
        )


def _bind_parameters(ctx: _FileContext, node, frame: _Frame) -> None:
    params = node.child_by_field_name("parameters")
    if params is None:
        return
    for param in params.named_children:
        if param.type not in PARAMETER_TYPES:
            continue
        pattern = param.child_by_field_name("pattern")
        annotation = param.child_by_field_name("type")
        if pattern is None or pattern.type != "identifier" or annotation is None:
            continue
        bound = type_name(ctx.text(annotation))
        if bound:
            frame.bindings[ctx.text(pattern)] = bound


def _binding_type(ctx: _FileContext, declarator, value) -> str | None:
    annotation = declarator.child_by_field_name("type")
    if annotation is not None:
        return type_name(ctx.text(annotation))
    inner = unwrap(value)
    if inner is not None and inner.type == "new_expression":
        return _constructor_name(ctx, inner)
    return None


def _constructor_name(ctx: _FileContext, new_node) -> str | None:
    constructor = unwrap(new_node.child_by_field_name("constructor"))
    if constructor is None:
        return None
    if constructor.type == "identifier":
        return ctx.text(constructor)
    if constructor.type == "member_expression":
        prop = constructor.child_by_field_name("property")
        return ctx.text(prop) if prop is not None else None
    return None


def _pattern_identifiers(node):
    if node.type in ("identifier", "shorthand_property_identifier_pattern"):
        yield node
    elif node.type == "pair_pattern":
        target = node.child_by_field_name("value")
        if target is not None:
            yield from _pattern_identifiers(target)
    elif node.type in ("assignment_pattern", "object_assignment_pattern"):
        target = node.child_by_field_name("left")
        if target is not None:
            yield from _pattern_identifiers(target)
    elif node.type in ("object_pattern", "array_pattern", "rest_pattern"):
        for child in node.named_children:
            yield from _pattern_identifiers(child)


def _import_clause_bindings(ctx: _FileContext, clause) -> list[ImportBinding]:
    bindings = []
    for child in clause.named_children:
        if child.type == "identifier":
            bindings.append(ImportBinding(ctx.text(child), "default", "default"))
        elif child.type == "namespace_import":
            local = child_of_type(child, "identifier")
            if local is not None:
                bindings.append(ImportBinding(ctx.text(local), "*", "namespace"))
        elif child.type == "named_imports":
            for spec in child.named_children:
                if spec.type != "import_specifier":
                    continue
                name = spec.child_by_field_name("name")
                if name is None:
                    continue
                alias = spec.child_by_field_name("alias")
                imported = ctx.text(name).strip("'\"")
                local = ctx.text(alias) if alias is not None else imported
                bindings.append(ImportBinding(local, imported, "named"))
    return bindings


def _record_require(ctx: _FileContext, node, arguments) -> None:
    specifier = _first_string_argument(ctx, arguments)
    if specifier is None:
        return
    bindings = []
    parent = node.parent
    if (
        parent is not None
        and parent.type == "variable_declarator"
        and is_same_node(parent.child_by_field_name("value"), node)
    ):
        target = parent.child_by_field_name("name")
        if target is not None and target.type == "identifier":
            bindings.append(ImportBinding(ctx.text(target), "default", "require"))
        elif target is not None and target.type == "object_pattern":
            for child in target.named_children:
                if child.type == "shorthand_property_identifier_pattern":
                    name = ctx.text(child)
                    bindings.append(ImportBinding(name, name, "require"))
                elif child.type == "pair_pattern":
                    key = child.child_by_field_name("key")
                    value = child.child_by_field_name("value")
                    if key is not None and value is not None and value.type == "identifier":
                        bindings.append(ImportBinding(ctx.text(value), ctx.text(key), "require"))
    ctx.add_import(node, specifier, "require", bindings)


def _first_string_argument(ctx: _FileContext, arguments) -> str | None:
    if arguments is None or not arguments.named_children:
        return None
    return string_value(arguments.named_children[0], ctx.source)


def _export_clause_bindings(ctx: _FileContext, clause) -> list[ExportBinding]:
    bindings = []
    for spec in clause.named_children:
        if spec.type != "export_specifier":
            continue
        name = spec.child_by_field_name("name")
        if name is None:
            continue
        alias = spec.child_by_field_name("alias")
        local = ctx.text(name).strip("'\"")
        exported = ctx.text(alias).strip("'\"") if alias is not None else local
        bindings.append(ExportBinding(local, exported))
    return bindings


def _declaration_names(ctx: _FileContext, declaration) -> list[str]:
    if declaration.type in ("lexical_declaration", "variable_declaration"):
        names = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            target = declarator.child_by_field_name("name")
            if target is not None:
                names.extend(ctx.text(item) for item in _pattern_identifiers(target))
        return names
    name = declaration.child_by_field_name("name")
    if name is not None:
        return [ctx.text(name)]
    return []


def _expression_local(ctx: _FileContext, value) -> str | None:
    inner = unwrap(value)
    if inner is None:
        return None
    if inner.type == "identifier":
        return ctx.text(inner)
    if inner.type in FUNCTION_EXPRESSION_TYPES or inner.type in CLASS_TYPES:
        return _declared_name(inner, ctx.source)
    return None


def _commonjs_bindings(ctx: _FileContext, value) -> list[ExportBinding]:
    inner = unwrap(value)
    if inner is None or inner.type != "object":
        local = _expression_local(ctx, value)
        return [ExportBinding(local, "default")] if local else []
    bindings = []
    for child in inner.named_children:
        if child.type == "pair":
            key = child.child_by_field_name("key")
            if key is None:
                continue
            exported = ctx.text(key).strip("'\"")
            local = _expression_local(ctx, child.child_by_field_name("value"))
            bindings.append(ExportBinding(local or exported, exported))
        elif child.type == "shorthand_property_identifier":
            name = ctx.text(child)
            bindings.append(ExportBinding(name, name))
        elif child.type == "method_definition":
            name_node = child.child_by_field_name("name")
            if name_node is not None:
                name = ctx.text(name_node)
                bindings.append(ExportBinding(name, name))
    return bindings
