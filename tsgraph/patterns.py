"""Syntactic detection of JavaScript idioms that are not plain declarations.

Every detector is a pure predicate over one node plus a builder for its
record. A node can match several detectors (an IIFE is both a closure and a
module pattern) and is then recorded under each.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .models import (
    CallbackPattern,
    ClosurePattern,
    DynamicPropertyPattern,
    FunctionExpressionPattern,
    ModulePattern,
    ObjectLiteralPattern,
    ObjectProperty,
    PatternCatalog,
    PrototypeMethodPattern,
)
from .syntax import (
    FUNCTION_DECLARATION_TYPES,
    FUNCTION_EXPRESSION_TYPES,
    compact_text,
    has_token,
    is_same_node,
    location,
    node_text,
    string_value,
    unwrap,
)


ASYNC_CALLEE_MARKERS = ("async", "then", "catch", "settimeout", "setinterval")
AMD_CALLEES = ("define", "require")
FUNCTION_TYPES = FUNCTION_EXPRESSION_TYPES | FUNCTION_DECLARATION_TYPES | {"method_definition"}

_PROTOTYPE_TARGET = re.compile(r"^([A-Za-z_$][\w$]*)\.prototype\.([A-Za-z_$][\w$]*)$")


@dataclass(frozen=True)
class _Source:
    path: str
    source_bytes: bytes

    def text(self, node) -> str:
        return node_text(node, self.source_bytes)


def detect_patterns(parsed) -> PatternCatalog:
    source = _Source(parsed.path, parsed.source_bytes)
    found: dict[str, list] = {name: [] for name, _, _ in DETECTORS}
    _visit(parsed.tree.root_node, source, found)
    return PatternCatalog(**{name: tuple(records) for name, records in found.items()})


def _visit(root, source: _Source, found: dict[str, list]) -> None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_named:
            for name, matches, build in DETECTORS:
                if matches(node, source):
                    found[name].append(build(node, source))
        stack.extend(reversed(node.children))


def is_iife(node) -> bool:
    """A call whose callee is a function expression, optionally parenthesized."""
    if node.type != "call_expression":
        return False
    callee = unwrap(node.child_by_field_name("function"))
    return callee is not None and callee.type in FUNCTION_EXPRESSION_TYPES


def _is_dynamic_property(node, source: _Source) -> bool:
    return node.type == "subscript_expression"


def _dynamic_property(node, source: _Source) -> DynamicPropertyPattern:
    obj = node.child_by_field_name("object")
    index = node.child_by_field_name("index")
    return DynamicPropertyPattern(
        location=location(node, source.path, source.source_bytes),
        object=source.text(obj) if obj is not None else "",
        property=source.text(index) if index is not None else "",
        access_type=_access_type(node),
    )


def _access_type(node) -> str:
    parent = node.parent
    if parent is None:
        return "read"
    if parent.type in ("assignment_expression", "augmented_assignment_expression"):
        if is_same_node(parent.child_by_field_name("left"), node):
            return "write"
    if parent.type == "call_expression" and is_same_node(parent.child_by_field_name("function"), node):
        return "call"
    return "read"


def _is_prototype_method(node, source: _Source) -> bool:
    if node.type != "assignment_expression":
        return False
    left = node.child_by_field_name("left")
    return left is not None and _PROTOTYPE_TARGET.match(source.text(left)) is not None


def _prototype_method(node, source: _Source) -> PrototypeMethodPattern:
    match = _PROTOTYPE_TARGET.match(source.text(node.child_by_field_name("left")))
    right = node.child_by_field_name("right")
    return PrototypeMethodPattern(
        location=location(node, source.path, source.source_bytes),
        constructor=match.group(1),
        method_name=match.group(2),
        implementation=compact_text(right, source.source_bytes) if right is not None else "",
    )


def _is_closure(node, source: _Source) -> bool:
    if is_iife(node):
        return True
    if node.type not in FUNCTION_DECLARATION_TYPES:
        return False
    return next(_nested_functions(node.child_by_field_name("body")), None) is not None


def _closure(node, source: _Source) -> ClosurePattern:
    if node.type == "call_expression":
        outer = unwrap(node.child_by_field_name("function"))
    else:
        outer = node
    body = outer.child_by_field_name("body")
    inner_functions = []
    for nested in _nested_functions(body):
        name = nested.child_by_field_name("name")
        if nested.type in FUNCTION_DECLARATION_TYPES and name is not None:
            inner_functions.append(source.text(name))
    return ClosurePattern(
        location=location(node, source.path, source.source_bytes),
        inner_functions=tuple(inner_functions),
        outer_variables=_captured_variables(outer, source),
    )


def _nested_functions(body):
    """Functions nested anywhere below ``body``, outermost first."""
    if body is None:
        return
    stack = list(reversed(body.named_children))
    while stack:
        child = stack.pop()
        if child.type in FUNCTION_TYPES:
            yield child
        stack.extend(reversed(child.named_children))


def _captured_variables(function, source: _Source) -> tuple[str, ...]:
    """Names declared in ``function`` that its nested functions reference."""
    body = function.child_by_field_name("body")
    declared: list[str] = []
    params = function.child_by_field_name("parameters") or function.child_by_field_name("parameter")
    if params is not None:
        declared.extend(_identifiers(params, source))
    declared.extend(_local_declarations(body, source))

    referenced: set[str] = set()
    for nested in _nested_functions(body):
        referenced.update(_identifiers(nested.child_by_field_name("body"), source))
    return tuple(dict.fromkeys(name for name in declared if name in referenced))


def _local_declarations(node, source: _Source):
    if node is None:
        return
    stack = list(reversed(node.named_children))
    while stack:
        child = stack.pop()
        if child.type in FUNCTION_DECLARATION_TYPES:
            name = child.child_by_field_name("name")
            if name is not None:
                yield source.text(name)
            continue
        if child.type in FUNCTION_TYPES:
            continue
        if child.type == "variable_declarator":
            target = child.child_by_field_name("name")
            if target is not None:
                yield from _identifiers(target, source)
        stack.extend(reversed(child.named_children))


def _identifiers(node, source: _Source):
    if node is None:
        return
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in ("identifier", "shorthand_property_identifier_pattern", "shorthand_property_identifier"):
            yield source.text(current)
        stack.extend(reversed(current.named_children))


def _is_module_pattern(node, source: _Source) -> bool:
    if is_iife(node):
        return True
    if node.type == "assignment_expression":
        left = node.child_by_field_name("left")
        return left is not None and _is_commonjs_target(source.text(left))
    if node.type == "call_expression":
        callee = node.child_by_field_name("function")
        return callee is not None and callee.type == "identifier" and source.text(callee) in AMD_CALLEES
    return False


def _is_commonjs_target(text: str) -> bool:
    return "module.exports" in text or text.startswith("exports.")


def _module_pattern(node, source: _Source) -> ModulePattern:
    loc = location(node, source.path, source.source_bytes)
    if is_iife(node):
        text = source.text(node)
        if "define" in text and ("module.exports" in text or "exports." in text):
            pattern_type = "UMD"
        else:
            pattern_type = "IIFE"
        return ModulePattern(location=loc, pattern_type=pattern_type)

    if node.type == "assignment_expression":
        target = source.text(node.child_by_field_name("left"))
        exports = _commonjs_exports(target, node.child_by_field_name("right"), source)
        return ModulePattern(location=loc, pattern_type="CommonJS", exports=exports)

    arguments = node.child_by_field_name("arguments")
    dependencies: list[str] = []
    for argument in arguments.named_children if arguments is not None else ():
        if argument.type == "string":
            dependencies.append(string_value(argument, source.source_bytes))
        elif argument.type == "array":
            dependencies.extend(
                string_value(item, source.source_bytes)
                for item in argument.named_children
                if item.type == "string"
            )
    return ModulePattern(location=loc, pattern_type="AMD", dependencies=tuple(dependencies))


def _commonjs_exports(target: str, value, source: _Source) -> tuple[str, ...]:
    if target != "module.exports":
        return (target.rsplit(".", 1)[-1],)
    value = unwrap(value)
    if value is None or value.type != "object":
        return ("default",)
    names = []
    for child in value.named_children:
        key = child.child_by_field_name("key") or child.child_by_field_name("name")
        if key is not None:
            names.append(source.text(key).strip("'\""))
        elif child.type == "shorthand_property_identifier":
            names.append(source.text(child))
    return tuple(names)


def _is_callback(node, source: _Source) -> bool:
    return node.type == "call_expression" and bool(_function_arguments(node))


def _function_arguments(node) -> list:
    arguments = node.child_by_field_name("arguments")
    if arguments is None:
        return []
    return [argument for argument in arguments.named_children if argument.type in FUNCTION_EXPRESSION_TYPES]


def _callback(node, source: _Source) -> CallbackPattern:
    """Record a call taking function arguments.

    ``is_async`` is a heuristic on the callee text only (``then``,
    ``setTimeout`` and the like); it does not prove asynchronous execution.
    """
    callee = node.child_by_field_name("function")
    callee_text = compact_text(callee, source.source_bytes) if callee is not None else ""
    lowered = source.text(callee).lower() if callee is not None else ""
    return CallbackPattern(
        location=location(node, source.path, source.source_bytes),
        caller_function=callee_text,
        callback_arguments=tuple(f"callback_{index}" for index, _ in enumerate(_function_arguments(node))),
        is_async=any(marker in lowered for marker in ASYNC_CALLEE_MARKERS),
    )


def _is_object_literal(node, source: _Source) -> bool:
    return node.type == "object"


def _object_literal(node, source: _Source) -> ObjectLiteralPattern:
    properties: list[ObjectProperty] = []
    methods: list[str] = []
    computed: list[str] = []
    for child in node.named_children:
        if child.type == "pair":
            key = child.child_by_field_name("key")
            value = unwrap(child.child_by_field_name("value"))
            name = source.text(key).strip("'\"") if key is not None else ""
            is_method = value is not None and value.type in FUNCTION_EXPRESSION_TYPES
            properties.append(ObjectProperty(name=name, kind="pair", is_method=is_method))
            if is_method:
                methods.append(name)
            if key is not None and key.type == "computed_property_name":
                computed.append(name)
        elif child.type == "method_definition":
            key = child.child_by_field_name("name")
            name = source.text(key) if key is not None else ""
            is_getter = has_token(child, "get")
            is_setter = has_token(child, "set")
            properties.append(
                ObjectProperty(
                    name=name,
                    kind="method",
                    is_method=not (is_getter or is_setter),
                    is_getter=is_getter,
                    is_setter=is_setter,
                )
            )
            if not (is_getter or is_setter):
                methods.append(name)
            if key is not None and key.type == "computed_property_name":
                computed.append(name)
        elif child.type == "shorthand_property_identifier":
            properties.append(ObjectProperty(name=source.text(child), kind="shorthand"))
        elif child.type == "spread_element":
            properties.append(ObjectProperty(name=compact_text(child, source.source_bytes), kind="spread"))
    return ObjectLiteralPattern(
        location=location(node, source.path, source.source_bytes),
        properties=tuple(properties),
        methods=tuple(methods),
        computed_properties=tuple(computed),
    )


def _is_function_expression(node, source: _Source) -> bool:
    return node.type in FUNCTION_EXPRESSION_TYPES


def _function_expression(node, source: _Source) -> FunctionExpressionPattern:
    parent = node.parent
    while parent is not None and parent.type == "parenthesized_expression":
        parent = parent.parent
    params = node.child_by_field_name("parameters")
    if params is not None:
        parameters = tuple(source.text(param) for param in params.named_children if param.type != "comment")
    else:
        single = node.child_by_field_name("parameter")
        parameters = (source.text(single),) if single is not None else ()
    return FunctionExpressionPattern(
        location=location(node, source.path, source.source_bytes),
        is_arrow=node.type == "arrow_function",
        is_iife=parent is not None and is_iife(parent),
        captures_this=_uses_this(node.child_by_field_name("body")),
        parameters=parameters,
    )


def _uses_this(node) -> bool:
    """True when ``this`` occurs below ``node`` outside nested non-arrow functions."""
    if node is None:
        return False
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "this":
            return True
        stack.extend(
            child
            for child in current.named_children
            if child.type not in FUNCTION_TYPES or child.type == "arrow_function"
        )
    return False


# (catalog field, predicate, record builder)
DETECTORS = (
    ("dynamic_properties", _is_dynamic_property, _dynamic_property),
    ("closures", _is_closure, _closure),
    ("prototype_methods", _is_prototype_method, _prototype_method),
    ("module_patterns", _is_module_pattern, _module_pattern),
    ("callbacks", _is_callback, _callback),
    ("object_literals", _is_object_literal, _object_literal),
    ("function_expressions", _is_function_expression, _function_expression),
)
