"""Tree-sitter node helpers shared by the extraction passes."""

from __future__ import annotations

import re
from enum import Enum

from .models import Location, Position


class NodeCategory(Enum):
    CLASS = "class"
    INTERFACE = "interface"
    FUNCTION = "function"
    FUNCTION_EXPRESSION = "function_expression"
    METHOD = "method"
    FIELD = "field"
    MEMBER_SIGNATURE = "member_signature"
    VARIABLE = "variable"
    IMPORT = "import"
    EXPORT = "export"
    CALL = "call"
    NEW = "new"
    MEMBER_ACCESS = "member_access"
    ELEMENT_ACCESS = "element_access"
    ASSIGNMENT = "assignment"
    OBJECT = "object"
    OTHER = "other"


NODE_CATEGORIES = {
    "class_declaration": NodeCategory.CLASS,
    "abstract_class_declaration": NodeCategory.CLASS,
    "class": NodeCategory.CLASS,
    "interface_declaration": NodeCategory.INTERFACE,
    "function_declaration": NodeCategory.FUNCTION,
    "generator_function_declaration": NodeCategory.FUNCTION,
    "function_expression": NodeCategory.FUNCTION_EXPRESSION,
    "function": NodeCategory.FUNCTION_EXPRESSION,
    "generator_function": NodeCategory.FUNCTION_EXPRESSION,
    "arrow_function": NodeCategory.FUNCTION_EXPRESSION,
    "method_definition": NodeCategory.METHOD,
    "public_field_definition": NodeCategory.FIELD,
    "field_definition": NodeCategory.FIELD,
    "method_signature": NodeCategory.MEMBER_SIGNATURE,
    "abstract_method_signature": NodeCategory.MEMBER_SIGNATURE,
    "property_signature": NodeCategory.MEMBER_SIGNATURE,
    "variable_declarator": NodeCategory.VARIABLE,
    "import_statement": NodeCategory.IMPORT,
    "export_statement": NodeCategory.EXPORT,
    "call_expression": NodeCategory.CALL,
    "new_expression": NodeCategory.NEW,
    "member_expression": NodeCategory.MEMBER_ACCESS,
    "subscript_expression": NodeCategory.ELEMENT_ACCESS,
    "assignment_expression": NodeCategory.ASSIGNMENT,
    "augmented_assignment_expression": NodeCategory.ASSIGNMENT,
    "object": NodeCategory.OBJECT,
}

CLASS_TYPES = frozenset(
    node_type for node_type, category in NODE_CATEGORIES.items() if category is NodeCategory.CLASS
)
FUNCTION_EXPRESSION_TYPES = frozenset(
    node_type
    for node_type, category in NODE_CATEGORIES.items()
    if category is NodeCategory.FUNCTION_EXPRESSION
)
FUNCTION_DECLARATION_TYPES = frozenset({"function_declaration", "generator_function_declaration"})

BUILTIN_TYPES = frozenset(
    {
        "any",
        "bigint",
        "boolean",
        "never",
        "null",
        "number",
        "object",
        "string",
        "symbol",
        "undefined",
        "unknown",
        "void",
        "Array",
        "Boolean",
        "Date",
        "Error",
        "Function",
        "Map",
        "Number",
        "Object",
        "Partial",
        "Promise",
        "Readonly",
        "ReadonlyArray",
        "Record",
        "RegExp",
        "Set",
        "String",
        "Symbol",
        "WeakMap",
        "WeakSet",
        "__type",
    }
)

_TYPE_NAME = re.compile(r"(?:readonly\s+)?([A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)")
_WHITESPACE = re.compile(r"\s+")


def classify(node) -> NodeCategory:
    if not node.is_named:
        return NodeCategory.OTHER
    return NODE_CATEGORIES.get(node.type, NodeCategory.OTHER)


def node_text(node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def compact_text(node, source_bytes: bytes, limit: int = 80) -> str:
    text = _WHITESPACE.sub(" ", node_text(node, source_bytes)).strip()
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def character_column(source_bytes: bytes, byte_offset: int, byte_column: int) -> int:
    """Convert a tree-sitter byte column into a 0-based character column."""
    if byte_column == 0:
        return 0
    prefix = source_bytes[byte_offset - byte_column : byte_offset]
    if prefix.isascii():
        return byte_column
    return len(prefix.decode("utf-8", errors="replace"))


def location(node, file_path: str, source_bytes: bytes) -> Location:
    start_line, start_byte_column = node.start_point
    end_line, end_byte_column = node.end_point
    start_column = character_column(source_bytes, node.start_byte, start_byte_column)
    end_column = character_column(source_bytes, node.end_byte, end_byte_column)
    return Location(
        file_path=file_path,
        start=Position(line=start_line + 1, column=start_column + 1),
        end=Position(line=end_line + 1, column=end_column + 1),
    )


def synthetic_name(hint: str, node, source_bytes: bytes) -> str:
    line, byte_column = node.start_point
    column = character_column(source_bytes, node.start_byte, byte_column)
    return f"{hint}@{line + 1}:{column + 1}"


def string_value(node, source_bytes: bytes) -> str | None:
    if node is None or node.type != "string":
        return None
    return node_text(node, source_bytes)[1:-1]


def unwrap(node):
    """Strip parentheses and TypeScript-only wrappers around an expression."""
    while node is not None and node.type in (
        "parenthesized_expression",
        "non_null_expression",
        "as_expression",
        "satisfies_expression",
    ):
        node = node.named_children[0] if node.named_children else None
    return node


def has_token(node, token: str) -> bool:
    return any(not child.is_named and child.type == token for child in node.children)


def child_of_type(node, *types: str):
    for child in node.children:
        if child.type in types:
            return child
    return None


def accessibility(node, source_bytes: bytes) -> str:
    modifier = child_of_type(node, "accessibility_modifier")
    if modifier is not None:
        return node_text(modifier, source_bytes).strip()
    name = node.child_by_field_name("name") or node.child_by_field_name("pattern")
    if name is not None and name.type == "private_property_identifier":
        return "private"
    return "public"


def type_name(annotation: str | None) -> str | None:
    """Reduce a type annotation to the name of its outermost named type."""
    if not annotation:
        return None
    text = annotation.strip()
    if text.startswith(":"):
        text = text[1:].strip()
    if not text or "|" in text or "&" in text or text.startswith(("{", "(", "[")):
        return None
    if text.endswith("[]"):
        return "Array"
    match = _TYPE_NAME.match(text)
    if match is None:
        return None
    return match.group(1).rsplit(".", 1)[-1]


def is_custom_type(name: str | None) -> bool:
    if not name:
        return False
    return name not in BUILTIN_TYPES and not name.isdigit()


def is_same_node(left, right) -> bool:
    if left is None or right is None:
        return False
    return (left.start_byte, left.end_byte, left.type) == (
        right.start_byte,
        right.end_byte,
        right.type,
    )
