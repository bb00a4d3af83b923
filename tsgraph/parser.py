"""Tree-sitter based parser for TypeScript and JavaScript sources."""

from __future__ import annotations

import os
from dataclasses import dataclass

from tree_sitter import Parser

from .ts_lang import load_typescript_language


TYPESCRIPT_EXTENSIONS = (".ts", ".tsx", ".mts", ".cts")
JAVASCRIPT_EXTENSIONS = (".js", ".jsx", ".mjs", ".cjs")
SOURCE_EXTENSIONS = TYPESCRIPT_EXTENSIONS + JAVASCRIPT_EXTENSIONS

# Plain TypeScript needs its own grammar for `<T>expr` casts; every other
# extension goes through the TSX grammar, which also accepts JavaScript and JSX.
_TYPESCRIPT_GRAMMAR_EXTENSIONS = (".ts", ".mts", ".cts")


class ParseError(Exception):
    def __init__(self, path: str, line: int, column: int) -> None:
        super().__init__(f"{path}:{line}:{column}: syntax error")
        self.path = path
        self.line = line
        self.column = column


@dataclass
class ParsedSource:
    path: str
    tree: object
    source_bytes: bytes
    is_typescript: bool
    is_javascript: bool


def is_typescript_file(path: str) -> bool:
    return path.lower().endswith(TYPESCRIPT_EXTENSIONS)


def is_javascript_file(path: str) -> bool:
    return path.lower().endswith(JAVASCRIPT_EXTENSIONS)


def is_source_file(path: str) -> bool:
    return is_typescript_file(path) or is_javascript_file(path)


class SourceParser:
    def __init__(self) -> None:
        self._parsers = {
            "typescript": _make_parser("typescript"),
            "tsx": _make_parser("tsx"),
        }

    def parse_bytes(self, source_bytes: bytes, path: str) -> ParsedSource:
        dialect = "typescript" if path.lower().endswith(_TYPESCRIPT_GRAMMAR_EXTENSIONS) else "tsx"
        tree = self._parsers[dialect].parse(source_bytes)
        error = _first_error(tree.root_node)
        if error is not None:
            line, column = error.start_point
            raise ParseError(path, line + 1, column + 1)
        return ParsedSource(
            path=path,
            tree=tree,
            source_bytes=source_bytes,
            is_typescript=is_typescript_file(path),
            is_javascript=is_javascript_file(path),
        )

    def parse_text(self, source_text: str, path: str = "<memory>.ts") -> ParsedSource:
        return self.parse_bytes(source_text.encode("utf-8"), path)

    def parse_file(self, path: str) -> ParsedSource:
        with open(path, "rb") as handle:
            source_bytes = handle.read()
        return self.parse_bytes(source_bytes, os.path.abspath(path))


def _make_parser(dialect: str) -> Parser:
    parser = Parser()
    language = load_typescript_language(dialect)
    # tree-sitter API supports either set_language or direct attribute.
    if hasattr(parser, "set_language"):
        parser.set_language(language)
    else:
        parser.language = language
    return parser


def _first_error(node):
    if not (node.has_error or node.is_missing):
        return None
    while node.type != "ERROR" and not node.is_missing:
        child = next((c for c in node.children if c.has_error or c.is_missing), None)
        if child is None:
            return node
        node = child
    return node
