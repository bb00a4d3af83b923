"""Tree-sitter language loader helpers."""

from __future__ import annotations


DIALECTS = ("typescript", "tsx")


def load_typescript_language(dialect: str = "typescript"):
    """Return a Tree-sitter Language object for the TypeScript or TSX grammar."""
    from tree_sitter import Language

    if dialect not in DIALECTS:
        raise ValueError(f"Unknown TypeScript dialect: {dialect}")

    try:
        import tree_sitter_typescript as tstypescript
    except Exception as exc:  # pragma: no cover - import guard
        raise RuntimeError("tree_sitter_typescript is not installed") from exc

    # tree_sitter_typescript exposes `language_typescript` / `language_tsx` (callable or object).
    lang = getattr(tstypescript, f"language_{dialect}", None)
    if lang is None:
        raise RuntimeError("Unsupported tree_sitter_typescript API")
    lang = lang() if callable(lang) else lang

    # The grammar package may return a PyCapsule; wrap to Language if needed.
    if isinstance(lang, Language):
        return lang
    return Language(lang)
