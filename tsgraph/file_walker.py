"""File walking utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .parser import SOURCE_EXTENSIONS


DEFAULT_EXCLUDES = {"node_modules", "dist", "build", "coverage", ".git", ".hg", ".svn"}


def iter_source_files(root: str | Path, excludes: Iterable[str] | None = None) -> list[str]:
    """Sorted TypeScript/JavaScript files under ``root``, skipping declaration files."""
    root_path = Path(root)
    exclude_set = set(DEFAULT_EXCLUDES if excludes is None else excludes)
    matches: list[str] = []

    for path in root_path.rglob("*"):
        if path.suffix.lower() not in SOURCE_EXTENSIONS or not path.is_file():
            continue
        if path.name.endswith(".d.ts"):
            continue
        if any(part in exclude_set for part in path.relative_to(root_path).parts):
            continue
        matches.append(str(path))

    return sorted(matches)
