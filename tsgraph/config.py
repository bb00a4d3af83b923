"""Project configuration (tsconfig.json) discovery and parsing."""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path


logger = logging.getLogger(__name__)

CONFIG_FILENAME = "tsconfig.json"

_COMMENTS = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMAS = re.compile(r'("(?:\\.|[^"\\])*")|,(?=\s*[}\]])')


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ProjectConfig:
    config_path: str | None = None
    target: str = "ES2020"
    module: str = "CommonJS"
    module_resolution: str = "node"
    allow_js: bool = True
    strict: bool = False
    no_emit: bool = True
    base_url: str | None = None
    # Alias pattern -> absolute target patterns, each holding at most one "*".
    paths: dict[str, tuple[str, ...]] = field(default_factory=dict)


def find_config_file(start: str | Path, name: str = CONFIG_FILENAME) -> Path | None:
    current = Path(os.path.abspath(start))
    if current.is_file():
        current = current.parent
    for directory in (current, *current.parents):
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_project_config(start: str | Path) -> ProjectConfig:
    """Locate the nearest tsconfig.json above ``start`` and read it.

    Returns permissive defaults when no config file exists. Raises
    ``ConfigError`` when a config file exists but cannot be read.
    """
    path = find_config_file(start)
    if path is None:
        return ProjectConfig()
    return read_config_file(path)


def read_config_file(path: str | Path) -> ProjectConfig:
    config_path = Path(os.path.abspath(path))
    options = _read_compiler_options(config_path, seen=set())
    defaults = ProjectConfig()
    return ProjectConfig(
        config_path=str(config_path),
        target=str(options.get("target", defaults.target)),
        module=str(options.get("module", defaults.module)),
        module_resolution=str(options.get("moduleResolution", defaults.module_resolution)),
        allow_js=bool(options.get("allowJs", defaults.allow_js)),
        strict=bool(options.get("strict", defaults.strict)),
        no_emit=bool(options.get("noEmit", defaults.no_emit)),
        base_url=options.get("baseUrl"),
        paths=options.get("paths", {}),
    )


def parse_jsonc(text: str):
    text = _COMMENTS.sub(lambda match: match.group(1) or "", text)
    text = _TRAILING_COMMAS.sub(lambda match: match.group(1) or "", text)
    return json.loads(text)


def _read_compiler_options(config_path: Path, seen: set[Path]) -> dict:
    if config_path in seen:
        raise ConfigError(f"Circular 'extends' chain at {config_path}")
    seen.add(config_path)

    try:
        data = parse_jsonc(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Cannot read {config_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Malformed {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Malformed {config_path}: top level is not an object")

    options: dict = {}
    parent = data.get("extends")
    if isinstance(parent, str) and parent.startswith("."):
        parent_path = Path(os.path.normpath(config_path.parent / parent))
        if parent_path.suffix != ".json":
            parent_path = parent_path.with_name(parent_path.name + ".json")
        options.update(_read_compiler_options(parent_path, seen))
    elif parent:
        logger.debug("Ignoring non-relative extends %r in %s", parent, config_path)

    compiler_options = data.get("compilerOptions", {})
    if compiler_options is None:
        compiler_options = {}
    if not isinstance(compiler_options, dict):
        raise ConfigError(f"Malformed {config_path}: compilerOptions is not an object")

    own = dict(compiler_options)
    if isinstance(own.get("baseUrl"), str):
        own["baseUrl"] = os.path.normpath(str(config_path.parent / own["baseUrl"]))
    if "paths" in own:
        alias_root = own.get("baseUrl") or options.get("baseUrl") or str(config_path.parent)
        own["paths"] = _absolute_paths(own["paths"], alias_root, config_path)
    options.update(own)
    return options


def _absolute_paths(paths, alias_root: str, config_path: Path) -> dict[str, tuple[str, ...]]:
    if not isinstance(paths, dict):
        raise ConfigError(f"Malformed {config_path}: paths is not an object")
    resolved: dict[str, tuple[str, ...]] = {}
    for pattern, targets in paths.items():
        if isinstance(targets, str):
            targets = [targets]
        if not isinstance(targets, list):
            raise ConfigError(f"Malformed {config_path}: paths[{pattern!r}] is not a list")
        resolved[pattern] = tuple(
            os.path.normpath(os.path.join(alias_root, str(target))) for target in targets
        )
    return resolved
