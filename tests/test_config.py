from __future__ import annotations

import os
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from tsgraph.config import (
    ConfigError,
    ProjectConfig,
    find_config_file,
    load_project_config,
    parse_jsonc,
    read_config_file,
)


def test_defaults_are_permissive_without_config_file():
    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir) / "isolated"
        root.mkdir()
        config = load_project_config(root)

    if config.config_path is None:
        assert config == ProjectConfig()
    assert ProjectConfig().allow_js
    assert not ProjectConfig().strict
    assert ProjectConfig().no_emit


def test_parse_jsonc_strips_comments_and_trailing_commas():
    data = parse_jsonc(
        """{
  // line comment
  "url": "http://example.com/*not-a-comment*/",
  /* block
     comment */
  "list": [1, 2,],
}"""
    )

    assert data == {"url": "http://example.com/*not-a-comment*/", "list": [1, 2]}


def test_config_is_found_upwards_and_extends_parent():
    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "base.json").write_text(
            '{ "compilerOptions": { "strict": true, "target": "ES5", "allowJs": false } }',
            encoding="utf-8",
        )
        (root / "tsconfig.json").write_text(
            """{
  "extends": "./base",
  "compilerOptions": {
    "target": "ES2022",
    "baseUrl": "./src",
    "paths": { "@lib/*": ["lib/*"], "config": ["config/index.ts"] }
  }
}""",
            encoding="utf-8",
        )
        nested = root / "src" / "deep"
        nested.mkdir(parents=True)

        found = find_config_file(nested)
        config = load_project_config(nested)

    assert found == root / "tsconfig.json"
    assert config.config_path == str(root / "tsconfig.json")
    assert config.strict
    assert not config.allow_js
    assert config.target == "ES2022"
    assert config.base_url == os.path.normpath(str(root / "src"))
    assert config.paths["@lib/*"] == (os.path.normpath(str(root / "src" / "lib" / "*")),)
    assert config.paths["config"] == (os.path.normpath(str(root / "src" / "config" / "index.ts")),)


def test_malformed_config_raises_config_error():
    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "tsconfig.json").write_text('{ "compilerOptions": [] }', encoding="utf-8")

        with pytest.raises(ConfigError):
            load_project_config(root)


def test_circular_extends_is_rejected():
    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "a.json").write_text('{ "extends": "./b.json" }', encoding="utf-8")
        (root / "b.json").write_text('{ "extends": "./a.json" }', encoding="utf-8")

        with pytest.raises(ConfigError):
            read_config_file(root / "a.json")


@pytest.mark.parametrize("value", ['""', "0", "false", "[1]"])
def test_falsy_compiler_options_are_rejected(value):
    with TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "tsconfig.json"
        path.write_text('{ "compilerOptions": %s }' % value, encoding="utf-8")

        with pytest.raises(ConfigError):
            read_config_file(path)


def test_null_compiler_options_use_defaults():
    with TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "tsconfig.json"
        path.write_text('{ "compilerOptions": null }', encoding="utf-8")
        config = read_config_file(path)

    assert config.config_path == str(path)
    assert config.target == ProjectConfig().target


def test_malformed_config_becomes_analysis_warning():
    from tsgraph.analyzer import Analyzer

    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "tsconfig.json").write_text('{ "compilerOptions": [] }', encoding="utf-8")
        source = root / "a.ts"
        source.write_text("export function a() {}\n", encoding="utf-8")
        result = Analyzer(root=root).analyze([str(source)])

    assert result.files == (str(source),)
    assert any(w.startswith("Using default project options:") for w in result.warnings)
