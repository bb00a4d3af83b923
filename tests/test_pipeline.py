from __future__ import annotations

import json
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from tsgraph.pipeline import build_graph_from_root, main


def _write_project(root: Path) -> None:
    (root / "src").mkdir()
    (root / "src" / "mod.ts").write_text(
        """
export class Foo {
  method() {
    return 1;
  }
}

export function bar() {
  const foo = new Foo();
  return foo.method();
}
""",
        encoding="utf-8",
    )
    (root / "src" / "legacy.js").write_text("module.exports = function () {};\n", encoding="utf-8")


def test_build_graph_from_root_saves_json():
    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_project(root)

        out_path = root / "graph.json"
        graph = build_graph_from_root(root, out_path)

        assert out_path.exists()
        assert graph.number_of_nodes() > 0
        assert graph.number_of_edges() > 0


def test_main_writes_graph_and_result(capsys):
    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _write_project(root)
        graph_path = root / "graph.json"
        result_path = root / "result.json"

        code = main(
            [
                "--root",
                str(root),
                "--output",
                str(graph_path),
                "--result",
                str(result_path),
                "--ts-only",
            ]
        )
        data = json.loads(result_path.read_text(encoding="utf-8"))

        assert code == 0
        assert graph_path.exists()

    assert data["metadata"]["totalFiles"] == 1
    assert data["files"][0].endswith("mod.ts")
    nodes, edges = capsys.readouterr().out.split()
    assert int(nodes) > 0


def test_main_rejects_conflicting_dialects():
    with pytest.raises(SystemExit):
        main(["--ts-only", "--js-only"])
