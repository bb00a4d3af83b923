from __future__ import annotations

from pathlib import Path
from tempfile import TemporaryDirectory

from tsgraph.file_walker import iter_source_files


def test_iter_source_files_filters_and_sorts():
    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        (root / "b.ts").write_text("export {}", encoding="utf-8")
        (root / "a.jsx").write_text("export {}", encoding="utf-8")
        (root / "types.d.ts").write_text("declare const x: number;", encoding="utf-8")
        (root / "notes.txt").write_text("nope", encoding="utf-8")
        sub = root / "sub"
        sub.mkdir()
        (sub / "c.mjs").write_text("export {}", encoding="utf-8")
        deps = root / "node_modules" / "lib"
        deps.mkdir(parents=True)
        (deps / "index.js").write_text("module.exports = {}", encoding="utf-8")

        matches = iter_source_files(root)
        relative = [str(Path(path).relative_to(root)) for path in matches]

    assert relative == sorted(relative)
    assert set(relative) == {"a.jsx", "b.ts", str(Path("sub") / "c.mjs")}


def test_iter_source_files_custom_excludes():
    with TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        generated = root / "generated"
        generated.mkdir()
        (generated / "x.ts").write_text("export {}", encoding="utf-8")
        (root / "y.ts").write_text("export {}", encoding="utf-8")

        matches = iter_source_files(root, excludes={"generated"})

    assert [Path(path).name for path in matches] == ["y.ts"]
