"""End-to-end pipeline for building a graph from a TS/JS project."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .analyzer import AnalysisOptions, Analyzer
from .file_walker import iter_source_files
from .storage import save_graph, save_result


def analyze_root(
    root: str | Path,
    options: AnalysisOptions | None = None,
    max_files: int | None = None,
    max_workers: int | None = None,
    timeout: float | None = None,
):
    root_path = Path(root)
    files = iter_source_files(root_path)
    if max_files is not None:
        files = files[:max_files]
    return Analyzer(root=root_path, max_workers=max_workers, timeout=timeout).analyze(files, options)


def build_graph_from_root(
    root: str | Path,
    output_path: str | Path | None = None,
    max_files: int | None = None,
    options: AnalysisOptions | None = None,
) -> object:
    result = analyze_root(root, options=options, max_files=max_files)
    graph = result.to_graph()

    if output_path:
        save_graph(graph, output_path)

    return graph


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Build a call graph from a TypeScript/JavaScript project")
    parser.add_argument("--root", default=".", help="Root directory of the project")
    parser.add_argument("--output", default="tsgraph.json", help="Output JSON path for the graph")
    parser.add_argument("--result", help="Also write the full analysis result as JSON")
    parser.add_argument(
        "--max-files",
        type=int,
        default=None,
        help="Limit number of files analyzed (for quick checks)",
    )
    parser.add_argument("--workers", type=int, default=None, help="Parallel file workers")
    parser.add_argument("--timeout", type=float, default=None, help="Whole-run timeout in seconds")
    parser.add_argument("--include-private", action="store_true", help="Keep private class members")
    dialect = parser.add_mutually_exclusive_group()
    dialect.add_argument("--ts-only", action="store_true", help="Analyze TypeScript files only")
    dialect.add_argument("--js-only", action="store_true", help="Analyze JavaScript files only")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    options = AnalysisOptions(
        include_private=args.include_private,
        ts_only=args.ts_only,
        js_only=args.js_only,
    )
    result = analyze_root(
        args.root,
        options=options,
        max_files=args.max_files,
        max_workers=args.workers,
        timeout=args.timeout,
    )
    if result.error:
        logging.getLogger(__name__).error(result.error)
        return 2

    graph = result.to_graph()
    save_graph(graph, args.output)
    if args.result:
        save_result(result, args.result)
    print(graph.number_of_nodes(), graph.number_of_edges())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
