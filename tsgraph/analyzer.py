"""Analysis entry point: per-file extraction in parallel, then one linking pass."""

from __future__ import annotations

import concurrent.futures
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .config import ConfigError, ProjectConfig, load_project_config
from .extract import FileAnalysis, extract_file
from .linker import link
from .parser import ParseError, SourceParser, is_javascript_file, is_source_file, is_typescript_file
from .result import AnalysisResult, aggregate


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisOptions:
    include_private: bool = False
    ts_only: bool = False
    js_only: bool = False

    def validate(self) -> str | None:
        if self.ts_only and self.js_only:
            return "ts_only and js_only cannot both be set: no file can match"
        return None

    def accepts(self, path: str) -> bool:
        if self.ts_only:
            return is_typescript_file(path)
        if self.js_only:
            return is_javascript_file(path)
        return is_source_file(path)


class Analyzer:
    """Analyze a set of TS/JS files into one ``AnalysisResult``.

    Files are parsed and extracted concurrently, each worker thread owning
    its own parser. Linking runs once every file has been collected. With a
    ``timeout`` (seconds, whole run) files still pending at the deadline are
    abandoned and the rest is linked as usual.
    """

    def __init__(
        self,
        root: str | Path | None = None,
        config: ProjectConfig | None = None,
        max_workers: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self.root = root
        self.config = config
        self.max_workers = max_workers
        self.timeout = timeout
        self._local = threading.local()
        self.reset()

    def reset(self) -> None:
        self._analyses: list[FileAnalysis] = []
        self._processed: set[str] = set()
        self._warnings: list[str] = []

    @property
    def processed_files(self) -> frozenset[str]:
        return frozenset(self._processed)

    def analyze(self, paths: Iterable[str], options: AnalysisOptions | None = None) -> AnalysisResult:
        self.reset()
        options = options or AnalysisOptions()
        problem = options.validate()
        if problem:
            logger.error("Rejected analysis options: %s", problem)
            return AnalysisResult.empty(error=problem)

        files = self._select(paths, options)
        if not files:
            logger.info("No source files to analyze")
            return AnalysisResult.empty()

        config = self._load_config(files)
        outcomes = self._extract_all(files, options.include_private)
        for path in files:
            outcome = outcomes.get(path)
            if isinstance(outcome, FileAnalysis):
                self._analyses.append(outcome)
                self._processed.add(path)
            elif outcome is None:
                self._warn(f"Abandoned {path}: analysis timed out")
            else:
                self._warn(outcome)

        linked = link(self._analyses, config)
        self._warnings.extend(linked.warnings)
        logger.info(
            "Analyzed %d of %d files: %d symbols, %d call relations",
            len(self._analyses),
            len(files),
            len(linked.symbols),
            len(linked.call_relations),
        )
        return aggregate(
            files=[analysis.path for analysis in self._analyses],
            symbols=linked.symbols,
            call_relations=linked.call_relations,
            import_relations=linked.import_relations,
            export_relations=linked.export_relations,
            catalogs=[analysis.patterns for analysis in self._analyses],
            warnings=self._warnings,
        )

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self._warnings.append(message)

    def _select(self, paths: Iterable[str], options: AnalysisOptions) -> list[str]:
        selected: list[str] = []
        seen: set[str] = set()
        for path in paths:
            absolute = os.path.normpath(os.path.abspath(path))
            if absolute in seen:
                continue
            seen.add(absolute)
            if options.accepts(absolute):
                selected.append(absolute)
            else:
                logger.debug("Skipping %s: not selected by options", absolute)
        return selected

    def _load_config(self, files: list[str]) -> ProjectConfig:
        if self.config is not None:
            return self.config
        start = self.root or os.path.commonpath(files)
        try:
            return load_project_config(start)
        except ConfigError as exc:
            self._warn(f"Using default project options: {exc}")
            return ProjectConfig()

    def _parser(self) -> SourceParser:
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = self._local.parser = SourceParser()
        return parser

    def _extract_one(self, path: str, include_private: bool) -> FileAnalysis | str:
        try:
            parsed = self._parser().parse_file(path)
        except OSError as exc:
            return f"Skipped unreadable file {path}: {exc.strerror or exc}"
        except ParseError as exc:
            return f"Skipped unparsable file {exc}"
        try:
            return extract_file(parsed, include_private=include_private)
        except Exception as exc:
            logger.debug("Extraction failed for %s", path, exc_info=True)
            return f"Skipped file {path}: extraction failed ({type(exc).__name__}: {exc})"

    def _extract_all(self, files: list[str], include_private: bool) -> dict[str, FileAnalysis | str]:
        results: dict[str, FileAnalysis | str] = {}
        executor = concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers)
        future_to_path = {
            executor.submit(self._extract_one, path, include_private): path for path in files
        }
        try:
            for future in concurrent.futures.as_completed(future_to_path, timeout=self.timeout):
                results[future_to_path[future]] = future.result()
        except concurrent.futures.TimeoutError:
            logger.warning("Analysis timed out after %ss", self.timeout)
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        # Files already running at the deadline still finish; keep them.
        for future, path in future_to_path.items():
            if path not in results and future.done() and not future.cancelled():
                results[path] = future.result()
        return results


def analyze(paths: Iterable[str], options: AnalysisOptions | None = None, **kwargs) -> AnalysisResult:
    return Analyzer(**kwargs).analyze(paths, options)
