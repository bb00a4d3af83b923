"""Structural call graph extraction for TypeScript and JavaScript."""

from .analyzer import AnalysisOptions, Analyzer, analyze
from .config import ConfigError, ProjectConfig, load_project_config
from .extract import extract_file
from .file_walker import iter_source_files
from .graph import build_graph
from .linker import link
from .parser import ParseError, SourceParser
from .patterns import detect_patterns
from .result import AnalysisResult
from .storage import load_graph, save_graph, save_result

__all__ = [
    "AnalysisOptions",
    "AnalysisResult",
    "Analyzer",
    "ConfigError",
    "ParseError",
    "ProjectConfig",
    "SourceParser",
    "analyze",
    "build_graph",
    "detect_patterns",
    "extract_file",
    "iter_source_files",
    "link",
    "load_graph",
    "load_project_config",
    "save_graph",
    "save_result",
]
