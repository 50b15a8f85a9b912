"""codebundle: collect project files and bundle them into context for LLMs.

This package resolves include/exclude rules (glob or regex) over a project
tree, optionally narrows the result by content search, and renders the
collected files as console text, JSON or Markdown.
"""

from codebundle.builder import FileContextBuilder
from codebundle.cli import main
from codebundle.file_operations import FileCollector, LocalFileSystem, collect_files
from codebundle.models import (
    CollectedFile,
    CollectorConfig,
    FileContext,
    IncludeDirSpec,
    Pattern,
    PatternError,
    PatternKind,
    SearchSpec,
)

__version__ = "0.1.0"
__all__ = [
    "main",
    "collect_files",
    "CollectedFile",
    "CollectorConfig",
    "FileCollector",
    "FileContext",
    "FileContextBuilder",
    "IncludeDirSpec",
    "LocalFileSystem",
    "Pattern",
    "PatternError",
    "PatternKind",
    "SearchSpec",
]
