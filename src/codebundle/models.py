"""Data models for codebundle."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_GLOB_INCLUDE = "**/*"
DEFAULT_REGEX_INCLUDE = ".*"


class PatternKind(Enum):
    """How a pattern string is interpreted."""

    GLOB = "glob"
    REGEX = "regex"


@dataclass(frozen=True)
class Pattern:
    """A pattern string tagged with its interpretation.

    Attributes:
        raw: The pattern as written in the configuration
        kind: Glob or regex
        flags: Default regex flags, used only for regex patterns
    """

    raw: str
    kind: PatternKind
    flags: str = ""

    @classmethod
    def from_string(cls, raw: str, use_regex: bool, flags: str = "") -> "Pattern":
        return cls(raw, PatternKind.REGEX if use_regex else PatternKind.GLOB, flags)


@dataclass(frozen=True)
class PatternError:
    """A regex that failed to compile.

    Returned in place of a compiled pattern so that callers can inspect the
    failure without the matcher raising.
    """

    pattern: str
    message: str


@dataclass
class IncludeDirSpec:
    """One configured root to scan.

    Attributes:
        path: Directory to scan, absolute or relative to the working directory
        include_patterns: A file is a candidate if it matches at least one
        exclude_patterns: Candidates matching any of these are dropped
        recursive: When False only direct children of path are considered
        use_regex: Overrides the collector-wide pattern mode when set
    """

    path: str
    include_patterns: list[str] = field(default_factory=list)
    exclude_patterns: list[str] = field(default_factory=list)
    recursive: bool = True
    use_regex: bool | None = None

    def resolve_use_regex(self, default: bool) -> bool:
        return default if self.use_regex is None else self.use_regex

    def effective_include_patterns(self, use_regex: bool) -> list[str]:
        if self.include_patterns:
            return list(self.include_patterns)
        return [DEFAULT_REGEX_INCLUDE if use_regex else DEFAULT_GLOB_INCLUDE]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IncludeDirSpec":
        include = data.get("include") or data.get("includePatterns") or []
        exclude = data.get("exclude") or data.get("excludePatterns") or []
        return cls(
            path=data["path"],
            include_patterns=list(include),
            exclude_patterns=list(exclude),
            recursive=bool(data.get("recursive", True)),
            use_regex=data.get("useRegex"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "path": self.path,
            "include": list(self.include_patterns),
            "recursive": self.recursive,
        }
        if self.exclude_patterns:
            data["exclude"] = list(self.exclude_patterns)
        if self.use_regex is not None:
            data["useRegex"] = self.use_regex
        return data


@dataclass
class SearchSpec:
    """Content filter applied to file bodies after path selection."""

    pattern: str
    is_regex: bool = False


@dataclass
class CollectorConfig:
    """Top-level input of a collection run.

    Attributes:
        include_dirs: Directory specs to scan
        include_files: Explicit paths or patterns outside any directory spec
        exclude_files: Patterns applied to the union of all collected paths
        use_regex: Default pattern mode when not overridden per directory
        search_in_files: Optional content filter
        name: Display name used by renderers
        show_contents: Renderers include file bodies
        show_meta: Renderers include tree, sizes and statistics
        list_only_files: Patterns for files listed without their contents
        include_hidden: Enumerate dot-files and dot-directories
        respect_gitignore: Exclude paths ignored by the project's .gitignore
        max_workers: Upper bound on concurrent file reads
        show_progress: Display a progress bar while reading files
    """

    include_dirs: list[IncludeDirSpec] = field(default_factory=list)
    include_files: list[str] = field(default_factory=list)
    exclude_files: list[str] = field(default_factory=list)
    use_regex: bool = False
    search_in_files: SearchSpec | None = None
    name: str = "Project Context"
    show_contents: bool = True
    show_meta: bool = True
    list_only_files: list[str] = field(default_factory=list)
    include_hidden: bool = False
    respect_gitignore: bool = False
    max_workers: int = 8
    show_progress: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CollectorConfig":
        """Build a config from the camelCase JSON wire format."""
        search = data.get("searchInFiles")
        return cls(
            include_dirs=[IncludeDirSpec.from_dict(d) for d in data.get("includeDirs") or []],
            include_files=list(data.get("includeFiles") or []),
            exclude_files=list(data.get("excludeFiles") or []),
            use_regex=bool(data.get("useRegex", False)),
            search_in_files=(
                SearchSpec(search["pattern"], bool(search.get("isRegex", False)))
                if search
                else None
            ),
            name=data.get("name", "Project Context"),
            show_contents=bool(data.get("showContents", True)),
            show_meta=bool(data.get("showMeta", True)),
            list_only_files=list(data.get("listOnlyFiles") or []),
            include_hidden=bool(data.get("includeHidden", False)),
            respect_gitignore=bool(data.get("respectGitignore", False)),
            max_workers=int(data.get("maxWorkers", 8)),
            show_progress=bool(data.get("showProgress", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "showContents": self.show_contents,
            "showMeta": self.show_meta,
            "includeDirs": [d.to_dict() for d in self.include_dirs],
            "includeFiles": list(self.include_files),
            "excludeFiles": list(self.exclude_files),
            "useRegex": self.use_regex,
        }
        if self.search_in_files:
            data["searchInFiles"] = {
                "pattern": self.search_in_files.pattern,
                "isRegex": self.search_in_files.is_regex,
            }
        if self.list_only_files:
            data["listOnlyFiles"] = list(self.list_only_files)
        if self.include_hidden:
            data["includeHidden"] = True
        if self.respect_gitignore:
            data["respectGitignore"] = True
        return data


@dataclass(frozen=True)
class CollectedFile:
    """One file produced by a collection run.

    Attributes:
        file_path: Path as discovered (relative or absolute like its directory spec)
        relative_path: Path relative to the working directory
        content: Full UTF-8 decoded text
        file_size: Size in bytes from stat
        line_count: Number of newline-delimited segments; an empty file has 1
        meta: Annotations attached by downstream scanners and reviewers
    """

    file_path: str
    relative_path: str
    content: str
    file_size: int
    line_count: int
    meta: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "filePath": self.file_path,
            "relativePath": self.relative_path,
            "content": self.content,
            "fileSize": self.file_size,
            "lineCount": self.line_count,
            "meta": dict(self.meta),
        }


@dataclass
class FileContext:
    """A configuration together with the files it produced."""

    config: CollectorConfig
    files: list[CollectedFile]

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_size(self) -> int:
        return sum(f.file_size for f in self.files)

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)
