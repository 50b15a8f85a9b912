"""File system operations and the file collector."""

import logging
import os
import pathlib
import posixpath
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Protocol

import pathspec
from tqdm import tqdm

from codebundle.constants import ALWAYS_IGNORE_PATTERNS
from codebundle.content_search import matches_content
from codebundle.language_detection import get_list_only_type
from codebundle.models import CollectedFile, CollectorConfig, IncludeDirSpec, Pattern
from codebundle.pattern_matching import match_any, to_patterns

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileStat:
    size: int
    mtime: float


class FileSystem(Protocol):
    """What the collector needs from a file system."""

    def list_directory(self, path: str, recursive: bool, include_hidden: bool = False) -> list[str]:
        """Return the files under path, joined onto path with forward slashes.

        Raises:
            OSError: If path is missing or cannot be listed
        """
        ...

    def read_text(self, path: str) -> str: ...

    def stat(self, path: str) -> FileStat: ...


def to_posix(path: str) -> str:
    return path.replace(os.sep, "/")


def normalize_path(path: str) -> str:
    """Normalize a path to forward slashes without ``./`` segments.

    Examples:
        >>> normalize_path("./src/../src/a.ts")
        'src/a.ts'
    """
    return posixpath.normpath(to_posix(path))


def join_pattern(base: str, pattern: str) -> str:
    return posixpath.normpath(posixpath.join(normalize_path(base), to_posix(pattern)))


def has_glob_magic(pattern: str) -> bool:
    return "*" in pattern or "?" in pattern


class LocalFileSystem:
    """FileSystem backed by the real disk."""

    def list_directory(self, path: str, recursive: bool, include_hidden: bool = False) -> list[str]:
        if not os.path.isdir(path):
            raise FileNotFoundError(f"Directory not found: {path}")

        base = normalize_path(path)
        files = []

        def on_error(error: OSError) -> None:
            logger.warning(f"Could not list {error.filename}: {error}")

        for root, dirs, filenames in os.walk(path, topdown=True, onerror=on_error):
            # Prune hidden directories and stop descending when not recursive
            if not recursive:
                dirs.clear()
            elif not include_hidden:
                dirs[:] = [d for d in dirs if not d.startswith(".")]
            dirs.sort()

            rel_root = to_posix(os.path.relpath(root, path))
            for filename in sorted(filenames):
                if not include_hidden and filename.startswith("."):
                    continue
                rel = filename if rel_root == "." else f"{rel_root}/{filename}"
                files.append(rel if base == "." else f"{base}/{rel}")
        return files

    def read_text(self, path: str) -> str:
        with open(path, encoding="utf-8", errors="replace", newline="") as f:
            return f.read()

    def stat(self, path: str) -> FileStat:
        st = os.stat(path)
        return FileStat(size=st.st_size, mtime=st.st_mtime)


def find_project_root(start_dir: pathlib.Path) -> pathlib.Path:
    """Find the nearest parent directory containing .git or return start_dir.

    Args:
        start_dir: Starting directory for search

    Returns:
        Path to project root (directory containing .git) or start_dir if not found
    """
    current = start_dir.resolve()
    while True:
        if (current / ".git").is_dir():
            return current
        parent = current.parent
        if parent == current:
            logger.debug(f".git directory not found. Using {start_dir} as project root.")
            return start_dir.resolve()
        current = parent


def get_combined_spec(root_dir: pathlib.Path) -> pathspec.PathSpec:
    """Combines ALWAYS_IGNORE_PATTERNS with patterns from .gitignore files.

    Loads .gitignore from project root and also checks .git/info/exclude.

    Args:
        root_dir: Project root directory

    Returns:
        PathSpec object combining hardcoded patterns and .gitignore patterns
    """
    all_patterns = sorted(ALWAYS_IGNORE_PATTERNS)

    for ignore_path in (root_dir / ".gitignore", root_dir / ".git" / "info" / "exclude"):
        if not ignore_path.is_file():
            continue
        try:
            with open(ignore_path, encoding="utf-8", errors="ignore") as f:
                all_patterns.extend(f.read().splitlines())
        except OSError as e:
            logger.warning(f"Could not read {ignore_path}: {e}")

    return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, all_patterns)


class FileCollector:
    """Resolves a CollectorConfig into the final list of collected files.

    Each call to :meth:`collect_files` works on its own include/exclude
    sets, so one collector can be reused.
    """

    def __init__(self, config: CollectorConfig, fs: FileSystem | None = None):
        self.config = config
        self.fs = fs or LocalFileSystem()

    def collect_files(self) -> list[CollectedFile]:
        """Resolve the configuration into collected files.

        Paths are deduplicated by their cwd-relative form; the first
        discovered spelling is kept as ``file_path``. Excludes from any level
        win over includes from any route.

        Returns:
            Collected files in discovery order
        """
        cwd = os.getcwd()
        # cwd-relative path -> first discovered spelling, insertion-ordered
        included: dict[str, str] = {}
        excluded: set[str] = set()
        tree_cache: list[list[str]] = []

        def include(path: str) -> None:
            included.setdefault(self._relative(path, cwd), path)

        def working_tree() -> list[str]:
            if not tree_cache:
                try:
                    tree_cache.append(self.fs.list_directory(".", True, self.config.include_hidden))
                except OSError as e:
                    logger.warning(f"Could not list working directory: {e}")
                    tree_cache.append([])
            return tree_cache[0]

        for dir_spec in self.config.include_dirs:
            self._expand_dir(dir_spec, include)

        if self.config.include_files:
            self._expand_include_files(working_tree, include)

        # Directory excludes apply to files from every include route
        for dir_spec in self.config.include_dirs:
            if dir_spec.exclude_patterns:
                self._exclude_under_dir(dir_spec, included, excluded, cwd)

        if self.config.exclude_files:
            patterns = self._global_patterns(self.config.exclude_files)
            for key, path in included.items():
                if match_any(path, patterns) or match_any(key, patterns):
                    excluded.add(key)

        if self.config.respect_gitignore:
            self._exclude_gitignored(included, excluded, cwd)

        final = [path for key, path in included.items() if key not in excluded]
        logger.debug(
            f"Resolved {len(final)} files ({len(included)} included, {len(excluded)} excluded)"
        )
        return self._materialize(final, cwd)

    def _expand_dir(self, dir_spec: IncludeDirSpec, include: Callable[[str], None]) -> None:
        use_regex = dir_spec.resolve_use_regex(self.config.use_regex)
        try:
            candidates = self.fs.list_directory(
                dir_spec.path, dir_spec.recursive, self.config.include_hidden
            )
        except OSError as e:
            logger.warning(f"Skipping directory {dir_spec.path}: {e}")
            return

        includes = self._dir_patterns(
            dir_spec.path, dir_spec.effective_include_patterns(use_regex), use_regex
        )
        for path in candidates:
            if match_any(path, includes):
                include(path)

    def _exclude_under_dir(
        self,
        dir_spec: IncludeDirSpec,
        included: dict[str, str],
        excluded: set[str],
        cwd: str,
    ) -> None:
        """Apply a directory's exclude patterns to every included file below it.

        Each file is matched in the spelling the directory listing would give
        it, as well as its discovered and cwd-relative forms.
        """
        use_regex = dir_spec.resolve_use_regex(self.config.use_regex)
        patterns = self._dir_patterns(dir_spec.path, dir_spec.exclude_patterns, use_regex)
        base = normalize_path(dir_spec.path)
        root = os.path.join(cwd, dir_spec.path)

        for key, path in included.items():
            try:
                rel = to_posix(os.path.relpath(os.path.join(cwd, key), root))
            except ValueError:
                continue
            if rel == ".." or rel.startswith("../"):
                continue
            if not dir_spec.recursive and "/" in rel:
                continue
            as_listed = rel if base == "." else f"{base}/{rel}"
            if any(match_any(form, patterns) for form in (as_listed, path, key)):
                excluded.add(key)

    @staticmethod
    def _dir_patterns(base: str, raw_patterns: list[str], use_regex: bool) -> list[Pattern]:
        if use_regex:
            return to_patterns(raw_patterns, True)
        return to_patterns([join_pattern(base, p) for p in raw_patterns], False)

    def _global_patterns(self, raw_patterns: list[str]) -> list[Pattern]:
        if self.config.use_regex:
            return to_patterns(raw_patterns, True)
        return to_patterns([normalize_path(p) for p in raw_patterns], False)

    def _expand_include_files(
        self, working_tree: Callable[[], list[str]], include: Callable[[str], None]
    ) -> None:
        if self.config.use_regex:
            patterns = to_patterns(self.config.include_files, True)
            for path in working_tree():
                if match_any(path, patterns):
                    include(path)
            return

        globs = []
        for entry in self.config.include_files:
            if has_glob_magic(entry):
                globs.append(entry)
            else:
                include(normalize_path(entry))

        if globs:
            patterns = self._global_patterns(globs)
            for path in working_tree():
                if match_any(path, patterns):
                    include(path)

    def _exclude_gitignored(
        self, included: dict[str, str], excluded: set[str], cwd: str
    ) -> None:
        root = find_project_root(pathlib.Path(cwd))
        spec = get_combined_spec(root)
        for key in included:
            try:
                rel = pathlib.Path(cwd, key).resolve().relative_to(root)
            except (OSError, ValueError):
                continue
            if spec.match_file(rel.as_posix()):
                excluded.add(key)

    @staticmethod
    def _relative(path: str, cwd: str) -> str:
        return to_posix(os.path.relpath(os.path.join(cwd, path), cwd))

    def _materialize(self, paths: list[str], cwd: str) -> list[CollectedFile]:
        list_only = self._global_patterns(self.config.list_only_files)
        workers = max(1, self.config.max_workers)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = pool.map(lambda p: self._process_file(p, cwd, list_only), paths)
            with tqdm(
                total=len(paths),
                desc="Reading",
                unit="file",
                disable=not self.config.show_progress,
            ) as pbar:
                files = []
                for collected in results:
                    if collected is not None:
                        files.append(collected)
                    pbar.update(1)
        return files

    def _process_file(
        self, path: str, cwd: str, list_only: list[Pattern]
    ) -> CollectedFile | None:
        """Read, filter and measure a single file.

        Returns:
            CollectedFile, or None if the file fails the content filter or
            cannot be read
        """
        relative_path = self._relative(path, cwd)
        try:
            if list_only and (match_any(path, list_only) or match_any(relative_path, list_only)):
                return self._list_only_file(path, relative_path)

            content = self.fs.read_text(path)
            search = self.config.search_in_files
            if search and not matches_content(content, search.pattern, search.is_regex):
                return None
            stat = self.fs.stat(path)
        except OSError as e:
            logger.warning(f"Error reading file {path}: {e}")
            return None

        return CollectedFile(
            file_path=path,
            relative_path=relative_path,
            content=content,
            file_size=stat.size,
            line_count=len(content.split("\n")),
        )

    def _list_only_file(self, path: str, relative_path: str) -> CollectedFile:
        stat = self.fs.stat(path)
        file_type = get_list_only_type(path)
        name = posixpath.basename(path)
        if file_type == "unknown":
            content = f"[File: {name} (list-only)]"
        else:
            content = f"[{file_type.capitalize()} file: {name}]"
        return CollectedFile(
            file_path=path,
            relative_path=relative_path,
            content=content,
            file_size=stat.size,
            line_count=1,
            meta={"is_list_only": True, "type": file_type, "last_modified": stat.mtime},
        )


def collect_files(config: CollectorConfig, fs: FileSystem | None = None) -> list[CollectedFile]:
    """Collect files for a configuration with a fresh FileCollector."""
    return FileCollector(config, fs).collect_files()
