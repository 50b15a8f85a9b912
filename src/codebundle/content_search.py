"""Content search over collected files."""

import logging
import re
from dataclasses import dataclass, field, replace

from codebundle.models import CollectedFile
from codebundle.pattern_matching import CompiledRegex, compile_regex, test_regex

logger = logging.getLogger(__name__)


def matches_content(content: str, pattern: str, is_regex: bool, flags: str = "gm") -> bool:
    """Check whether file content satisfies a search condition.

    Args:
        content: File body
        pattern: Substring or regex; empty means "match everything"
        is_regex: Interpret pattern as a regex instead of a plain substring
        flags: Default regex flags (multiline so ``^``/``$`` work per line)

    Returns:
        True if the content matches
    """
    if not pattern:
        return True
    if is_regex:
        return test_regex(content, pattern, flags)
    return pattern in content


@dataclass
class SearchOptions:
    """Options for the line-oriented search."""

    pattern: str
    is_regex: bool = False
    case_sensitive: bool = False
    whole_word: bool = False
    max_results: int | None = None
    context_lines: int = 0


@dataclass
class SearchMatch:
    """One hit on one line. Line numbers are 1-based."""

    line: int
    content: str
    match_index: int
    match_length: int
    context_content: str | None = None
    context_start_line: int | None = None
    context_end_line: int | None = None
    before_context: str | None = None
    after_context: str | None = None


@dataclass
class FileSearchResult:
    file: CollectedFile
    matches: list[SearchMatch] = field(default_factory=list)

    @property
    def match_count(self) -> int:
        return len(self.matches)


def build_search_regex(options: SearchOptions) -> CompiledRegex | None:
    flags = "g" if options.case_sensitive else "gi"
    if options.is_regex:
        return compile_regex(options.pattern, flags)
    escaped = re.escape(options.pattern)
    if options.whole_word:
        escaped = rf"\b{escaped}\b"
    return compile_regex(f"{escaped}:{flags}")


def search_in_file(file: CollectedFile, options: SearchOptions) -> FileSearchResult:
    """Find every match of the search pattern in a file, line by line."""
    regex = build_search_regex(options)
    if regex is None:
        logger.warning(f"Invalid search pattern: {options.pattern}")
        return FileSearchResult(file)

    matches = []
    for line_number, line in enumerate(file.content.split("\n"), start=1):
        for m in regex.iter_matches(line):
            matches.append(SearchMatch(line_number, line, m.start(), m.end() - m.start()))
    return FileSearchResult(file, matches)


def search_in_files(files: list[CollectedFile], options: SearchOptions) -> list[FileSearchResult]:
    results = [r for r in (search_in_file(f, options) for f in files) if r.match_count > 0]
    if options.max_results and len(results) > options.max_results:
        return results[: options.max_results]
    return results


def add_context_lines(result: FileSearchResult, context_lines: int = 2) -> FileSearchResult:
    """Return a copy of result with surrounding lines attached to every match."""
    if context_lines <= 0:
        return result

    lines = result.file.content.split("\n")
    with_context = []
    for match in result.matches:
        index = match.line - 1
        start = max(0, index - context_lines)
        end = min(len(lines) - 1, index + context_lines)
        with_context.append(
            replace(
                match,
                context_content="\n".join(lines[start : end + 1]),
                context_start_line=start + 1,
                context_end_line=end + 1,
                before_context="\n".join(lines[start:index]),
                after_context="\n".join(lines[index + 1 : end + 1]),
            )
        )
    return FileSearchResult(result.file, with_context)


def format_results(
    results: list[FileSearchResult],
    show_file_path: bool = True,
    highlight_matches: bool = True,
) -> str:
    """Render search results as plain text."""
    output = ""
    for result in results:
        if show_file_path:
            header = f"File: {result.file.file_path} ({result.match_count} matches)"
            output += f"\n{header}\n"
            output += "=" * (len(result.file.file_path) + 10) + "\n"

        for match in result.matches:
            if match.context_content is not None:
                output += f"Lines {match.context_start_line}-{match.context_end_line}:\n"
                if match.before_context:
                    output += match.before_context + "\n"
                if highlight_matches:
                    end = match.match_index + match.match_length
                    before = match.content[: match.match_index]
                    hit = match.content[match.match_index : end]
                    after = match.content[end:]
                    output += f"{before}>>>{hit}<<<{after}\n"
                    output += (
                        f"Line {match.line}: "
                        + " " * match.match_index
                        + "^" * match.match_length
                        + "\n"
                    )
                else:
                    output += f"Line {match.line}: {match.content}\n"
                if match.after_context:
                    output += match.after_context + "\n"
            else:
                output += f"Line {match.line}: {match.content}\n"
                if highlight_matches:
                    prefix = len(f"Line {match.line}: ")
                    output += " " * (match.match_index + prefix) + "^" * match.match_length + "\n"
            output += "\n"
    return output


def search(
    files: list[CollectedFile],
    options: SearchOptions,
    show_file_path: bool = True,
    highlight_matches: bool = True,
) -> str:
    results = search_in_files(files, options)
    if options.context_lines > 0:
        results = [add_context_lines(r, options.context_lines) for r in results]
    return format_results(results, show_file_path, highlight_matches)


def search_as_dicts(files: list[CollectedFile], options: SearchOptions) -> list[dict]:
    """Search results in a JSON-serializable shape."""
    results = search_in_files(files, options)
    if options.context_lines > 0:
        results = [add_context_lines(r, options.context_lines) for r in results]
    return [
        {
            "filePath": r.file.file_path,
            "matchCount": r.match_count,
            "matches": [
                {
                    "line": m.line,
                    "content": m.content,
                    "matchIndex": m.match_index,
                    "matchLength": m.match_length,
                    **(
                        {
                            "contextStartLine": m.context_start_line,
                            "contextEndLine": m.context_end_line,
                            "contextContent": m.context_content,
                        }
                        if m.context_content is not None
                        else {}
                    ),
                }
                for m in r.matches
            ],
        }
        for r in results
    ]


def search_for_matching_files(files: list[CollectedFile], options: SearchOptions) -> list[str]:
    return [r.file.file_path for r in search_in_files(files, options)]


def count_matches(files: list[CollectedFile], options: SearchOptions) -> int:
    return sum(r.match_count for r in search_in_files(files, options))
