"""Glob and regex pattern matching for paths and text.

Regex patterns may carry trailing flags in the form ``pattern:flags``
(for example ``foo.*:gi``). Flags follow the usual one-letter convention:

- ``i``: case-insensitive
- ``m``: ``^`` and ``$`` match at line boundaries
- ``s``: ``.`` also matches newlines
- ``u``: accepted, Python string patterns are always Unicode-aware
- ``g``: find every match (no effect on a yes/no test)
- ``y``: sticky, a match must start exactly at the scan position

A malformed regex never raises out of this module: it is reported as a
:class:`~codebundle.models.PatternError` or logged and treated as "no match".
"""

import functools
import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from codebundle.models import Pattern, PatternError, PatternKind

logger = logging.getLogger(__name__)

VALID_FLAGS_RE = re.compile(r"^[gimsuy]+$")

_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}


@dataclass(frozen=True)
class CompiledRegex:
    """A compiled pattern together with the flags it was built from."""

    regex: re.Pattern
    flags: str

    @property
    def sticky(self) -> bool:
        return "y" in self.flags

    def _match_at(self, text: str, pos: int) -> re.Match | None:
        if self.sticky:
            return self.regex.match(text, pos)
        return self.regex.search(text, pos)

    def test(self, text: str) -> bool:
        return self._match_at(text, 0) is not None

    def iter_matches(self, text: str) -> Iterator[re.Match]:
        """Yield successive matches, stepping past empty ones."""
        pos = 0
        while pos <= len(text):
            match = self._match_at(text, pos)
            if match is None:
                return
            yield match
            pos = match.end() if match.end() > match.start() else match.end() + 1


@dataclass(frozen=True)
class Match:
    """A single regex hit inside a text."""

    match_text: str
    index: int
    length: int


def parse_pattern_with_flags(pattern: str, default_flags: str = "") -> tuple[str, str]:
    """Split a ``pattern:flags`` string into its core pattern and flags.

    Args:
        pattern: Pattern string, optionally suffixed with ``:flags``
        default_flags: Flags used when no valid suffix is present

    Returns:
        Tuple of (core pattern, flags)

    Examples:
        >>> parse_pattern_with_flags("foo:gi")
        ('foo', 'gi')
        >>> parse_pattern_with_flags("a:b:gim")
        ('a:b', 'gim')
        >>> parse_pattern_with_flags("not:aflag")
        ('not:aflag', '')
    """
    parts = pattern.split(":")
    if len(parts) > 1 and VALID_FLAGS_RE.match(parts[-1]):
        return ":".join(parts[:-1]), parts[-1]
    return pattern, default_flags


def _flags_to_re(flags: str) -> int:
    if len(set(flags)) != len(flags):
        raise re.error(f"duplicate flags in {flags!r}")
    value = 0
    for flag in flags:
        if flag not in "gimsuy":
            raise re.error(f"invalid flag {flag!r}")
        value |= _FLAG_MAP.get(flag, 0)
    return value


@functools.lru_cache(maxsize=1024)
def _compile_core(core: str, flags: str) -> CompiledRegex | PatternError:
    try:
        return CompiledRegex(re.compile(core, _flags_to_re(flags)), flags)
    except re.error as e:
        return PatternError(core, str(e))


def try_compile_regex(pattern: str, default_flags: str = "") -> CompiledRegex | PatternError:
    """Compile a pattern, returning a PatternError instead of raising."""
    result = _compile_core(*parse_pattern_with_flags(pattern, default_flags))
    if isinstance(result, PatternError):
        return PatternError(pattern, result.message)
    return result


@functools.lru_cache(maxsize=1024)
def compile_regex(pattern: str, default_flags: str = "") -> CompiledRegex | None:
    """Compile a pattern or return None (with a warning) if it is malformed."""
    result = try_compile_regex(pattern, default_flags)
    if isinstance(result, PatternError):
        logger.warning(f"Invalid regex pattern {result.pattern!r}: {result.message}")
        return None
    return result


def test_regex(text: str, pattern: str, default_flags: str = "") -> bool:
    """Test whether a regex pattern matches anywhere in text.

    Args:
        text: Text to search
        pattern: Regex, optionally with a trailing ``:flags`` suffix
        default_flags: Flags used when the pattern carries none

    Returns:
        True on a match; False when there is none or the pattern is malformed
    """
    regex = compile_regex(pattern, default_flags)
    return regex.test(text) if regex else False


def find_all_matches(text: str, pattern: str, default_flags: str = "g") -> list[Match]:
    """Find every match of pattern in text.

    The global flag is always added; an explicit ``:flags`` suffix on the
    pattern still gets it.
    """
    core, flags = parse_pattern_with_flags(pattern, default_flags)
    if "g" not in flags:
        flags += "g"
    regex = _compile_core(core, flags)
    if isinstance(regex, PatternError):
        logger.warning(f"Invalid regex pattern {pattern!r}: {regex.message}")
        return []
    return [Match(m.group(0), m.start(), m.end() - m.start()) for m in regex.iter_matches(text)]


def glob_to_regex(pattern: str) -> str:
    """Translate a glob into an anchored regex source.

    ``**/`` matches zero or more whole directories, a bare ``**`` matches any
    run of characters, ``*`` any run without ``/`` and ``?`` one character.
    Everything else is matched literally.
    """
    parts = []
    i, n = 0, len(pattern)
    while i < n:
        if pattern.startswith("**", i):
            i += 2
            if pattern.startswith("/", i):
                parts.append("(?:.*/)?")
                i += 1
            else:
                parts.append(".*")
            continue
        char = pattern[i]
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
        i += 1
    return r"\A" + "".join(parts) + r"\Z"


@functools.lru_cache(maxsize=1024)
def _compile_glob(pattern: str) -> re.Pattern:
    return re.compile(glob_to_regex(pattern), re.DOTALL)


def match_glob(path: str, pattern: str) -> bool:
    """Match a whole path against a glob.

    Args:
        path: Forward-slash path
        pattern: Glob using ``*``, ``**`` and ``?``

    Returns:
        True if the glob matches the entire path

    Examples:
        >>> match_glob("a/b/c.js", "a/**/*.js")
        True
        >>> match_glob("a/b/c.js", "a/*.js")
        False
    """
    return _compile_glob(pattern).match(path) is not None


def match_any_glob(path: str, patterns: Iterable[str]) -> bool:
    """True if any of the globs matches path."""
    return any(match_glob(path, p) for p in patterns)


def match_any_regex(path: str, patterns: Iterable[str], default_flags: str = "") -> bool:
    """True if any of the regexes matches path. Malformed ones never match."""
    return any(test_regex(path, p, default_flags) for p in patterns)


def _match_glob_pattern(path: str, pattern: Pattern) -> bool:
    return match_glob(path, pattern.raw)


def _match_regex_pattern(path: str, pattern: Pattern) -> bool:
    return test_regex(path, pattern.raw, pattern.flags)


_MATCHERS = {
    PatternKind.GLOB: _match_glob_pattern,
    PatternKind.REGEX: _match_regex_pattern,
}


def to_patterns(raw_patterns: Iterable[str], use_regex: bool) -> list[Pattern]:
    """Tag raw pattern strings as globs or regexes."""
    return [Pattern.from_string(raw, use_regex) for raw in raw_patterns]


def match_pattern(path: str, pattern: Pattern) -> bool:
    """Match path against a tagged pattern.

    Args:
        path: Forward-slash path
        pattern: Glob or regex pattern; its kind selects the matcher

    Returns:
        True if the pattern matches
    """
    return _MATCHERS[pattern.kind](path, pattern)


def match_any(path: str, patterns: Iterable[Pattern]) -> bool:
    return any(match_pattern(path, p) for p in patterns)
