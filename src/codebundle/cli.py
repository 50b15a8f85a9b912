"""Command-line interface for codebundle."""

import argparse
import json
import logging
import pathlib
import sys

from codebundle.builder import FileContextBuilder
from codebundle.config import ConfigError, load_config
from codebundle.content_search import (
    SearchOptions,
    count_matches,
    search,
    search_as_dicts,
    search_for_matching_files,
)
from codebundle.file_operations import FileCollector
from codebundle.models import CollectorConfig, IncludeDirSpec, SearchSpec
from codebundle.output_generators import MarkdownRenderer, default_registry, format_size
from codebundle.security import SensitiveDataScanner


def parse_dir_arg(value: str, use_regex: bool) -> IncludeDirSpec:
    """Parse ``path[:pattern1,pattern2]`` into a directory spec."""
    path, _, patterns = value.partition(":")
    return IncludeDirSpec(
        path=path,
        include_patterns=patterns.split(",") if patterns else [],
        recursive=True,
        use_regex=use_regex,
    )


def split_list_args(values: list[str] | None) -> list[str]:
    """Flatten repeated and comma-separated option values."""
    result = []
    for value in values or []:
        result.extend(v.strip() for v in value.split(",") if v.strip())
    return result


def filter_by_extension(files, extensions: list[str]):
    """Keep only files whose extension is in extensions (with or without the dot)."""
    wanted = {e.lstrip(".") for e in extensions}
    return [f for f in files if pathlib.PurePosixPath(f.file_path).suffix.lstrip(".") in wanted]


def config_from_args(args: argparse.Namespace) -> CollectorConfig:
    """Build a CollectorConfig from a config file or from selection flags.

    Without any -d or -i the current directory is collected.

    Raises:
        ConfigError: If --config names a missing or malformed file
    """
    if args.config:
        return load_config(args.config)

    config = CollectorConfig(
        include_dirs=[parse_dir_arg(d, args.regex) for d in args.dir or []],
        include_files=list(args.include or []),
        exclude_files=list(args.exclude or []),
        use_regex=args.regex,
        include_hidden=args.hidden,
        respect_gitignore=args.gitignore,
    )
    if not config.include_dirs and not config.include_files:
        config.include_dirs = [parse_dir_arg(".", args.regex)]
    return config


def add_selection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-d",
        "--dir",
        action="append",
        help="Directory to include, optionally with patterns: path[:pat1,pat2].",
    )
    parser.add_argument("-i", "--include", action="append", help="File path or pattern to include.")
    parser.add_argument("-e", "--exclude", action="append", help="File pattern to exclude.")
    parser.add_argument(
        "-r", "--regex", action="store_true", help="Interpret patterns as regular expressions."
    )
    parser.add_argument("--ext", action="append", help="Only keep these extensions (e.g. py,md).")
    parser.add_argument("--hidden", action="store_true", help="Include dot-files and dot-directories.")
    parser.add_argument(
        "--gitignore", action="store_true", help="Skip files ignored by the project's .gitignore."
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show detailed processing information."
    )


def run_build(args: argparse.Namespace) -> int:
    """Handle `codebundle build`: collect, optionally scan, and render.

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit status
    """
    config = config_from_args(args)
    if not args.config:
        config.name = args.name
        config.show_contents = not args.no_contents
        config.show_meta = not args.no_meta
        if args.search:
            config.search_in_files = SearchSpec(args.search, args.search_regex)
        config.list_only_files = list(args.list_only or [])
    config.show_progress = args.progress

    registry = default_registry()
    registry.register(
        MarkdownRenderer(
            include_metadata_table=not args.no_metadata_table, include_hash=args.include_hash
        )
    )
    builder = FileContextBuilder(
        config,
        registry=registry,
        scanner=SensitiveDataScanner() if args.scan else None,
    )

    print("📑 Collecting files...", file=sys.stderr)
    context = builder.build()
    extensions = split_list_args(args.ext)
    if extensions:
        context.files = filter_by_extension(context.files, extensions)
        print(
            f"✓ Filtered to {len(context.files)} files with extensions: {', '.join(extensions)}",
            file=sys.stderr,
        )
    print(f"✓ Found {context.total_files} files", file=sys.stderr)

    output = registry.get(args.format).render(context)

    if args.output:
        output_path = pathlib.Path(args.output).resolve()
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(output, encoding="utf-8")
        except OSError as e:
            print(f"❌ Error: Could not write to {output_path}: {e}", file=sys.stderr)
            return 1
        print(f"📊 Total lines: {context.total_lines:,}", file=sys.stderr)
        print(f"💾 Total size: {format_size(context.total_size)}", file=sys.stderr)
        print(f"📄 Output: {output_path}", file=sys.stderr)
    else:
        print(output)
    return 0


def run_search(args: argparse.Namespace) -> int:
    """Handle `codebundle search`: collect files and report content matches.

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit status
    """
    config = config_from_args(args)
    files = FileCollector(config).collect_files()
    extensions = split_list_args(args.ext)
    if extensions:
        files = filter_by_extension(files, extensions)

    options = SearchOptions(
        pattern=args.pattern,
        is_regex=args.regex,
        case_sensitive=args.case_sensitive,
        whole_word=args.whole_word,
        max_results=args.max_results,
        context_lines=args.context,
    )

    if args.format == "json":
        output = json.dumps(search_as_dicts(files, options), indent=2)
    elif args.format == "files-only":
        output = "\n".join(search_for_matching_files(files, options))
    elif args.format == "count":
        output = f"Found {count_matches(files, options)} matches"
    else:
        output = search(files, options, highlight_matches=not args.no_highlight)

    if args.output:
        pathlib.Path(args.output).write_text(output, encoding="utf-8")
        print(f"📄 Output: {pathlib.Path(args.output).resolve()}", file=sys.stderr)
    else:
        print(output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codebundle",
        description="Package project files into structured context for LLMs.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser(
        "build",
        help="Build context from project files.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    build.add_argument("-c", "--config", help="Path to a JSON/JSON5 configuration file.")
    build.add_argument("-o", "--output", help="Write output to this file instead of stdout.")
    build.add_argument(
        "-f", "--format", default="console", choices=["console", "json", "markdown"]
    )
    build.add_argument("-n", "--name", default="Project Context", help="Context name.")
    build.add_argument("--no-contents", action="store_true", help="Don't show file contents.")
    build.add_argument("--no-meta", action="store_true", help="Don't show metadata.")
    build.add_argument("--search", help="Only include files containing this pattern.")
    build.add_argument(
        "--search-regex", action="store_true", help="Treat --search as a regular expression."
    )
    build.add_argument(
        "--list-only", action="append", help="Pattern for files listed without their contents."
    )
    build.add_argument("--scan", action="store_true", help="Flag potential secrets in files.")
    build.add_argument(
        "--no-metadata-table",
        action="store_true",
        help="Skip the metadata table in markdown output.",
    )
    build.add_argument(
        "--include-hash",
        action="store_true",
        help="Include SHA-256 hash for each file in markdown output.",
    )
    build.add_argument("--progress", action="store_true", help="Show a progress bar.")
    add_selection_arguments(build)
    build.set_defaults(handler=run_build)

    search_parser = subparsers.add_parser(
        "search",
        help="Search for content within files.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    search_parser.add_argument("pattern", help="Search pattern.")
    search_parser.add_argument("-c", "--config", help="Path to a JSON/JSON5 configuration file.")
    search_parser.add_argument("-o", "--output", help="Write output to this file.")
    search_parser.add_argument(
        "-f", "--format", default="text", choices=["text", "json", "files-only", "count"]
    )
    search_parser.add_argument("--case-sensitive", action="store_true")
    search_parser.add_argument("-w", "--whole-word", action="store_true")
    search_parser.add_argument("--context", type=int, default=2, help="Context lines.")
    search_parser.add_argument("--max-results", type=int, default=100)
    search_parser.add_argument("--no-highlight", action="store_true")
    add_selection_arguments(search_parser)
    search_parser.set_defaults(handler=run_search)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the codebundle CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        return args.handler(args)
    except ConfigError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
