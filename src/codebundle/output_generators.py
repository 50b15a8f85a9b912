"""Renderers that turn a FileContext into console, JSON or Markdown text."""

import dataclasses
import hashlib
import json
import re
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from codebundle.language_detection import get_file_category, get_language_from_path
from codebundle.models import CollectedFile, FileContext


class Renderer(Protocol):
    id: str

    def render(self, context: FileContext) -> str: ...


def estimate_tokens(files: list[CollectedFile]) -> int:
    """Rough token estimate: one token per four characters."""
    return round(sum(len(f.content) for f in files) / 4)


def generate_gfm_anchor(heading_text: str) -> str:
    """Generate a GitHub-Flavored Markdown anchor from heading text.

    Args:
        heading_text: The heading text (without # prefix)

    Returns:
        Anchor slug matching GFM behavior

    Examples:
        >>> generate_gfm_anchor("File: src/main.py")
        'file-srcmainpy'
    """
    # Remove backticks and lowercase
    slug = heading_text.replace("`", "").lower()
    # Replace spaces and special chars with hyphens
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_]+", "-", slug)
    # Remove leading/trailing hyphens
    slug = slug.strip("-")
    return slug


def format_size(size_bytes: float) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string like "1.5 MB"
    """
    for unit in ["B", "KB", "MB", "GB"]:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} TB"


@dataclass
class TreeNode:
    name: str
    children: list["TreeNode"] = field(default_factory=list)
    file: CollectedFile | None = None


def build_tree(files: list[CollectedFile]) -> TreeNode:
    """Arrange files into a directory tree keyed by their relative paths."""
    root = TreeNode(".")
    for file in files:
        parts = (file.relative_path or file.file_path).split("/")
        node = root
        for i, part in enumerate(parts):
            child = next((c for c in node.children if c.name == part), None)
            if child is None:
                child = TreeNode(part, file=file if i == len(parts) - 1 else None)
                node.children.append(child)
            node = child
    return root


def tree_lines(node: TreeNode, prefix: str = "") -> list[str]:
    lines = []
    for index, child in enumerate(node.children):
        is_last = index == len(node.children) - 1
        lines.append(prefix + ("└── " if is_last else "├── ") + child.name)
        lines.extend(tree_lines(child, prefix + ("    " if is_last else "│   ")))
    return lines


class ConsoleRenderer:
    """Plain-text output: directory tree, file bodies and a summary."""

    id = "console"

    def render(self, context: FileContext) -> str:
        config = context.config
        files = context.files
        output = ""

        if config.show_meta:
            output += "=== Directory Tree ===\n"
            output += ".\n"
            output += "".join(line + "\n" for line in tree_lines(build_tree(files)))
            output += "\n"

        if config.show_contents:
            for file in files:
                if config.show_meta:
                    output += (
                        f"--- File: {file.file_path} "
                        f"(Size: {file.file_size} bytes, {file.line_count} lines) ---\n"
                    )
                output += file.content + "\n"
                if config.show_meta:
                    output += "\n"

        if config.show_meta:
            output += "=== Summary ===\n"
            output += "\nIncluded Files:\n"
            for file in files:
                output += f"  {file.file_path} - {file.file_size} bytes, {file.line_count} lines\n"

            output += "\nStatistics:\n"
            output += f"  Total files: {context.total_files}\n"
            output += f"  Total lines: {context.total_lines}\n"
            output += f"  Total size: {context.total_size} bytes\n"
            output += f"  Estimated tokens: {estimate_tokens(files)}\n"

        return output


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value):
        return dataclasses.asdict(value)
    if isinstance(value, Enum):
        return value.value
    return str(value)


class JsonRenderer:
    """JSON document with the context and summary statistics."""

    id = "json"

    def render_to_object(self, context: FileContext) -> dict[str, Any]:
        return {
            "fileContext": {
                "config": context.config.to_dict(),
                "files": [f.to_dict() for f in context.files],
            },
            "summary": {
                "includedFiles": [
                    {
                        "filePath": f.file_path,
                        "fileSize": f.file_size,
                        "lineCount": f.line_count,
                    }
                    for f in context.files
                ],
                "statistics": {
                    "totalFiles": context.total_files,
                    "totalLines": context.total_lines,
                    "totalSize": context.total_size,
                    "estimatedTokens": estimate_tokens(context.files),
                },
            },
        }

    def render(self, context: FileContext) -> str:
        return json.dumps(self.render_to_object(context), indent=2, default=_json_default)


def generate_metadata_table(files: list[CollectedFile]) -> str:
    """Generate a markdown table with file metadata.

    Args:
        files: Collected files

    Returns:
        Markdown-formatted table as a string
    """
    table = "| File | Size | Lines | Type | Category |\n"
    table += "|------|------|-------|------|----------|\n"

    for file in sorted(files, key=lambda x: x.relative_path):
        table += (
            f"| `{file.relative_path}` | {format_size(file.file_size)} | {file.line_count} | "
            f"{get_language_from_path(file.file_path)} | {get_file_category(file.file_path)} |\n"
        )

    return table


def generate_statistics(files: list[CollectedFile]) -> str:
    """Generate statistics summary.

    Args:
        files: Collected files

    Returns:
        Markdown-formatted statistics section
    """
    total_lines = sum(f.line_count for f in files)
    total_size = sum(f.file_size for f in files)

    by_category = defaultdict(list)
    by_language = defaultdict(list)
    for file in files:
        by_category[get_file_category(file.file_path)].append(file)
        by_language[get_language_from_path(file.file_path)].append(file)

    stats = "## 📊 Statistics\n\n"
    stats += f"- **Total Files:** {len(files)}\n"
    stats += f"- **Total Lines of Code:** {total_lines:,}\n"
    stats += f"- **Total Size:** {format_size(total_size)}\n"
    stats += f"- **Estimated Tokens:** {estimate_tokens(files):,}\n\n"

    stats += "### By Category\n\n"
    for category, group in sorted(by_category.items(), key=lambda x: len(x[1]), reverse=True):
        lines = sum(f.line_count for f in group)
        stats += f"- **{category}:** {len(group)} files, {lines:,} lines\n"

    stats += "\n### By Language\n\n"
    for language, group in sorted(by_language.items(), key=lambda x: len(x[1]), reverse=True):
        lines = sum(f.line_count for f in group)
        stats += f"- **{language}:** {len(group)} files, {lines:,} lines\n"

    return stats


class MarkdownRenderer:
    """Markdown document with statistics, a metadata table, TOC and fenced contents."""

    id = "markdown"

    def __init__(self, include_metadata_table: bool = True, include_hash: bool = False):
        self.include_metadata_table = include_metadata_table
        self.include_hash = include_hash

    def render(self, context: FileContext) -> str:
        files = sorted(context.files, key=lambda x: x.relative_path)
        md = f"# 📦 {context.config.name}\n\n"
        md += f"**Generated:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n\n"
        md += "---\n\n"

        if context.config.show_meta:
            md += generate_statistics(files)
            md += "\n---\n\n"

            if self.include_metadata_table:
                md += "## 📋 File Metadata\n\n"
                md += generate_metadata_table(files)
                md += "\n---\n\n"

        md += "## 📑 Table of Contents\n\n"
        for file in files:
            anchor = generate_gfm_anchor(f"File: {file.relative_path}")
            md += f"- [`{file.relative_path}`](#{anchor})\n"
        md += "\n---\n\n"

        if context.config.show_contents:
            md += "## 📄 File Contents\n\n"
            for file in files:
                md += self._render_file(file)

        return md

    def _render_file(self, file: CollectedFile) -> str:
        language = get_language_from_path(file.file_path)
        md = f"### File: `{file.relative_path}`\n\n"
        md += f"**Language:** {language} | "
        md += f"**Size:** {format_size(file.file_size)} | "
        md += f"**Lines:** {file.line_count}\n\n"

        if self.include_hash:
            digest = hashlib.sha256(file.content.encode("utf-8")).hexdigest()
            md += f"**Hash (SHA-256):** `{digest}`\n\n"

        for issue in file.meta.get("security_issues", []):
            where = f" (line {issue.line})" if issue.line else ""
            md += f"> ⚠ **{issue.severity.value.upper()}**{where}: {issue.description}\n"
        if file.meta.get("security_issues"):
            md += "\n"

        # Write code fence with language hint for syntax highlighting
        md += f"```{language}\n"
        md += file.content
        if not file.content.endswith("\n"):
            md += "\n"
        md += "```\n\n"
        md += "---\n\n"
        return md


class RendererRegistry:
    """Looks up renderers by id."""

    def __init__(self, renderers: list[Renderer] | None = None):
        self._renderers: dict[str, Renderer] = {}
        for renderer in renderers or []:
            self.register(renderer)

    def register(self, renderer: Renderer) -> None:
        self._renderers[renderer.id] = renderer

    def get(self, renderer_id: str) -> Renderer:
        try:
            return self._renderers[renderer_id]
        except KeyError:
            raise KeyError(
                f"Unknown renderer {renderer_id!r}; available: {', '.join(self.ids())}"
            ) from None

    def ids(self) -> list[str]:
        return sorted(self._renderers)


def default_registry() -> RendererRegistry:
    return RendererRegistry([ConsoleRenderer(), JsonRenderer(), MarkdownRenderer()])
