"""
Text exports of an analysis result.

Every export honours an inclusion map. The full export format is:

    Repository: {name}
    Files analyzed: {files}
    Estimated tokens: {tokens/1000:.1f}k

    Directory structure:
    {tree}

    Files Content:

    --- {path} ---

    {content}

"""

import re
from typing import Iterator, List, Mapping, Optional, Sequence, Tuple

from ..utils.tree_builder import FileTreeBuilder
from .inclusion import included_totals, is_included
from .models import AnalysisResult, TreeNode

ROOT_CONNECTOR = "└── "
CHILD_CONNECTOR = "├── "
INDENT = "    "


def tree_prefix(depth: int) -> str:
    """Line prefix for a node at the given depth."""
    if depth == 0:
        return ROOT_CONNECTOR
    return INDENT * (depth - 1) + CHILD_CONNECTOR


def _visible_nodes(tree: Sequence[TreeNode], depth: int,
                   inclusion: Mapping[str, bool]) -> Iterator[Tuple[TreeNode, int]]:
    # Explicit stack of (node, depth), children pushed in reverse to keep order
    stack: List[Tuple[TreeNode, int]] = [(node, depth) for node in reversed(tree)]
    while stack:
        node, level = stack.pop()
        if is_included(node.path, inclusion):
            yield node, level
        if node.is_directory():
            stack.extend((child, level + 1) for child in reversed(node.children))


def render_tree_text(tree: Sequence[TreeNode], depth: int = 0,
                     inclusion: Optional[Mapping[str, bool]] = None) -> str:
    """
    Render a forest as indented text, one line per included node.

    Directories get a trailing '/'. An excluded node emits no line, but its
    children are still visited and checked on their own; cascading
    exclusion to descendants is done by set_inclusion, not here.
    """
    lines = []
    for node, level in _visible_nodes(tree, depth, inclusion or {}):
        suffix = "/" if node.is_directory() else ""
        lines.append(f"{tree_prefix(level)}{node.name}{suffix}\n")
    return "".join(lines)


def render_tree_details(tree: Sequence[TreeNode], inclusion: Optional[Mapping[str, bool]] = None) -> str:
    """
    Tree with per-node annotations.

    Directories show the tokens of their whole subtree, files their own
    tokens and size. A file that was not read shows why instead.
    """
    lines = []
    for node, level in _visible_nodes(tree, 0, inclusion or {}):
        if node.is_directory():
            label = f"{node.name}/"
            detail = f"{FileTreeBuilder.directory_tokens(node)} tokens"
        else:
            label = node.name
            detail = f"{node.tokens} tokens, {format_file_size(node.size)}"
            if node.error:
                detail += f", skipped: {node.error}"
        lines.append(f"{tree_prefix(level)}{label}  ({detail})\n")
    return "".join(lines)


def render_tree_section(tree: Sequence[TreeNode], inclusion: Optional[Mapping[str, bool]] = None) -> str:
    """The tree-only copy: header line plus the rendered tree."""
    return f"Directory structure:\n{render_tree_text(tree, 0, inclusion)}"


def format_token_count(tokens: int) -> str:
    """Tokens in thousands with one decimal, e.g. 1234 -> '1.2k'."""
    return f"{tokens / 1000:.1f}k"


def render_summary(result: AnalysisResult, inclusion: Optional[Mapping[str, bool]] = None) -> str:
    """Summary block over the included files."""
    files, tokens = included_totals(result, inclusion or {})
    return (
        f"Repository: {result.repo_name}\n"
        f"Files analyzed: {files}\n"
        f"Estimated tokens: {format_token_count(tokens)}"
    )


def render_file_contents(result: AnalysisResult, inclusion: Optional[Mapping[str, bool]] = None) -> str:
    """Blocks for every included file that has content, in flat order."""
    inclusion = inclusion or {}
    blocks = []
    for record in result.flat_structure:
        if not record.is_file() or not is_included(record.path, inclusion):
            continue
        content = result.file_contents.get(record.path)
        if content is None:
            continue
        blocks.append(f"--- {record.path} ---\n\n{content}\n\n")
    return "".join(blocks)


def render_full_export(result: AnalysisResult, inclusion: Optional[Mapping[str, bool]] = None) -> str:
    """Summary, directory structure and file contents in one document."""
    inclusion = inclusion or {}
    return (
        f"{render_summary(result, inclusion)}\n\n"
        f"{render_tree_section(result.directory_structure, inclusion)}"
        f"\n\nFiles Content:\n\n"
        f"{render_file_contents(result, inclusion)}"
    )


def format_file_size(size: int) -> str:
    """Human readable size, base 1024, e.g. 1536 -> '1.5 KB'."""
    if size <= 0:
        return "0 Bytes"

    units = ['Bytes', 'KB', 'MB', 'GB']
    exponent = 0
    while exponent < len(units) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = f"{size / 1024 ** exponent:.2f}".rstrip('0').rstrip('.')
    return f"{value} {units[exponent]}"


def export_filename(repo_name: str) -> str:
    """File name used when saving the full export."""
    # Replace characters that are invalid in file names
    safe_name = re.sub(r'[<>:"/\\|?*]', '_', repo_name).rstrip('. ') or "repository"
    return f"{safe_name}_analysis.txt"
