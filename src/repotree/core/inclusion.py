"""
Include/exclude state for analysis results.

An inclusion map is a plain dict from path to bool; a missing path is
included. The functions here never modify the map they are given.
"""

from typing import Dict, List, Mapping, Sequence, Tuple

from ..utils.tree_builder import FileTreeBuilder
from .models import AnalysisResult, TreeNode

InclusionMap = Dict[str, bool]


def is_included(path: str, inclusion: Mapping[str, bool]) -> bool:
    """Inclusion of a path; included unless explicitly set otherwise."""
    return inclusion.get(path, True)


def set_inclusion(inclusion: Mapping[str, bool], path: str, included: bool,
                  tree: Sequence[TreeNode]) -> InclusionMap:
    """
    Return a new map with `path` and all of its descendants set to `included`.

    Descendants are found by locating the node for `path` in `tree` and
    walking its subtree; prior settings below it are overridden. Ancestors
    are left alone. If `path` is not in the tree only its own key changes.
    """
    updated = dict(inclusion)
    updated[path] = included

    node = FileTreeBuilder.find(tree, path)
    if node is None:
        return updated

    stack = list(node.children)
    while stack:
        child = stack.pop()
        updated[child.path] = included
        stack.extend(child.children)

    return updated


def initial_inclusion(result: AnalysisResult) -> InclusionMap:
    """Map with every path of a fresh result included."""
    return {record.path: True for record in result.flat_structure}


def included_totals(result: AnalysisResult, inclusion: Mapping[str, bool]) -> Tuple[int, int]:
    """
    File count and token total over included files read as text.

    Returns:
        Tuple of (files, tokens)
    """
    files = 0
    tokens = 0
    for record in result.flat_structure:
        if record.is_text and is_included(record.path, inclusion):
            files += 1
            tokens += record.tokens
    return files, tokens


def excluded_paths(inclusion: Mapping[str, bool]) -> List[str]:
    """Paths explicitly excluded, sorted."""
    return sorted(path for path, included in inclusion.items() if not included)
