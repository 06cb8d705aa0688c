"""Core components for repotree."""

from .models import Config, FlatRecord, TreeNode, AnalysisResult, ProgressUpdate
from .exceptions import AnalysisError, EmptyInputError
from .tokenizer import TokenCounter, estimate_tokens
from .file_analyzer import FileAnalyzer
from .normalizer import EntryNormalizer
from .inclusion import is_included, set_inclusion, initial_inclusion, included_totals
from .renderer import render_tree_text, render_full_export
from .analyzer import RepositoryAnalyzer

__all__ = [
    "Config",
    "FlatRecord",
    "TreeNode",
    "AnalysisResult",
    "ProgressUpdate",
    "AnalysisError",
    "EmptyInputError",
    "TokenCounter",
    "estimate_tokens",
    "FileAnalyzer",
    "EntryNormalizer",
    "is_included",
    "set_inclusion",
    "initial_inclusion",
    "included_totals",
    "render_tree_text",
    "render_full_export",
    "RepositoryAnalyzer",
]
