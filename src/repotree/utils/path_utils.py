"""Canonical path helpers: slash-delimited, relative to the analysis root."""

from typing import List


class PathUtils:
    """Utilities for consistent path handling across input shapes."""

    @staticmethod
    def normalize_path(path: str) -> str:
        """
        Normalize path separators to forward slashes.

        Args:
            path: File path with potentially mixed separators

        Returns:
            Path with forward slashes only
        """
        return path.replace('\\\\', '/').replace('\\', '/')

    @staticmethod
    def split_segments(path: str) -> List[str]:
        """
        Normalize a path and split it into its non-empty segments.

        Leading, trailing and doubled slashes produce no segments.
        """
        return [part for part in PathUtils.normalize_path(path).split('/') if part]

    @staticmethod
    def join_path_components(components: List[str]) -> str:
        """Join path components with forward slashes."""
        return '/'.join(components)

    @staticmethod
    def parent_path(path: str) -> str:
        """Path with its last segment removed; '' for root-level paths."""
        if '/' not in path:
            return ''
        return path[:path.rindex('/')]

    @staticmethod
    def is_descendant(path: str, ancestor: str) -> bool:
        """Check if `path` lies strictly below `ancestor`."""
        return bool(ancestor) and path.startswith(ancestor + '/')
