"""
File filtering utilities for local scans.

Decides which directories and files a local scan skips before they ever
reach the pipeline (VCS metadata, dependency folders, editor droppings).
"""

from typing import List

from ..core.models import Config


class FileFilter:
    """Handles name-based exclusion during local directory scans."""

    def __init__(self, config: Config):
        self.config = config

    @property
    def enabled(self) -> bool:
        return self.config.apply_default_excludes

    def should_exclude_directory(self, dir_name: str) -> bool:
        """
        Check if a directory should be excluded.

        Args:
            dir_name: Name of the directory (not full path).
        """
        return self.enabled and dir_name in self.config.excluded_dirs

    def should_skip_file(self, file_name: str) -> bool:
        """
        Check if a file should be skipped based on patterns.

        Args:
            file_name: Name of the file (not full path).
        """
        if not self.enabled:
            return False

        for pattern in self.config.skip_patterns:
            if pattern.startswith('*'):
                # Wildcard pattern (e.g., *.pyc)
                if file_name.endswith(pattern[1:]):
                    return True
            elif file_name == pattern:
                return True

        return False

    def filter_names(self, names: List[str], directories: bool) -> List[str]:
        """Drop excluded names from a directory listing."""
        if directories:
            return [name for name in names if not self.should_exclude_directory(name)]
        return [name for name in names if not self.should_skip_file(name)]
