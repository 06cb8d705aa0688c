"""Input adapters: where file handles and directory entries come from."""
import os
from pathlib import Path

from ..core.models import Config
from .base import DirectoryEntry, DirectoryReader, FileHandle
from .local import LocalAdapter, LocalDirectoryEntry, LocalDirectoryReader, LocalFileHandle


def create_adapter(repo_path: str, config: Config) -> LocalAdapter:
    """
    Create a local adapter for a directory path.

    Raises:
        ValueError: If the path does not exist or is not a directory
    """
    path = Path(os.path.expanduser(repo_path))
    if not path.exists():
        raise ValueError(f"Path does not exist: {repo_path}")
    if not path.is_dir():
        raise ValueError(f"Path exists but is not a directory: {repo_path}")
    return LocalAdapter(str(path.resolve()), config)


__all__ = [
    'FileHandle', 'DirectoryEntry', 'DirectoryReader',
    'LocalAdapter', 'LocalFileHandle', 'LocalDirectoryEntry', 'LocalDirectoryReader',
    'create_adapter',
]
