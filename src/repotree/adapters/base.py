"""
Input boundary interfaces.

These abstract classes describe what the pipeline needs from a source of
files: flat file handles (optionally tagged with a relative path) and
recursive directory entries whose children are listed in batches.
Implementations only need to honour the contract; the pipeline relies on
duck typing and never checks isinstance.
"""

from abc import ABC, abstractmethod
from typing import List


class FileHandle(ABC):
    """
    A readable file.

    `relative_path` carries the hierarchy hint of flat lists; an empty value
    means the handle has no hierarchy and only `name` is known.
    """

    name: str = ""
    size: int = 0
    type: str = ""  # MIME type tag, may be empty
    relative_path: str = ""

    @abstractmethod
    async def text(self) -> str:
        """
        Read the whole file as text.

        Raises:
            Exception: any failure; the caller treats it as a per-file error.
        """


class DirectoryReader(ABC):
    """
    Stateful, batched child listing of one directory.

    Each call returns the next batch. An empty batch means the listing is
    exhausted; a single call is not guaranteed to return every child.
    """

    @abstractmethod
    async def read_entries(self) -> List["DirectoryEntry"]:
        """Return the next batch of child entries, or [] when done."""


class DirectoryEntry(ABC):
    """A node of a recursive directory listing."""

    name: str = ""
    is_file: bool = False
    is_directory: bool = False

    @abstractmethod
    def create_reader(self) -> DirectoryReader:
        """Create a batched reader over this directory's children."""

    @abstractmethod
    async def file(self) -> FileHandle:
        """Materialize the file handle behind a file entry."""
