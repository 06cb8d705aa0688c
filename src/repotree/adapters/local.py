"""Local filesystem implementations of the input boundary."""
import asyncio
import logging
import mimetypes
import os
from pathlib import Path
from typing import List, Optional

from ..core.models import Config
from ..utils.encodings import EncodingDetector
from ..utils.file_filter import FileFilter
from .base import DirectoryEntry, DirectoryReader, FileHandle

logger = logging.getLogger(__name__)


class LocalFileHandle(FileHandle):
    """A file on disk. Metadata is read eagerly, content on demand."""

    def __init__(self, path: Path, relative_path: str = "",
                 encodings: Optional[List[str]] = None):
        self.path = Path(path)
        self.name = self.path.name
        self.relative_path = relative_path
        self.size = self.path.stat().st_size
        self.type = mimetypes.guess_type(self.name)[0] or ""
        self._detector = EncodingDetector(encodings)

    def _read_text(self) -> str:
        raw = self.path.read_bytes()
        decoded = self._detector.decode(raw, str(self.path))
        if decoded.text is None:
            raise ValueError(decoded.error)
        return decoded.text

    async def text(self) -> str:
        return await asyncio.to_thread(self._read_text)

    def __repr__(self) -> str:
        return f"LocalFileHandle({str(self.path)!r}, relative_path={self.relative_path!r})"


class LocalDirectoryReader(DirectoryReader):
    """Lists a directory in fixed-size batches, sorted by name."""

    def __init__(self, entry: "LocalDirectoryEntry"):
        self.entry = entry
        self._pending: Optional[List[str]] = None

    def _list(self) -> List[str]:
        file_filter = self.entry.file_filter
        names = []
        for name in sorted(os.listdir(self.entry.path)):
            full_path = self.entry.path / name
            # Skip symlinks to prevent traversal outside the root
            if full_path.is_symlink():
                continue
            if full_path.is_dir():
                if not file_filter.should_exclude_directory(name):
                    names.append(name)
            elif not file_filter.should_skip_file(name):
                names.append(name)
        return names

    async def read_entries(self) -> List["LocalDirectoryEntry"]:
        if self._pending is None:
            self._pending = await asyncio.to_thread(self._list)

        batch_size = max(1, self.entry.config.read_batch_size)
        batch, self._pending = self._pending[:batch_size], self._pending[batch_size:]
        return [self.entry.child(name) for name in batch]


class LocalDirectoryEntry(DirectoryEntry):
    """A file or directory on disk, exposed as a recursive entry."""

    def __init__(self, path: Path, config: Config, file_filter: Optional[FileFilter] = None):
        self.path = Path(path)
        self.config = config
        self.file_filter = file_filter or FileFilter(config)
        self.name = self.path.name
        self.is_directory = self.path.is_dir()
        self.is_file = self.path.is_file()

    def child(self, name: str) -> "LocalDirectoryEntry":
        return LocalDirectoryEntry(self.path / name, self.config, self.file_filter)

    def create_reader(self) -> LocalDirectoryReader:
        if not self.is_directory:
            raise NotADirectoryError(str(self.path))
        return LocalDirectoryReader(self)

    async def file(self) -> LocalFileHandle:
        if not self.is_file:
            raise IsADirectoryError(str(self.path))
        return await asyncio.to_thread(LocalFileHandle, self.path, "", self.config.encoding_fallbacks)

    def __repr__(self) -> str:
        return f"LocalDirectoryEntry({str(self.path)!r})"


class LocalAdapter:
    """Exposes a local directory as any of the three input shapes."""

    def __init__(self, repo_path: str, config: Config):
        """Initialize local adapter with repository path."""
        if not os.path.isdir(repo_path):
            raise ValueError(f"Path is not a directory: {repo_path}")

        self.config = config
        self.repo_path = Path(os.path.abspath(repo_path))
        self.repo_name = self.repo_path.name
        self.file_filter = FileFilter(config)
        self.errors: List[str] = []

    def get_name(self) -> str:
        """Get repository name."""
        return self.repo_name

    def _walk(self):
        for root, dirs, files in os.walk(self.repo_path, onerror=self._on_walk_error):
            dirs[:] = sorted(self.file_filter.filter_names(dirs, directories=True))
            dirs[:] = [d for d in dirs if not os.path.islink(os.path.join(root, d))]
            for name in sorted(self.file_filter.filter_names(files, directories=False)):
                full_path = Path(root) / name
                if full_path.is_symlink():
                    continue
                yield full_path

    def _on_walk_error(self, error: OSError) -> None:
        message = f"Error listing {error.filename}: {error.strerror}"
        logger.warning(message)
        self.errors.append(message)

    def _handle(self, full_path: Path, relative_path: str) -> Optional[LocalFileHandle]:
        try:
            return LocalFileHandle(full_path, relative_path, self.config.encoding_fallbacks)
        except OSError as e:
            message = f"Error accessing {full_path}: {e}"
            logger.warning(message)
            self.errors.append(message)
            return None

    def file_list(self) -> List[LocalFileHandle]:
        """
        Flat list with hierarchy hints.

        Relative paths start with the root folder name, the way a browser
        folder picker tags files.
        """
        handles = []
        for full_path in self._walk():
            rel = full_path.relative_to(self.repo_path).as_posix()
            handle = self._handle(full_path, f"{self.repo_name}/{rel}")
            if handle is not None:
                handles.append(handle)
        return handles

    def flat_file_list(self) -> List[LocalFileHandle]:
        """Flat list without hierarchy: every handle is known by name only."""
        handles = []
        for full_path in self._walk():
            handle = self._handle(full_path, "")
            if handle is not None:
                handles.append(handle)
        return handles

    def directory_entries(self) -> List[LocalDirectoryEntry]:
        """Recursive entry for the root directory."""
        return [LocalDirectoryEntry(self.repo_path, self.config, self.file_filter)]
