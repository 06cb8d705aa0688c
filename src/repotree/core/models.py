"""
Core data models for repotree.

This module contains the fundamental data structures used throughout
the application for configuration, entry records, trees, and analysis results.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Set, Any
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


FILE = 'file'
DIRECTORY = 'directory'


def _env_int(name: str, default: int) -> int:
    """Read an integer from the environment, ignoring malformed values."""
    value = os.getenv(name, '')
    try:
        return int(value) if value else default
    except ValueError:
        return default


@dataclass
class Config:
    """Configuration settings for repotree."""

    token_strategy: str = field(default_factory=lambda: os.getenv('REPOTREE_TOKEN_STRATEGY', 'chars'))
    tiktoken_encoding: str = field(default_factory=lambda: os.getenv('REPOTREE_TIKTOKEN_ENCODING', 'cl100k_base'))

    # Files above this size are recorded but never read
    max_file_size: int = 10 * 1024 * 1024  # 10 MiB

    # MIME type tags treated as binary (exact match)
    binary_types: Set[str] = field(default_factory=lambda: {
        'application/octet-stream',
        'application/zip',
        'application/x-zip-compressed',
        'application/pdf',
        'application/x-msdownload',
        'application/x-executable',
    })

    # MIME type families treated as binary (prefix match)
    binary_type_prefixes: List[str] = field(default_factory=lambda: [
        'image/', 'audio/', 'video/'
    ])

    fallback_repo_name: str = 'repository'

    # Upper bound on file reads in flight at once
    max_concurrent_reads: int = field(default_factory=lambda: _env_int('REPOTREE_MAX_CONCURRENT_READS', 20))

    # Entries returned per call by the local directory reader
    read_batch_size: int = 100

    # Directories skipped by local scans
    excluded_dirs: Set[str] = field(default_factory=lambda: {
        '__pycache__', '.git', '.hg', '.svn', '.idea', '.vscode',
        'node_modules', '.pytest_cache', '.mypy_cache', '.tox',
        'venv', '.venv', 'virtualenv', '.virtualenv',
        'bower_components', '.sass-cache', '.cache', '.next',
        '.nuxt', '.parcel-cache',
    })

    # File names skipped by local scans
    skip_patterns: Set[str] = field(default_factory=lambda: {
        '.DS_Store', 'Thumbs.db', '*.pyc', '*.pyo'
    })

    apply_default_excludes: bool = True

    # Encoding fallbacks for local file reads
    encoding_fallbacks: List[str] = field(default_factory=lambda: [
        'utf-8', 'utf-8-sig', 'latin-1', 'cp1252'
    ])


@dataclass(frozen=True)
class FlatRecord:
    """One file or directory entry, before tree construction."""

    name: str
    path: str
    type: str  # 'file' or 'directory'
    parent: Optional[str] = None  # None means "not set", '' means root level
    size: int = 0
    tokens: int = 0
    binary: bool = False
    error: Optional[str] = None

    def is_file(self) -> bool:
        """Check if this record represents a file."""
        return self.type == FILE

    def is_directory(self) -> bool:
        """Check if this record represents a directory."""
        return self.type == DIRECTORY

    @property
    def is_text(self) -> bool:
        """True for files whose content was read as text."""
        return self.is_file() and not self.binary


@dataclass(frozen=True)
class TreeNode(FlatRecord):
    """A FlatRecord with its ordered children attached."""

    children: List['TreeNode'] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: FlatRecord) -> 'TreeNode':
        """Shallow copy of a record with an empty children list."""
        values = {f.name: getattr(record, f.name) for f in fields(FlatRecord)}
        return cls(**values, children=[])

    def to_dict(self) -> Dict[str, Any]:
        """Nested dictionary form, handy for JSON dumps."""
        data = {f.name: getattr(self, f.name) for f in fields(FlatRecord)}
        data['children'] = [child.to_dict() for child in self.children]
        return data


@dataclass(frozen=True)
class AnalysisResult:
    """Result of one analysis run. Never modified after creation."""

    repo_name: str
    total_tokens: int
    total_files: int
    total_directories: int
    directory_structure: List[TreeNode]
    file_contents: Dict[str, str]
    flat_structure: List[FlatRecord]
    errors: List[str] = field(default_factory=list)

    def has_errors(self) -> bool:
        """Check if any errors occurred during analysis."""
        return len(self.errors) > 0

    def get_error_summary(self) -> str:
        """Get a summary of all errors."""
        if not self.errors:
            return "No errors encountered."
        return f"{len(self.errors)} errors encountered:\n" + "\n".join(f"- {e}" for e in self.errors)

    def get_record(self, path: str) -> Optional[FlatRecord]:
        """Look up a flat record by path."""
        for record in self.flat_structure:
            if record.path == path:
                return record
        return None


@dataclass(frozen=True)
class ProgressUpdate:
    """Progress notification emitted at pipeline milestones."""

    status: str
    percentage: int


@dataclass(frozen=True)
class NormalizedEntry:
    """
    One enumerated input entry in canonical form.

    `handle` is the file handle for files. Explicit directory entries (from
    recursive readers) carry no handle, and so do files whose handle could
    not be materialized; those carry an `error` instead.
    """

    segments: tuple
    handle: Any = None
    is_directory: bool = False
    error: Optional[str] = None

    @property
    def path(self) -> str:
        return '/'.join(self.segments)


@dataclass(frozen=True)
class Classification:
    """Outcome of the binary/size check for one file handle."""

    binary: bool = False
    oversized: bool = False

    @property
    def skip_read(self) -> bool:
        return self.binary or self.oversized
