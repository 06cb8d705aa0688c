"""
Entry normalization.

Turns the three input shapes into one ordered sequence of NormalizedEntry
values, and plans the flat record sequence (directories synthesized from
path prefixes, interleaved with file slots) that the analyzer fills in.

Input shapes:
- flat file list with relative-path hints (folder picker style)
- flat file list without hierarchy (bare names)
- recursive directory entries with batched child readers (drag-and-drop style)
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Set, Tuple, Union

from ..utils.path_utils import PathUtils
from .models import Config, FlatRecord, NormalizedEntry, DIRECTORY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileSlot:
    """Placeholder for a file record, filled in once its content is read."""

    index: int
    entry: NormalizedEntry
    parent: str

    @property
    def name(self) -> str:
        return self.entry.segments[-1]

    @property
    def path(self) -> str:
        return self.entry.path


PlanItem = Union[FlatRecord, FileSlot]


class EntryNormalizer:
    """Normalizes raw inputs into canonical entries and a record plan."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.errors: List[str] = []

    def _error(self, message: str) -> None:
        logger.warning(message)
        self.errors.append(message)

    # -- flat lists -----------------------------------------------------------

    def from_file_list(self, files: Iterable[Any]) -> List[NormalizedEntry]:
        """
        Normalize a flat list of file handles.

        The handle's relative path is used when present, otherwise its bare
        name, which places the file at the root.
        """
        entries = []
        for handle in files:
            raw_path = getattr(handle, 'relative_path', '') or getattr(handle, 'name', '') or ''
            segments = PathUtils.split_segments(raw_path)
            if not segments:
                self._error(f"Skipping file without a name: {handle!r}")
                continue
            entries.append(NormalizedEntry(segments=tuple(segments), handle=handle))
        return entries

    # -- recursive directory entries -----------------------------------------

    async def read_all_entries(self, reader: Any, dir_path: str) -> List[Any]:
        """
        Drain a batched directory reader.

        The reader is called until it returns an empty batch; one call may
        return only part of a directory.
        """
        children: List[Any] = []
        try:
            batch = await reader.read_entries()
            while batch:
                children.extend(batch)
                batch = await reader.read_entries()
        except Exception as e:
            self._error(f"Error listing directory {dir_path}: {e}")
        return children

    async def from_directory_entries(self, roots: Iterable[Any]) -> List[NormalizedEntry]:
        """
        Traverse recursive directory entries depth-first, in listing order.

        Directories are emitted as explicit entries so empty ones survive.
        File handles are materialized during the walk; a failure is kept as
        an entry carrying the error.
        """
        entries: List[NormalizedEntry] = []
        stack: List[Tuple[Any, Tuple[str, ...]]] = [
            (entry, ()) for entry in reversed(list(roots)) if entry is not None
        ]

        while stack:
            entry, prefix = stack.pop()
            name = getattr(entry, 'name', '') or ''
            segments = prefix + tuple(PathUtils.split_segments(name))
            if len(segments) == len(prefix):
                self._error(f"Skipping entry without a name under '{'/'.join(prefix)}'")
                continue
            path = '/'.join(segments)

            if getattr(entry, 'is_file', False):
                try:
                    handle = await entry.file()
                except Exception as e:
                    message = f"Error opening file {path}: {e}"
                    self._error(message)
                    entries.append(NormalizedEntry(segments=segments, error=message))
                else:
                    entries.append(NormalizedEntry(segments=segments, handle=handle))

            elif getattr(entry, 'is_directory', False):
                entries.append(NormalizedEntry(segments=segments, is_directory=True))
                try:
                    reader = entry.create_reader()
                except Exception as e:
                    self._error(f"Error listing directory {path}: {e}")
                    continue
                children = await self.read_all_entries(reader, path)
                # Reversed so children pop off the stack in listing order
                stack.extend((child, segments) for child in reversed(children))

        return entries

    # -- repo name and record plan -------------------------------------------

    def derive_repo_name(self, entries: Sequence[NormalizedEntry]) -> str:
        """
        First non-empty root segment across the entries, else the fallback.

        For a flat list without hierarchy this is the first file's name.
        """
        for entry in entries:
            if entry.segments:
                return entry.segments[0]
        return self.config.fallback_repo_name

    def plan_records(self, entries: Sequence[NormalizedEntry]) -> List[PlanItem]:
        """
        Lay out the flat record sequence.

        For every entry, each directory prefix not seen before becomes a
        directory record, immediately followed by the file slot. Paths are
        unique: a repeated file path, or a file path already used by a
        directory, is skipped with an error. So is an entry that would nest
        under a path already taken by a file.
        """
        plan: List[PlanItem] = []
        seen: Set[str] = set()
        file_paths: Set[str] = set()
        slot_index = 0

        for entry in entries:
            dir_segments = entry.segments if entry.is_directory else entry.segments[:-1]

            prefixes = ['/'.join(dir_segments[:depth]) for depth in range(1, len(dir_segments) + 1)]
            conflict = next((p for p in prefixes if p in file_paths), None)
            if conflict is not None:
                self._error(f"Skipping {entry.path}: '{conflict}' is a file")
                continue

            parent = ''
            for name, dir_path in zip(dir_segments, prefixes):
                if dir_path not in seen:
                    seen.add(dir_path)
                    plan.append(FlatRecord(
                        name=name,
                        path=dir_path,
                        type=DIRECTORY,
                        parent=parent,
                    ))
                parent = dir_path

            if entry.is_directory:
                continue

            if entry.path in seen:
                self._error(f"Skipping duplicate path: {entry.path}")
                continue
            seen.add(entry.path)
            file_paths.add(entry.path)
            plan.append(FileSlot(index=slot_index, entry=entry, parent=parent))
            slot_index += 1

        return plan

    @staticmethod
    def file_slots(plan: Sequence[PlanItem]) -> Iterator[FileSlot]:
        """The file slots of a plan, in order."""
        return (item for item in plan if isinstance(item, FileSlot))
