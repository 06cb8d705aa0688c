"""Main repository analyzer orchestrator."""
import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ..utils.tree_builder import FileTreeBuilder
from .exceptions import AnalysisError, EmptyInputError
from .file_analyzer import FileAnalyzer
from .models import AnalysisResult, Config, FlatRecord, NormalizedEntry, ProgressUpdate, FILE
from .normalizer import EntryNormalizer, FileSlot
from .renderer import export_filename, render_full_export
from .tokenizer import TokenCounter

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressUpdate], None]


@dataclass
class FileResult:
    """Outcome of reading one file slot."""
    record: FlatRecord
    content: Optional[str] = None
    failure: Optional[str] = None  # set when opening or reading failed

    @property
    def success(self) -> bool:
        return self.content is not None


class RepositoryAnalyzer:
    """
    Runs the collection-to-tree pipeline for one input set.

    Each run builds a fresh AnalysisResult; nothing is carried over between
    runs.
    """

    def __init__(self, config: Optional[Config] = None,
                 on_progress: Optional[ProgressCallback] = None):
        """Initialize analyzer with configuration and an optional progress callback."""
        self.config = config or Config()
        self.on_progress = on_progress
        self.file_analyzer = FileAnalyzer(self.config)
        self.token_counter = TokenCounter(self.config.token_strategy, self.config.tiktoken_encoding)

    def _report(self, status: str, percentage: int) -> None:
        if self.on_progress is not None:
            self.on_progress(ProgressUpdate(status=status, percentage=percentage))

    # -- entry points ---------------------------------------------------------

    async def analyze_files(self, files: Iterable[Any]) -> AnalysisResult:
        """Analyze a flat list of file handles (with or without relative paths)."""
        self._report('Starting analysis...', 0)
        files = list(files or [])
        if not files:
            raise EmptyInputError()

        self._report('Scanning files...', 10)
        normalizer = EntryNormalizer(self.config)
        try:
            entries = normalizer.from_file_list(files)
        except Exception as e:
            raise AnalysisError(f"Error processing files: {e}") from e
        return await self._analyze_entries(entries, normalizer)

    async def analyze_entries(self, roots: Iterable[Any]) -> AnalysisResult:
        """Analyze recursive directory entries."""
        self._report('Starting analysis...', 0)
        roots = [root for root in (roots or []) if root is not None]
        if not roots:
            raise EmptyInputError()

        self._report('Scanning files...', 10)
        normalizer = EntryNormalizer(self.config)
        try:
            entries = await normalizer.from_directory_entries(roots)
        except Exception as e:
            raise AnalysisError(f"Error processing files: {e}") from e
        return await self._analyze_entries(entries, normalizer)

    def run_files(self, files: Iterable[Any]) -> AnalysisResult:
        """Synchronous wrapper around analyze_files."""
        return asyncio.run(self.analyze_files(files))

    def run_entries(self, roots: Iterable[Any]) -> AnalysisResult:
        """Synchronous wrapper around analyze_entries."""
        return asyncio.run(self.analyze_entries(roots))

    # -- pipeline -------------------------------------------------------------

    async def _analyze_entries(self, entries: Sequence[NormalizedEntry],
                               normalizer: EntryNormalizer) -> AnalysisResult:
        if not entries:
            raise EmptyInputError()

        try:
            repo_name = normalizer.derive_repo_name(entries)
            plan = normalizer.plan_records(entries)
            slots = list(EntryNormalizer.file_slots(plan))

            self._report('Analyzing files...', 30)
            results = await self._process_slots(slots)

            flat_structure: List[FlatRecord] = []
            file_contents: Dict[str, str] = {}
            errors = list(normalizer.errors)
            for item in plan:
                if isinstance(item, FileSlot):
                    result = results[item.index]
                    flat_structure.append(result.record)
                    if result.success:
                        file_contents[result.record.path] = result.content
                    elif result.failure and item.entry.error is None:
                        # Open failures were already reported by the normalizer
                        errors.append(f"{result.record.path}: {result.failure}")
                else:
                    flat_structure.append(item)

            self._report('Building directory tree...', 95)
            tree = FileTreeBuilder.build(flat_structure)

            text_files = [r for r in flat_structure if r.is_text]
            result = AnalysisResult(
                repo_name=repo_name,
                total_tokens=sum(r.tokens for r in text_files),
                total_files=len(text_files),
                total_directories=sum(1 for r in flat_structure if r.is_directory()),
                directory_structure=tree,
                file_contents=file_contents,
                flat_structure=flat_structure,
                errors=errors,
            )
        except Exception as e:
            logger.error(f"Error processing files: {e}")
            raise AnalysisError(f"Error processing files: {e}") from e

        logger.debug(f"Analysis complete: {result.total_files} files, {result.total_tokens} tokens")
        self._report('Analysis complete!', 100)
        return result

    async def _process_slots(self, slots: List[FileSlot]) -> List[FileResult]:
        """
        Read and annotate every file slot with bounded concurrency.

        Results come back indexed like `slots`, whatever order reads finish in.
        """
        semaphore = asyncio.Semaphore(max(1, self.config.max_concurrent_reads))
        total = len(slots)
        done = 0

        async def run(slot: FileSlot) -> FileResult:
            nonlocal done
            async with semaphore:
                result = await self._process_slot(slot)
            done += 1
            self._report('Processing files...', min(30 + (done * 60) // total, 90))
            return result

        return list(await asyncio.gather(*(run(slot) for slot in slots)))

    async def _process_slot(self, slot: FileSlot) -> FileResult:
        """Classify one file, read it if it is textual, and count its tokens."""
        handle = slot.entry.handle
        base = dict(name=slot.name, path=slot.path, type=FILE, parent=slot.parent)

        if handle is None:
            error = slot.entry.error or "File could not be opened"
            return FileResult(FlatRecord(**base, binary=True, error=error), failure=error)

        size = getattr(handle, 'size', 0) or 0
        classification = self.file_analyzer.classify(handle)
        if classification.skip_read:
            reason = self.file_analyzer.skip_reason(classification, size)
            logger.debug(f"Skipping {slot.path}: {reason}")
            return FileResult(FlatRecord(**base, size=size, binary=True, error=reason))

        try:
            content = await handle.text()
        except Exception as e:
            logger.warning(f"Error processing file {slot.path}: {e}")
            error = str(e) or type(e).__name__
            return FileResult(FlatRecord(**base, size=size, binary=True, error=error), failure=error)

        tokens = self.token_counter.count(content)
        return FileResult(FlatRecord(**base, size=size, tokens=tokens), content=content)

    # -- output ---------------------------------------------------------------

    def save_results(self, result: AnalysisResult, inclusion: Optional[Dict[str, bool]] = None,
                     output_dir: str = "output") -> str:
        """
        Write the full export to `{output_dir}/{repo_name}_analysis.txt`.

        Returns:
            Path of the written file
        """
        os.makedirs(output_dir, exist_ok=True)
        output_path = os.path.join(output_dir, export_filename(result.repo_name))
        content = render_full_export(result, inclusion or {})
        with open(output_path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
        return output_path
