import asyncio
import shutil
import tempfile
from pathlib import Path

import pytest


class FakeFile:
    """In-memory file handle."""

    def __init__(self, name, content="", relative_path="", type="text/plain",
                 size=None, error=None, delay=0.0):
        self.name = name
        self.content = content
        self.relative_path = relative_path
        self.type = type
        self.size = len(content.encode('utf-8')) if size is None else size
        self.error = error
        self.delay = delay
        self.reads = 0

    async def text(self):
        self.reads += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.content

    def __repr__(self):
        return f"FakeFile({self.name!r})"


class FakeReader:
    """Batched reader returning `batch_size` children per call."""

    def __init__(self, children, batch_size=1, error=None):
        self.pending = list(children)
        self.batch_size = batch_size
        self.error = error
        self.calls = 0

    async def read_entries(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        batch, self.pending = self.pending[:self.batch_size], self.pending[self.batch_size:]
        return batch


class FakeFileEntry:
    """Recursive entry for a file; `file()` fails when `error` is set."""

    is_file = True
    is_directory = False

    def __init__(self, handle=None, name=None, error=None):
        self.handle = handle
        self.name = name or handle.name
        self.error = error

    def create_reader(self):
        raise NotADirectoryError(self.name)

    async def file(self):
        if self.error is not None:
            raise self.error
        return self.handle


class FakeDirectoryEntry:
    """Recursive entry for a directory whose children come back one per batch."""

    is_file = False
    is_directory = True

    def __init__(self, name, children=(), batch_size=1, list_error=None):
        self.name = name
        self.children = list(children)
        self.batch_size = batch_size
        self.list_error = list_error
        self.readers = []

    def create_reader(self):
        reader = FakeReader(self.children, self.batch_size, self.list_error)
        self.readers.append(reader)
        return reader

    async def file(self):
        raise IsADirectoryError(self.name)


def file_entry(name, content="", **kwargs):
    """Shortcut for a file entry wrapping a FakeFile."""
    return FakeFileEntry(FakeFile(name, content, **kwargs))


@pytest.fixture
def temp_workspace():
    """Create a temporary directory for test files."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def sample_repo(temp_workspace):
    """Create a sample repository structure for testing."""
    repo_root = temp_workspace / "sample_repo"
    repo_root.mkdir()

    (repo_root / "src").mkdir()
    (repo_root / "src" / "utils").mkdir()
    (repo_root / "tests").mkdir()
    (repo_root / "docs").mkdir()
    (repo_root / ".git").mkdir()
    (repo_root / "node_modules").mkdir()

    (repo_root / "README.md").write_text("# Sample Repository\n\nTest repository for repotree")
    (repo_root / "setup.py").write_text("from setuptools import setup\n\nsetup(name='sample')")
    (repo_root / "src" / "__init__.py").write_text("")
    (repo_root / "src" / "main.py").write_text("def main():\n    print('Hello, World!')")
    (repo_root / "src" / "utils" / "helpers.py").write_text("def helper():\n    return 42")
    (repo_root / "tests" / "test_main.py").write_text("def test_main():\n    assert True")
    (repo_root / ".git" / "config").write_text("[core]\n    repositoryformatversion = 0")
    (repo_root / "node_modules" / "package.json").write_text('{"name": "test"}')
    (repo_root / "module.pyc").write_bytes(b'\x00\x01')

    # Binary file
    (repo_root / "image.png").write_bytes(b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR')

    return repo_root
