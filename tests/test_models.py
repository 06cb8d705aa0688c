import dataclasses

import pytest

from repotree.core.models import (
    AnalysisResult,
    Config,
    FlatRecord,
    NormalizedEntry,
    TreeNode,
)


class TestConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv('REPOTREE_TOKEN_STRATEGY', raising=False)
        monkeypatch.delenv('REPOTREE_MAX_CONCURRENT_READS', raising=False)
        config = Config()
        assert config.token_strategy == 'chars'
        assert config.max_file_size == 10 * 1024 * 1024
        assert config.fallback_repo_name == 'repository'
        assert config.max_concurrent_reads == 20
        assert 'application/pdf' in config.binary_types
        assert config.binary_type_prefixes == ['image/', 'audio/', 'video/']

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv('REPOTREE_TOKEN_STRATEGY', 'words')
        monkeypatch.setenv('REPOTREE_MAX_CONCURRENT_READS', '4')
        config = Config()
        assert config.token_strategy == 'words'
        assert config.max_concurrent_reads == 4

    def test_malformed_integer_ignored(self, monkeypatch):
        monkeypatch.setenv('REPOTREE_MAX_CONCURRENT_READS', 'many')
        assert Config().max_concurrent_reads == 20

    def test_mutable_defaults_not_shared(self):
        a, b = Config(), Config()
        a.excluded_dirs.add('build')
        assert 'build' not in b.excluded_dirs


class TestFlatRecord:
    def test_file_record(self):
        record = FlatRecord(name="a.py", path="repo/a.py", type="file", parent="repo", tokens=3)
        assert record.is_file() is True
        assert record.is_directory() is False
        assert record.is_text is True

    def test_binary_file_is_not_text(self):
        record = FlatRecord(name="b.bin", path="b.bin", type="file", parent="", binary=True)
        assert record.is_text is False

    def test_directory_is_not_text(self):
        record = FlatRecord(name="repo", path="repo", type="directory", parent="")
        assert record.is_directory() is True
        assert record.is_text is False

    def test_frozen(self):
        record = FlatRecord(name="a", path="a", type="file")
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.tokens = 5


class TestTreeNode:
    def test_from_record_copies_fields(self):
        record = FlatRecord(name="a.py", path="r/a.py", type="file", parent="r",
                            size=10, tokens=3, binary=False)
        node = TreeNode.from_record(record)
        assert node.path == "r/a.py"
        assert node.size == 10
        assert node.tokens == 3
        assert node.children == []

    def test_children_lists_not_shared(self):
        a = TreeNode.from_record(FlatRecord(name="a", path="a", type="directory"))
        b = TreeNode.from_record(FlatRecord(name="b", path="b", type="directory"))
        a.children.append(b)
        assert b.children == []

    def test_to_dict_nested(self):
        root = TreeNode.from_record(FlatRecord(name="r", path="r", type="directory", parent=""))
        root.children.append(TreeNode.from_record(FlatRecord(name="x", path="r/x", type="file", parent="r")))
        data = root.to_dict()
        assert data['path'] == 'r'
        assert data['children'][0]['path'] == 'r/x'
        assert data['children'][0]['children'] == []


class TestAnalysisResult:
    @pytest.fixture
    def result(self):
        records = [
            FlatRecord(name="r", path="r", type="directory", parent=""),
            FlatRecord(name="a.py", path="r/a.py", type="file", parent="r", tokens=2),
        ]
        return AnalysisResult(
            repo_name="r",
            total_tokens=2,
            total_files=1,
            total_directories=1,
            directory_structure=[],
            file_contents={"r/a.py": "abcdefgh"},
            flat_structure=records,
        )

    def test_errors_default_empty(self, result):
        assert result.has_errors() is False
        assert result.get_error_summary() == "No errors encountered."

    def test_error_summary(self):
        result = AnalysisResult("r", 0, 0, 0, [], {}, [], errors=["x: boom", "y: bad"])
        assert result.has_errors() is True
        assert result.get_error_summary() == "2 errors encountered:\n- x: boom\n- y: bad"

    def test_get_record(self, result):
        assert result.get_record("r/a.py").tokens == 2
        assert result.get_record("missing") is None


class TestNormalizedEntry:
    def test_path_joins_segments(self):
        assert NormalizedEntry(segments=("repo", "src", "a.py")).path == "repo/src/a.py"
