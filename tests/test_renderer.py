"""Tests for tree text and export rendering."""

import pytest

from repotree.core.inclusion import set_inclusion
from repotree.core.models import AnalysisResult, FlatRecord
from repotree.core.renderer import (
    export_filename,
    format_file_size,
    format_token_count,
    render_file_contents,
    render_full_export,
    render_summary,
    render_tree_details,
    render_tree_section,
    render_tree_text,
    tree_prefix,
)
from repotree.utils import FileTreeBuilder


def make_result(records, contents, repo_name="repo"):
    text = [r for r in records if r.is_text]
    return AnalysisResult(
        repo_name=repo_name,
        total_tokens=sum(r.tokens for r in text),
        total_files=len(text),
        total_directories=sum(1 for r in records if r.is_directory()),
        directory_structure=FileTreeBuilder.build(records),
        file_contents=contents,
        flat_structure=records,
    )


@pytest.fixture
def small_result():
    records = [
        FlatRecord(name="repo", path="repo", type="directory", parent=""),
        FlatRecord(name="a.txt", path="repo/a.txt", type="file", parent="repo", size=2, tokens=1),
        FlatRecord(name="sub", path="repo/sub", type="directory", parent="repo"),
        FlatRecord(name="b.bin", path="repo/sub/b.bin", type="file", parent="repo/sub",
                   size=5, binary=True, error="Binary file"),
    ]
    return make_result(records, {"repo/a.txt": "hi"})


@pytest.fixture
def deep_result():
    records = [
        FlatRecord(name="repo", path="repo", type="directory", parent=""),
        FlatRecord(name="a.txt", path="repo/a.txt", type="file", parent="repo", tokens=1),
        FlatRecord(name="sub", path="repo/sub", type="directory", parent="repo"),
        FlatRecord(name="c.py", path="repo/sub/c.py", type="file", parent="repo/sub", tokens=2),
        FlatRecord(name="deep", path="repo/sub/deep", type="directory", parent="repo/sub"),
        FlatRecord(name="d.md", path="repo/sub/deep/d.md", type="file", parent="repo/sub/deep", tokens=1),
        FlatRecord(name="z.txt", path="repo/z.txt", type="file", parent="repo", tokens=1),
    ]
    contents = {"repo/a.txt": "A", "repo/sub/c.py": "C = 1", "repo/sub/deep/d.md": "D", "repo/z.txt": "Z"}
    return make_result(records, contents)


def parse_tree(text):
    """Recover (depth, name) pairs from rendered tree text."""
    parsed = []
    for line in text.splitlines():
        if line.startswith("└── "):
            parsed.append((0, line[4:]))
        else:
            indent = len(line) - len(line.lstrip(" "))
            assert line[indent:indent + 4] == "├── "
            parsed.append((indent // 4 + 1, line[indent + 4:]))
    return parsed


class TestTreePrefix:
    def test_prefixes(self):
        assert tree_prefix(0) == "└── "
        assert tree_prefix(1) == "├── "
        assert tree_prefix(2) == "    ├── "
        assert tree_prefix(3) == "        ├── "


class TestRenderTreeText:
    def test_exact_output(self, deep_result):
        assert render_tree_text(deep_result.directory_structure) == (
            "└── repo/\n"
            "├── a.txt\n"
            "├── sub/\n"
            "    ├── c.py\n"
            "    ├── deep/\n"
            "        ├── d.md\n"
            "├── z.txt\n"
        )

    def test_round_trips_to_preorder(self, deep_result):
        tree = deep_result.directory_structure
        parsed = parse_tree(render_tree_text(tree))

        expected = []
        stack = [(node, 0) for node in reversed(tree)]
        while stack:
            node, depth = stack.pop()
            expected.append((depth, node.name + ("/" if node.is_directory() else "")))
            stack.extend((child, depth + 1) for child in reversed(node.children))

        assert parsed == expected

    def test_starting_depth(self, deep_result):
        sub = FileTreeBuilder.find(deep_result.directory_structure, "repo/sub")
        assert render_tree_text(sub.children, 2) == (
            "    ├── c.py\n"
            "    ├── deep/\n"
            "        ├── d.md\n"
        )

    def test_excluded_subtree_after_cascade(self, deep_result):
        tree = deep_result.directory_structure
        inclusion = set_inclusion({}, "repo/sub", False, tree)
        assert render_tree_text(tree, 0, inclusion) == "└── repo/\n├── a.txt\n├── z.txt\n"

    def test_exclusion_not_inherited_by_renderer(self, deep_result):
        # Only the directory itself is marked; its children still render
        text = render_tree_text(deep_result.directory_structure, 0, {"repo/sub": False})
        assert "sub/" not in text
        assert "    ├── c.py\n" in text
        assert "        ├── d.md\n" in text

    def test_empty_tree(self):
        assert render_tree_text([]) == ""


class TestRenderTreeDetails:
    def test_annotations(self, small_result):
        assert render_tree_details(small_result.directory_structure) == (
            "└── repo/  (1 tokens)\n"
            "├── a.txt  (1 tokens, 2 Bytes)\n"
            "├── sub/  (0 tokens)\n"
            "    ├── b.bin  (0 tokens, 5 Bytes, skipped: Binary file)\n"
        )

    def test_directory_totals_cover_subtree(self, deep_result):
        text = render_tree_details(deep_result.directory_structure)
        assert "└── repo/  (5 tokens)\n" in text
        assert "├── sub/  (3 tokens)\n" in text
        assert "    ├── deep/  (1 tokens)\n" in text

    def test_honours_inclusion(self, deep_result):
        tree = deep_result.directory_structure
        inclusion = set_inclusion({}, "repo/sub", False, tree)
        text = render_tree_details(tree, inclusion)
        assert [line.split("  (")[0] for line in text.splitlines()] == [
            "└── repo/", "├── a.txt", "├── z.txt",
        ]

    def test_empty_tree(self):
        assert render_tree_details([]) == ""


class TestExports:
    def test_summary(self, small_result):
        assert render_summary(small_result) == (
            "Repository: repo\n"
            "Files analyzed: 1\n"
            "Estimated tokens: 0.0k"
        )

    def test_format_token_count(self):
        assert format_token_count(0) == "0.0k"
        assert format_token_count(1234) == "1.2k"
        assert format_token_count(15060) == "15.1k"

    def test_tree_section(self, small_result):
        assert render_tree_section(small_result.directory_structure) == (
            "Directory structure:\n└── repo/\n├── a.txt\n├── sub/\n    ├── b.bin\n"
        )

    def test_full_export_exact(self, small_result):
        assert render_full_export(small_result, {}) == (
            "Repository: repo\n"
            "Files analyzed: 1\n"
            "Estimated tokens: 0.0k\n"
            "\n"
            "Directory structure:\n"
            "└── repo/\n"
            "├── a.txt\n"
            "├── sub/\n"
            "    ├── b.bin\n"
            "\n"
            "\n"
            "Files Content:\n"
            "\n"
            "--- repo/a.txt ---\n"
            "\n"
            "hi\n"
            "\n"
        )

    def test_full_export_with_excluded_directory(self, deep_result):
        inclusion = set_inclusion({}, "repo/sub", False, deep_result.directory_structure)
        export = render_full_export(deep_result, inclusion)

        assert "Files analyzed: 2\n" in export
        assert "sub/" not in export
        assert "c.py" not in export
        assert "d.md" not in export
        assert "--- repo/a.txt ---\n\nA\n\n" in export
        assert "--- repo/z.txt ---\n\nZ\n\n" in export

    def test_excluding_directory_drops_binary_file(self, small_result):
        inclusion = set_inclusion({}, "repo/sub", False, small_result.directory_structure)
        export = render_full_export(small_result, inclusion)
        assert "b.bin" not in export
        assert "a.txt" in export

    def test_file_contents_follow_flat_order(self, deep_result):
        blocks = render_file_contents(deep_result)
        order = [blocks.index(f"--- {p} ---") for p in
                 ["repo/a.txt", "repo/sub/c.py", "repo/sub/deep/d.md", "repo/z.txt"]]
        assert order == sorted(order)

    def test_files_without_content_skipped(self, small_result):
        assert "b.bin" not in render_file_contents(small_result)


class TestFormatFileSize:
    @pytest.mark.parametrize("size,expected", [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1023, "1023 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (1048576, "1 MB"),
        (1234567, "1.18 MB"),
        (5 * 1024 ** 3, "5 GB"),
        (100, "100 Bytes"),
        (1234567 * 1024 ** 3, "1234567 GB"),
    ])
    def test_sizes(self, size, expected):
        assert format_file_size(size) == expected


class TestExportFilename:
    def test_plain_name(self):
        assert export_filename("repo") == "repo_analysis.txt"

    def test_unsafe_characters(self):
        assert export_filename('my:repo?') == "my_repo__analysis.txt"

    def test_empty_name(self):
        assert export_filename("") == "repository_analysis.txt"
