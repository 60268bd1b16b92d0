"""Tests for file discovery and priority ordering."""

from __future__ import annotations

import os

import pytest

from coderag.indexing import FileCollectionError, collect_files, file_fingerprint, file_priority
from coderag.indexing.collector import DEFAULT_PRIORITY

from conftest import write_lines


def _rel(root, paths):
    return [os.path.relpath(p, root) for p in paths]


class TestPriority:
    @pytest.mark.parametrize(
        "rel_path, expected",
        [
            ("middleware/auth.go", 1),
            ("pkg/api/v1/h.go", 2),
            ("src/utils/x.py", 3),
            ("utils/x.py", 6),
            ("handlers/x.go", 10),
            ("main.go", DEFAULT_PRIORITY),
            ("other/pkg/x.go", DEFAULT_PRIORITY),
            # The file name itself does not count as a directory.
            ("api.go", DEFAULT_PRIORITY),
        ],
    )
    def test_file_priority(self, rel_path: str, expected: int) -> None:
        assert file_priority(rel_path) == expected

    def test_collection_order(self, tmp_path) -> None:
        write_lines(tmp_path / "z" / "main.go", 1)
        write_lines(tmp_path / "utils" / "b.go", 1)
        write_lines(tmp_path / "utils" / "a.go", 1)
        write_lines(tmp_path / "middleware" / "m.go", 1)
        write_lines(tmp_path / "api" / "h.go", 1)

        files = collect_files(str(tmp_path), [".go"])
        assert _rel(tmp_path, files) == [
            os.path.join("middleware", "m.go"),
            os.path.join("api", "h.go"),
            os.path.join("utils", "a.go"),
            os.path.join("utils", "b.go"),
            os.path.join("z", "main.go"),
        ]


class TestFiltering:
    def test_skip_dirs_and_hidden_dirs(self, tmp_path) -> None:
        write_lines(tmp_path / "keep.py", 1)
        write_lines(tmp_path / "node_modules" / "x.py", 1)
        write_lines(tmp_path / "tests" / "test_x.py", 1)
        write_lines(tmp_path / ".cache" / "x.py", 1)
        write_lines(tmp_path / "pkg" / "__pycache__" / "x.py", 1)

        assert _rel(tmp_path, collect_files(str(tmp_path), [".py"])) == ["keep.py"]

    def test_extension_filter(self, tmp_path) -> None:
        write_lines(tmp_path / "a.py", 1)
        write_lines(tmp_path / "b.txt", 1)
        write_lines(tmp_path / "c.go", 1)

        assert _rel(tmp_path, collect_files(str(tmp_path), [".py", ".go"])) == ["a.py", "c.go"]

    def test_size_ceiling_is_inclusive(self, tmp_path) -> None:
        (tmp_path / "exact.py").write_bytes(b"x" * 100)
        (tmp_path / "big.py").write_bytes(b"x" * 101)

        files = collect_files(str(tmp_path), [".py"], max_file_size=100)
        assert _rel(tmp_path, files) == ["exact.py"]

    def test_empty_tree(self, tmp_path) -> None:
        assert collect_files(str(tmp_path), [".py"]) == []


class TestErrors:
    def test_missing_root(self, tmp_path) -> None:
        with pytest.raises(FileCollectionError):
            collect_files(str(tmp_path / "missing"), [".py"])

    def test_dangling_symlink(self, tmp_path) -> None:
        os.symlink(str(tmp_path / "gone.py"), str(tmp_path / "link.py"))
        with pytest.raises(FileCollectionError):
            collect_files(str(tmp_path), [".py"])


class TestFingerprint:
    def test_changes_with_content(self, tmp_path) -> None:
        path = tmp_path / "a.py"
        path.write_text("one\n")
        before = file_fingerprint(str(path))
        path.write_text("one\ntwo\n")
        assert file_fingerprint(str(path)) != before

    def test_missing_file(self, tmp_path) -> None:
        assert file_fingerprint(str(tmp_path / "missing.py")) is None
