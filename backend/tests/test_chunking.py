"""Tests for LineChunker: fixed-size overlapping line windows."""

from __future__ import annotations

import pytest

from coderag.core import ChunkingError, LineChunker, detect_language, embedding_text
from coderag.core.models import CodeChunk


def _text(n: int) -> str:
    return "\n".join(f"line {i}" for i in range(1, n + 1))


@pytest.fixture
def chunker() -> LineChunker:
    return LineChunker()


class TestWindows:
    def test_exactly_chunk_size_gives_one_chunk(self, chunker: LineChunker) -> None:
        chunks = chunker.chunk_text(_text(50), "a.py")
        assert [(c.start_line, c.end_line) for c in chunks] == [(1, 50)]

    def test_trailing_newline_does_not_add_a_chunk(self, chunker: LineChunker) -> None:
        chunks = chunker.chunk_text(_text(50) + "\n", "a.py")
        assert len(chunks) == 1

    def test_stride_is_size_minus_overlap(self, chunker: LineChunker) -> None:
        chunks = chunker.chunk_text(_text(120), "a.py")
        assert [(c.start_line, c.end_line) for c in chunks] == [(1, 50), (41, 90), (81, 120)]

    def test_terminal_chunk_may_be_short(self, chunker: LineChunker) -> None:
        chunks = chunker.chunk_text(_text(95), "a.py")
        assert [(c.start_line, c.end_line) for c in chunks] == [(1, 50), (41, 90), (81, 95)]

    def test_stops_after_window_reaching_last_line(self, chunker: LineChunker) -> None:
        # 90 lines: the second window ends exactly on the last line.
        chunks = chunker.chunk_text(_text(90), "a.py")
        assert [(c.start_line, c.end_line) for c in chunks] == [(1, 50), (41, 90)]

    @pytest.mark.parametrize("n", [1, 7, 49, 51, 89, 91, 333, 1000])
    def test_coverage(self, chunker: LineChunker, n: int) -> None:
        chunks = chunker.chunk_text(_text(n), "a.py")
        covered = set()
        for c in chunks:
            covered.update(range(c.start_line, c.end_line + 1))
        assert covered == set(range(1, n + 1))
        assert chunks[-1].end_line == n
        assert chunks[0].start_line == 1

    def test_content_matches_line_range(self, chunker: LineChunker) -> None:
        chunks = chunker.chunk_text(_text(60), "a.py")
        assert chunks[1].content.splitlines()[0] == "line 41"
        assert chunks[1].content.splitlines()[-1] == "line 60"


class TestEmptyInput:
    def test_empty_text(self, chunker: LineChunker) -> None:
        assert chunker.chunk_text("", "a.py") == []

    def test_blank_text(self, chunker: LineChunker) -> None:
        assert chunker.chunk_text("\n   \n\t\n", "a.py") == []

    def test_blank_window_dropped(self, chunker: LineChunker) -> None:
        text = _text(10) + "\n" + "\n" * 100
        chunks = chunker.chunk_text(text, "a.py")
        assert [(c.start_line, c.end_line) for c in chunks] == [(1, 50)]


class TestConfiguration:
    def test_overlap_must_be_smaller_than_size(self) -> None:
        with pytest.raises(ValueError):
            LineChunker(chunk_size=10, overlap=10)

    def test_size_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            LineChunker(chunk_size=0, overlap=0)

    def test_custom_window(self) -> None:
        chunks = LineChunker(chunk_size=4, overlap=1).chunk_text(_text(10), "a.py")
        assert [(c.start_line, c.end_line) for c in chunks] == [(1, 4), (4, 7), (7, 10)]


class TestChunkFile:
    def test_reads_and_tags_language(self, chunker: LineChunker, tmp_path) -> None:
        path = tmp_path / "main.go"
        path.write_text(_text(3), encoding="utf-8")
        chunks = chunker.chunk_file(str(path))
        assert len(chunks) == 1
        assert chunks[0].language == "go"
        assert chunks[0].file_path == str(path)

    def test_missing_file_raises(self, chunker: LineChunker, tmp_path) -> None:
        with pytest.raises(ChunkingError):
            chunker.chunk_file(str(tmp_path / "nope.py"))

    def test_invalid_utf8_is_replaced(self, chunker: LineChunker, tmp_path) -> None:
        path = tmp_path / "bin.py"
        path.write_bytes(b"ok\n\xff\xfe bad\n")
        chunks = chunker.chunk_file(str(path))
        assert len(chunks) == 1
        assert "�" in chunks[0].content


class TestLanguage:
    @pytest.mark.parametrize(
        "path, lang",
        [
            ("x.py", "python"),
            ("x.yml", "yaml"),
            ("x.tf", "terraform"),
            ("x.hpp", "cpp"),
            ("x.h", "c"),
            ("Makefile", "unknown"),
            ("x.PY", "unknown"),
        ],
    )
    def test_detect_language(self, path: str, lang: str) -> None:
        assert detect_language(path) == lang

    def test_embedding_text_includes_file_context(self) -> None:
        chunk = CodeChunk(file_path="/repo/api/h.go", content="func X() {}", start_line=1, end_line=1, language="go")
        assert embedding_text(chunk) == "File: h.go\nLanguage: go\nCode:\nfunc X() {}"
