"""Line-window chunking for source files."""

from __future__ import annotations

import logging
import os
from typing import List

from .models import CodeChunk

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 50
DEFAULT_CHUNK_OVERLAP = 10

EXT_TO_LANG = {
    ".go": "go",
    ".py": "python",
    ".js": "javascript",
    ".ts": "typescript",
    ".tf": "terraform",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".md": "markdown",
    ".json": "json",
    ".sh": "bash",
    ".rs": "rust",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".cc": "cpp",
}


class ChunkingError(Exception):
    """Raised when a file cannot be read for chunking."""


def detect_language(file_path: str) -> str:
    """Get language name from file extension, ``unknown`` if unmapped."""
    _, ext = os.path.splitext(file_path)
    return EXT_TO_LANG.get(ext, "unknown")


def embedding_text(chunk: CodeChunk) -> str:
    """Text sent to the embedder for a chunk, prefixed with file context."""
    return (
        f"File: {os.path.basename(chunk.file_path)}\n"
        f"Language: {chunk.language}\n"
        f"Code:\n{chunk.content}"
    )


class LineChunker:
    """Splits text into fixed-size, overlapping line windows.

    The window advances by ``chunk_size - overlap`` lines. Windows that are
    blank once stripped are dropped, and chunking stops after the window that
    reaches the last line, so the final chunk may be shorter than
    ``chunk_size``.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_CHUNK_OVERLAP):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0 or overlap >= chunk_size:
            raise ValueError(
                f"overlap must be in [0, chunk_size), got overlap={overlap} chunk_size={chunk_size}"
            )
        self.chunk_size = chunk_size
        self.overlap = overlap

    @property
    def stride(self) -> int:
        return self.chunk_size - self.overlap

    def chunk_text(self, text: str, file_path: str) -> List[CodeChunk]:
        """Chunk already-loaded text.

        Args:
            text: File content
            file_path: Path recorded on each chunk, also used for language detection

        Returns:
            List of CodeChunk with 1-based inclusive line numbers
        """
        lines = text.splitlines()
        total_lines = len(lines)
        language = detect_language(file_path)

        chunks: List[CodeChunk] = []
        start_idx = 0
        while start_idx < total_lines:
            end_idx = min(start_idx + self.chunk_size, total_lines)
            content = "\n".join(lines[start_idx:end_idx])
            if content.strip():
                chunks.append(
                    CodeChunk(
                        file_path=file_path,
                        content=content,
                        start_line=start_idx + 1,
                        end_line=end_idx,
                        language=language,
                    )
                )
            if end_idx == total_lines:
                break
            start_idx += self.stride

        return chunks

    def chunk_file(self, file_path: str) -> List[CodeChunk]:
        """Read a file and chunk it.

        Raises:
            ChunkingError: If the file cannot be read
        """
        try:
            with open(file_path, "r", encoding="utf-8", errors="replace") as f:
                text = f.read()
        except OSError as e:
            raise ChunkingError(f"failed to read {file_path}: {e}") from e

        chunks = self.chunk_text(text, file_path)
        logger.debug(f"Chunked {file_path} into {len(chunks)} chunks")
        return chunks
