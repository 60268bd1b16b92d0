"""Data models for coderag."""

from __future__ import annotations

import dataclasses
from typing import Any, Dict, List

# Payload keys stored alongside every vector.
FILE_PATH_KEY = "file_path"
CONTENT_KEY = "content"
START_LINE_KEY = "line_start"
END_LINE_KEY = "line_end"
LANGUAGE_KEY = "language"
INDEXED_AT_KEY = "_indexed_at"


@dataclasses.dataclass(frozen=True)
class CodeChunk:
    """A contiguous, 1-based inclusive line range of one file."""

    file_path: str
    content: str
    start_line: int
    end_line: int
    language: str

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


@dataclasses.dataclass(frozen=True)
class ChunkPayload:
    """Closed payload schema attached to a stored point."""

    file_path: str
    content: str
    start_line: int
    end_line: int
    language: str
    indexed_at: str

    @classmethod
    def from_chunk(cls, chunk: CodeChunk, indexed_at: str) -> "ChunkPayload":
        return cls(
            file_path=chunk.file_path,
            content=chunk.content,
            start_line=chunk.start_line,
            end_line=chunk.end_line,
            language=chunk.language,
            indexed_at=indexed_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            FILE_PATH_KEY: self.file_path,
            CONTENT_KEY: self.content,
            START_LINE_KEY: self.start_line,
            END_LINE_KEY: self.end_line,
            LANGUAGE_KEY: self.language,
            INDEXED_AT_KEY: self.indexed_at,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ChunkPayload":
        return cls(
            file_path=str(payload.get(FILE_PATH_KEY, "")),
            content=str(payload.get(CONTENT_KEY, "")),
            start_line=int(payload.get(START_LINE_KEY, 0)),
            end_line=int(payload.get(END_LINE_KEY, 0)),
            language=str(payload.get(LANGUAGE_KEY, "")),
            indexed_at=str(payload.get(INDEXED_AT_KEY, "")),
        )


@dataclasses.dataclass(frozen=True)
class FileFilter:
    """Storage filter selecting every point of one file."""

    file_path: str


@dataclasses.dataclass
class StoredPoint:
    """A vector plus its payload, as submitted to the vector store."""

    id: str
    vector: List[float]
    payload: ChunkPayload


@dataclasses.dataclass(frozen=True)
class SearchHit:
    """One similarity search result."""

    id: str
    score: float
    file_path: str
    content: str
    start_line: int
    end_line: int
    language: str

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


@dataclasses.dataclass(frozen=True)
class CollectionInfo:
    points_count: int
    vector_dim: int
