"""Shared fakes for the embedding service and the vector store."""

from __future__ import annotations

from typing import Dict, List, Optional, Set

import pytest

from coderag.core import CollectionInfo, Embedder, FileFilter, SearchHit, StoredPoint
from coderag.storage import VectorStore


class FakeEmbedder(Embedder):
    """Deterministic embedder that records every batch it is asked for."""

    def __init__(self, dim: int = 4, fail_on_calls: Optional[Set[int]] = None) -> None:
        self.dim = dim
        self.calls: List[List[str]] = []
        self.fail_on_calls = fail_on_calls or set()

    @property
    def dimension(self) -> int:
        return self.dim

    def embed(self, texts: List[str]) -> List[List[float]]:
        call_no = len(self.calls)
        self.calls.append(list(texts))
        if call_no in self.fail_on_calls:
            raise RuntimeError("embedding service unavailable")
        return [[float(len(t))] + [0.0] * (self.dim - 1) for t in texts]

    @property
    def embedded_texts(self) -> List[str]:
        return [t for call in self.calls for t in call]


class FakeVectorStore(VectorStore):
    """In-memory store that records calls and can be told to fail."""

    def __init__(
        self,
        collection_name: str = "test",
        fail_delete_for: Optional[Set[str]] = None,
        fail_upsert: bool = False,
        search_results: Optional[List[SearchHit]] = None,
    ) -> None:
        self.collection_name = collection_name
        self.exists = False
        self.created_dims: List[int] = []
        self.points: Dict[str, StoredPoint] = {}
        self.upsert_calls: List[List[StoredPoint]] = []
        self.deleted: List[str] = []
        self.search_calls: List[tuple] = []
        self.fail_delete_for = fail_delete_for or set()
        self.fail_upsert = fail_upsert
        self.search_results = search_results or []

    def create_collection(self, vector_dim: int) -> None:
        self.exists = True
        self.created_dims.append(vector_dim)

    def collection_exists(self) -> bool:
        return self.exists

    def upsert(self, points: List[StoredPoint]) -> None:
        if self.fail_upsert:
            raise RuntimeError("storage unavailable")
        self.upsert_calls.append(list(points))
        for p in points:
            self.points[p.id] = p

    def search(self, query_vector: List[float], limit: int, min_score: float) -> List[SearchHit]:
        self.search_calls.append((query_vector, limit, min_score))
        return list(self.search_results)

    def delete(self, file_filter: FileFilter) -> None:
        self.deleted.append(file_filter.file_path)
        if file_filter.file_path in self.fail_delete_for:
            raise RuntimeError("delete failed")
        self.points = {
            pid: p for pid, p in self.points.items() if p.payload.file_path != file_filter.file_path
        }

    def get_collection_info(self) -> CollectionInfo:
        return CollectionInfo(points_count=len(self.points), vector_dim=self.created_dims[-1] if self.created_dims else 0)

    def paths(self) -> Set[str]:
        return {p.payload.file_path for p in self.points.values()}

    @property
    def call_count(self) -> int:
        return len(self.upsert_calls) + len(self.deleted) + len(self.search_calls) + len(self.created_dims)


def write_lines(path, count: int, prefix: str = "line") -> str:
    """Write ``count`` numbered lines to ``path`` and return the path as str."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{prefix} {i}\n" for i in range(1, count + 1)), encoding="utf-8")
    return str(path)


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def store() -> FakeVectorStore:
    return FakeVectorStore()
