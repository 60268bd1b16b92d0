"""Abstract vector storage interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..core.models import CollectionInfo, FileFilter, SearchHit, StoredPoint


class VectorStore(ABC):
    """Abstract base class for vector storage backends.

    An instance is bound to a single collection.
    """

    collection_name: str

    @abstractmethod
    def create_collection(self, vector_dim: int) -> None:
        """Create the collection with the given vector dimension."""

    @abstractmethod
    def collection_exists(self) -> bool:
        """Check whether the collection exists."""

    def ensure_collection(self, vector_dim: int) -> None:
        """Create the collection unless it already exists."""
        if not self.collection_exists():
            self.create_collection(vector_dim)

    @abstractmethod
    def upsert(self, points: List[StoredPoint]) -> None:
        """Insert or replace points."""

    @abstractmethod
    def search(self, query_vector: List[float], limit: int, min_score: float) -> List[SearchHit]:
        """Return up to ``limit`` hits scoring at least ``min_score``, best first."""

    @abstractmethod
    def delete(self, file_filter: FileFilter) -> None:
        """Delete every point matching the filter."""

    @abstractmethod
    def get_collection_info(self) -> CollectionInfo:
        """Point count and vector dimension of the collection."""
