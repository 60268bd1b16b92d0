"""Shared embed-and-store step for indexers."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from ..core import ChunkPayload, CodeChunk, Embedder, LineChunker, StoredPoint, embedding_text
from ..storage import VectorStore


def build_points(chunks: List[CodeChunk], vectors: List[List[float]]) -> List[StoredPoint]:
    """Pair chunks with their vectors as new points with random ids."""
    if len(chunks) != len(vectors):
        raise ValueError(f"got {len(vectors)} vectors for {len(chunks)} chunks")
    indexed_at = datetime.now(timezone.utc).isoformat()
    return [
        StoredPoint(
            id=str(uuid.uuid4()),
            vector=list(vector),
            payload=ChunkPayload.from_chunk(chunk, indexed_at),
        )
        for chunk, vector in zip(chunks, vectors)
    ]


class Indexer:
    """Base class holding the collaborators every indexer needs."""

    def __init__(
        self,
        embedder: Embedder,
        store: VectorStore,
        chunker: Optional[LineChunker] = None,
    ):
        self.embedder = embedder
        self.store = store
        self.chunker = chunker or LineChunker()

    def index_chunks(self, chunks: List[CodeChunk]) -> None:
        """Embed ``chunks`` in one call and upsert them. Raises on any failure."""
        if not chunks:
            return
        vectors = self.embedder.embed([embedding_text(c) for c in chunks])
        self.store.upsert(build_points(chunks, vectors))
