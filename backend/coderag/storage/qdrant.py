"""Qdrant vector database backend."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from qdrant_client import QdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    FilterSelector,
    MatchValue,
    PointStruct,
    VectorParams,
)

from ..core.models import (
    FILE_PATH_KEY,
    ChunkPayload,
    CollectionInfo,
    FileFilter,
    SearchHit,
    StoredPoint,
)
from .base import VectorStore

logger = logging.getLogger(__name__)


def _to_qdrant_filter(file_filter: FileFilter) -> Filter:
    return Filter(
        must=[FieldCondition(key=FILE_PATH_KEY, match=MatchValue(value=file_filter.file_path))]
    )


class QdrantVectorStore(VectorStore):

    def __init__(
        self,
        collection_name: str,
        host: str = "localhost",
        port: int = 6333,
        api_key: Optional[str] = None,
        client: Optional[QdrantClient] = None,
    ):
        self.host = host
        self.port = port
        self.collection_name = collection_name
        if client is None:
            # TLS is only used for hosted clusters, which always need a key.
            client = QdrantClient(host=host, port=port, api_key=api_key, https=bool(api_key))
        self.client = client

    def create_collection(self, vector_dim: int) -> None:
        self.client.create_collection(
            collection_name=self.collection_name,
            vectors_config=VectorParams(size=vector_dim, distance=Distance.COSINE),
        )
        logger.info(f"Created collection '{self.collection_name}' (dim={vector_dim})")

    def collection_exists(self) -> bool:
        return bool(self.client.collection_exists(collection_name=self.collection_name))

    def ensure_collection(self, vector_dim: int) -> None:
        if self.collection_exists():
            existing_dim = self.get_collection_info().vector_dim
            if existing_dim and existing_dim != vector_dim:
                raise ValueError(
                    f"Collection '{self.collection_name}' exists with dimension {existing_dim}, "
                    f"but the embedder produces dimension {vector_dim}. "
                    f"Please delete the collection and re-index."
                )
            return
        self.create_collection(vector_dim)

    def upsert(self, points: List[StoredPoint]) -> None:
        if not points:
            return
        self.client.upsert(
            collection_name=self.collection_name,
            points=[
                PointStruct(id=p.id, vector=p.vector, payload=p.payload.to_dict())
                for p in points
            ],
        )
        logger.debug(f"Upserted {len(points)} points into '{self.collection_name}'")

    def search(self, query_vector: List[float], limit: int, min_score: float) -> List[SearchHit]:
        try:
            results = self.client.query_points(
                collection_name=self.collection_name,
                query=query_vector,
                limit=limit,
                score_threshold=min_score,
                with_payload=True,
                with_vectors=False,
            )
        except Exception as e:
            logger.error(f"Error searching in collection '{self.collection_name}': {e}")
            raise

        hits: List[SearchHit] = []
        for point in results.points:
            payload = ChunkPayload.from_dict(point.payload or {})
            hits.append(
                SearchHit(
                    id=str(point.id),
                    score=float(point.score),
                    file_path=payload.file_path,
                    content=payload.content,
                    start_line=payload.start_line,
                    end_line=payload.end_line,
                    language=payload.language,
                )
            )
        return hits

    def delete(self, file_filter: FileFilter) -> None:
        self.client.delete(
            collection_name=self.collection_name,
            points_selector=FilterSelector(filter=_to_qdrant_filter(file_filter)),
            wait=True,
        )
        logger.debug(f"Deleted points for {file_filter.file_path}")

    def get_collection_info(self) -> CollectionInfo:
        info = self.client.get_collection(collection_name=self.collection_name)
        vectors = info.config.params.vectors
        vector_dim = getattr(vectors, "size", 0) or 0
        return CollectionInfo(points_count=int(info.points_count or 0), vector_dim=int(vector_dim))


def make_vector_store(cfg: Dict, collection_name: Optional[str] = None) -> VectorStore:
    vector_store_cfg = cfg.get("vector_store", {})
    qdrant_cfg = vector_store_cfg.get("qdrant", {})
    host = qdrant_cfg.get("host", "localhost")
    port = qdrant_cfg.get("port", 6333)
    api_key = qdrant_cfg.get("api_key") or None
    name = collection_name or vector_store_cfg.get("collection_name", "code_embeddings")

    return QdrantVectorStore(collection_name=name, host=host, port=port, api_key=api_key)
