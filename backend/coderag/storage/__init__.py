"""Vector storage: the VectorStore interface and its Qdrant backend."""

from .base import VectorStore
from .factory import collection_name_for, create_vector_store
from .qdrant import QdrantVectorStore, make_vector_store

__all__ = [
    "VectorStore",
    "QdrantVectorStore",
    "collection_name_for",
    "create_vector_store",
    "make_vector_store",
]
