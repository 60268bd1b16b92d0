"""Core functionality for coderag."""

from .models import ChunkPayload, CodeChunk, CollectionInfo, FileFilter, SearchHit, StoredPoint
from .chunking import ChunkingError, LineChunker, detect_language, embedding_text
from .embeddings import (
    Embedder,
    EmbeddingError,
    OpenAICompatibleEmbedder,
    SentenceTransformersEmbedder,
    make_embedder,
)

__all__ = [
    "ChunkPayload",
    "CodeChunk",
    "CollectionInfo",
    "FileFilter",
    "SearchHit",
    "StoredPoint",
    "ChunkingError",
    "LineChunker",
    "detect_language",
    "embedding_text",
    "Embedder",
    "EmbeddingError",
    "OpenAICompatibleEmbedder",
    "SentenceTransformersEmbedder",
    "make_embedder",
]
