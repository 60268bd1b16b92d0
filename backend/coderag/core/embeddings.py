"""Embedding models for semantic search."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class EmbeddingError(RuntimeError):
    """Raised when an embedding backend fails or answers with a bad payload."""


class Embedder:
    """Abstract base class for embedding models.

    ``embed`` is order-preserving and atomic: it returns exactly one vector per
    input text or raises.
    """

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed multiple texts into vectors."""
        raise NotImplementedError

    def embed_one(self, text: str) -> List[float]:
        """Embed a single text into a vector."""
        return self.embed([text])[0]

    @property
    def dimension(self) -> int:
        raise NotImplementedError


class SentenceTransformersEmbedder(Embedder):
    """Embedder using SentenceTransformers library."""

    def __init__(self, model_name: str) -> None:
        from sentence_transformers import SentenceTransformer  # type: ignore
        self.model = SentenceTransformer(model_name)

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed texts using SentenceTransformers model."""
        if not texts:
            return []
        arr = self.model.encode(texts, normalize_embeddings=True, show_progress_bar=False)
        return [row.tolist() for row in arr]

    @property
    def dimension(self) -> int:
        return int(self.model.get_sentence_embedding_dimension())


class OpenAICompatibleEmbedder(Embedder):
    """Embedder for any server speaking the OpenAI ``/embeddings`` API.

    Covers LM Studio (no key) and OpenAI itself. Large inputs are split into
    requests of at most ``max_batch_size`` texts; a failure in any request fails
    the whole call.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        dimension: int,
        api_key: Optional[str] = None,
        max_batch_size: int = 20,
        timeout: float = 120.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._dimension = dimension
        self.max_batch_size = max(1, max_batch_size)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json"}
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, texts: List[str]) -> List[List[float]]:
        vectors: List[List[float]] = []
        for i in range(0, len(texts), self.max_batch_size):
            batch = texts[i:i + self.max_batch_size]
            try:
                vectors.extend(self._embed_direct(batch))
            except EmbeddingError as e:
                raise EmbeddingError(
                    f"failed to embed sub-batch [{i}:{i + len(batch)}]: {e}"
                ) from e
        return vectors

    def _embed_direct(self, texts: List[str]) -> List[List[float]]:
        url = f"{self.base_url}/embeddings"
        try:
            response = self.session.post(
                url,
                headers=self.headers,
                json={"model": self.model, "input": texts},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise EmbeddingError(f"request to {url} failed: {e}") from e

        if response.status_code != 200:
            raise EmbeddingError(
                f"embedding server returned status {response.status_code}: {response.text[:500]}"
            )

        try:
            data = response.json()["data"]
        except (ValueError, KeyError, TypeError) as e:
            raise EmbeddingError(f"failed to decode embedding response: {e}") from e

        if len(data) != len(texts):
            raise EmbeddingError(f"expected {len(texts)} embeddings, got {len(data)}")

        ordered = sorted(data, key=lambda item: item.get("index", 0))
        return [list(item["embedding"]) for item in ordered]


def make_embedder(cfg: Dict) -> Embedder:
    """Create embedder from config.

    Args:
        cfg: Configuration dictionary

    Returns:
        Embedder instance

    Raises:
        ValueError: If the configured backend is unknown
    """
    emb_cfg = cfg.get("embedding", {})
    backend = str(emb_cfg.get("backend", "sentence_transformers")).strip().lower()

    if backend == "sentence_transformers":
        model_name = emb_cfg.get("sentence_transformers_model", "all-MiniLM-L6-v2")
        logger.info(f"Loading sentence-transformers model {model_name}")
        return SentenceTransformersEmbedder(model_name)

    if backend in ("local", "lmstudio", "openai"):
        base_url = emb_cfg.get("base_url", "http://localhost:1234/v1")
        if backend == "openai":
            base_url = emb_cfg.get("openai_base_url", "https://api.openai.com/v1")
            if not emb_cfg.get("api_key"):
                raise ValueError("embedding.api_key (OPENAI_API_KEY) is required for the openai backend")
        return OpenAICompatibleEmbedder(
            base_url=base_url,
            model=emb_cfg.get("model", ""),
            dimension=int(emb_cfg.get("dimension", 768)),
            api_key=emb_cfg.get("api_key") or None,
            max_batch_size=int(emb_cfg.get("max_batch_size", 20)),
            timeout=float(emb_cfg.get("timeout", 120)),
        )

    raise ValueError(f"invalid embedding.backend: {backend!r}")
