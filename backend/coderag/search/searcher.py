"""Semantic search functionality."""

from __future__ import annotations

import dataclasses
import logging
from typing import List

from ..core import CollectionInfo, Embedder, SearchHit
from ..storage import VectorStore
from .dedup import deduplicate_results

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5
DEFAULT_MIN_SCORE = 0.15
DEFAULT_SIMILAR_MIN_SCORE = 0.18
EXPLAIN_LIMIT = 5
EXPLAIN_MIN_SCORE = 0.6


@dataclasses.dataclass
class CodeExplanation:
    """A file together with related chunks found elsewhere in the index."""

    file_path: str
    content: str
    related: List[SearchHit]


class CodeSearcher:

    def __init__(self, embedder: Embedder, store: VectorStore):
        self.embedder = embedder
        self.store = store

    def search(
        self,
        query: str,
        limit: int = DEFAULT_LIMIT,
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> List[SearchHit]:
        """Search for code chunks semantically similar to a natural language query.

        Args:
            query: Search query text
            limit: Maximum number of hits requested from the store
            min_score: Hits scoring below this are not returned

        Returns:
            Hits best first, with overlapping chunks of the same file removed
        """
        logger.info(f"Semantic search: {query!r} (limit={limit}, min_score={min_score})")
        return self._search_vector(self.embedder.embed_one(query), limit, min_score)

    def find_similar(
        self,
        snippet: str,
        limit: int = DEFAULT_LIMIT,
        min_score: float = DEFAULT_SIMILAR_MIN_SCORE,
    ) -> List[SearchHit]:
        """Find stored chunks similar to a code snippet."""
        logger.info(f"Finding similar code ({len(snippet)} chars, limit={limit})")
        return self._search_vector(self.embedder.embed_one(snippet), limit, min_score)

    def explain(self, file_path: str, focus: str = "") -> CodeExplanation:
        """Read a file and look up related code in other files.

        Args:
            file_path: File to explain
            focus: Optional aspect to steer the lookup, e.g. ``callers``

        Returns:
            CodeExplanation with the file content and related hits, none of
            them from ``file_path`` itself

        Raises:
            OSError: If the file cannot be read
        """
        logger.info(f"Explaining code: {file_path} (focus={focus!r})")
        with open(file_path, "r", encoding="utf-8", errors="replace") as f:
            content = f.read()

        query = f"code related to {file_path} {focus}"
        hits = self._search_vector(self.embedder.embed_one(query), EXPLAIN_LIMIT, EXPLAIN_MIN_SCORE)
        related = [hit for hit in hits if hit.file_path != file_path]
        return CodeExplanation(file_path=file_path, content=content, related=related)

    def _search_vector(self, vector: List[float], limit: int, min_score: float) -> List[SearchHit]:
        hits = self.store.search(vector, limit, min_score)
        return deduplicate_results(hits)

    def index_stats(self) -> CollectionInfo:
        return self.store.get_collection_info()


def format_compact(hit: SearchHit) -> str:
    return f"{hit.file_path}:{hit.start_line}-{hit.end_line} (score: {hit.score:.3f}, {hit.language})"


def format_hit(hit: SearchHit, excerpt_lines: int = 0) -> str:
    """Render a hit with its code, optionally keeping only the first lines."""
    content = hit.content
    if excerpt_lines > 0:
        lines = content.split("\n")
        if len(lines) > excerpt_lines:
            content = "\n".join(lines[:excerpt_lines])
            content += f"\n... ({len(lines) - excerpt_lines} more lines)"
    header = f"{hit.score:0.4f}  {hit.file_path}:{hit.start_line}-{hit.end_line}"
    return f"{header}\n```{hit.language}\n{content.rstrip()}\n```\n"
