"""Semantic search and result deduplication."""

from .dedup import deduplicate_results, is_overlapping, overlap_length
from .searcher import CodeExplanation, CodeSearcher, format_compact, format_hit

__all__ = [
    "deduplicate_results",
    "is_overlapping",
    "overlap_length",
    "CodeExplanation",
    "CodeSearcher",
    "format_compact",
    "format_hit",
]
