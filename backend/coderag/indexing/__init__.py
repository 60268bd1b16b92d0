"""Indexing functionality for coderag."""

from .base import Indexer, build_points
from .collector import FileCollectionError, collect_files, file_fingerprint, file_priority
from .pipeline import IndexingPipeline, RunOutcome, RunPhase
from .reindex import ReindexCoordinator, ReindexError, ReindexResult, read_pending_marker, reindex_pending
from .state import (
    STATE_FILE_NAME,
    IndexStatus,
    InvalidStatusTransition,
    ProgressState,
    ProgressStats,
    should_resume,
)

__all__ = [
    "Indexer",
    "build_points",
    "FileCollectionError",
    "collect_files",
    "file_fingerprint",
    "file_priority",
    "IndexingPipeline",
    "RunOutcome",
    "RunPhase",
    "ReindexCoordinator",
    "ReindexError",
    "ReindexResult",
    "read_pending_marker",
    "reindex_pending",
    "STATE_FILE_NAME",
    "IndexStatus",
    "InvalidStatusTransition",
    "ProgressState",
    "ProgressStats",
    "should_resume",
]
