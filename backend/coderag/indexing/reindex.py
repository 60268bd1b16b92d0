"""Targeted delete-and-rebuild of specific files."""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Dict, Iterable, List

from ..core import ChunkingError, CodeChunk, FileFilter
from .base import Indexer

logger = logging.getLogger(__name__)


class ReindexError(RuntimeError):
    """Raised when the combined embed/upsert of a reindex request fails."""


@dataclasses.dataclass
class ReindexResult:
    files_requested: int = 0
    files_deleted: int = 0
    files_reindexed: int = 0
    files_missing: int = 0
    total_chunks: int = 0
    delete_errors: Dict[str, str] = dataclasses.field(default_factory=dict)


class ReindexCoordinator(Indexer):
    """Refreshes the stored chunks of an explicit list of files.

    Every file first has all its points deleted, since line ranges may have
    shifted. Files that still exist are re-chunked, and all new chunks are
    embedded and stored together once every file has been visited.
    """

    def reindex_files(self, file_paths: Iterable[str]) -> ReindexResult:
        """Re-index ``file_paths``.

        Raises:
            ReindexError: If embedding or storing the new chunks fails
        """
        paths = [p.strip() for p in file_paths if p and p.strip()]
        result = ReindexResult(files_requested=len(paths))
        logger.info(f"Re-indexing {len(paths)} files")

        all_chunks: List[CodeChunk] = []
        for file_path in paths:
            try:
                self.store.delete(FileFilter(file_path=file_path))
                result.files_deleted += 1
            except Exception as e:
                logger.warning(f"Failed to delete old chunks for {file_path}: {e}")
                result.delete_errors[file_path] = str(e)

            if not os.path.exists(file_path):
                logger.info(f"File deleted, skipping re-indexing: {file_path}")
                result.files_missing += 1
                continue

            try:
                chunks = self.chunker.chunk_file(file_path)
            except ChunkingError as e:
                logger.warning(f"Failed to chunk file {file_path}: {e}")
                continue

            if not chunks:
                logger.debug(f"No chunks generated for {file_path}")
                continue

            all_chunks.extend(chunks)
            result.files_reindexed += 1

        if not all_chunks:
            logger.info("No chunks to re-index")
            return result

        try:
            self.index_chunks(all_chunks)
        except Exception as e:
            raise ReindexError(f"failed to index {len(all_chunks)} chunks: {e}") from e

        result.total_chunks = len(all_chunks)
        logger.info(
            f"Re-indexing complete: {result.files_reindexed} files re-indexed, "
            f"{result.files_deleted} deleted, {result.total_chunks} chunks"
        )
        return result


def read_pending_marker(marker_path: str) -> List[str]:
    """File paths listed in a pending-reindex marker; empty if there is none."""
    try:
        with open(marker_path, "r", encoding="utf-8") as f:
            return f.read().split()
    except FileNotFoundError:
        return []


def reindex_pending(coordinator: ReindexCoordinator, marker_path: str) -> ReindexResult:
    """Consume a pending-reindex marker.

    The marker is removed once its files were re-indexed (or if it lists none).
    On failure it is left in place so the request can be retried.
    """
    if not os.path.exists(marker_path):
        return ReindexResult()

    paths = read_pending_marker(marker_path)
    if paths:
        logger.info(f"Processing pending reindex from {marker_path} ({len(paths)} files)")
        result = coordinator.reindex_files(paths)
    else:
        result = ReindexResult()

    try:
        os.remove(marker_path)
    except OSError as e:
        logger.warning(f"Failed to remove marker file {marker_path}: {e}")
    return result
