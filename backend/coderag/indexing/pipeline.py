"""Resumable, batched indexing of a directory tree."""

from __future__ import annotations

import enum
import logging
import os
import threading
import time
from collections import defaultdict
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from ..core import ChunkingError, CodeChunk, Embedder, FileFilter, LineChunker
from ..storage import VectorStore
from .base import Indexer
from .collector import MAX_FILE_SIZE, FileCollectionError, collect_files, file_fingerprint
from .state import IndexStatus, ProgressState, should_resume

logger = logging.getLogger(__name__)

FILE_BATCH_SIZE = 50
CHUNK_BATCH_SIZE = 100
BATCH_DELAY_SECONDS = 0.1


class RunOutcome(str, enum.Enum):
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"


class RunPhase(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    INTERRUPTED = "interrupted"


class IndexingPipeline(Indexer):
    """Indexes a directory in file batches, persisting progress after each one.

    A run that is interrupted (crash or cancellation) resumes from the state
    file on the next call with the same root: files already marked processed
    are never re-embedded.
    """

    def __init__(
        self,
        embedder: Embedder,
        store: VectorStore,
        state_path: str,
        chunker: Optional[LineChunker] = None,
        file_batch_size: int = FILE_BATCH_SIZE,
        chunk_batch_size: int = CHUNK_BATCH_SIZE,
        batch_delay: float = BATCH_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        super().__init__(embedder, store, chunker)
        self.state_path = state_path
        self.file_batch_size = max(1, file_batch_size)
        self.chunk_batch_size = max(1, chunk_batch_size)
        self.batch_delay = batch_delay
        self._sleep = sleep
        self._state: Optional[ProgressState] = None
        self._phase = RunPhase.NOT_STARTED

    @property
    def state(self) -> Optional[ProgressState]:
        return self._state

    @property
    def phase(self) -> RunPhase:
        return self._phase

    def reset_state(self) -> None:
        """Remove the state file so the next run starts fresh."""
        try:
            os.remove(self.state_path)
        except FileNotFoundError:
            pass
        self._state = None
        self._phase = RunPhase.NOT_STARTED

    def index_directory(
        self,
        root_path: str,
        extensions: Iterable[str],
        cancel_event: Optional[threading.Event] = None,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> RunOutcome:
        """Index ``root_path``, resuming a previous unfinished run if possible.

        When the previous run over the same root completed, a new run is
        started, but files unchanged since then are carried over without being
        embedded again. Changed and removed files have their old points deleted.

        Args:
            root_path: Directory to index
            extensions: File extensions to include, e.g. ``[".py", ".go"]``
            cancel_event: Checked before every batch; when set the state is
                saved and the run stops
            max_file_size: Larger files are skipped

        Returns:
            RunOutcome.COMPLETED or RunOutcome.INTERRUPTED

        Raises:
            FileCollectionError: If the tree cannot be traversed; the state is
                marked failed
        """
        root_path = os.path.abspath(root_path)
        persisted = ProgressState.load(self.state_path)
        state = self._load_or_create_state(persisted, root_path)
        self._state = state
        self._phase = RunPhase.IN_PROGRESS

        try:
            all_files = collect_files(root_path, extensions, max_file_size=max_file_size)
        except FileCollectionError:
            logger.exception(f"Failed to collect files under {root_path}")
            self._finish(RunPhase.FAILED, IndexStatus.FAILED)
            raise

        state.set_total_files(len(all_files))
        logger.info(f"Files to index: {len(all_files)}")

        stale: Set[str] = set()
        if (
            persisted is not None
            and persisted.root_path == root_path
            and persisted.status == IndexStatus.COMPLETED
        ):
            stale, removed = self._carry_forward(persisted, all_files)
            for file_path in removed:
                self._delete_points(file_path)

        files_to_process = [f for f in all_files if not state.is_processed(f)]
        logger.info(f"Files remaining: {len(files_to_process)}")

        if not files_to_process:
            self._finish(RunPhase.COMPLETED, IndexStatus.COMPLETED)
            logger.info("Indexing already complete")
            return RunOutcome.COMPLETED

        try:
            self.store.ensure_collection(self.embedder.dimension)
        except Exception:
            logger.exception(f"Could not prepare collection '{self.store.collection_name}'")
            self._finish(RunPhase.FAILED, IndexStatus.FAILED)
            raise

        for i in range(0, len(files_to_process), self.file_batch_size):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Indexing cancelled, saving state...")
                self._save_state()
                self._phase = RunPhase.INTERRUPTED
                return RunOutcome.INTERRUPTED

            batch = files_to_process[i:i + self.file_batch_size]
            self._process_batch(batch, stale)
            self._save_state()

            stats = state.stats()
            logger.info(
                f"Progress update: {stats.indexed_files}/{stats.total_files} files "
                f"({stats.progress:.1f}%), {stats.total_chunks} chunks"
            )

        self._finish(RunPhase.COMPLETED, IndexStatus.COMPLETED)
        stats = state.stats()
        logger.info(
            f"Indexing complete: {stats.indexed_files} files, {stats.total_chunks} chunks, "
            f"{len(stats.failed_files)} failed"
        )
        return RunOutcome.COMPLETED

    def _load_or_create_state(self, persisted: Optional[ProgressState], root_path: str) -> ProgressState:
        if not should_resume(persisted, root_path):
            logger.info(f"Starting new indexing session for {root_path}")
            return ProgressState.new(root_path)

        if persisted.status == IndexStatus.FAILED:
            persisted = persisted.reopened()
        stats = persisted.stats()
        logger.info(
            f"Resuming indexing session for {root_path}: "
            f"{stats.indexed_files} files already indexed ({stats.progress:.1f}%)"
        )
        return persisted

    def _carry_forward(self, previous: ProgressState, all_files: List[str]) -> Tuple[Set[str], List[str]]:
        """Copy unchanged files of a completed run into the new state.

        Returns the files that changed since and the files that disappeared.
        """
        stale: Set[str] = set()
        for file_path in all_files:
            entry = previous.processed_entry(file_path)
            if entry is None:
                # A file that failed mid-batch may have left some chunks behind.
                if previous.is_failed(file_path):
                    stale.add(file_path)
                continue
            chunk_count, fingerprint = entry
            if fingerprint is not None and fingerprint == file_fingerprint(file_path):
                self._state.mark_processed(file_path, chunk_count, fingerprint)
            else:
                stale.add(file_path)

        current = set(all_files)
        removed = [f for f in previous.processed_files() if f not in current]
        if stale or removed:
            logger.info(f"Since the last run: {len(stale)} files changed, {len(removed)} removed")
        return stale, removed

    def _finish(self, phase: RunPhase, status: IndexStatus) -> None:
        self._state.set_status(status)
        self._save_state()
        self._phase = phase

    def _save_state(self) -> None:
        try:
            self._state.save(self.state_path)
        except OSError as e:
            logger.warning(f"Failed to save state to {self.state_path}: {e}")

    def _delete_points(self, file_path: str) -> None:
        try:
            self.store.delete(FileFilter(file_path=file_path))
        except Exception as e:
            logger.warning(f"Failed to delete old chunks for {file_path}: {e}")

    def _process_batch(self, files: List[str], stale: Set[str]) -> None:
        """Chunk, embed and store one batch of files.

        Unreadable files are marked failed and skipped. If embedding or storage
        fails, the rest of the batch is abandoned and the files whose chunks
        were not all stored are marked failed so a later run retries them.
        """
        state = self._state
        expected: Dict[str, int] = {}
        fingerprints: Dict[str, Optional[str]] = {}
        batch_chunks: List[CodeChunk] = []

        for file_path in files:
            # Old points of changed or previously failed files may still be stored.
            if file_path in stale or state.is_failed(file_path):
                self._delete_points(file_path)

            fingerprint = file_fingerprint(file_path)
            try:
                chunks = self.chunker.chunk_file(file_path)
            except ChunkingError as e:
                logger.warning(f"Failed to chunk file {file_path}: {e}")
                state.mark_failed(file_path, str(e))
                continue

            if not chunks:
                state.mark_processed(file_path, 0, fingerprint)
                continue

            expected[file_path] = len(chunks)
            fingerprints[file_path] = fingerprint
            batch_chunks.extend(chunks)

        if not batch_chunks:
            return

        stored: Dict[str, int] = defaultdict(int)
        try:
            for i in range(0, len(batch_chunks), self.chunk_batch_size):
                if i > 0:
                    self._sleep(self.batch_delay)
                sub_batch = batch_chunks[i:i + self.chunk_batch_size]
                self.index_chunks(sub_batch)

                for chunk in sub_batch:
                    stored[chunk.file_path] += 1
                for file_path in {c.file_path for c in sub_batch}:
                    if stored[file_path] == expected[file_path]:
                        state.mark_processed(file_path, expected[file_path], fingerprints[file_path])
        except Exception as e:
            logger.error(f"Batch processing failed ({len(files)} files): {e}")
            for file_path in expected:
                state.mark_failed(file_path, f"batch indexing failed: {e}")
