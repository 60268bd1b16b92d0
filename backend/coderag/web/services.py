"""Long-lived collaborators shared by the HTTP routes."""

from __future__ import annotations

import dataclasses
import functools
import logging
import os
import threading
from typing import Dict, List, Optional

from ..config import load_config
from ..core import LineChunker, make_embedder
from ..indexing import (
    STATE_FILE_NAME,
    IndexingPipeline,
    ProgressState,
    ProgressStats,
    ReindexCoordinator,
)
from ..search import CodeSearcher
from ..storage import VectorStore, create_vector_store

logger = logging.getLogger(__name__)


class BackgroundIndexer:
    """Runs at most one IndexingPipeline run at a time on a worker thread."""

    def __init__(self, pipeline: IndexingPipeline, extensions: List[str], max_file_size: int):
        self.pipeline = pipeline
        self.extensions = list(extensions)
        self.max_file_size = max_file_size
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._cancel_event = threading.Event()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, root_path: str, extensions: Optional[List[str]] = None) -> bool:
        """Start a run in the background. Returns False if one is active."""
        with self._lock:
            if self.is_running:
                return False
            self._cancel_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(root_path, extensions or self.extensions, self._cancel_event),
                name="coderag-indexer",
                daemon=True,
            )
            self._thread.start()
            return True

    def _run(self, root_path: str, extensions: List[str], cancel_event: threading.Event) -> None:
        try:
            outcome = self.pipeline.index_directory(
                root_path,
                extensions,
                cancel_event=cancel_event,
                max_file_size=self.max_file_size,
            )
            logger.info(f"Background indexing of {root_path} finished: {outcome.value}")
        except Exception:
            logger.exception(f"Background indexing of {root_path} failed")

    def cancel(self) -> bool:
        """Ask the active run to stop at the next batch boundary."""
        if not self.is_running:
            return False
        self._cancel_event.set()
        return True

    def reset(self) -> bool:
        """Drop saved progress. Refused (False) while a run is active."""
        with self._lock:
            if self.is_running:
                return False
            self.pipeline.reset_state()
            return True

    def wait(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def stats(self) -> Optional[ProgressStats]:
        """Progress of the current run, or of the last persisted one."""
        state = self.pipeline.state
        if state is None:
            state = ProgressState.load(self.pipeline.state_path)
        return state.stats() if state is not None else None


@dataclasses.dataclass
class Services:
    cfg: Dict
    store: VectorStore
    indexer: BackgroundIndexer
    coordinator: ReindexCoordinator
    searcher: CodeSearcher


def build_services(cfg: Dict) -> Services:
    embedder = make_embedder(cfg)
    store = create_vector_store(cfg)
    chunker = LineChunker(chunk_size=int(cfg["chunk_size"]), overlap=int(cfg["chunk_overlap"]))

    indexing_cfg = cfg.get("indexing", {})
    state_path = os.path.join(indexing_cfg.get("state_dir", "."), STATE_FILE_NAME)
    pipeline = IndexingPipeline(
        embedder,
        store,
        state_path=state_path,
        chunker=chunker,
        file_batch_size=int(indexing_cfg.get("file_batch_size", 50)),
        chunk_batch_size=int(indexing_cfg.get("chunk_batch_size", 100)),
        batch_delay=float(indexing_cfg.get("batch_delay_seconds", 0.1)),
    )

    return Services(
        cfg=cfg,
        store=store,
        indexer=BackgroundIndexer(pipeline, cfg["file_extensions"], int(cfg["max_file_size"])),
        coordinator=ReindexCoordinator(embedder, store, chunker=chunker),
        searcher=CodeSearcher(embedder, store),
    )


@functools.lru_cache(maxsize=1)
def get_services() -> Services:
    return build_services(load_config())
