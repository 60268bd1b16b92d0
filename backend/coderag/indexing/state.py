"""Persisted, resumable record of indexing progress."""

from __future__ import annotations

import dataclasses
import enum
import logging
import os
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

STATE_FILE_NAME = ".indexing_state.json"


class IndexStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = frozenset({IndexStatus.COMPLETED, IndexStatus.FAILED})


class InvalidStatusTransition(ValueError):
    """Raised when a terminal status would be changed."""


class ProgressDocument(BaseModel):
    """On-disk layout of the state file."""

    root_path: str
    total_files: int = 0
    indexed_files: int = 0
    total_chunks: int = 0
    processed_files: List[str] = Field(default_factory=list)
    failed_files: Dict[str, str] = Field(default_factory=dict)
    # size:mtime of processed files, used to skip unchanged files on the next run
    file_fingerprints: Dict[str, str] = Field(default_factory=dict)
    file_chunks: Dict[str, int] = Field(default_factory=dict)
    status: IndexStatus = IndexStatus.IN_PROGRESS
    start_time: datetime
    last_update: datetime
    completion_time: Optional[datetime] = None


@dataclasses.dataclass(frozen=True)
class ProgressStats:
    """Point-in-time copy of a ProgressState, safe to hand to other threads."""

    root_path: str
    total_files: int
    indexed_files: int
    failed_files: Dict[str, str]
    total_chunks: int
    progress: float
    status: IndexStatus
    start_time: datetime
    last_update: datetime
    completion_time: Optional[datetime] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completion_time is None:
            return None
        return (self.completion_time - self.start_time).total_seconds()


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ProgressState:
    """Progress of one indexing run.

    All access goes through methods that serialize on an internal lock, so a
    progress query from another thread never observes a half-applied update.
    """

    def __init__(self, document: ProgressDocument):
        self._lock = threading.Lock()
        self._root_path = document.root_path
        self._total_files = document.total_files
        self._indexed_files = document.indexed_files
        self._total_chunks = document.total_chunks
        self._processed = set(document.processed_files)
        self._failed = dict(document.failed_files)
        self._fingerprints = dict(document.file_fingerprints)
        self._chunks = dict(document.file_chunks)
        self._status = document.status
        self._start_time = document.start_time
        self._last_update = document.last_update
        self._completion_time = document.completion_time

    @classmethod
    def new(cls, root_path: str) -> "ProgressState":
        now = _now()
        return cls(ProgressDocument(root_path=root_path, start_time=now, last_update=now))

    @classmethod
    def load(cls, path: str) -> Optional["ProgressState"]:
        """Load a state file, or ``None`` if it is missing or unreadable."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not read state file {path}: {e}")
            return None

        try:
            return cls(ProgressDocument.model_validate_json(raw))
        except ValidationError as e:
            logger.warning(f"Ignoring corrupt state file {path}: {e}")
            return None

    def save(self, path: str) -> None:
        """Overwrite the state file with the full document.

        The document is written to a sibling temp file first and moved into
        place, so readers see either the previous or the new version.
        """
        with self._lock:
            document = self._to_document()
        data = document.model_dump_json(indent=2)

        tmp_path = f"{path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError:
            try:
                os.remove(tmp_path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Could not remove temp state file {tmp_path}: {e}")
            raise

    def _to_document(self) -> ProgressDocument:
        return ProgressDocument(
            root_path=self._root_path,
            total_files=self._total_files,
            indexed_files=self._indexed_files,
            total_chunks=self._total_chunks,
            processed_files=sorted(self._processed),
            failed_files=dict(self._failed),
            file_fingerprints=dict(self._fingerprints),
            file_chunks=dict(self._chunks),
            status=self._status,
            start_time=self._start_time,
            last_update=self._last_update,
            completion_time=self._completion_time,
        )

    def reopened(self) -> "ProgressState":
        """Copy of this state back in ``in_progress``, used to resume a failed run."""
        with self._lock:
            document = self._to_document()
        return ProgressState(
            document.model_copy(
                update={"status": IndexStatus.IN_PROGRESS, "completion_time": None, "last_update": _now()}
            )
        )

    @property
    def root_path(self) -> str:
        return self._root_path

    @property
    def status(self) -> IndexStatus:
        with self._lock:
            return self._status

    def set_total_files(self, total: int) -> None:
        with self._lock:
            self._total_files = total
            self._last_update = _now()

    def mark_processed(self, file_path: str, chunk_count: int, fingerprint: Optional[str] = None) -> None:
        """Record a file as fully indexed. Repeated calls are ignored."""
        with self._lock:
            if file_path in self._processed:
                return
            self._processed.add(file_path)
            self._failed.pop(file_path, None)
            self._chunks[file_path] = chunk_count
            if fingerprint is not None:
                self._fingerprints[file_path] = fingerprint
            self._indexed_files += 1
            self._total_chunks += chunk_count
            self._last_update = _now()

    def mark_failed(self, file_path: str, error_message: str) -> None:
        with self._lock:
            if file_path in self._processed:
                return
            self._failed[file_path] = error_message or "unknown error"
            self._last_update = _now()

    def is_processed(self, file_path: str) -> bool:
        with self._lock:
            return file_path in self._processed

    def is_failed(self, file_path: str) -> bool:
        with self._lock:
            return file_path in self._failed

    def processed_files(self) -> List[str]:
        with self._lock:
            return sorted(self._processed)

    def processed_entry(self, file_path: str) -> Optional[Tuple[int, Optional[str]]]:
        """``(chunk_count, fingerprint)`` of a processed file, else ``None``."""
        with self._lock:
            if file_path not in self._processed:
                return None
            return self._chunks.get(file_path, 0), self._fingerprints.get(file_path)

    def set_status(self, status: IndexStatus) -> None:
        """Move to ``status``. Only ``in_progress`` may be left."""
        status = IndexStatus(status)
        with self._lock:
            if status == self._status:
                return
            if self._status in TERMINAL_STATUSES:
                raise InvalidStatusTransition(
                    f"cannot change status from {self._status.value} to {status.value}"
                )
            self._status = status
            self._last_update = _now()
            if status in TERMINAL_STATUSES:
                self._completion_time = self._last_update

    def _progress(self) -> float:
        if self._total_files == 0:
            return 0.0
        return self._indexed_files / self._total_files * 100

    def progress(self) -> float:
        """Indexed files as a percentage of the total."""
        with self._lock:
            return self._progress()

    def stats(self) -> ProgressStats:
        with self._lock:
            return ProgressStats(
                root_path=self._root_path,
                total_files=self._total_files,
                indexed_files=self._indexed_files,
                failed_files=dict(self._failed),
                total_chunks=self._total_chunks,
                progress=self._progress(),
                status=self._status,
                start_time=self._start_time,
                last_update=self._last_update,
                completion_time=self._completion_time,
            )


def should_resume(persisted: Optional[ProgressState], root_path: str) -> bool:
    """A persisted run is resumed only for the same root and if not completed."""
    if persisted is None:
        return False
    return persisted.root_path == root_path and persisted.status != IndexStatus.COMPLETED
