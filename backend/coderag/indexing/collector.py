"""Prioritized discovery of files to index."""

from __future__ import annotations

import logging
import os
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 1024 * 1024
DEFAULT_PRIORITY = 99

# Lower number = indexed earlier.
PRIORITY_DIRS = {
    "middleware": 1,
    "api": 2,
    "src": 3,
    "lib": 4,
    "core": 5,
    "utils": 6,
    "services": 7,
    "models": 8,
    "routes": 9,
    "handlers": 10,
}

SKIP_DIRS = frozenset({
    "node_modules",
    ".git",
    "vendor",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
    "coverage",
    "test",
    "tests",
    "__tests__",
    "spec",
    "specs",
    "mocks",
    "fixtures",
    ".next",
    ".nuxt",
    "target",
    "bin",
})


class FileCollectionError(Exception):
    """Raised when the directory tree cannot be fully traversed."""


def is_skipped_dir(name: str) -> bool:
    return name in SKIP_DIRS or name.startswith(".")


def file_priority(rel_path: str) -> int:
    """Priority of a file from the first recognised directory in its path."""
    dir_parts = rel_path.replace("\\", "/").split("/")[:-1]
    for part in dir_parts:
        if part in PRIORITY_DIRS:
            return PRIORITY_DIRS[part]
    return DEFAULT_PRIORITY


def file_fingerprint(file_path: str) -> Optional[str]:
    """Cheap change marker for a file (size and mtime), ``None`` if it cannot be stat'ed."""
    try:
        st = os.stat(file_path)
    except OSError:
        return None
    return f"{st.st_size}:{st.st_mtime_ns}"


def _raise_walk_error(err: OSError) -> None:
    raise FileCollectionError(f"failed to walk {err.filename}: {err}") from err


def collect_files(
    root_path: str,
    extensions: Iterable[str],
    max_file_size: int = MAX_FILE_SIZE,
) -> List[str]:
    """Walk ``root_path`` and return the files to index, most important first.

    Deny-listed and hidden directories are pruned. Files must carry one of
    ``extensions`` and be at most ``max_file_size`` bytes. The result is
    ordered by directory priority, then by path.

    Raises:
        FileCollectionError: On any traversal or stat failure
    """
    allowed = set(extensions)
    files: List[Tuple[int, str]] = []

    for dirpath, dirnames, filenames in os.walk(root_path, onerror=_raise_walk_error):
        dirnames[:] = [d for d in dirnames if not is_skipped_dir(d)]

        for fname in filenames:
            _, ext = os.path.splitext(fname)
            if ext not in allowed:
                continue

            file_path = os.path.join(dirpath, fname)
            try:
                size = os.stat(file_path).st_size
            except OSError as e:
                raise FileCollectionError(f"failed to stat {file_path}: {e}") from e

            if size > max_file_size:
                logger.debug(f"Skipping large file {file_path} ({size} bytes)")
                continue

            rel_path = os.path.relpath(file_path, root_path)
            files.append((file_priority(rel_path), file_path))

    files.sort()
    return [path for _, path in files]
