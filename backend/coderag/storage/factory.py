"""Factory for creating vector store instances."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, Optional

from .base import VectorStore
from .qdrant import make_vector_store


def collection_name_for(repo_path: Path) -> str:
    """Derive a valid collection name from a directory name."""
    name = re.sub(r"[^a-zA-Z0-9_-]", "_", repo_path.name)
    if name and not name[0].isalpha() and name[0] != "_":
        name = "_" + name
    return name or "_root"


def create_vector_store(
    cfg: Dict,
    repo_path: Optional[Path] = None,
    collection_name: Optional[str] = None,
) -> VectorStore:
    """Build the configured store.

    The collection is, in order of preference, ``collection_name``, the
    configured ``vector_store.collection_name``, or one derived from
    ``repo_path``.
    """
    if not collection_name:
        collection_name = cfg.get("vector_store", {}).get("collection_name")
    if not collection_name and repo_path is not None:
        collection_name = collection_name_for(repo_path)
    return make_vector_store(cfg, collection_name=collection_name)
