"""Configuration management for coderag."""

from __future__ import annotations

import copy
import logging
import os
from typing import Dict, List

logger = logging.getLogger(__name__)

DEFAULT_FILE_EXTENSIONS: List[str] = [
    ".go", ".py", ".js", ".ts", ".tf", ".yaml", ".yml", ".md",
]

DEFAULT_CONFIG: Dict = {
    "version": "1.0.0",
    "log_level": "INFO",
    "file_extensions": DEFAULT_FILE_EXTENSIONS,
    "max_file_size": 1024 * 1024,
    "chunk_size": 50,
    "chunk_overlap": 10,
    "indexing": {
        "file_batch_size": 50,
        "chunk_batch_size": 100,
        "batch_delay_seconds": 0.1,
        "state_dir": ".",
    },
    "embedding": {
        # sentence_transformers | local | lmstudio | openai
        "backend": "sentence_transformers",
        "sentence_transformers_model": "sentence-transformers/all-MiniLM-L6-v2",
        "model": "nomic-ai/nomic-embed-text-v1.5-GGUF",
        "base_url": "http://localhost:1234/v1",
        "api_key": "",
        "dimension": 768,
        "max_batch_size": 20,
        "timeout": 120,
    },
    "search": {
        "top_k": 5,
        "min_score": 0.15,
        "similar_min_score": 0.18,
    },
    "reindex": {
        "marker_name": ".code-rag-pending-reindex",
    },
    "vector_store": {
        "backend": "qdrant",
        "collection_name": "code_embeddings",
        "qdrant": {
            "host": "localhost",
            "port": 6333,
            "api_key": "",
        },
    },
}

# env var -> (section path, key, converter)
_ENV_OVERRIDES = {
    "QDRANT_HOST": (("vector_store", "qdrant"), "host", str),
    "QDRANT_PORT": (("vector_store", "qdrant"), "port", int),
    "QDRANT_API_KEY": (("vector_store", "qdrant"), "api_key", str),
    "CODERAG_COLLECTION": (("vector_store",), "collection_name", str),
    "CODERAG_EMBEDDING_BACKEND": (("embedding",), "backend", str),
    "CODERAG_EMBEDDING_MODEL": (("embedding",), "model", str),
    "CODERAG_EMBEDDING_DIM": (("embedding",), "dimension", int),
    "OPENAI_API_KEY": (("embedding",), "api_key", str),
    "LM_STUDIO_URL": (("embedding",), "base_url", str),
    "CODERAG_STATE_DIR": (("indexing",), "state_dir", str),
    "CODERAG_LOG_LEVEL": ((), "log_level", str),
}


def load_config() -> Dict:
    """Load configuration.

    Returns a copy of the default configuration with environment overrides
    applied. Invalid numeric overrides are logged and ignored.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    for env_name, (section_path, key, convert) in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is None or raw == "":
            continue
        section = config
        for part in section_path:
            section = section[part]
        try:
            section[key] = convert(raw)
        except ValueError:
            logger.warning(f"Ignoring invalid value for {env_name}: {raw!r}")

    return config
