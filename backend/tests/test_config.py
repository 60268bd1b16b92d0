"""Tests for configuration loading and collection naming."""

from __future__ import annotations

from pathlib import Path

import pytest

from coderag.config import DEFAULT_CONFIG, load_config
from coderag.storage import collection_name_for


class TestLoadConfig:
    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("QDRANT_PORT", raising=False)
        monkeypatch.delenv("CODERAG_COLLECTION", raising=False)
        cfg = load_config()
        assert cfg["chunk_size"] == 50
        assert cfg["chunk_overlap"] == 10
        assert cfg["indexing"]["file_batch_size"] == 50
        assert cfg["indexing"]["chunk_batch_size"] == 100
        assert cfg["reindex"]["marker_name"] == ".code-rag-pending-reindex"
        assert cfg["vector_store"]["collection_name"] == "code_embeddings"

    def test_env_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("QDRANT_HOST", "qdrant.internal")
        monkeypatch.setenv("QDRANT_PORT", "7000")
        monkeypatch.setenv("CODERAG_COLLECTION", "my_repo")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

        cfg = load_config()
        assert cfg["vector_store"]["qdrant"]["host"] == "qdrant.internal"
        assert cfg["vector_store"]["qdrant"]["port"] == 7000
        assert cfg["vector_store"]["collection_name"] == "my_repo"
        assert cfg["embedding"]["api_key"] == "sk-test"

    def test_invalid_int_is_ignored(self, monkeypatch) -> None:
        monkeypatch.setenv("QDRANT_PORT", "not-a-port")
        assert load_config()["vector_store"]["qdrant"]["port"] == 6333

    def test_defaults_are_not_mutated(self, monkeypatch) -> None:
        monkeypatch.setenv("QDRANT_HOST", "elsewhere")
        cfg = load_config()
        cfg["file_extensions"].append(".rs")

        assert DEFAULT_CONFIG["vector_store"]["qdrant"]["host"] == "localhost"
        assert ".rs" not in DEFAULT_CONFIG["file_extensions"]


class TestCollectionName:
    @pytest.mark.parametrize(
        "dirname, expected",
        [
            ("my-repo", "my-repo"),
            ("my repo.v2", "my_repo_v2"),
            ("2024-project", "_2024-project"),
            ("_private", "_private"),
        ],
    )
    def test_sanitized(self, dirname: str, expected: str) -> None:
        assert collection_name_for(Path("/work") / dirname) == expected

    def test_root(self) -> None:
        assert collection_name_for(Path("/")) == "_root"
