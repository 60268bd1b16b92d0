"""Resumable incremental code indexing over a vector store."""

__version__ = "1.0.0"
