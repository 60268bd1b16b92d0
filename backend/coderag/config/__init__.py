"""Configuration management for coderag."""

from .manager import (
    DEFAULT_CONFIG,
    DEFAULT_FILE_EXTENSIONS,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_FILE_EXTENSIONS",
    "load_config",
]
