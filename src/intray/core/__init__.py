"""Core module - Chunking, configuration and shared types."""

from intray.core.chunking import (
    DEFAULT_CHUNK_SIZE,
    ChunkRange,
    chunk_count,
    read_chunk,
    slice_chunks,
)
from intray.core.config import ServerConfig, UploadConfig
from intray.core.types import IntrayError, InvalidConfig, TaskState

__all__ = [
    # Chunking
    "DEFAULT_CHUNK_SIZE",
    "ChunkRange",
    "chunk_count",
    "read_chunk",
    "slice_chunks",
    # Config
    "ServerConfig",
    "UploadConfig",
    # Types
    "IntrayError",
    "InvalidConfig",
    "TaskState",
]
