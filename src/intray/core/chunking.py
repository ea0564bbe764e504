"""Fixed-size chunking for intray uploads.

This module provides:
- ChunkRange: A contiguous byte range of a file
- slice_chunks: Compute the ordered ranges covering a file
- read_chunk: Read one range from disk without loading the whole file

Chunk boundaries are positional, not content-defined: chunk ``i`` always
covers ``[i * chunk_size, min((i + 1) * chunk_size, file_size))``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from intray.core.types import InvalidConfig

# Chunk size configuration (in bytes)
DEFAULT_CHUNK_SIZE = 4 * 1024 * 1024  # 4 MiB


@dataclass(frozen=True)
class ChunkRange:
    """Represents one chunk of a file by its byte range.

    Attributes:
        index: Position of the chunk, starting at 0.
        start: Offset of the first byte (inclusive).
        end: Offset after the last byte (exclusive).
    """

    index: int
    start: int
    end: int

    @property
    def size(self) -> int:
        """Return the size of this chunk in bytes."""
        return self.end - self.start


def chunk_count(file_size: int, chunk_size: int) -> int:
    """Number of chunks needed to cover ``file_size`` bytes.

    Raises:
        InvalidConfig: If chunk_size is not positive or file_size is negative.
    """
    if chunk_size <= 0:
        raise InvalidConfig(f"chunk_size must be positive, got {chunk_size}")
    if file_size < 0:
        raise InvalidConfig(f"file_size must not be negative, got {file_size}")
    return -(-file_size // chunk_size)


def slice_chunks(file_size: int, chunk_size: int) -> list[ChunkRange]:
    """Split a file of ``file_size`` bytes into fixed-size ranges.

    The ranges are contiguous, non-overlapping and together cover exactly
    ``[0, file_size)``. Only the last range may be shorter than chunk_size.
    An empty file yields no ranges.

    Args:
        file_size: Size of the file in bytes.
        chunk_size: Maximum size of each chunk in bytes.

    Returns:
        Chunk ranges in ascending index order.

    Raises:
        InvalidConfig: If chunk_size is not positive or file_size is negative.
    """
    count = chunk_count(file_size, chunk_size)
    return [
        ChunkRange(
            index=index,
            start=index * chunk_size,
            end=min((index + 1) * chunk_size, file_size),
        )
        for index in range(count)
    ]


def read_chunk(path: Path, chunk: ChunkRange) -> bytes:
    """Read the bytes of one chunk from a file.

    Args:
        path: Path to the file.
        chunk: Range to read.

    Returns:
        Exactly ``chunk.size`` bytes.

    Raises:
        FileNotFoundError: If the file does not exist.
        OSError: If the file is shorter than the chunk end.
    """
    with open(path, "rb") as f:
        f.seek(chunk.start)
        data = f.read(chunk.size)

    if len(data) != chunk.size:
        raise OSError(
            f"Short read on {path}: chunk {chunk.index} expected "
            f"{chunk.size} bytes, got {len(data)}"
        )
    return data
