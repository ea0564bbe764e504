"""Shared types and dataclasses for upload operations.

This module provides:
- UploadError, InitError, ChunkError, FinishError: Task failure classes
- UploadFile: A local file to upload
- Task: One file's upload attempt and its lifecycle state
- Type aliases for callbacks
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from intray.core.chunking import ChunkRange, read_chunk
from intray.core.types import IntrayError, TaskState


class UploadError(IntrayError):
    """Failed to upload a file.

    Attributes:
        cause: The underlying exception, if any.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class InitError(UploadError):
    """The start phase was rejected or the server was unreachable."""


class ChunkError(UploadError):
    """A chunk exhausted its retry budget.

    Attributes:
        index: Index of the chunk that failed.
    """

    def __init__(self, index: int, cause: BaseException | None = None) -> None:
        super().__init__(f"Chunk {index} failed: {cause}", cause)
        self.index = index


class FinishError(UploadError):
    """The finish phase was rejected or the server was unreachable."""


# Callback type aliases
TaskProgressCallback = Callable[[float], None]
ProgressCallback = Callable[[int, float], None]
DoneCallback = Callable[[int, float], None]
FailedCallback = Callable[[int, UploadError], None]


@dataclass(frozen=True)
class UploadFile:
    """A local file selected for upload.

    The size is captured once, when the file is selected.

    Attributes:
        path: Path to the file on disk.
        name: Name sent to the server.
        size: Size in bytes.
    """

    path: Path
    name: str
    size: int

    @classmethod
    def from_path(cls, path: Path | str, name: str | None = None) -> UploadFile:
        """Create from a path on disk.

        Raises:
            FileNotFoundError: If the path does not exist.
            IsADirectoryError: If the path is a directory.
        """
        path = Path(path)
        if path.is_dir():
            raise IsADirectoryError(f"Not a file: {path}")
        size = path.stat().st_size
        return cls(path=path, name=name or path.name, size=size)

    def read(self, chunk: ChunkRange) -> bytes:
        """Read one chunk of the file."""
        return read_chunk(self.path, chunk)

    def read_all(self) -> bytes:
        """Read the whole file (used for one-shot uploads of small files)."""
        return self.path.read_bytes()


@dataclass(eq=False)
class Task:
    """One file's upload attempt.

    A task is PENDING while queued, IN_PROGRESS while a single worker owns
    it, then DONE or FAILED for good. Resubmitting a file creates a new task.

    Attributes:
        id: Unique id, assigned in submission order.
        file: The file being uploaded.
        progress_callback: Optional handler receiving the progress fraction.
        state: Current lifecycle state.
        progress: Fraction of chunks uploaded, in [0, 1].
        error: Failure reason once FAILED.
        elapsed_ms: Wall-clock duration from the start call once DONE.
    """

    id: int
    file: UploadFile
    progress_callback: TaskProgressCallback | None = None
    state: TaskState = TaskState.PENDING
    progress: float = 0.0
    error: UploadError | None = None
    elapsed_ms: float | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def begin(self) -> None:
        """Claim the task for a worker.

        Raises:
            RuntimeError: If the task is not PENDING (already claimed or finished).
        """
        with self._lock:
            if self.state != TaskState.PENDING:
                raise RuntimeError(f"Task {self.id} cannot start from state {self.state.value}")
            self.state = TaskState.IN_PROGRESS

    def set_progress(self, progress: float) -> None:
        """Record progress and forward it to the progress callback."""
        with self._lock:
            if self.state != TaskState.IN_PROGRESS:
                raise RuntimeError(f"Task {self.id} is not in progress")
            self.progress = progress
        if self.progress_callback:
            self.progress_callback(progress)

    def complete(self, elapsed_ms: float) -> None:
        """Mark the task DONE."""
        with self._lock:
            self._check_not_terminal()
            self.state = TaskState.DONE
            self.elapsed_ms = elapsed_ms

    def fail(self, error: UploadError) -> None:
        """Mark the task FAILED, keeping its partial progress."""
        with self._lock:
            self._check_not_terminal()
            self.state = TaskState.FAILED
            self.error = error

    def _check_not_terminal(self) -> None:
        if self.state.is_terminal:
            raise RuntimeError(f"Task {self.id} already {self.state.value}")

    @property
    def is_finished(self) -> bool:
        """Check if the task reached DONE or FAILED."""
        return self.state.is_terminal

    def __repr__(self) -> str:
        return (
            f"Task(id={self.id}, file={self.file.name!r}, "
            f"state={self.state.value}, progress={self.progress:.3f})"
        )
