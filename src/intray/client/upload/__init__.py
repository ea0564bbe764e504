"""Concurrent chunked upload engine.

This package provides:
- UploadEngine: Task queue plus worker pool, the main entry point
- FileUploader: Start/chunk/finish protocol client for one task
- TaskQueue: Thread-safe FIFO of pending tasks
- WorkerPool, UploadWorker: Fixed set of upload threads
- UploadCallbacks, LoggingSink: Progress and result hooks
- Task, UploadFile and the UploadError hierarchy
"""

from intray.client.upload.engine import UploadEngine
from intray.client.upload.queue import TaskQueue
from intray.client.upload.retry import retry_with_backoff
from intray.client.upload.sink import LoggingSink, ProgressSink, UploadCallbacks
from intray.client.upload.transfer import FileUploader
from intray.client.upload.types import (
    ChunkError,
    FinishError,
    InitError,
    Task,
    UploadError,
    UploadFile,
)
from intray.client.upload.workers import (
    PoolState,
    UploadWorker,
    WorkerPool,
    WorkerResult,
    WorkerState,
)

__all__ = [
    # Engine
    "UploadEngine",
    # Protocol
    "FileUploader",
    "retry_with_backoff",
    # Queue and workers
    "PoolState",
    "TaskQueue",
    "UploadWorker",
    "WorkerPool",
    "WorkerResult",
    "WorkerState",
    # Callbacks
    "LoggingSink",
    "ProgressSink",
    "UploadCallbacks",
    # Types
    "ChunkError",
    "FinishError",
    "InitError",
    "Task",
    "UploadError",
    "UploadFile",
]
