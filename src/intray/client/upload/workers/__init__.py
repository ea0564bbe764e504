"""Workers for concurrent uploads.

This package provides:
- UploadWorker: Runs one upload task at a time and contains its failures
- WorkerPool: Manages the fixed set of worker threads

Usage:
    from intray.client.upload.workers import WorkerPool

    pool = WorkerPool(queue, uploader, sink, worker_count=3)
    pool.start()
    pool.stop()
"""

from intray.client.upload.workers.pool import PoolState, WorkerPool
from intray.client.upload.workers.upload_worker import (
    UploadWorker,
    WorkerResult,
    WorkerState,
)

__all__ = [
    # Worker
    "UploadWorker",
    "WorkerResult",
    "WorkerState",
    # Pool
    "PoolState",
    "WorkerPool",
]
