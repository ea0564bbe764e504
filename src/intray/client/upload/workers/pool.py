"""Worker pool for concurrent uploads.

This module provides:
- PoolState: Enum for pool lifecycle states
- WorkerPool: Fixed set of worker threads sharing one task queue
"""

from __future__ import annotations

import logging
import threading
from enum import Enum, auto
from typing import TYPE_CHECKING

from intray.client.upload.workers.upload_worker import UploadWorker, WorkerState
from intray.core.config import DEFAULT_WORKER_COUNT
from intray.core.types import InvalidConfig

if TYPE_CHECKING:
    from intray.client.upload.queue import TaskQueue
    from intray.client.upload.sink import ProgressSink
    from intray.client.upload.transfer import FileUploader
    from intray.client.upload.workers.upload_worker import WorkerResult

logger = logging.getLogger(__name__)

# Seconds an idle worker waits on the queue before re-checking the pool state
DEFAULT_POLL_INTERVAL = 0.5


class PoolState(Enum):
    """State of the worker pool."""

    STOPPED = auto()
    RUNNING = auto()
    STOPPING = auto()


class WorkerPool:
    """Pool of upload worker threads.

    Each thread owns one UploadWorker and loops: take the oldest task from
    the queue, upload it to completion, take the next one. The pool size
    is fixed; it does not grow with the queue.

    Stopping is graceful. Workers stop taking tasks, and a worker in the
    middle of a task finishes it before its thread exits. Tasks still in
    the queue stay PENDING.

    Usage:
        pool = WorkerPool(queue, uploader, sink, worker_count=3)
        pool.start()
        queue.put(task)
        pool.stop()
    """

    def __init__(
        self,
        queue: TaskQueue,
        uploader: FileUploader,
        sink: ProgressSink,
        worker_count: int = DEFAULT_WORKER_COUNT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        """Initialize the worker pool.

        Args:
            queue: Queue the workers take tasks from.
            uploader: Protocol client shared by all workers.
            sink: Receives done/failed notifications.
            worker_count: Number of worker threads.
            poll_interval: Seconds between pool state checks while idle.

        Raises:
            InvalidConfig: If worker_count is less than 1.
        """
        if worker_count < 1:
            raise InvalidConfig(f"worker_count must be at least 1, got {worker_count}")

        self._queue = queue
        self._uploader = uploader
        self._sink = sink
        self._worker_count = worker_count
        self._poll_interval = poll_interval

        # Pool state
        self._pool_state = PoolState.STOPPED
        self._lock = threading.Lock()

        # Worker threads
        self._workers: list[UploadWorker] = []
        self._threads: list[threading.Thread] = []

        # Statistics
        self._completed_count = 0
        self._failed_count = 0

    @property
    def state(self) -> PoolState:
        """Get current pool state."""
        return self._pool_state

    @property
    def worker_count(self) -> int:
        """Number of worker threads."""
        return self._worker_count

    @property
    def active_count(self) -> int:
        """Get number of workers currently uploading."""
        return sum(1 for w in self._workers if w.state == WorkerState.RUNNING)

    @property
    def completed_count(self) -> int:
        """Get number of tasks that succeeded."""
        return self._completed_count

    @property
    def failed_count(self) -> int:
        """Get number of tasks that failed."""
        return self._failed_count

    def start(self) -> None:
        """Start the worker threads.

        Raises:
            RuntimeError: If the queue was closed by a previous stop().
        """
        with self._lock:
            if self._pool_state != PoolState.STOPPED:
                logger.warning("Worker pool already running")
                return
            if self._queue.is_closed:
                raise RuntimeError("Cannot start a pool on a closed queue")

            self._pool_state = PoolState.RUNNING

            for i in range(self._worker_count):
                worker = UploadWorker(self._uploader, self._sink, name=f"Worker[{i}]")
                thread = threading.Thread(
                    target=self._worker_loop,
                    args=(worker,),
                    name=f"UploadWorker-{i}",
                    daemon=True,
                )
                self._workers.append(worker)
                self._threads.append(thread)
                thread.start()

            logger.info(f"Worker pool started with {self._worker_count} workers")

    def stop(self, timeout: float | None = None) -> bool:
        """Stop the worker pool, letting in-flight tasks finish.

        Args:
            timeout: Maximum seconds to wait for workers (None = wait for
                every in-flight task).

        Returns:
            True if every worker thread exited in time.
        """
        with self._lock:
            if self._pool_state == PoolState.STOPPED:
                self._queue.close()
                return True

            self._pool_state = PoolState.STOPPING
            logger.info("Worker pool stopping...")
            self._queue.close()
            threads = list(self._threads)

        per_thread = None if timeout is None else timeout / len(threads)
        for thread in threads:
            thread.join(timeout=per_thread)

        stopped = not any(thread.is_alive() for thread in threads)

        with self._lock:
            self._pool_state = PoolState.STOPPED
            self._threads.clear()
            self._workers.clear()

        if stopped:
            logger.info("Worker pool stopped")
        else:
            logger.warning("Worker pool stopped with uploads still in flight")
        return stopped

    def _worker_loop(self, worker: UploadWorker) -> None:
        """Main loop for worker threads."""
        logger.debug(f"{worker.name} started")

        while self._pool_state == PoolState.RUNNING:
            task = self._queue.get(timeout=self._poll_interval)
            if task is None:
                if self._queue.is_closed:
                    break
                continue

            try:
                result = worker.execute(task)
                self._record(result)
            except Exception:
                logger.exception(f"Unexpected error in {worker.name} loop")
            finally:
                self._queue.task_done()

        logger.debug(f"{worker.name} ends")

    def _record(self, result: WorkerResult) -> None:
        with self._lock:
            if result.success:
                self._completed_count += 1
            else:
                self._failed_count += 1
