"""Upload engine coordinating concurrent file uploads.

This module provides:
- UploadEngine: Owns the task queue, the worker pool and task ids
"""

from __future__ import annotations

import itertools
import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from intray.client.upload.queue import TaskQueue
from intray.client.upload.sink import ProgressSink, UploadCallbacks
from intray.client.upload.transfer import FileUploader
from intray.client.upload.types import Task, UploadFile
from intray.client.upload.workers import PoolState, WorkerPool
from intray.core.config import UploadConfig

if TYPE_CHECKING:
    from collections.abc import Iterable

    from intray.client.api import IntrayClient
    from intray.client.upload.types import TaskProgressCallback

logger = logging.getLogger(__name__)


class UploadEngine:
    """Uploads files through a fixed pool of workers.

    Files are turned into tasks with increasing ids and served in
    submission order. Each task reports through the registered callbacks:
    progress after every chunk, then exactly one of done or failed.

    Usage:
        callbacks = UploadCallbacks(on_done=..., on_failed=...)
        with UploadEngine(client, UploadConfig(worker_count=3), callbacks) as engine:
            engine.submit_many(paths)
            engine.wait()
    """

    def __init__(
        self,
        client: IntrayClient,
        config: UploadConfig | None = None,
        callbacks: UploadCallbacks | None = None,
        uploader: FileUploader | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            client: HTTP client for server communication.
            config: Chunking, pool size and retry policy.
            callbacks: Progress and result hooks.
            uploader: Protocol client to use instead of a default FileUploader.
        """
        self._config = config or UploadConfig()
        self._sink = ProgressSink(callbacks)
        self._uploader = uploader or FileUploader(client, self._config)
        self._queue = TaskQueue()
        self._pool = WorkerPool(
            self._queue,
            self._uploader,
            self._sink,
            worker_count=self._config.worker_count,
        )
        self._ids = itertools.count(1)
        self._tasks: dict[int, Task] = {}
        self._lock = threading.Lock()

    @property
    def config(self) -> UploadConfig:
        """Engine configuration."""
        return self._config

    @property
    def pool(self) -> WorkerPool:
        """The worker pool."""
        return self._pool

    @property
    def is_running(self) -> bool:
        """Check if the workers are running."""
        return self._pool.state == PoolState.RUNNING

    @property
    def tasks(self) -> dict[int, Task]:
        """Every submitted task by id."""
        with self._lock:
            return dict(self._tasks)

    @property
    def pending(self) -> list[Task]:
        """Tasks still waiting for a worker, in queue order."""
        return self._queue.snapshot()

    def start(self) -> None:
        """Start the worker pool.

        Tasks submitted before start() are processed once it runs. An
        engine cannot be restarted after stop().
        """
        self._pool.start()

    def stop(self, timeout: float | None = None) -> bool:
        """Stop the workers once their current tasks are finished.

        Tasks still queued are left PENDING.

        Args:
            timeout: Maximum seconds to wait (None = wait for in-flight tasks).

        Returns:
            True if every worker exited in time.
        """
        stopped = self._pool.stop(timeout=timeout)
        remaining = len(self._queue)
        if remaining:
            logger.info(f"Upload engine stopped with {remaining} tasks still pending")
        return stopped

    def __enter__(self) -> UploadEngine:
        """Context manager entry: start the workers."""
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit: stop the workers gracefully."""
        self.stop()

    def submit(
        self,
        path: Path | str,
        name: str | None = None,
        progress_callback: TaskProgressCallback | None = None,
    ) -> Task:
        """Queue a file for upload.

        Args:
            path: File to upload.
            name: Name to store the file under (defaults to the base name).
            progress_callback: Optional handler for this task's progress.

        Returns:
            The new PENDING task.

        Raises:
            FileNotFoundError: If the file does not exist.
            IsADirectoryError: If the path is a directory.
            RuntimeError: If the engine was stopped.
        """
        upload_file = UploadFile.from_path(path, name)

        with self._lock:
            task_id = next(self._ids)
            task = Task(
                id=task_id,
                file=upload_file,
                progress_callback=self._progress_handler(task_id, progress_callback),
            )
            self._queue.put(task)
            self._tasks[task_id] = task

        logger.info(f"Task {task_id} queued: {upload_file.name} ({upload_file.size} bytes)")
        return task

    def submit_many(self, paths: Iterable[Path | str]) -> list[Task]:
        """Queue several files, in order."""
        return [self.submit(path) for path in paths]

    def wait(self, timeout: float | None = None) -> bool:
        """Block until every submitted task is DONE or FAILED.

        Args:
            timeout: Maximum seconds to wait (None = wait forever)

        Returns:
            True if all tasks finished, False on timeout
        """
        return self._queue.join(timeout=timeout)

    def _progress_handler(
        self,
        task_id: int,
        progress_callback: TaskProgressCallback | None,
    ) -> TaskProgressCallback:
        """Build the progress handler of a task: sink first, then the task's own."""

        def on_progress(fraction: float) -> None:
            self._sink.progress(task_id, fraction)
            if progress_callback:
                try:
                    progress_callback(fraction)
                except Exception:
                    logger.exception(f"Progress callback failed for task {task_id}")

        return on_progress
