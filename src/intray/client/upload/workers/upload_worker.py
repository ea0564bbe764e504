"""Upload worker running one task at a time.

This module provides:
- WorkerState: Enum for worker lifecycle states
- WorkerResult: Result of one task execution
- UploadWorker: Runs a FileUploader on a task and contains its failures
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from intray.client.upload.types import UploadError

if TYPE_CHECKING:
    from intray.client.upload.sink import ProgressSink
    from intray.client.upload.transfer import FileUploader
    from intray.client.upload.types import Task

logger = logging.getLogger(__name__)


class WorkerState(Enum):
    """State of a worker."""

    IDLE = auto()
    RUNNING = auto()


@dataclass
class WorkerResult:
    """Result of a worker execution.

    Attributes:
        task_id: Id of the task that ran.
        success: Whether the upload succeeded.
        elapsed_ms: Upload duration if successful.
        error: Failure reason otherwise.
    """

    task_id: int
    success: bool
    elapsed_ms: float | None = None
    error: UploadError | None = None


class UploadWorker:
    """Runs upload tasks one after the other.

    Whatever happens during a task, execute() returns normally: typed
    upload failures and unexpected exceptions alike end that task as
    FAILED and are reported to the sink.

    Usage:
        worker = UploadWorker(uploader, sink, name="upload-0")
        result = worker.execute(task)
    """

    def __init__(self, uploader: FileUploader, sink: ProgressSink, name: str = "upload") -> None:
        """Initialize the upload worker.

        Args:
            uploader: Protocol client driving each task.
            sink: Receives done/failed notifications.
            name: Worker name for log messages.
        """
        self._uploader = uploader
        self._sink = sink
        self._name = name
        self._state = WorkerState.IDLE
        self._current: Task | None = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        """Worker name."""
        return self._name

    @property
    def state(self) -> WorkerState:
        """Get current worker state."""
        return self._state

    @property
    def current_task(self) -> Task | None:
        """Task being uploaded, if any."""
        return self._current

    def execute(self, task: Task) -> WorkerResult:
        """Upload one task to completion.

        Args:
            task: A PENDING task fresh from the queue.

        Returns:
            The outcome of the task.

        Raises:
            RuntimeError: If the worker is already running a task, or the
                task was claimed before.
        """
        with self._lock:
            if self._state == WorkerState.RUNNING:
                raise RuntimeError(f"{self._name} is already running task {self._current}")
            task.begin()
            self._state = WorkerState.RUNNING
            self._current = task

        logger.info(f"{self._name} fetched task {task.id} ({task.file.name})")

        elapsed_ms = 0.0
        error: UploadError | None = None
        try:
            elapsed_ms = self._uploader.upload(task)
        except UploadError as e:
            logger.error(f"{self._name}: task {task.id} failed: {e}")
            error = e
        except Exception as e:
            logger.exception(f"{self._name}: unexpected error in task {task.id}")
            error = UploadError(f"Unexpected error: {e}", e)
        finally:
            with self._lock:
                self._state = WorkerState.IDLE
                self._current = None

        if error is not None:
            task.fail(error)
            self._sink.failed(task.id, error)
            return WorkerResult(task_id=task.id, success=False, error=error)

        task.complete(elapsed_ms)
        self._sink.done(task.id, elapsed_ms)
        return WorkerResult(task_id=task.id, success=True, elapsed_ms=elapsed_ms)
