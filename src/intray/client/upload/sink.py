"""Progress and result notifications for upload tasks.

This module provides:
- UploadCallbacks: The hooks a front end registers with the engine
- LoggingSink: Callbacks that only log task events
- ProgressSink: Dispatcher that invokes callbacks without letting them fail a task

Callbacks are invoked on the worker thread that owns the task. Front ends
that touch shared state from them must do their own locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from intray.client.upload.types import (
        DoneCallback,
        FailedCallback,
        ProgressCallback,
        UploadError,
    )

logger = logging.getLogger(__name__)


@dataclass
class UploadCallbacks:
    """Hooks invoked as tasks progress.

    Attributes:
        on_progress: Called with (task_id, fraction) after every chunk.
        on_done: Called with (task_id, elapsed_ms) when a task succeeds.
        on_failed: Called with (task_id, error) when a task fails.
    """

    on_progress: ProgressCallback | None = None
    on_done: DoneCallback | None = None
    on_failed: FailedCallback | None = None


class LoggingSink(UploadCallbacks):
    """Callbacks that report every task event to the log."""

    def __init__(self, level: int = logging.INFO) -> None:
        super().__init__(
            on_progress=self._log_progress,
            on_done=self._log_done,
            on_failed=self._log_failed,
        )
        self._level = level

    def _log_progress(self, task_id: int, fraction: float) -> None:
        logger.log(self._level, "Task %d: %.1f%%", task_id, fraction * 100)

    def _log_done(self, task_id: int, elapsed_ms: float) -> None:
        logger.log(self._level, "Task %d: done in %.0f ms", task_id, elapsed_ms)

    def _log_failed(self, task_id: int, error: UploadError) -> None:
        logger.log(self._level, "Task %d: failed: %s", task_id, error)


class ProgressSink:
    """Dispatches task events to registered callbacks.

    An exception raised by a callback is logged and swallowed so that a
    broken front end never fails an upload or kills a worker.
    """

    def __init__(self, callbacks: UploadCallbacks | None = None) -> None:
        self._callbacks = callbacks or UploadCallbacks()

    @property
    def callbacks(self) -> UploadCallbacks:
        """The registered callbacks."""
        return self._callbacks

    def progress(self, task_id: int, fraction: float) -> None:
        """Report the progress fraction of a task."""
        if self._callbacks.on_progress:
            try:
                self._callbacks.on_progress(task_id, fraction)
            except Exception:
                logger.exception(f"on_progress callback failed for task {task_id}")

    def done(self, task_id: int, elapsed_ms: float) -> None:
        """Report that a task succeeded."""
        if self._callbacks.on_done:
            try:
                self._callbacks.on_done(task_id, elapsed_ms)
            except Exception:
                logger.exception(f"on_done callback failed for task {task_id}")

    def failed(self, task_id: int, error: UploadError) -> None:
        """Report that a task failed."""
        if self._callbacks.on_failed:
            try:
                self._callbacks.on_failed(task_id, error)
            except Exception:
                logger.exception(f"on_failed callback failed for task {task_id}")
