"""Task queue for upload workers.

This module provides:
- TaskQueue: Thread-safe FIFO queue of pending upload tasks

Tasks are served strictly in arrival order across the whole worker pool.
A single lock guards the deque, so each task is handed to exactly one
caller of get()/get_nowait(), whatever the interleaving of workers.

Usage:
    queue = TaskQueue()
    queue.put(task)
    task = queue.get(timeout=1.0)  # None on timeout or close
    ...
    queue.task_done()
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from intray.client.upload.types import Task

logger = logging.getLogger(__name__)


class TaskQueue:
    """Thread-safe FIFO queue of upload tasks.

    Besides put/get, the queue counts unfinished tasks the way
    queue.Queue does: every put() adds one, every task_done() removes
    one, and join() waits for the count to reach zero.
    """

    def __init__(self) -> None:
        """Initialize an empty queue."""
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._all_done = threading.Condition(self._lock)
        self._tasks: deque[Task] = deque()
        self._unfinished = 0
        self._closed = False

    def put(self, task: Task) -> None:
        """Append a task to the tail of the queue.

        Raises:
            RuntimeError: If the queue is closed.
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("Queue is closed")
            self._tasks.append(task)
            self._unfinished += 1
            self._not_empty.notify()
            logger.debug("Queued task %d (queue size: %d)", task.id, len(self._tasks))

    def get(self, timeout: float | None = None) -> Task | None:
        """Remove and return the task at the head of the queue.

        Blocks until a task is available, the timeout expires or the queue
        is closed.

        Args:
            timeout: Maximum seconds to wait (None = wait until closed).

        Returns:
            The oldest task, or None on timeout or once closed.
        """
        with self._not_empty:
            deadline = None if timeout is None else time.monotonic() + timeout

            while not self._tasks and not self._closed:
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return None
                    self._not_empty.wait(timeout=remaining)
                else:
                    self._not_empty.wait()

            if self._closed or not self._tasks:
                return None

            task = self._tasks.popleft()
            logger.debug("Dequeued task %d (queue size: %d)", task.id, len(self._tasks))
            return task

    def get_nowait(self) -> Task | None:
        """Get the head task without blocking.

        Returns:
            The oldest task, or None if the queue is empty
        """
        return self.get(timeout=0)

    def task_done(self) -> None:
        """Signal that a task obtained from get() reached a terminal state.

        Raises:
            ValueError: If called more times than tasks were put.
        """
        with self._lock:
            if self._unfinished <= 0:
                raise ValueError("task_done() called too many times")
            self._unfinished -= 1
            if self._unfinished == 0:
                self._all_done.notify_all()

    def join(self, timeout: float | None = None) -> bool:
        """Wait until every queued task has been marked done.

        Args:
            timeout: Maximum seconds to wait (None = wait forever)

        Returns:
            True if all tasks are done, False on timeout
        """
        with self._all_done:
            return self._all_done.wait_for(lambda: self._unfinished == 0, timeout=timeout)

    def close(self) -> None:
        """Close the queue and wake up waiting workers.

        Pending tasks stay in the queue and can still be inspected.
        """
        with self._lock:
            self._closed = True
            self._not_empty.notify_all()
            logger.debug("Task queue closed with %d pending tasks", len(self._tasks))

    def snapshot(self) -> list[Task]:
        """Pending tasks in queue order (does not remove them)."""
        with self._lock:
            return list(self._tasks)

    @property
    def is_closed(self) -> bool:
        """Check if queue is closed."""
        return self._closed

    @property
    def unfinished(self) -> int:
        """Number of tasks put but not yet marked done."""
        with self._lock:
            return self._unfinished

    def __len__(self) -> int:
        """Get number of pending tasks."""
        with self._lock:
            return len(self._tasks)

    def __bool__(self) -> bool:
        """Check if queue has tasks."""
        with self._lock:
            return bool(self._tasks)
