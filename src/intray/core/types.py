"""Shared types for intray.

This module defines the root exception and the enums used across the
core and client packages.
"""

from __future__ import annotations

from enum import Enum


class IntrayError(Exception):
    """Base exception for all intray errors."""


class InvalidConfig(IntrayError, ValueError):
    """A configuration value is out of range (chunk size, pool size, ...)."""


class TaskState(str, Enum):
    """Lifecycle state of an upload task.

    PENDING tasks sit in the task queue, IN_PROGRESS tasks are owned by
    exactly one worker. DONE and FAILED are terminal.
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition is allowed."""
        return self in (TaskState.DONE, TaskState.FAILED)
