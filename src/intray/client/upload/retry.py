"""Bounded retry with optional exponential backoff.

This module provides:
- retry_with_backoff: Call a function up to a fixed number of attempts
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default retry configuration
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_BACKOFF = 0.0  # seconds, retry immediately
DEFAULT_MAX_BACKOFF = 30.0  # seconds
DEFAULT_BACKOFF_MULTIPLIER = 2.0


def retry_with_backoff(
    func: Callable[[], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
    max_backoff: float = DEFAULT_MAX_BACKOFF,
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
    retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
    description: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Execute a function, retrying on failure a bounded number of times.

    Args:
        func: Function to execute.
        max_attempts: Total number of attempts, including the first one.
        initial_backoff: Wait before the first retry in seconds (0 = none).
        max_backoff: Maximum wait between attempts in seconds.
        backoff_multiplier: Multiplier applied to the wait after each retry.
        retryable_exceptions: Tuple of exception types to retry on.
        description: What is being attempted, for log messages.
        sleep: Function used to wait (replaceable in tests).

    Returns:
        Result of the function.

    Raises:
        ValueError: If max_attempts is less than 1.
        The last exception if every attempt fails.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    backoff = initial_backoff

    for attempt in range(1, max_attempts + 1):
        try:
            return func()
        except retryable_exceptions as e:
            if attempt == max_attempts:
                logger.error(f"{description}: all {max_attempts} attempts failed: {e}")
                raise

            if backoff > 0:
                logger.warning(
                    f"{description}: attempt {attempt}/{max_attempts} failed: {e}. "
                    f"Retrying in {backoff:.1f}s..."
                )
                sleep(backoff)
                backoff = min(backoff * backoff_multiplier, max_backoff)
            else:
                logger.warning(
                    f"{description}: attempt {attempt}/{max_attempts} failed: {e}. Retrying..."
                )

    # Should not reach here, but satisfy type checker
    raise RuntimeError("Unexpected retry loop exit")
